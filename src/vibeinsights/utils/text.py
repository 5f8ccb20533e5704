"""Text helpers including line-aware chunking and token estimates."""

from __future__ import annotations

import math
from typing import Iterator, Sequence

# Fraction of the window, measured from its start, before which a newline
# is not accepted as a break point.
BREAK_SEARCH_FLOOR = 0.75


def estimate_token_count(text: str) -> int:
    """Approximate token count, assuming roughly 4 characters per token."""
    return math.ceil(len(text) / 4)


def chunk_text(text: str, *, max_chars: int) -> Iterator[str]:
    """Split text into consecutive chunks of at most `max_chars` characters.

    Each cut prefers the end of a blank line, then the end of any line, as long
    as it falls within the last quarter of the window; otherwise the text is
    cut exactly at the limit. Joining the chunks reproduces `text`.
    """
    if max_chars <= 0:
        raise ValueError("max_chars must be positive")

    offset = 0
    length = len(text)
    while offset < length:
        limit = offset + max_chars
        if limit >= length:
            yield text[offset:]
            return

        floor = offset + int(max_chars * BREAK_SEARCH_FLOOR)
        cut = limit
        paragraph = text.rfind("\n\n", floor, limit)
        if paragraph != -1:
            cut = paragraph + 2
        else:
            newline = text.rfind("\n", floor, limit)
            if newline != -1:
                cut = newline + 1

        yield text[offset:cut]
        offset = cut


def annotate_chunk(text: str, index: int, total: int) -> str:
    """Prefix a chunk with its ordinal, size and estimated token count."""
    return (
        "[CHUNK METADATA]\n"
        f"Chunk: {index + 1} of {total}\n"
        f"Characters: {len(text)}\n"
        f"Estimated Tokens: {estimate_token_count(text)}\n"
        "[END METADATA]\n"
        "\n"
        f"{text}"
    )


def add_chunk_metadata(chunks: Sequence[str]) -> list[str]:
    """Annotate every chunk with its position in the sequence."""
    total = len(chunks)
    return [annotate_chunk(chunk, index, total) for index, chunk in enumerate(chunks)]
