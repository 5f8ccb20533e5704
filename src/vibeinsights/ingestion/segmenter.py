"""Corpus segmentation that keeps source files together where possible.

The extractor writes every source file behind a two-line marker::

    // src/app/main.py
    // ============================================================

Segmentation packs whole files into chunks of at most ``max_chunk_size``
characters. Files that are too large on their own, and corpora without
markers, fall back to line-aware splitting.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List

from vibeinsights.errors import ConfigurationError
from vibeinsights.models import Chunk
from vibeinsights.utils.text import chunk_text

LOGGER = logging.getLogger(__name__)

MARKER_RULE = "=" * 60

FILE_MARKER_RE = re.compile(
    r"^// (?P<path>[^\n]+)\n// " + MARKER_RULE + r"[ \t]*(?:\n|$)", re.MULTILINE
)


@dataclass(frozen=True, slots=True)
class FileSpan:
    """Region of the corpus belonging to one marked file."""

    path: str
    start: int
    end: int

    @property
    def size(self) -> int:
        return self.end - self.start


def format_file_marker(path: str) -> str:
    """Render the boundary marker that introduces a file in a corpus."""
    return f"// {path}\n// {MARKER_RULE}\n"


def find_file_spans(content: str) -> List[FileSpan]:
    """Locate marked files in `content`.

    Text preceding the first marker is attributed to the first file so the
    spans always cover the corpus without gaps.
    """
    matches = list(FILE_MARKER_RE.finditer(content))
    spans: List[FileSpan] = []
    for position, match in enumerate(matches):
        start = 0 if position == 0 else match.start()
        end = matches[position + 1].start() if position + 1 < len(matches) else len(content)
        spans.append(FileSpan(path=match.group("path").strip(), start=start, end=end))
    return spans


def _validate_chunk_size(max_chunk_size: int) -> None:
    if isinstance(max_chunk_size, bool) or not isinstance(max_chunk_size, int):
        raise ConfigurationError(f"max_chunk_size must be an integer, got {max_chunk_size!r}")
    if max_chunk_size <= 0:
        raise ConfigurationError(f"max_chunk_size must be positive, got {max_chunk_size}")


def split_content_into_chunks(content: str, max_chunk_size: int) -> List[str]:
    """Partition `content` into ordered chunks of at most `max_chunk_size` characters."""
    _validate_chunk_size(max_chunk_size)

    if len(content) <= max_chunk_size:
        return [content]

    spans = find_file_spans(content)
    if len(spans) < 2:
        LOGGER.debug("Found %d file markers, using line-aware chunking", len(spans))
        return list(chunk_text(content, max_chars=max_chunk_size))

    chunks: List[str] = []
    current = ""
    for span in spans:
        file_text = content[span.start : span.end]

        if len(file_text) > max_chunk_size:
            LOGGER.debug(
                "File %s (%d chars) exceeds chunk size, splitting by lines", span.path, span.size
            )
            if current:
                chunks.append(current)
                current = ""
            chunks.extend(chunk_text(file_text, max_chars=max_chunk_size))
            continue

        if current and len(current) + len(file_text) > max_chunk_size:
            chunks.append(current)
            current = file_text
        else:
            current += file_text

    if current:
        chunks.append(current)

    return chunks


def build_chunks(content: str, max_chunk_size: int) -> List[Chunk]:
    """Segment a corpus into indexed `Chunk` records."""
    return [
        Chunk(index=index, text=text)
        for index, text in enumerate(split_content_into_chunks(content, max_chunk_size))
    ]


def describe_chunk_files(chunk: Chunk, spans: List[FileSpan], offset: int) -> List[str]:
    """Return the paths of files whose span overlaps `chunk`.

    `offset` is the position of the chunk in the corpus.
    """
    chunk_end = offset + chunk.char_count
    return [span.path for span in spans if span.start < chunk_end and span.end > offset]
