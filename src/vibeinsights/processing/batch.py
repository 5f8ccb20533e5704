"""Bounded-concurrency batch processing of corpus chunks.

Chunks are dispatched in waves of ``concurrency`` requests. Every request in a
wave runs concurrently and the next wave starts only after the whole wave has
settled. A failing request is recorded in its own result slot and never stops
the batch.

Known gap: a wave that has been issued cannot be cancelled.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, List, Sequence

from vibeinsights.completion.client import CompletionClient
from vibeinsights.errors import CompletionError, ConfigurationError
from vibeinsights.ingestion.segmenter import build_chunks
from vibeinsights.models import (
    Chunk,
    ChunkResult,
    ProcessingMetrics,
    ProcessingOptions,
    ProcessingResult,
)
from vibeinsights.utils.text import annotate_chunk, estimate_token_count

LOGGER = logging.getLogger(__name__)


def validate_options(options: ProcessingOptions) -> None:
    """Reject unusable options before anything is segmented or dispatched."""
    if options.max_chunk_size <= 0:
        raise ConfigurationError(f"max_chunk_size must be positive, got {options.max_chunk_size}")
    if isinstance(options.concurrency, bool) or not isinstance(options.concurrency, int):
        raise ConfigurationError(f"concurrency must be an integer, got {options.concurrency!r}")
    if options.concurrency < 1:
        raise ConfigurationError(f"concurrency must be at least 1, got {options.concurrency}")
    if options.max_tokens < 1:
        raise ConfigurationError(f"max_tokens must be at least 1, got {options.max_tokens}")
    if not options.prompt_template or not options.prompt_template.strip():
        raise ConfigurationError("prompt_template must not be empty")
    if options.request_timeout is not None and options.request_timeout <= 0:
        raise ConfigurationError(
            f"request_timeout must be positive, got {options.request_timeout}"
        )


def build_prompt(template: str, content: str, chunk_index: int, total_chunks: int) -> str:
    """Fill the prompt placeholders; `chunk_index` is 1-based.

    Content goes in last so placeholders appearing inside the source code are
    left untouched.
    """
    prompt = template.replace("{{chunkIndex}}", str(chunk_index))
    prompt = prompt.replace("{{totalChunks}}", str(total_chunks))
    return prompt.replace("{{content}}", content)


def format_chunk_error(chunk_index: int, total_chunks: int, message: str) -> str:
    return f"[Error processing chunk {chunk_index} of {total_chunks}: {message}]"


async def _await_with_timeout(request: Awaitable[str], timeout: float | None) -> str:
    if timeout is None:
        return await request
    try:
        return await asyncio.wait_for(request, timeout=timeout)
    except asyncio.TimeoutError:
        raise CompletionError(f"request timed out after {timeout}s") from None


def combine_results(outputs: Sequence[str], total_chunks: int) -> str:
    """Join chunk outputs into one document, labelling each part."""
    if len(outputs) == 1:
        return outputs[0]

    return "\n\n".join(
        f"---- PART {position} OF {total_chunks} ----\n\n{output}"
        for position, output in enumerate(outputs, start=1)
    )


async def dispatch_chunks(
    chunks: Sequence[Chunk],
    client: CompletionClient,
    options: ProcessingOptions,
) -> List[ChunkResult]:
    """Send every chunk to `client` in waves and return results in chunk order."""
    validate_options(options)

    total = len(chunks)
    results: List[ChunkResult | None] = [None] * total
    completed = 0

    def report_progress() -> None:
        nonlocal completed
        completed += 1
        if options.on_progress is not None:
            options.on_progress(completed, total)

    async def run_chunk(position: int, chunk: Chunk) -> None:
        prompt = build_prompt(
            options.prompt_template,
            annotate_chunk(chunk.text, position, total),
            position + 1,
            total,
        )
        message: str | None = None
        try:
            request = client.complete(
                options.system_prompt,
                prompt,
                model=options.model,
                max_tokens=options.max_tokens,
            )
            output = await _await_with_timeout(request, options.request_timeout)
        except Exception as exc:
            message = str(exc) or type(exc).__name__

        if message is None:
            results[position] = ChunkResult(index=chunk.index, output=output or "", success=True)
        else:
            LOGGER.warning("Chunk %d/%d failed: %s", position + 1, total, message)
            results[position] = ChunkResult(
                index=chunk.index,
                output=format_chunk_error(position + 1, total, message),
                success=False,
                error=message,
            )
        report_progress()

    for start in range(0, total, options.concurrency):
        wave = chunks[start : start + options.concurrency]
        LOGGER.debug(
            "Dispatching chunks %d-%d of %d", start + 1, start + len(wave), total
        )
        await asyncio.gather(
            *(run_chunk(start + offset, chunk) for offset, chunk in enumerate(wave))
        )

    return [result for result in results if result is not None]


async def process_batch(
    content: str,
    client: CompletionClient,
    options: ProcessingOptions | None = None,
) -> ProcessingResult:
    """Segment `content`, dispatch every chunk and combine the outputs."""
    options = options or ProcessingOptions()
    validate_options(options)
    started = time.perf_counter()

    chunks = build_chunks(content, options.max_chunk_size)
    LOGGER.info(
        "Processing %d chars as %d chunk(s), concurrency %d",
        len(content),
        len(chunks),
        options.concurrency,
    )

    chunk_results = await dispatch_chunks(chunks, client, options)
    combined = combine_results([result.output for result in chunk_results], len(chunks))

    metrics = ProcessingMetrics(
        total_chunks=len(chunks),
        total_input_chars=len(content),
        total_output_chars=len(combined),
        estimated_input_tokens=estimate_token_count(content),
        processing_time_ms=(time.perf_counter() - started) * 1000,
    )
    failed = sum(1 for result in chunk_results if not result.success)
    LOGGER.info(
        "Processed %d chunk(s) in %.1fms (%d failed)",
        metrics.total_chunks,
        metrics.processing_time_ms,
        failed,
    )
    return ProcessingResult(combined_result=combined, chunk_results=chunk_results, metrics=metrics)
