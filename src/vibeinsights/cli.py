"""Command line interface for VibeInsights."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn
from rich.table import Table

from vibeinsights.completion.client import OpenAICompletionClient
from vibeinsights.config import AppConfig
from vibeinsights.errors import ConfigurationError
from vibeinsights.ingestion.segmenter import build_chunks, describe_chunk_files, find_file_spans
from vibeinsights.models import ProcessingResult
from vibeinsights.processing.templates import DOC_TYPES, generate_documentation
from vibeinsights.utils.text import estimate_token_count

console = Console()
app = typer.Typer(help="VibeInsights - AI documentation for large code corpora")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _read_corpus(corpus: Path) -> str:
    if not corpus.is_file():
        raise typer.BadParameter(f"Corpus file not found: {corpus}")
    return corpus.read_text(encoding="utf-8", errors="replace")


def _print_metrics(result: ProcessingResult) -> None:
    metrics = result.metrics
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Chunks")
    table.add_column("Input chars")
    table.add_column("Output chars")
    table.add_column("Est. input tokens")
    table.add_column("Time (ms)")
    table.add_row(
        str(metrics.total_chunks),
        str(metrics.total_input_chars),
        str(metrics.total_output_chars),
        str(metrics.estimated_input_tokens),
        f"{metrics.processing_time_ms:.0f}",
    )
    console.print(table)


async def _run_generation(
    client: OpenAICompletionClient,
    content: str,
    doc_type: str,
    **kwargs: Any,
) -> ProcessingResult:
    try:
        return await generate_documentation(content, client, doc_type, **kwargs)
    finally:
        await client.close()


@app.command()
def chunks(
    corpus: Path = typer.Argument(..., help="Extracted corpus text file."),
    max_chunk_size: int = typer.Option(
        AppConfig().max_chunk_size, help="Maximum chunk size in characters"
    ),
) -> None:
    """Show how a corpus would be split into chunks."""
    content = _read_corpus(corpus)
    try:
        records = build_chunks(content, max_chunk_size)
    except ConfigurationError as exc:
        raise typer.BadParameter(str(exc)) from exc

    spans = find_file_spans(content)
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Chunk")
    table.add_column("Characters")
    table.add_column("Est. tokens")
    table.add_column("Files")

    offset = 0
    for record in records:
        files = describe_chunk_files(record, spans, offset)
        label = ", ".join(files[:3]) + (f" (+{len(files) - 3} more)" if len(files) > 3 else "")
        table.add_row(
            str(record.index + 1),
            str(record.char_count),
            str(estimate_token_count(record.text)),
            label or "-",
        )
        offset += record.char_count

    console.print(table)
    console.print(f"{len(records)} chunk(s), {len(content)} characters total.")


@app.command()
def generate(
    corpus: Path = typer.Argument(..., help="Extracted corpus text file."),
    doc_type: str = typer.Option(
        "architecture", "--type", "-t", help=f"Documentation type: {', '.join(DOC_TYPES)}"
    ),
    prompt: Optional[str] = typer.Option(None, "--prompt", help="Request for custom analysis"),
    complexity: str = typer.Option("moderate", help="Code story level: simple, moderate, detailed"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write result to file"),
    model: str = typer.Option(AppConfig().model, help="Completion model name"),
    max_chunk_size: int = typer.Option(
        AppConfig().max_chunk_size, help="Maximum chunk size in characters"
    ),
    concurrency: int = typer.Option(AppConfig().concurrency, help="Requests per wave"),
    max_tokens: int = typer.Option(AppConfig().max_tokens, help="Completion token limit"),
    timeout: Optional[float] = typer.Option(None, help="Per-request timeout in seconds"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Generate documentation for a corpus, one chunk per request."""
    _setup_logging(verbose)
    content = _read_corpus(corpus)

    config = AppConfig(
        model=model,
        max_chunk_size=max_chunk_size,
        concurrency=concurrency,
        max_tokens=max_tokens,
        request_timeout=timeout,
    )

    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(f"Generating {doc_type}", total=None)

        def on_progress(completed: int, total: int) -> None:
            progress.update(task, completed=completed, total=total)

        try:
            api_key = config.require_api_key()
            options = config.processing_options(on_progress=on_progress)
            client = OpenAICompletionClient(api_key, base_url=config.base_url)
            result = asyncio.run(
                _run_generation(
                    client,
                    content,
                    doc_type,
                    custom_prompt=prompt,
                    complexity=complexity,
                    options=options,
                )
            )
        except ConfigurationError as exc:
            raise typer.BadParameter(str(exc)) from exc

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(result.combined_result, encoding="utf-8")
        console.print(f"Documentation written to [bold]{output}[/bold]")
    else:
        console.print(result.combined_result, markup=False)

    _print_metrics(result)
    failed = result.failed_chunks
    if failed:
        console.print(
            f"[yellow]{len(failed)} chunk(s) failed: "
            f"{', '.join(str(item.index + 1) for item in failed)}. "
            "Re-run them separately.[/yellow]"
        )


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
) -> None:
    """Start the HTTP API."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    from vibeinsights.web.app import app as web_app

    console.print(f"Starting API on http://{host}:{port}")
    uvicorn.run(web_app, host=host, port=port, reload=False, log_level="info")
