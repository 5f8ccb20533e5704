"""FastAPI application exposing segmentation and documentation generation."""

from __future__ import annotations

import logging
from typing import Any, List

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from vibeinsights.completion.client import OpenAICompletionClient
from vibeinsights.config import AppConfig
from vibeinsights.errors import ConfigurationError
from vibeinsights.ingestion.segmenter import build_chunks, describe_chunk_files, find_file_spans
from vibeinsights.processing.batch import validate_options
from vibeinsights.processing.templates import generate_documentation, get_template
from vibeinsights.utils.text import estimate_token_count

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="VibeInsights API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


class ChunksPayload(BaseModel):
    content: str
    max_chunk_size: int | None = None


class ChunkSummary(BaseModel):
    index: int
    characters: int
    estimated_tokens: int
    files: List[str]


class GeneratePayload(BaseModel):
    content: str
    doc_type: str = "architecture"
    custom_prompt: str | None = None
    complexity: str = "moderate"
    model: str | None = None
    max_chunk_size: int | None = None
    concurrency: int | None = None
    max_tokens: int | None = None


def _build_client(config: AppConfig) -> OpenAICompletionClient:
    try:
        api_key = config.require_api_key()
    except ConfigurationError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return OpenAICompletionClient(api_key, base_url=config.base_url)


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


@app.post("/chunks")
async def preview_chunks(payload: ChunksPayload) -> dict[str, Any]:
    max_chunk_size = payload.max_chunk_size
    if max_chunk_size is None:
        max_chunk_size = AppConfig().max_chunk_size
    try:
        records = build_chunks(payload.content, max_chunk_size)
    except ConfigurationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    spans = find_file_spans(payload.content)
    summaries: List[ChunkSummary] = []
    offset = 0
    for record in records:
        summaries.append(
            ChunkSummary(
                index=record.index,
                characters=record.char_count,
                estimated_tokens=estimate_token_count(record.text),
                files=describe_chunk_files(record, spans, offset),
            )
        )
        offset += record.char_count

    return {"total_chunks": len(summaries), "chunks": summaries}


@app.post("/generate")
async def generate(payload: GeneratePayload) -> dict[str, Any]:
    config = AppConfig()
    try:
        options = config.processing_options(
            model=payload.model,
            max_chunk_size=payload.max_chunk_size,
            concurrency=payload.concurrency,
            max_tokens=payload.max_tokens,
        )
        validate_options(options)
        get_template(
            payload.doc_type,
            custom_prompt=payload.custom_prompt,
            complexity=payload.complexity,
        )
    except ConfigurationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    client = _build_client(config)
    try:
        result = await generate_documentation(
            payload.content,
            client,
            payload.doc_type,
            custom_prompt=payload.custom_prompt,
            complexity=payload.complexity,
            options=options,
        )
    except ConfigurationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    finally:
        await client.close()

    if result.failed_chunks:
        LOGGER.warning(
            "%d of %d chunk(s) failed", len(result.failed_chunks), len(result.chunk_results)
        )
    return result.to_dict()
