"""Application configuration defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Any

from vibeinsights.errors import ConfigurationError
from vibeinsights.models import (
    DEFAULT_CONCURRENCY,
    DEFAULT_MAX_CHUNK_SIZE,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    ProcessingOptions,
)

API_KEY_ENV = "OPENAI_API_KEY"
BASE_URL_ENV = "OPENAI_BASE_URL"


@dataclass(slots=True)
class AppConfig:
    model: str = DEFAULT_MODEL
    max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE
    concurrency: int = DEFAULT_CONCURRENCY
    max_tokens: int = DEFAULT_MAX_TOKENS
    request_timeout: float | None = None
    api_key: str | None = None
    base_url: str | None = None

    def __post_init__(self) -> None:
        if self.api_key is None:
            self.api_key = os.environ.get(API_KEY_ENV) or None
        if self.base_url is None:
            self.base_url = os.environ.get(BASE_URL_ENV) or None

    def require_api_key(self) -> str:
        if not self.api_key:
            raise ConfigurationError(
                f"OpenAI API key not found. Set {API_KEY_ENV} or pass it explicitly."
            )
        return self.api_key

    def processing_options(self, **overrides: Any) -> ProcessingOptions:
        """Build `ProcessingOptions` from these defaults, ignoring `None` overrides."""
        options = ProcessingOptions(
            max_chunk_size=self.max_chunk_size,
            concurrency=self.concurrency,
            model=self.model,
            max_tokens=self.max_tokens,
            request_timeout=self.request_timeout,
        )
        known = {field.name for field in fields(ProcessingOptions)}
        unknown = set(overrides) - known
        if unknown:
            raise ConfigurationError(f"Unknown processing options: {', '.join(sorted(unknown))}")
        return replace(options, **{key: value for key, value in overrides.items() if value is not None})
