"""VibeInsights - chunked, concurrent documentation generation for code corpora."""

from vibeinsights.errors import CompletionError, ConfigurationError, VibeInsightsError
from vibeinsights.models import (
    Chunk,
    ChunkResult,
    ProcessingMetrics,
    ProcessingOptions,
    ProcessingResult,
)
from vibeinsights.processing.batch import process_batch

__all__ = [
    "Chunk",
    "ChunkResult",
    "CompletionError",
    "ConfigurationError",
    "ProcessingMetrics",
    "ProcessingOptions",
    "ProcessingResult",
    "VibeInsightsError",
    "process_batch",
]
