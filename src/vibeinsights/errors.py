"""Exception hierarchy for segmentation and batch dispatch."""

from __future__ import annotations

__all__ = [
    "VibeInsightsError",
    "ConfigurationError",
    "CompletionError",
]


class VibeInsightsError(Exception):
    """Base exception for VibeInsights failures."""


class ConfigurationError(VibeInsightsError, ValueError):
    """Raised when processing options are invalid, before anything is dispatched."""


class CompletionError(VibeInsightsError):
    """Raised by a completion client when a single request fails."""
