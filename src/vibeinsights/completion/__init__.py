"""Completion clients used to turn prompts into generated text."""

from vibeinsights.completion.client import CompletionClient, OpenAICompletionClient

__all__ = ["CompletionClient", "OpenAICompletionClient"]
