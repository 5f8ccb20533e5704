"""Completion client protocol and the OpenAI-backed implementation."""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

from openai import AsyncOpenAI, OpenAIError

from vibeinsights.errors import CompletionError

LOGGER = logging.getLogger(__name__)


@runtime_checkable
class CompletionClient(Protocol):
    """Anything that turns a system prompt and a user prompt into text."""

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        model: str,
        max_tokens: int,
    ) -> str: ...


class OpenAICompletionClient:
    """Thin wrapper around `AsyncOpenAI` chat completions.

    API failures are re-raised as `CompletionError` so the dispatcher can
    record them against the chunk that caused them.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str | None = None,
        temperature: float | None = None,
        client: Any | None = None,
    ) -> None:
        self._client = client or AsyncOpenAI(api_key=api_key, base_url=base_url)
        self.temperature = temperature

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        model: str,
        max_tokens: int,
    ) -> str:
        request: dict[str, Any] = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "max_tokens": max_tokens,
        }
        if self.temperature is not None:
            request["temperature"] = self.temperature

        try:
            response = await self._client.chat.completions.create(**request)
        except OpenAIError as exc:
            LOGGER.debug("OpenAI request failed: %s", exc)
            raise CompletionError(f"OpenAI API error: {exc}") from exc

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def close(self) -> None:
        await self._client.close()
