# src/llm/adapters/openai_adapter.py — v2
"""OpenAI chat-completions adapter implementing BaseProviderAdapter.

Uses the official openai SDK (AsyncOpenAI). The prompt is sent as the
user message after a fixed system message.
"""

from __future__ import annotations

from typing import Any

from arlo.core.errors import ConfigError, MalformedResponseError
from arlo.llm.base_client import BaseProviderAdapter
from arlo.llm.models import CompletionRequest, Provider, ProviderSettings


SYSTEM_MESSAGE = "You are a helpful assistant specialized in software development."


class OpenAIAdapter(BaseProviderAdapter):
    """Adapter for OpenAI chat models."""

    def __init__(self, settings: ProviderSettings, client: Any = None) -> None:
        self._settings = settings
        self.__client = client

    @property
    def _client(self):
        """Lazy-init OpenAI client (only on first API call)."""
        if self.__client is None:
            import openai

            self.__client = openai.AsyncOpenAI(
                api_key=self._settings.api_key,
                base_url=self._settings.endpoint,
                timeout=self._settings.timeout_s,
            )
        return self.__client

    @property
    def provider(self) -> Provider:
        return Provider.OPENAI

    async def generate(self, request: CompletionRequest) -> str:
        if not self._settings.api_key:
            raise ConfigError("OpenAI API key not configured")

        response = await self._client.chat.completions.create(
            model=request.model,
            messages=[
                {"role": "system", "content": SYSTEM_MESSAGE},
                {"role": "user", "content": request.prompt},
            ],
            temperature=request.temperature,
            max_tokens=request.max_tokens,
        )
        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise MalformedResponseError(
                "Invalid response format from OpenAI API",
                details={"provider": "openai"},
            ) from e
        if not isinstance(content, str):
            raise MalformedResponseError(
                "Invalid response format from OpenAI API",
                details={"provider": "openai"},
            )
        return content
