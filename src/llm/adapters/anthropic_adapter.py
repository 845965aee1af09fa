# src/llm/adapters/anthropic_adapter.py — v3
"""Anthropic Claude adapter implementing BaseProviderAdapter.

Uses the official anthropic SDK, which sets the x-api-key and
anthropic-version headers.
"""

from __future__ import annotations

from typing import Any

from arlo.core.errors import ConfigError, MalformedResponseError
from arlo.llm.base_client import BaseProviderAdapter
from arlo.llm.models import CompletionRequest, Provider, ProviderSettings


class AnthropicAdapter(BaseProviderAdapter):
    """Adapter for Anthropic Claude models."""

    def __init__(self, settings: ProviderSettings, client: Any = None) -> None:
        self._settings = settings
        self.__client = client

    @property
    def _client(self):
        """Lazy-init Anthropic client (only on first API call)."""
        if self.__client is None:
            import anthropic

            self.__client = anthropic.AsyncAnthropic(
                api_key=self._settings.api_key,
                base_url=self._settings.endpoint,
                timeout=self._settings.timeout_s,
            )
        return self.__client

    @property
    def provider(self) -> Provider:
        return Provider.ANTHROPIC

    async def generate(self, request: CompletionRequest) -> str:
        if not self._settings.api_key:
            raise ConfigError("Anthropic API key not configured")

        response = await self._client.messages.create(
            model=request.model,
            messages=[{"role": "user", "content": request.prompt}],
            max_tokens=request.max_tokens,
            temperature=request.temperature,
        )
        return self._extract_content(response)

    @staticmethod
    def _extract_content(response: Any) -> str:
        """Text of the first content block."""
        try:
            text = response.content[0].text
        except (AttributeError, IndexError, TypeError) as e:
            raise MalformedResponseError(
                "Invalid response format from Anthropic API",
                details={"provider": "anthropic"},
            ) from e
        if not isinstance(text, str):
            raise MalformedResponseError(
                "Invalid response format from Anthropic API",
                details={"provider": "anthropic"},
            )
        return text
