# src/llm/adapters/ollama_adapter.py — v2
"""Ollama local inference adapter implementing BaseProviderAdapter.

Uses the ollama Python SDK (AsyncClient.generate, non-streaming).
"""

from __future__ import annotations

from typing import Any

from arlo.core.errors import MalformedResponseError
from arlo.llm.base_client import BaseProviderAdapter
from arlo.llm.models import CompletionRequest, Provider, ProviderSettings


class OllamaAdapter(BaseProviderAdapter):
    """Ollama local inference adapter."""

    def __init__(self, settings: ProviderSettings, client: Any = None) -> None:
        self._settings = settings
        self.__client = client

    @property
    def _client(self):
        """Lazy-init Ollama client (only on first call)."""
        if self.__client is None:
            import ollama

            self.__client = ollama.AsyncClient(
                host=self._settings.endpoint, timeout=self._settings.timeout_s
            )
        return self.__client

    @property
    def provider(self) -> Provider:
        return Provider.OLLAMA

    async def generate(self, request: CompletionRequest) -> str:
        resp = await self._client.generate(
            model=request.model,
            prompt=request.prompt,
            options={
                "temperature": request.temperature,
                "num_predict": request.max_tokens,
            },
            stream=False,
        )
        text = _get_field(resp, "response")
        if not isinstance(text, str) or not text:
            raise MalformedResponseError(
                "Invalid response format from Ollama API",
                details={"provider": "ollama"},
            )
        return text


def _get_field(resp: Any, name: str) -> Any:
    # SDK responses are pydantic objects that also support item access
    if isinstance(resp, dict):
        return resp.get(name)
    return getattr(resp, name, None)
