# src/llm/base_client.py — v2
"""Abstract provider adapter interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from arlo.llm.models import CompletionRequest, Provider


class BaseProviderAdapter(ABC):
    """Unified text-generation interface for all providers."""

    @abstractmethod
    async def generate(self, request: CompletionRequest) -> str:
        """Return the generated text for a single prompt.

        Raises:
            ConfigError: Provider credentials are missing.
            MalformedResponseError: Provider answered with an unexpected shape.
        """

    @property
    @abstractmethod
    def provider(self) -> Provider:
        """Provider this adapter talks to."""
