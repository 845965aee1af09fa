# src/llm/models.py — v2
"""LLM-specific types: Provider, ProviderSettings, CompletionRequest."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class Provider(str, Enum):
    """Closed set of supported text-generation providers."""

    OLLAMA = "ollama"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"

    @classmethod
    def parse(cls, value: str | Provider | None) -> Provider | None:
        """Map a provider identifier to the enum, None when unknown."""
        if value is None:
            return None
        if isinstance(value, Provider):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class ProviderSettings(BaseModel):
    """Resolved connection settings for one provider."""

    provider: Provider
    endpoint: str
    default_model: str
    api_key: str | None = None
    timeout_s: float = 120.0

    @property
    def requires_api_key(self) -> bool:
        return self.provider is not Provider.OLLAMA


class CompletionRequest(BaseModel):
    """Normalized request handed to a provider adapter."""

    prompt: str
    model: str
    temperature: float = 0.2
    max_tokens: int = 2000
