# src/pipeline/environment.py — v1
"""Pre-flight check of provider configuration against agent assignments."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, Field

from arlo.config.settings import Settings
from arlo.core.models import AgentConfig
from arlo.llm.models import Provider


class EnvironmentStatus(BaseModel):
    warnings: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def validate_environment(settings: Settings, agents: Iterable[AgentConfig]) -> EnvironmentStatus:
    """Warnings for implicit Ollama defaults, errors for missing API keys."""
    status = EnvironmentStatus()

    if not settings.is_set("ollama_endpoint"):
        status.warnings.append(
            f"OLLAMA_ENDPOINT not set, using default: {settings.ollama_endpoint}"
        )
    if not settings.is_set("ollama_default_model"):
        status.warnings.append(
            f"OLLAMA_DEFAULT_MODEL not set, using default: {settings.ollama_default_model}"
        )

    providers = {agent.provider for agent in agents}
    if Provider.OPENAI in providers and not settings.openai_api_key:
        status.errors.append("OpenAI provider is used but OPENAI_API_KEY is not set")
    if Provider.ANTHROPIC in providers and not settings.anthropic_api_key:
        status.errors.append("Anthropic provider is used but ANTHROPIC_API_KEY is not set")

    return status
