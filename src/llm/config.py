# src/llm/config.py — v2
"""Per-agent LLM routing with cascade resolution.

Resolution order:
  1. Per-agent setting (LLM_DEVELOPER=openai:gpt-4o, or just "openai")
  2. Default provider (DEFAULT_AI_PROVIDER) with the provider's default model

An unparseable override is logged and ignored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from arlo.config.agents import AGENT_LLM_FIELDS
from arlo.config.settings import Settings
from arlo.llm.models import Provider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LLMAssignment:
    """Resolved provider and model for an agent."""

    provider: Provider
    model: str | None
    source: str  # "agent" or "default"

    @property
    def key(self) -> str:
        """Return 'provider:model' string."""
        return f"{self.provider.value}:{self.model or '<default>'}"


def _parse_assignment(value: str) -> tuple[Provider, str | None] | None:
    """Parse 'provider[:model]'. Returns None if empty or unknown provider."""
    if not value or not value.strip():
        return None
    provider_part, _, model_part = value.partition(":")
    provider = Provider.parse(provider_part)
    if provider is None:
        return None
    model = model_part.strip() or None
    return provider, model


def resolve_agent_llm(agent_name: str, settings: Settings) -> LLMAssignment:
    """Resolve provider/model for one agent.

    Args:
        agent_name: Agent name (e.g. "Developer").
        settings: Application settings.

    Returns:
        LLMAssignment. A None model means "provider default".
    """
    field = AGENT_LLM_FIELDS.get(agent_name)
    if field:
        raw = getattr(settings, field, "")
        parsed = _parse_assignment(raw)
        if parsed:
            return LLMAssignment(provider=parsed[0], model=parsed[1], source="agent")
        if raw:
            logger.warning("Ignoring invalid %s=%r", field.upper(), raw)

    return LLMAssignment(provider=settings.default_provider, model=None, source="default")
