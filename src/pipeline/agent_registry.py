# src/pipeline/agent_registry.py — v2
"""Registry of agent configurations with persisted prompt overrides.

Builds one AgentConfig per known agent from settings (provider/model
routing) and the built-in defaults, then applies prompt overrides saved
by a PromptStore.
"""

from __future__ import annotations

import logging

from arlo.config.agents import (
    AGENT_COLORS,
    AGENT_NAMES,
    AGENT_TEMPERATURES,
    DEFAULT_AGENT_COLOR,
    DEFAULT_SYSTEM_PROMPTS,
    PIPELINE_AGENTS,
    generic_system_prompt,
)
from arlo.config.settings import Settings
from arlo.core.errors import AgentNotFoundError
from arlo.core.models import MIN_SYSTEM_PROMPT_LENGTH, AgentConfig
from arlo.llm.config import resolve_agent_llm
from arlo.pipeline.prompt_store import PromptStore, normalize_agent_key

logger = logging.getLogger(__name__)


class AgentRegistry:
    """Holds the mutable agent configurations for one orchestrator."""

    def __init__(self, settings: Settings, prompt_store: PromptStore | None = None) -> None:
        self._store = prompt_store
        self._configs: dict[str, AgentConfig] = {}
        for name in AGENT_NAMES:
            assignment = resolve_agent_llm(name, settings)
            self._configs[name] = AgentConfig(
                name=name,
                provider=assignment.provider,
                model=assignment.model,
                temperature=AGENT_TEMPERATURES.get(name, 0.1),
                system_prompt=self.get_default_system_prompt(name),
            )
        missing = [a for a in PIPELINE_AGENTS if a not in self._configs]
        if missing:
            raise ValueError(f"Pipeline agents missing from configuration: {missing}")

    @property
    def agent_names(self) -> list[str]:
        return list(self._configs)

    def configs(self) -> list[AgentConfig]:
        return list(self._configs.values())

    def get_agent_config(self, name: str) -> AgentConfig | None:
        return self._configs.get(name)

    def require(self, name: str) -> AgentConfig:
        config = self._configs.get(name)
        if config is None:
            raise AgentNotFoundError(f"Agent '{name}' not found", details={"agent": name})
        return config

    @staticmethod
    def get_default_system_prompt(name: str) -> str:
        return DEFAULT_SYSTEM_PROMPTS.get(name) or generic_system_prompt(name)

    @staticmethod
    def get_agent_color(name: str) -> str:
        return AGENT_COLORS.get(name, DEFAULT_AGENT_COLOR)

    def update_system_prompt(self, name: str, text: str) -> AgentConfig:
        """Replace an agent's prompt and persist it.

        Raises:
            AgentNotFoundError: Unknown agent.
            ValueError: Prompt shorter than the minimum length.
        """
        config = self.require(name)
        if not isinstance(text, str) or len(text.strip()) < MIN_SYSTEM_PROMPT_LENGTH:
            raise ValueError(
                f"System prompt must be a string of at least {MIN_SYSTEM_PROMPT_LENGTH} characters"
            )
        config.system_prompt = text
        logger.info("Updated system prompt for agent '%s'", name)

        if self._store is not None:
            try:
                self._store.write(name, text)
            except OSError as e:
                logger.error("Error saving prompt for agent '%s': %s", name, e)
        return config

    def reset_system_prompt(self, name: str) -> AgentConfig:
        """Restore the built-in prompt and drop the persisted override."""
        config = self.require(name)
        config.system_prompt = self.get_default_system_prompt(name)
        logger.info("Reset system prompt for agent '%s' to default", name)

        if self._store is not None:
            try:
                self._store.delete(name)
            except OSError as e:
                logger.error("Error deleting prompt file for agent '%s': %s", name, e)
        return config

    def load_saved_prompts(self) -> int:
        """Apply persisted overrides and write defaults for agents without one.

        Returns:
            Number of overrides applied.
        """
        if self._store is None:
            return 0
        try:
            self._store.ensure_dir()
        except OSError as e:
            logger.error("Prompts directory %s unusable: %s", self._store.root, e)
            return 0

        saved = self._store.read_all()
        by_key = {normalize_agent_key(name): name for name in self._configs}
        applied = 0
        for key, text in saved.items():
            agent_name = by_key.get(key)
            if agent_name is None:
                logger.debug("Ignoring prompt file for unknown agent key '%s'", key)
                continue
            if len(text.strip()) < MIN_SYSTEM_PROMPT_LENGTH:
                logger.warning("Ignoring too-short saved prompt for agent '%s'", agent_name)
                continue
            self._configs[agent_name].system_prompt = text
            applied += 1
            logger.info("Loaded saved system prompt for agent '%s'", agent_name)

        for name in self._configs:
            if normalize_agent_key(name) in saved:
                continue
            try:
                self._store.write(name, self.get_default_system_prompt(name))
                logger.debug("Created default prompt file for agent '%s'", name)
            except OSError as e:
                logger.error("Error creating default prompt file for agent '%s': %s", name, e)
        return applied
