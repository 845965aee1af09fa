# tests/conftest.py — v2
"""Shared test fixtures for all unit tests.

Provides settings without .env, in-memory collaborators, a scripted
completion gateway and a fully wired orchestrator. No network, no
provider SDKs.
"""

from __future__ import annotations

import random
from collections.abc import Callable
from unittest.mock import AsyncMock

import pytest

from arlo.config.settings import Settings
from arlo.events.bus import EventBus
from arlo.pipeline.agent_registry import AgentRegistry
from arlo.pipeline.orchestrator import TaskOrchestrator
from arlo.storage.knowledge_store import InMemoryKnowledgeStore
from arlo.storage.memory_task_store import InMemoryTaskStore
from arlo.tracking.analytics import InMemoryAnalyticsSink
from arlo.vcs.simulated import SimulatedVersionControl

SAMPLE_PLAN = """# Overview
Add a dark mode toggle to the settings page.

## Implementation Steps
1. Create the theme store
src/theme/store.ts
Keep the state in a single module.
2. Wire the toggle into the settings page
src/settings/page.tsx
src/settings/page.test.tsx

## Testing Strategy
- Unit test the store
- Snapshot the settings page

## Risks
- Flash of unstyled content on load
"""

SAMPLE_PR = """# Add dark mode toggle

Adds a theme store and a toggle on the settings page.
"""


# === FIXTURES: Settings ===


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    """Drop every environment variable Settings would read."""
    for field_name in Settings.model_fields:
        monkeypatch.delenv(field_name.upper(), raising=False)


@pytest.fixture
def settings(tmp_path, monkeypatch) -> Settings:
    """Settings isolated from .env and provider environment variables."""
    for var in (
        "OPENAI_API_KEY",
        "ANTHROPIC_API_KEY",
        "DEFAULT_AI_PROVIDER",
        "LLM_ADMIN",
        "LLM_CONFIG",
        "LLM_DEVELOPER",
        "LLM_VALIDATOR",
        "LLM_GIT",
    ):
        monkeypatch.delenv(var, raising=False)
    return Settings(
        _env_file=None,
        prompts_dir=tmp_path / "prompts",
        tasks_dir=tmp_path / "tasks",
    )


# === FIXTURES: Collaborators ===


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def task_store(event_bus: EventBus) -> InMemoryTaskStore:
    return InMemoryTaskStore(event_bus=event_bus)


@pytest.fixture
def knowledge_store() -> InMemoryKnowledgeStore:
    return InMemoryKnowledgeStore()


@pytest.fixture
def analytics() -> InMemoryAnalyticsSink:
    return InMemoryAnalyticsSink()


@pytest.fixture
def vcs() -> SimulatedVersionControl:
    return SimulatedVersionControl("https://github.com/example/repo", rng=random.Random(7))


# === FIXTURES: Scripted gateway ===


def script_responses(prompt: str) -> str:
    """Canned model output chosen from the stage-specific prompt sections."""
    if "# Analysis Requirements" in prompt:
        return "The task needs a theme store and a settings toggle."
    if "# Planning Requirements" in prompt:
        return SAMPLE_PLAN
    if "# File to Modify" in prompt:
        return "export const theme = 'dark';"
    if "# Implementations to Validate" in prompt:
        return "1. Valid: Yes\n2. Issues Found\n3. Suggestions\n- Add a test"
    if "Your PR description:" in prompt:
        return SAMPLE_PR
    return "ok"


@pytest.fixture
def scripted() -> Callable[[str], str]:
    """The default responder, for tests that wrap it."""
    return script_responses


@pytest.fixture
def make_gateway() -> Callable[..., AsyncMock]:
    """Factory for a gateway mock whose generate() answers via a responder."""

    def _make(responder: Callable[[str], str] = script_responses) -> AsyncMock:
        gateway = AsyncMock()

        async def _generate(prompt, **kwargs):
            return responder(prompt)

        gateway.generate = AsyncMock(side_effect=_generate)
        return gateway

    return _make


@pytest.fixture
def gateway(make_gateway) -> AsyncMock:
    return make_gateway()


# === FIXTURES: Orchestrator ===


@pytest.fixture
def agents(settings: Settings) -> AgentRegistry:
    return AgentRegistry(settings)


@pytest.fixture
def orchestrator(
    settings, gateway, task_store, knowledge_store, analytics, vcs, event_bus, agents
) -> TaskOrchestrator:
    return TaskOrchestrator(
        settings=settings,
        gateway=gateway,
        task_store=task_store,
        knowledge_store=knowledge_store,
        analytics=analytics,
        vcs=vcs,
        event_bus=event_bus,
        agents=agents,
    )
