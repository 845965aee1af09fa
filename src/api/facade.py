# src/api/facade.py — v2
"""Public API facade: wire the orchestrator and run tasks.

Usage:
    from arlo.api.facade import run_task
    report = await run_task("Add dark mode", "Support a dark theme toggle")
"""

from __future__ import annotations

import logging

from arlo.config.settings import Settings
from arlo.core.models import ExecutionReport
from arlo.events.bus import EventBus
from arlo.llm.gateway import CompletionGateway
from arlo.pipeline.agent_registry import AgentRegistry
from arlo.pipeline.orchestrator import TaskOrchestrator
from arlo.pipeline.prompt_store import PromptStore
from arlo.storage.base_task_store import BaseTaskStore
from arlo.storage.json_task_store import JsonTaskStore
from arlo.storage.knowledge_store import BaseKnowledgeStore, InMemoryKnowledgeStore
from arlo.tracking.analytics import BaseAnalyticsSink, InMemoryAnalyticsSink
from arlo.vcs.base_vcs import BaseVersionControl
from arlo.vcs.simulated import SimulatedVersionControl

logger = logging.getLogger(__name__)


def build_orchestrator(
    settings: Settings | None = None,
    task_store: BaseTaskStore | None = None,
    knowledge_store: BaseKnowledgeStore | None = None,
    analytics: BaseAnalyticsSink | None = None,
    vcs: BaseVersionControl | None = None,
    event_bus: EventBus | None = None,
    gateway: CompletionGateway | None = None,
) -> TaskOrchestrator:
    """Assemble a TaskOrchestrator with default collaborators.

    Args:
        settings: Global settings. Loaded from .env if None.
        task_store: Task persistence. Defaults to JSON files under TASKS_DIR.
        knowledge_store: Agent knowledge. Defaults to in-memory.
        analytics: Analytics sink. Defaults to in-memory.
        vcs: Version control. Defaults to a simulated repository at PR_REPOSITORY_URL.
        event_bus: Event bus shared by the task store and the orchestrator.
        gateway: Completion gateway. Built from settings if None.
    """
    if settings is None:
        settings = Settings()
    if event_bus is None:
        event_bus = EventBus()
    if gateway is None:
        gateway = CompletionGateway(settings)
    if task_store is None:
        task_store = JsonTaskStore(settings.tasks_dir, event_bus=event_bus)
    if knowledge_store is None:
        knowledge_store = InMemoryKnowledgeStore()
    if analytics is None:
        analytics = InMemoryAnalyticsSink()
    if vcs is None:
        vcs = SimulatedVersionControl(
            settings.pr_repository_url, default_branch=settings.pr_base_branch
        )
    return TaskOrchestrator(
        settings=settings,
        gateway=gateway,
        task_store=task_store,
        knowledge_store=knowledge_store,
        analytics=analytics,
        vcs=vcs,
        event_bus=event_bus,
        agents=AgentRegistry(settings, PromptStore(settings.prompts_dir)),
    )


async def run_task(
    title: str,
    description: str,
    settings: Settings | None = None,
    orchestrator: TaskOrchestrator | None = None,
    task_store: BaseTaskStore | None = None,
) -> ExecutionReport:
    """Create a task and drive it through the pipeline.

    Returns:
        ExecutionReport of the run (failed runs included).

    Raises:
        ConfigError: Required provider credentials are missing.
    """
    if settings is None:
        settings = Settings()
    if orchestrator is None:
        event_bus = EventBus()
        if task_store is None:
            task_store = JsonTaskStore(settings.tasks_dir, event_bus=event_bus)
        orchestrator = build_orchestrator(settings, task_store=task_store, event_bus=event_bus)
    elif task_store is None:
        raise ValueError("task_store is required when passing an orchestrator")

    await orchestrator.initialize()
    task = await task_store.create_task(title, description)
    logger.info("Created task %s: %s", task.id, title)
    try:
        return await orchestrator.start_execution(task.id)
    finally:
        await orchestrator.flush_telemetry()
