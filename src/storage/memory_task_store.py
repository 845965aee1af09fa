# src/storage/memory_task_store.py — v1
"""Dict-backed task store for tests and single-process runs."""

from __future__ import annotations

from arlo.core.models import Task
from arlo.events.bus import EventBus
from arlo.storage.base_task_store import BaseTaskStore


class InMemoryTaskStore(BaseTaskStore):
    """Keeps tasks in memory. Stored copies are isolated from callers."""

    def __init__(self, event_bus: EventBus | None = None) -> None:
        super().__init__(event_bus)
        self._tasks: dict[str, Task] = {}

    async def _load(self, task_id: str) -> Task | None:
        task = self._tasks.get(task_id)
        return task.model_copy(deep=True) if task is not None else None

    async def _save(self, task: Task) -> None:
        self._tasks[task.id] = task.model_copy(deep=True)

    async def list_tasks(self) -> list[Task]:
        return sorted(
            (t.model_copy(deep=True) for t in self._tasks.values()),
            key=lambda t: t.created_at,
        )
