# src/storage/base_task_store.py — v1
"""Abstract task store interface.

Backends implement raw load/save/list; the task operations used by the
orchestrator (status, log, field updates) are shared here and publish
the matching task:* events when an EventBus is attached.
"""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from typing import Any

from arlo.core.errors import NotFoundError
from arlo.core.models import Task, TaskStatus, utc_now
from arlo.events.bus import EventBus, EventType

logger = logging.getLogger(__name__)

_IMMUTABLE_FIELDS = {"id", "created_at"}


class BaseTaskStore(ABC):
    """Unified interface for task storage backends."""

    def __init__(self, event_bus: EventBus | None = None) -> None:
        self._event_bus = event_bus

    # --- Backend primitives ---

    @abstractmethod
    async def _load(self, task_id: str) -> Task | None:
        """Read one task, None if absent."""

    @abstractmethod
    async def _save(self, task: Task) -> None:
        """Persist one task, replacing any previous version."""

    @abstractmethod
    async def list_tasks(self) -> list[Task]:
        """All stored tasks, oldest first."""

    # --- Task operations ---

    async def get_task_by_id(self, task_id: str) -> Task | None:
        return await self._load(task_id)

    async def create_task(
        self, title: str, description: str, task_id: str | None = None
    ) -> Task:
        task = Task(id=task_id or uuid.uuid4().hex[:12], title=title, description=description)
        await self._save(task)
        await self._publish(task.id, EventType.TASK_CREATED, {"task": task.model_dump(mode="json")})
        return task

    async def update_task(self, task_id: str, fields: dict[str, Any]) -> Task:
        """Merge fields into a task. ``id`` and ``created_at`` are never changed."""
        task = await self._require(task_id)
        updates = {k: v for k, v in fields.items() if k not in _IMMUTABLE_FIELDS}
        updated = Task.model_validate(
            {**task.model_dump(), **updates, "updated_at": utc_now()}
        )
        await self._save(updated)
        await self._publish(
            task_id,
            EventType.TASK_UPDATED,
            {"updates": {k: _jsonable(v) for k, v in updates.items()}},
        )
        return updated

    async def add_task_log(self, task_id: str, message: str) -> Task:
        """Append a timestamped log line."""
        task = await self._require(task_id)
        entry = f"[{utc_now().strftime('%H:%M:%S')}] {message}"
        updated = task.model_copy(
            update={"logs": [*task.logs, entry], "updated_at": utc_now()}
        )
        await self._save(updated)
        await self._publish(task_id, EventType.TASK_LOG_ADDED, {"log": entry})
        return updated

    async def update_task_status(
        self, task_id: str, status: TaskStatus | str, message: str | None = None
    ) -> Task:
        task = await self._require(task_id)
        new_status = TaskStatus(status)
        updated = task.model_copy(
            update={"status": new_status, "status_message": message, "updated_at": utc_now()}
        )
        await self._save(updated)

        payload = {"status": new_status.value, "message": message}
        await self._publish(task_id, EventType.TASK_STATUS_CHANGED, payload)
        if new_status is TaskStatus.COMPLETED:
            await self._publish(task_id, EventType.TASK_COMPLETED, payload)
        elif new_status is TaskStatus.FAILED:
            await self._publish(task_id, EventType.TASK_FAILED, payload)
        return updated

    # --- Internal helpers ---

    async def _require(self, task_id: str) -> Task:
        task = await self._load(task_id)
        if task is None:
            raise NotFoundError(f"Task with ID {task_id} not found", details={"task_id": task_id})
        return task

    async def _publish(self, task_id: str, event_type: EventType, data: dict[str, Any]) -> None:
        if self._event_bus is not None:
            await self._event_bus.publish(task_id, event_type, data)


def _jsonable(value: Any) -> Any:
    if hasattr(value, "value"):
        return value.value
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value
