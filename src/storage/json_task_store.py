# src/storage/json_task_store.py — v1
"""JSON file-based task store.

Stores each task as an individual JSON file (<task_id>.json) under
TASKS_DIR.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from pydantic import ValidationError

from arlo.core.models import Task
from arlo.events.bus import EventBus
from arlo.storage.base_task_store import BaseTaskStore

logger = logging.getLogger(__name__)

_SAFE_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")


class JsonTaskStore(BaseTaskStore):
    """File-based task store using one JSON file per task."""

    def __init__(self, tasks_dir: Path, event_bus: EventBus | None = None) -> None:
        super().__init__(event_bus)
        self._root = Path(tasks_dir).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)

    async def _load(self, task_id: str) -> Task | None:
        if not _SAFE_ID_RE.match(task_id):
            logger.debug("No task file for unsafe id %r", task_id)
            return None
        path = self._task_path(task_id)
        if not path.exists():
            return None
        return Task.model_validate_json(path.read_text(encoding="utf-8"))

    async def _save(self, task: Task) -> None:
        path = self._task_path(task.id)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(task.model_dump_json(indent=2), encoding="utf-8")
        tmp.replace(path)

    async def list_tasks(self) -> list[Task]:
        tasks: list[Task] = []
        for path in sorted(self._root.glob("*.json")):
            try:
                tasks.append(Task.model_validate_json(path.read_text(encoding="utf-8")))
            except (OSError, ValidationError) as e:
                logger.warning("Skipping unreadable task file %s: %s", path.name, e)
        return sorted(tasks, key=lambda t: t.created_at)

    def _task_path(self, task_id: str) -> Path:
        if not _SAFE_ID_RE.match(task_id):
            raise ValueError(f"Invalid task id: {task_id!r}")
        return self._root / f"{task_id}.json"
