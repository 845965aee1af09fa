# src/events/bus.py — v1
"""In-process publish/subscribe for task and execution progress.

Listeners register per event type either for one task or globally.
Per-task listeners receive the event data as published; global listeners
receive it with the task id merged in. Handlers may be plain callables or
coroutine functions, and a failing handler never stops delivery.
"""

from __future__ import annotations

import inspect
import logging
import uuid
from enum import Enum
from typing import Any, Awaitable, Callable, Union

logger = logging.getLogger(__name__)

Handler = Callable[[dict[str, Any]], Union[None, Awaitable[None]]]
Unsubscribe = Callable[[], None]

GLOBAL_SCOPE = "*"


class EventType(str, Enum):
    TASK_CREATED = "task:created"
    TASK_UPDATED = "task:updated"
    TASK_STATUS_CHANGED = "task:status_changed"
    TASK_LOG_ADDED = "task:log_added"
    TASK_COMPLETED = "task:completed"
    TASK_FAILED = "task:failed"
    EXECUTION_STEP_STARTED = "execution:step_started"
    EXECUTION_STEP_COMPLETED = "execution:step_completed"
    EXECUTION_STEP_FAILED = "execution:step_failed"
    GIT_OPERATION = "git:operation"
    FILE_OPERATION = "file:operation"
    SYSTEM_ERROR = "system:error"

    @property
    def is_task_scoped(self) -> bool:
        """Whether subscribe() registers for this type."""
        return self.value.startswith(("task:", "execution:"))


TASK_EVENT_TYPES: list[EventType] = [t for t in EventType if t.is_task_scoped]


class EventBus:
    """Two-level registry: event type -> scope (task id or global) -> handlers."""

    def __init__(self) -> None:
        self._handlers: dict[EventType, dict[str, dict[str, Handler]]] = {}
        self._task_subscribers: dict[str, set[str]] = {}

    async def publish(
        self, task_id: str, event_type: EventType, data: dict[str, Any] | None = None
    ) -> None:
        """Deliver an event to the task's listeners, then to global listeners."""
        data = dict(data or {})
        scopes = self._handlers.get(event_type, {})
        # Copy so handlers may unsubscribe during delivery
        task_handlers = list(scopes.get(task_id, {}).values())
        global_handlers = list(scopes.get(GLOBAL_SCOPE, {}).values())

        for handler in task_handlers:
            await self._deliver(handler, event_type, data)
        if global_handlers:
            global_data = {"task_id": task_id, **data}
            for handler in global_handlers:
                await self._deliver(handler, event_type, global_data)

    def subscribe(self, task_id: str, callback: Handler) -> Unsubscribe:
        """Listen to every task:* and execution:* event of one task.

        Returns:
            Idempotent callable removing the subscription.
        """
        sub_id = uuid.uuid4().hex[:12]
        for event_type in TASK_EVENT_TYPES:
            self._add(event_type, task_id, sub_id, callback)
        self._task_subscribers.setdefault(task_id, set()).add(sub_id)

        def unsubscribe() -> None:
            for event_type in TASK_EVENT_TYPES:
                self._remove(event_type, task_id, sub_id)
            subs = self._task_subscribers.get(task_id)
            if subs is not None:
                subs.discard(sub_id)
                if not subs:
                    del self._task_subscribers[task_id]

        return unsubscribe

    def on(
        self, event_type: EventType, callback: Handler, task_id: str | None = None
    ) -> Unsubscribe:
        """Listen to one event type, globally or for a single task."""
        scope = task_id or GLOBAL_SCOPE
        sub_id = uuid.uuid4().hex[:12]
        self._add(event_type, scope, sub_id, callback)

        def unsubscribe() -> None:
            self._remove(event_type, scope, sub_id)

        return unsubscribe

    def subscriber_count(self, task_id: str) -> int:
        """Number of subscribe() registrations for a task."""
        return len(self._task_subscribers.get(task_id, ()))

    def has_subscribers(self, task_id: str) -> bool:
        return self.subscriber_count(task_id) > 0

    def listener_count(self, event_type: EventType, task_id: str | None = None) -> int:
        return len(self._handlers.get(event_type, {}).get(task_id or GLOBAL_SCOPE, {}))

    # --- Internal helpers ---

    def _add(self, event_type: EventType, scope: str, sub_id: str, handler: Handler) -> None:
        self._handlers.setdefault(event_type, {}).setdefault(scope, {})[sub_id] = handler

    def _remove(self, event_type: EventType, scope: str, sub_id: str) -> None:
        scopes = self._handlers.get(event_type)
        if not scopes or scope not in scopes:
            return
        scopes[scope].pop(sub_id, None)
        if not scopes[scope]:
            del scopes[scope]

    @staticmethod
    async def _deliver(handler: Handler, event_type: EventType, data: dict[str, Any]) -> None:
        try:
            if inspect.iscoroutinefunction(handler):
                await handler(data)
            else:
                result = handler(data)
                if inspect.isawaitable(result):
                    await result
        except Exception:
            logger.exception("Event handler failed for %s", event_type.value)
