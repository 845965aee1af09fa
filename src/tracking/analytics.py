# src/tracking/analytics.py — v1
"""Analytics sink for task lifecycle events.

The orchestrator dispatches these fire-and-forget; a sink failure is
logged by the caller and never affects the task.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from arlo.core.models import utc_now


class AnalyticsEventType(str, Enum):
    TASK_CREATED = "task_created"
    TASK_COMPLETED = "task_completed"
    AGENT_ACTIVATED = "agent_activated"
    SYSTEM_ERROR = "system_error"


class AnalyticsEvent(BaseModel):
    event_type: AnalyticsEventType
    payload: dict[str, Any] = Field(default_factory=dict)
    recorded_at: datetime = Field(default_factory=utc_now)


class BaseAnalyticsSink(ABC):
    """Unified interface for analytics backends."""

    @abstractmethod
    async def track_event(
        self, event_type: AnalyticsEventType, payload: dict[str, Any]
    ) -> None:
        """Record one event."""


class InMemoryAnalyticsSink(BaseAnalyticsSink):
    """Keeps events in a list, in dispatch order."""

    def __init__(self) -> None:
        self.events: list[AnalyticsEvent] = []

    async def track_event(
        self, event_type: AnalyticsEventType, payload: dict[str, Any]
    ) -> None:
        self.events.append(AnalyticsEvent(event_type=event_type, payload=dict(payload)))

    def of_type(self, event_type: AnalyticsEventType) -> list[AnalyticsEvent]:
        return [e for e in self.events if e.event_type is event_type]
