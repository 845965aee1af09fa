# src/logging/context.py — v2
"""Contextual logging support: attach task_id, run_id, agent, stage to log records.

The orchestrator sets the task/run context once per execution and the
agent/stage context per pipeline stage. Values live in contextvars, so
interleaved executions on one event loop keep separate contexts.
"""

from __future__ import annotations

import contextvars
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

_task_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "task_id", default=None
)
_run_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "run_id", default=None
)
_agent: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "agent", default=None
)
_stage: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "stage", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    task_id: str | None = None
    run_id: str | None = None
    agent: str | None = None
    stage: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        task_id=_task_id.get(),
        run_id=_run_id.get(),
        agent=_agent.get(),
        stage=_stage.get(),
    )


@contextmanager
def task_context(task_id: str, run_id: str) -> Iterator[None]:
    """Bind task-level context for the duration of one execution."""
    tokens = (_task_id.set(task_id), _run_id.set(run_id))
    try:
        yield
    finally:
        _run_id.reset(tokens[1])
        _task_id.reset(tokens[0])


@contextmanager
def stage_context(agent: str, stage: str) -> Iterator[None]:
    """Bind agent/stage context for one pipeline stage."""
    tokens = (_agent.set(agent), _stage.set(stage))
    try:
        yield
    finally:
        _stage.reset(tokens[1])
        _agent.reset(tokens[0])


def clear_context() -> None:
    """Reset all context variables."""
    _task_id.set(None)
    _run_id.set(None)
    _agent.set(None)
    _stage.set(None)
