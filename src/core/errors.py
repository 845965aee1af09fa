# src/core/errors.py — v1
"""Error kinds raised across the orchestration core.

Every error carries a short machine-readable kind next to its
human-readable message, so callers (CLI, task logs, analytics) can
branch on the kind without parsing text.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Machine-readable error tags."""

    NOT_FOUND = "NOT_FOUND"
    TASK_RUNNING = "TASK_RUNNING"
    CONFIG_ERROR = "CONFIG_ERROR"
    AI_ERROR = "AI_ERROR"
    VCS_ERROR = "VCS_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ArloError(Exception):
    """Base error with a kind tag and optional details."""

    default_kind: ErrorKind = ErrorKind.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        kind: ErrorKind | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind or self.default_kind
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """Serializable form used in task logs and analytics payloads."""
        return {"message": self.message, "type": self.kind.value, "details": self.details}


class NotFoundError(ArloError):
    """Unknown task (or other addressed entity)."""

    default_kind = ErrorKind.NOT_FOUND


class AgentNotFoundError(NotFoundError):
    """Agent name has no configuration entry."""


class TaskRunningError(ArloError):
    """A second execution was requested for a task already in flight."""

    default_kind = ErrorKind.TASK_RUNNING


class ConfigError(ArloError):
    """Missing credential or invalid environment."""

    default_kind = ErrorKind.CONFIG_ERROR


class AIError(ArloError):
    """Provider call failed, timed out, or returned an unusable payload."""

    default_kind = ErrorKind.AI_ERROR


class MalformedResponseError(AIError):
    """Provider answered but the payload lacks the expected text field."""


class VCSError(ArloError):
    """Version-control collaborator failure."""

    default_kind = ErrorKind.VCS_ERROR


def error_kind_of(error: BaseException) -> str:
    """Kind tag for any exception (INTERNAL_ERROR for foreign ones)."""
    if isinstance(error, ArloError):
        return error.kind.value
    return ErrorKind.INTERNAL_ERROR.value
