# src/core/models.py — v2
"""Shared Pydantic domain models used across modules.

Tasks, agent configurations, pipeline step records, knowledge records
and the structured plan / validation documents parsed from model output.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from arlo.llm.models import Provider

MIN_SYSTEM_PROMPT_LENGTH = 10


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# === TASKS ===


class TaskStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.COMPLETED, TaskStatus.FAILED)


class Task(BaseModel):
    """A unit of work driven through the pipeline."""

    id: str
    title: str
    description: str
    status: TaskStatus = TaskStatus.PENDING
    status_message: str | None = None
    logs: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    # Pull request metadata, filled by the integration stage
    pr_number: int | None = None
    pr_url: str | None = None
    pr_title: str | None = None
    pr_description: str | None = None
    pr_branch: str | None = None
    commit_hash: str | None = None


# === AGENTS ===


class AgentConfig(BaseModel):
    """Static per-agent generation settings. The system prompt is mutable."""

    model_config = {"validate_assignment": True}

    name: str
    provider: Provider
    model: str | None = None
    temperature: float = 0.1
    system_prompt: str

    @field_validator("system_prompt")
    @classmethod
    def validate_system_prompt(cls, v: str) -> str:
        if len(v.strip()) < MIN_SYSTEM_PROMPT_LENGTH:
            raise ValueError(
                f"System prompt must be a string of at least {MIN_SYSTEM_PROMPT_LENGTH} characters"
            )
        return v


# === PIPELINE EXECUTION LEDGER ===


class StepStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"


class StepRecord(BaseModel):
    """One finished pipeline stage (or execution sub-step) of a running task."""

    agent: str
    action: str
    started_at: datetime
    ended_at: datetime
    ai_duration_ms: int | None = None
    status: StepStatus
    error: str | None = None

    @property
    def duration_ms(self) -> int:
        return int((self.ended_at - self.started_at).total_seconds() * 1000)


class RunningTask(BaseModel):
    """Registry entry for a task currently executing."""

    task_id: str
    started_at: datetime = Field(default_factory=utc_now)
    steps: list[StepRecord] = Field(default_factory=list)


class ExecutionReport(BaseModel):
    """Outcome of one start_execution call."""

    task_id: str
    status: TaskStatus
    started_at: datetime
    ended_at: datetime
    steps: list[StepRecord] = Field(default_factory=list)
    error: str | None = None
    error_kind: str | None = None

    @property
    def failed_steps(self) -> list[StepRecord]:
        return [s for s in self.steps if s.status is StepStatus.FAILED]


# === KNOWLEDGE ===


class KnowledgeRecord(BaseModel):
    """Document written by an agent, tagged with its task."""

    agent: str
    document: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utc_now)

    @property
    def type(self) -> str | None:
        return self.metadata.get("type")

    @property
    def task_id(self) -> str | None:
        return self.metadata.get("task_id")


# === PARSED MODEL OUTPUT ===


class PlanStep(BaseModel):
    description: str
    files: list[str] = Field(default_factory=list)
    details: str = ""


class ImplementationPlan(BaseModel):
    """Structured plan parsed from free-text model output."""

    overview: str = ""
    steps: list[PlanStep] = Field(default_factory=list)
    risks: list[str] = Field(default_factory=list)
    tests: list[str] = Field(default_factory=list)

    @property
    def files(self) -> list[str]:
        """All referenced files in step order, without duplicates."""
        seen: list[str] = []
        for step in self.steps:
            for f in step.files:
                if f not in seen:
                    seen.append(f)
        return seen


class ValidationReport(BaseModel):
    valid: bool = False
    issues: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    security_concerns: list[str] = Field(default_factory=list)

    @property
    def has_issues(self) -> bool:
        return bool(self.issues or self.security_concerns)


class PullRequestInfo(BaseModel):
    number: int
    url: str
    title: str
    branch: str
    base: str = "main"
