# src/pipeline/state.py — v2
"""Mutable per-run state flowing through the five pipeline stages.

Each stage reads what earlier stages produced and appends its own
results. The RunningTask ledger inside is the same object held in the
orchestrator's running registry.
"""

from __future__ import annotations

import re
import uuid

from pydantic import BaseModel, Field

from arlo.core.models import ImplementationPlan, PullRequestInfo, RunningTask, Task

_SLUG_RE = re.compile(r"[^a-z0-9]+")
BRANCH_SLUG_LENGTH = 30


class PipelineRun(BaseModel):
    """State accumulated by one execution of one task."""

    run_id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    task: Task
    running: RunningTask

    # === STAGE OUTPUTS ===
    analysis: str | None = None
    plan: ImplementationPlan | None = None
    implementation_count: int = 0
    changed_files: list[str] = Field(default_factory=list)
    validation: str | None = None
    pr_description: str | None = None
    pr_title: str | None = None
    branch: str | None = None
    commit_hash: str | None = None
    pull_request: PullRequestInfo | None = None

    def record_file(self, file: str) -> None:
        if file not in self.changed_files:
            self.changed_files.append(file)


def branch_name(task: Task) -> str:
    """task/<id>_<slug>, the slug being the lowercased title, at most 30 chars."""
    slug = _SLUG_RE.sub("-", task.title.lower())[:BRANCH_SLUG_LENGTH] if task.title else ""
    return f"task/{task.id}_{slug or 'implementation'}"
