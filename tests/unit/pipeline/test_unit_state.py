# tests/unit/pipeline/test_unit_state.py — v2
"""Tests for pipeline/state.py — run state and branch naming."""

from __future__ import annotations

from arlo.core.models import RunningTask, Task
from arlo.pipeline.state import PipelineRun, branch_name


def _task(title: str, task_id: str = "abc123") -> Task:
    return Task(id=task_id, title=title, description="d")


class TestBranchName:
    def test_slug(self):
        assert branch_name(_task("Add Dark Mode!")) == "task/abc123_add-dark-mode-"

    def test_truncated_to_thirty(self):
        name = branch_name(_task("a" * 50))
        assert name == f"task/abc123_{'a' * 30}"

    def test_empty_title(self):
        assert branch_name(_task("")) == "task/abc123_implementation"


class TestPipelineRun:
    def test_record_file_deduplicates(self):
        task = _task("T")
        run = PipelineRun(task=task, running=RunningTask(task_id=task.id))
        run.record_file("a.ts")
        run.record_file("b.ts")
        run.record_file("a.ts")
        assert run.changed_files == ["a.ts", "b.ts"]
        assert len(run.run_id) == 12

    def test_shares_running_ledger(self):
        task = _task("T")
        running = RunningTask(task_id=task.id)
        run = PipelineRun(task=task, running=running)
        assert run.running is running
