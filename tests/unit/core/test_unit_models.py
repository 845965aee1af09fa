# tests/unit/core/test_unit_models.py — v2
"""Tests for core/models.py — task, agent, step and parsed-output models."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from arlo.core.models import (
    AgentConfig,
    ExecutionReport,
    ImplementationPlan,
    KnowledgeRecord,
    PlanStep,
    StepRecord,
    StepStatus,
    Task,
    TaskStatus,
    ValidationReport,
)
from arlo.llm.models import Provider


class TestTask:
    def test_defaults(self):
        task = Task(id="t1", title="T", description="D")
        assert task.status is TaskStatus.PENDING
        assert task.logs == []
        assert task.pr_number is None

    def test_terminal_statuses(self):
        assert TaskStatus.COMPLETED.is_terminal
        assert TaskStatus.FAILED.is_terminal
        assert not TaskStatus.RUNNING.is_terminal
        assert not TaskStatus.PENDING.is_terminal


class TestAgentConfig:
    def test_valid(self):
        cfg = AgentConfig(name="Admin", provider=Provider.OLLAMA, system_prompt="x" * 10)
        assert cfg.model is None
        assert cfg.temperature == 0.1

    def test_short_prompt_rejected(self):
        with pytest.raises(ValidationError, match="at least 10 characters"):
            AgentConfig(name="Admin", provider=Provider.OLLAMA, system_prompt="short")

    def test_whitespace_does_not_count(self):
        with pytest.raises(ValidationError):
            AgentConfig(name="Admin", provider=Provider.OLLAMA, system_prompt="   abc      ")

    def test_assignment_validated(self):
        cfg = AgentConfig(name="Admin", provider="ollama", system_prompt="a valid prompt")
        with pytest.raises(ValidationError):
            cfg.system_prompt = "tiny"
        assert cfg.system_prompt == "a valid prompt"


class TestStepRecord:
    def test_duration(self):
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        step = StepRecord(
            agent="Admin",
            action="analyze_task",
            started_at=start,
            ended_at=start + timedelta(milliseconds=1500),
            status=StepStatus.COMPLETED,
        )
        assert step.duration_ms == 1500


class TestExecutionReport:
    def test_failed_steps(self):
        now = datetime.now(timezone.utc)
        ok = StepRecord(agent="A", action="a", started_at=now, ended_at=now, status="completed")
        bad = StepRecord(
            agent="B", action="b", started_at=now, ended_at=now, status="failed", error="boom"
        )
        report = ExecutionReport(
            task_id="t", status=TaskStatus.FAILED, started_at=now, ended_at=now, steps=[ok, bad]
        )
        assert report.failed_steps == [bad]


class TestKnowledgeRecord:
    def test_metadata_accessors(self):
        rec = KnowledgeRecord(
            agent="Developer", document="code", metadata={"type": "implementation", "task_id": "t1"}
        )
        assert rec.type == "implementation"
        assert rec.task_id == "t1"


class TestImplementationPlan:
    def test_files_deduplicated_in_order(self):
        plan = ImplementationPlan(
            steps=[
                PlanStep(description="one", files=["a.ts", "b.ts"]),
                PlanStep(description="two", files=["b.ts", "c.ts"]),
            ]
        )
        assert plan.files == ["a.ts", "b.ts", "c.ts"]


class TestValidationReport:
    def test_has_issues(self):
        assert not ValidationReport(valid=True, suggestions=["x"]).has_issues
        assert ValidationReport(issues=["bug"]).has_issues
        assert ValidationReport(security_concerns=["xss"]).has_issues
