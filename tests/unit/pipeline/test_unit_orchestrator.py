# tests/unit/pipeline/test_unit_orchestrator.py — v2
"""Tests for pipeline/orchestrator.py — five-stage execution, running registry, failures."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from arlo.core.errors import (
    AgentNotFoundError,
    AIError,
    ConfigError,
    NotFoundError,
    TaskRunningError,
    VCSError,
)
from arlo.core.models import StepStatus, TaskStatus
from arlo.events.bus import EventType
from arlo.pipeline.agent_registry import AgentRegistry
from arlo.pipeline.orchestrator import TaskOrchestrator
from arlo.tracking.analytics import AnalyticsEventType


async def _new_task(task_store, title="Add dark mode toggle"):
    return await task_store.create_task(title, "Users want a dark theme on the settings page.")


class TestHappyPath:
    @pytest.mark.asyncio
    async def test_completes_all_stages(self, orchestrator, task_store):
        task = await _new_task(task_store)
        report = await orchestrator.start_execution(task.id)

        assert report.status is TaskStatus.COMPLETED
        assert report.error is None
        assert [s.agent for s in report.steps] == [
            "Admin",
            "Config",
            "Developer",
            "Validator",
            "Git",
        ]
        assert all(s.status is StepStatus.COMPLETED for s in report.steps)

        stored = await task_store.get_task_by_id(task.id)
        assert stored.status is TaskStatus.COMPLETED
        assert stored.status_message == "Task completed successfully"

    @pytest.mark.asyncio
    async def test_one_developer_call_per_file(self, orchestrator, task_store, gateway):
        task = await _new_task(task_store)
        await orchestrator.start_execution(task.id)

        calls = gateway.generate.await_args_list
        # analysis, plan, three files, validation, PR description
        assert len(calls) == 7
        assert [c.kwargs["max_tokens"] for c in calls] == [
            2000, 4000, 3000, 3000, 3000, 3000, 2000
        ]
        assert all(c.kwargs["use_cache"] is False for c in calls)

    @pytest.mark.asyncio
    async def test_agent_temperatures_used(self, orchestrator, task_store, gateway):
        task = await _new_task(task_store)
        await orchestrator.start_execution(task.id)

        temps = [c.kwargs["temperature"] for c in gateway.generate.await_args_list]
        assert temps[0] == 0.2  # Admin
        assert temps[1] == 0.2  # Config
        assert temps[2:] == [0.1] * 5

    @pytest.mark.asyncio
    async def test_stage_logs(self, orchestrator, task_store):
        task = await _new_task(task_store)
        await orchestrator.start_execution(task.id)

        logs = "\n".join((await task_store.get_task_by_id(task.id)).logs)
        assert "Task execution started" in logs
        assert "Config agent completed task plan with 2 steps" in logs
        assert "Executing step 1/2: Create the theme store" in logs
        assert "Generated implementation for src/settings/page.tsx" in logs
        assert "Validator agent completed testing" in logs
        assert "PR created: https://github.com/example/repo/pull/" in logs

    @pytest.mark.asyncio
    async def test_knowledge_written(self, orchestrator, task_store, knowledge_store):
        task = await _new_task(task_store)
        await orchestrator.start_execution(task.id)

        impls = await knowledge_store.query_agent_knowledge(
            "Developer", task_id=task.id, record_type="implementation"
        )
        assert len(impls) == 3
        oldest = impls[-1]
        assert oldest.metadata["file"] == "src/theme/store.ts"
        assert oldest.metadata["step"] == 1

        analysis = await knowledge_store.query_agent_knowledge("Admin", task_id=task.id)
        assert analysis[0].type == "task_analysis"
        plan = await knowledge_store.query_agent_knowledge("Config", task_id=task.id)
        assert plan[0].type == "task_plan"
        pr = await knowledge_store.query_agent_knowledge("Git", task_id=task.id)
        assert pr[0].type == "pull_request"
        assert pr[0].metadata["pr_url"].startswith("https://github.com/example/repo/pull/")

    @pytest.mark.asyncio
    async def test_validation_prompt_lists_implementations_in_order(
        self, orchestrator, task_store, gateway
    ):
        task = await _new_task(task_store)
        await orchestrator.start_execution(task.id)

        validation_prompt = gateway.generate.await_args_list[5].args[0]
        first = validation_prompt.index("## File: src/theme/store.ts")
        second = validation_prompt.index("## File: src/settings/page.tsx")
        third = validation_prompt.index("## File: src/settings/page.test.tsx")
        assert first < second < third

    @pytest.mark.asyncio
    async def test_empty_plan_validates_no_earlier_implementations(
        self, make_gateway, scripted, settings, task_store, knowledge_store, agents
    ):
        plans = [None, "# Overview\nNothing to change."]

        def responder(prompt):
            if "# Planning Requirements" in prompt and plans[0] is not None:
                return plans[0]
            return scripted(prompt)

        gateway = make_gateway(responder)
        orch = TaskOrchestrator(settings, gateway, task_store, knowledge_store, agents=agents)
        task = await _new_task(task_store)
        await orch.start_execution(task.id)

        plans[0] = plans[1]
        gateway.generate.reset_mock()
        report = await orch.start_execution(task.id)

        assert report.status is TaskStatus.COMPLETED
        prompts_sent = [call.args[0] for call in gateway.generate.await_args_list]
        assert len(prompts_sent) == 4
        validation_prompt = next(p for p in prompts_sent if "# Implementations to Validate" in p)
        assert "## File:" not in validation_prompt

    @pytest.mark.asyncio
    async def test_running_registry_cleared(self, orchestrator, task_store):
        task = await _new_task(task_store)
        await orchestrator.start_execution(task.id)
        assert not orchestrator.is_running(task.id)
        assert orchestrator.running_task_ids() == []
        assert orchestrator.get_running_task(task.id) is None


class TestPullRequest:
    @pytest.mark.asyncio
    async def test_pr_fields_stored(self, orchestrator, task_store):
        task = await _new_task(task_store)
        await orchestrator.start_execution(task.id)

        stored = await task_store.get_task_by_id(task.id)
        assert stored.pr_title == "Add dark mode toggle"
        assert stored.pr_description.startswith("# Add dark mode toggle")
        assert stored.pr_branch == f"task/{task.id}_add-dark-mode-toggle"
        assert 100 <= stored.pr_number <= 1099
        assert stored.pr_url == f"https://github.com/example/repo/pull/{stored.pr_number}"
        assert stored.commit_hash

    @pytest.mark.asyncio
    async def test_vcs_operation_order(self, orchestrator, task_store, vcs):
        task = await _new_task(task_store)
        await orchestrator.start_execution(task.id)

        assert vcs.operation_names() == [
            "create_branch",
            "stage_files",
            "create_commit",
            "push_changes",
            "create_pull_request",
        ]
        _, staged = vcs.operations[1]
        assert staged["files"] == [
            "src/theme/store.ts",
            "src/settings/page.tsx",
            "src/settings/page.test.tsx",
        ]
        _, commit = vcs.operations[2]
        assert commit["message"] == (
            f"Add dark mode toggle\n\nImplement changes for task {task.id}"
        )

    @pytest.mark.asyncio
    async def test_vcs_failure_becomes_warning(self, orchestrator, task_store, vcs):
        vcs.push_changes = AsyncMock(side_effect=VCSError("remote rejected"))
        task = await _new_task(task_store)
        report = await orchestrator.start_execution(task.id)

        assert report.status is TaskStatus.COMPLETED
        stored = await task_store.get_task_by_id(task.id)
        assert any(
            "Warning: Failed to push branch to remote: remote rejected" in line
            for line in stored.logs
        )
        assert stored.pr_number is not None

    @pytest.mark.asyncio
    async def test_not_a_repository_skips(self, orchestrator, task_store, vcs):
        vcs._is_repo = False
        task = await _new_task(task_store)
        report = await orchestrator.start_execution(task.id)

        assert report.status is TaskStatus.COMPLETED
        stored = await task_store.get_task_by_id(task.id)
        assert stored.pr_number is None
        assert stored.pr_title == "Add dark mode toggle"
        assert any("Git not available" in line for line in stored.logs)
        assert vcs.operations == []

    @pytest.mark.asyncio
    async def test_without_vcs(
        self, settings, gateway, task_store, knowledge_store, agents
    ):
        orch = TaskOrchestrator(settings, gateway, task_store, knowledge_store, agents=agents)
        task = await _new_task(task_store)
        report = await orch.start_execution(task.id)

        assert report.status is TaskStatus.COMPLETED
        stored = await task_store.get_task_by_id(task.id)
        assert stored.pr_url is None
        assert any("Version control not configured" in line for line in stored.logs)

    @pytest.mark.asyncio
    async def test_title_falls_back_to_task_title(
        self, make_gateway, scripted, settings, task_store, knowledge_store, agents
    ):
        def responder(prompt):
            if "Your PR description:" in prompt:
                return "Summary without a heading"
            return scripted(prompt)

        orch = TaskOrchestrator(
            settings, make_gateway(responder), task_store, knowledge_store, agents=agents
        )
        task = await _new_task(task_store, title="Fix login redirect")
        await orch.start_execution(task.id)
        stored = await task_store.get_task_by_id(task.id)
        assert stored.pr_title == "Fix login redirect"


class TestFailures:
    @pytest.mark.asyncio
    async def test_unknown_task(self, orchestrator):
        with pytest.raises(NotFoundError, match="Task missing not found"):
            await orchestrator.start_execution("missing")

    @pytest.mark.asyncio
    async def test_developer_failure_stops_pipeline(
        self, make_gateway, scripted, settings, task_store, knowledge_store, analytics, vcs, agents
    ):
        def responder(prompt):
            if "# File to Modify" in prompt:
                raise AIError("AI model error: connection refused")
            return scripted(prompt)

        gateway = make_gateway(responder)
        orch = TaskOrchestrator(
            settings, gateway, task_store, knowledge_store, analytics, vcs, agents=agents
        )
        task = await _new_task(task_store)
        report = await orch.start_execution(task.id)

        assert report.status is TaskStatus.FAILED
        assert report.error == "AI model error: connection refused"
        assert report.error_kind == "AI_ERROR"
        assert [s.agent for s in report.steps] == ["Admin", "Config", "Developer"]
        failed = report.failed_steps
        assert len(failed) == 1
        assert failed[0].action == "implement_plan"
        assert failed[0].error == "AI model error: connection refused"

        # Admin, Config, then the first Developer call
        assert gateway.generate.await_count == 3
        assert vcs.operations == []

        stored = await task_store.get_task_by_id(task.id)
        assert stored.status is TaskStatus.FAILED
        assert stored.status_message == "Task failed: AI model error: connection refused"
        assert any("Error in Developer implementation" in line for line in stored.logs)
        assert not orch.is_running(task.id)

        await orch.flush_telemetry()
        assert analytics.of_type(AnalyticsEventType.SYSTEM_ERROR)
        assert not analytics.of_type(AnalyticsEventType.TASK_COMPLETED)

    @pytest.mark.asyncio
    async def test_missing_api_key_rejected(
        self, settings, gateway, task_store, knowledge_store, analytics
    ):
        settings = settings.model_copy(update={"llm_developer": "openai:gpt-4"})
        orch = TaskOrchestrator(
            settings,
            gateway,
            task_store,
            knowledge_store,
            analytics,
            agents=AgentRegistry(settings),
        )
        task = await _new_task(task_store)

        with pytest.raises(ConfigError, match="OPENAI_API_KEY"):
            await orch.start_execution(task.id)

        stored = await task_store.get_task_by_id(task.id)
        assert stored.status is TaskStatus.FAILED
        assert "not properly configured" in stored.status_message
        assert gateway.generate.await_count == 0
        assert not orch.is_running(task.id)

    @pytest.mark.asyncio
    async def test_concurrent_start_rejected(
        self, settings, scripted, task_store, knowledge_store, agents
    ):
        gate = asyncio.Event()
        gateway = AsyncMock()

        async def _generate(prompt, **kwargs):
            await gate.wait()
            return scripted(prompt)

        gateway.generate = AsyncMock(side_effect=_generate)
        orch = TaskOrchestrator(settings, gateway, task_store, knowledge_store, agents=agents)
        task = await _new_task(task_store)

        first = asyncio.create_task(orch.start_execution(task.id))
        for _ in range(20):
            await asyncio.sleep(0)
            if orch.is_running(task.id):
                break
        assert orch.is_running(task.id)
        assert orch.get_running_task(task.id).task_id == task.id

        with pytest.raises(TaskRunningError):
            await orch.start_execution(task.id)

        gate.set()
        report = await first
        assert report.status is TaskStatus.COMPLETED

        # A finished task can be executed again
        again = await orch.start_execution(task.id)
        assert again.status is TaskStatus.COMPLETED


class TestEvents:
    @pytest.mark.asyncio
    async def test_step_events(self, orchestrator, task_store, event_bus):
        started, completed, git_ops, file_ops = [], [], [], []
        event_bus.on(EventType.EXECUTION_STEP_STARTED, started.append)
        event_bus.on(EventType.EXECUTION_STEP_COMPLETED, completed.append)
        event_bus.on(EventType.GIT_OPERATION, git_ops.append)
        event_bus.on(EventType.FILE_OPERATION, file_ops.append)

        task = await _new_task(task_store)
        await orchestrator.start_execution(task.id)

        assert [e["agent"] for e in started] == [
            "Admin", "Config", "Developer", "Validator", "Git"
        ]
        assert len(completed) == 5
        assert all(e["task_id"] == task.id for e in completed)
        assert len(file_ops) == 3
        assert [e["operation"] for e in git_ops] == [
            "create_branch",
            "stage_files",
            "create_commit",
            "push_changes",
            "create_pull_request",
        ]

    @pytest.mark.asyncio
    async def test_task_subscriber_sees_status_changes(
        self, orchestrator, task_store, event_bus
    ):
        task = await _new_task(task_store)
        statuses = []
        event_bus.on(
            EventType.TASK_STATUS_CHANGED, lambda d: statuses.append(d["status"]), task_id=task.id
        )
        await orchestrator.start_execution(task.id)
        assert statuses == ["running", "completed"]


class TestAnalytics:
    @pytest.mark.asyncio
    async def test_events_after_flush(self, orchestrator, task_store, analytics):
        task = await _new_task(task_store)
        await orchestrator.start_execution(task.id)
        await orchestrator.flush_telemetry()

        assert len(analytics.of_type(AnalyticsEventType.TASK_CREATED)) == 1
        activated = analytics.of_type(AnalyticsEventType.AGENT_ACTIVATED)
        assert [e.payload["agent"] for e in activated] == [
            "Admin", "Config", "Developer", "Validator", "Git"
        ]
        done = analytics.of_type(AnalyticsEventType.TASK_COMPLETED)
        assert len(done) == 1
        assert done[0].payload["status"] == "completed"
        assert len(done[0].payload["steps"]) == 5

    @pytest.mark.asyncio
    async def test_sink_failure_does_not_fail_task(self, orchestrator, task_store, analytics):
        analytics.track_event = AsyncMock(side_effect=RuntimeError("sink down"))
        task = await _new_task(task_store)
        report = await orchestrator.start_execution(task.id)
        await orchestrator.flush_telemetry()
        assert report.status is TaskStatus.COMPLETED


class TestAgentConfiguration:
    def test_update_prompt_too_short(self, orchestrator):
        with pytest.raises(ValueError, match="at least 10 characters"):
            orchestrator.update_system_prompt("Developer", "short")

    def test_update_prompt_unknown_agent(self, orchestrator):
        with pytest.raises(AgentNotFoundError):
            orchestrator.update_system_prompt("Nobody", "a perfectly fine prompt")

    def test_update_and_reset(self, orchestrator):
        orchestrator.update_system_prompt("Developer", "You write careful code.")
        assert orchestrator.get_agent_config("Developer").system_prompt == (
            "You write careful code."
        )
        orchestrator.reset_system_prompt("Developer")
        assert orchestrator.get_agent_config("Developer").system_prompt == (
            orchestrator.get_default_system_prompt("Developer")
        )

    def test_agent_color(self, orchestrator):
        assert orchestrator.get_agent_color("Unknown") == "#000000"

    @pytest.mark.asyncio
    async def test_updated_prompt_used_in_next_run(self, orchestrator, task_store, gateway):
        orchestrator.update_system_prompt("Admin", "You are the release captain.")
        task = await _new_task(task_store)
        await orchestrator.start_execution(task.id)
        first_prompt = gateway.generate.await_args_list[0].args[0]
        assert first_prompt.startswith("You are the release captain.")
