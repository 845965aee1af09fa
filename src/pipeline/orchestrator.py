# src/pipeline/orchestrator.py — v2
"""Task orchestrator: drives the five-stage agent pipeline for one task.

Stage order (strict, non-skippable):
  1. Analysis     (Admin)      analyze the task
  2. Planning     (Config)     implementation plan from the analysis
  3. Execution    (Developer)  one generation per plan step and file
  4. Validation   (Validator)  review of every generated implementation
  5. Integration  (Git)        PR description, then branch/commit/push/PR

A task runs at most once at a time: the running registry is checked and
populated with no suspension point in between. Pipeline failures end the
run as "failed" and are reported in the returned ExecutionReport.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

from arlo.config.settings import Settings
from arlo.core.errors import ConfigError, NotFoundError, TaskRunningError, error_kind_of
from arlo.core.models import (
    AgentConfig,
    ExecutionReport,
    KnowledgeRecord,
    RunningTask,
    StepRecord,
    StepStatus,
    TaskStatus,
    utc_now,
)
from arlo.events.bus import EventBus, EventType
from arlo.llm.gateway import CompletionGateway
from arlo.llm.parsing import extract_title, parse_implementation_plan
from arlo.logging.context import stage_context, task_context
from arlo.pipeline import prompts
from arlo.pipeline.agent_registry import AgentRegistry
from arlo.pipeline.environment import EnvironmentStatus, validate_environment
from arlo.pipeline.prompt_store import PromptStore
from arlo.pipeline.state import PipelineRun, branch_name
from arlo.storage.base_task_store import BaseTaskStore
from arlo.storage.knowledge_store import BaseKnowledgeStore
from arlo.tracking.analytics import AnalyticsEventType, BaseAnalyticsSink
from arlo.vcs.base_vcs import BaseVersionControl

logger = logging.getLogger(__name__)

StageBody = Callable[[PipelineRun], Awaitable[int]]


class TaskOrchestrator:
    """Runs tasks through the agent pipeline.

    Args:
        settings: Application settings.
        gateway: Completion gateway used for every agent call.
        task_store: Task persistence.
        knowledge_store: Agent knowledge persistence.
        analytics: Optional analytics sink (fire-and-forget).
        vcs: Optional version-control collaborator for the integration stage.
        event_bus: Optional bus for execution:* and git/file events.
        agents: Agent registry; built from settings when omitted.
    """

    def __init__(
        self,
        settings: Settings,
        gateway: CompletionGateway,
        task_store: BaseTaskStore,
        knowledge_store: BaseKnowledgeStore,
        analytics: BaseAnalyticsSink | None = None,
        vcs: BaseVersionControl | None = None,
        event_bus: EventBus | None = None,
        agents: AgentRegistry | None = None,
    ) -> None:
        self._settings = settings
        self._gateway = gateway
        self._tasks = task_store
        self._knowledge = knowledge_store
        self._analytics = analytics
        self._vcs = vcs
        self._event_bus = event_bus
        self._agents = (
            agents if agents is not None else AgentRegistry(settings, PromptStore(settings.prompts_dir))
        )
        self._running: dict[str, RunningTask] = {}
        self._telemetry: set[asyncio.Task[Any]] = set()
        self._initialized = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """Load saved prompts and report environment problems. Idempotent."""
        if self._initialized:
            return
        self._agents.load_saved_prompts()
        status = self.validate_environment()
        for warning in status.warnings:
            logger.warning("Environment: %s", warning)
        for error in status.errors:
            logger.error("Environment: %s", error)
        self._initialized = True

    def validate_environment(self) -> EnvironmentStatus:
        return validate_environment(self._settings, self._agents.configs())

    async def flush_telemetry(self) -> None:
        """Wait for outstanding analytics dispatches."""
        while self._telemetry:
            await asyncio.gather(*list(self._telemetry), return_exceptions=True)

    # ------------------------------------------------------------------
    # Running registry
    # ------------------------------------------------------------------

    def is_running(self, task_id: str) -> bool:
        return task_id in self._running

    def running_task_ids(self) -> list[str]:
        return list(self._running)

    def get_running_task(self, task_id: str) -> RunningTask | None:
        running = self._running.get(task_id)
        return running.model_copy(deep=True) if running is not None else None

    # ------------------------------------------------------------------
    # Agent configuration
    # ------------------------------------------------------------------

    @property
    def agents(self) -> AgentRegistry:
        return self._agents

    def get_agent_config(self, name: str) -> AgentConfig | None:
        return self._agents.get_agent_config(name)

    def update_system_prompt(self, name: str, text: str) -> AgentConfig:
        return self._agents.update_system_prompt(name, text)

    def reset_system_prompt(self, name: str) -> AgentConfig:
        return self._agents.reset_system_prompt(name)

    def get_default_system_prompt(self, name: str) -> str:
        return self._agents.get_default_system_prompt(name)

    def get_agent_color(self, name: str) -> str:
        return self._agents.get_agent_color(name)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def start_execution(self, task_id: str) -> ExecutionReport:
        """Run the full pipeline for a task.

        Raises:
            NotFoundError: No such task.
            TaskRunningError: The task is already executing.
            ConfigError: Required provider credentials are missing.
        """
        if not self._initialized:
            await self.initialize()

        task = await self._tasks.get_task_by_id(task_id)
        if task is None:
            raise NotFoundError(f"Task {task_id} not found", details={"task_id": task_id})

        # No await between the membership check and the insertion below
        env = self.validate_environment()
        if task_id in self._running:
            raise TaskRunningError(
                f"Task {task_id} is already running", details={"task_id": task_id}
            )
        if not env.is_valid:
            await self._reject_misconfigured(task_id, env)

        running = RunningTask(task_id=task_id)
        self._running[task_id] = running
        run = PipelineRun(task=task, running=running)
        error: Exception | None = None

        with task_context(task_id, run.run_id):
            try:
                await self._tasks.add_task_log(task_id, "Task execution started")
                self._track(
                    AnalyticsEventType.TASK_CREATED,
                    {"task_id": task_id, "description": task.description},
                )
                await self._tasks.update_task_status(task_id, TaskStatus.RUNNING)

                await self._execute_pipeline(run)

                current = await self._tasks.get_task_by_id(task_id)
                if current is None or current.status is not TaskStatus.FAILED:
                    await self._tasks.update_task_status(
                        task_id, TaskStatus.COMPLETED, "Task completed successfully"
                    )
                    self._track(
                        AnalyticsEventType.TASK_COMPLETED,
                        {
                            "task_id": task_id,
                            "description": task.description,
                            "started_at": running.started_at.isoformat(),
                            "ended_at": utc_now().isoformat(),
                            "status": TaskStatus.COMPLETED.value,
                            "steps": [s.model_dump(mode="json") for s in running.steps],
                        },
                    )
                    logger.info("Task %s completed in %d steps", task_id, len(running.steps))
            except Exception as e:
                error = e
                logger.error("Error executing task %s: %s", task_id, e)
                await self._tasks.add_task_log(task_id, f"Error: {e}")
                await self._tasks.update_task_status(
                    task_id, TaskStatus.FAILED, f"Task failed: {e}"
                )
                self._track(
                    AnalyticsEventType.SYSTEM_ERROR,
                    {
                        "system": "TaskOrchestrator",
                        "task_id": task_id,
                        "error": str(e),
                        "error_type": error_kind_of(e),
                        "status": TaskStatus.FAILED.value,
                    },
                )
            finally:
                self._running.pop(task_id, None)

        final = await self._tasks.get_task_by_id(task_id)
        if error is not None or (final is not None and final.status is TaskStatus.FAILED):
            status = TaskStatus.FAILED
        else:
            status = TaskStatus.COMPLETED
        return ExecutionReport(
            task_id=task_id,
            status=status,
            started_at=running.started_at,
            ended_at=utc_now(),
            steps=list(running.steps),
            error=str(error) if error is not None else None,
            error_kind=error_kind_of(error) if error is not None else None,
        )

    async def _reject_misconfigured(self, task_id: str, env: EnvironmentStatus) -> None:
        message = (
            "Task execution environment not properly configured: "
            f"{', '.join(env.errors)}"
        )
        await self._tasks.add_task_log(task_id, f"Error: {message}")
        await self._tasks.update_task_status(task_id, TaskStatus.FAILED, message)
        self._track(
            AnalyticsEventType.SYSTEM_ERROR,
            {"system": "TaskOrchestrator", "task_id": task_id, "errors": list(env.errors)},
        )
        raise ConfigError(message, details={"errors": list(env.errors)})

    async def _execute_pipeline(self, run: PipelineRun) -> None:
        await self._run_stage(run, "Admin", "analyze_task", "Admin analysis", self._analyze)
        await self._run_stage(run, "Config", "create_plan", "Config planning", self._plan)
        await self._run_stage(
            run, "Developer", "implement_plan", "Developer implementation", self._implement
        )
        await self._run_stage(
            run, "Validator", "validate_implementation", "Validator testing", self._validate
        )
        await self._run_stage(
            run, "Git", "create_pull_request", "Git PR creation", self._integrate
        )

    async def _run_stage(
        self,
        run: PipelineRun,
        agent_name: str,
        action: str,
        label: str,
        body: StageBody,
    ) -> None:
        """Run one stage and record its StepRecord. Failures are re-raised."""
        task_id = run.task.id
        agent = self._agents.require(agent_name)
        started_at = utc_now()

        with stage_context(agent_name, action):
            await self._publish(
                task_id, EventType.EXECUTION_STEP_STARTED, {"agent": agent_name, "action": action}
            )
            self._track(
                AnalyticsEventType.AGENT_ACTIVATED,
                {
                    "agent": agent_name,
                    "task_id": task_id,
                    "provider": agent.provider.value,
                    "model": agent.model,
                    "action": action,
                },
            )
            try:
                ai_duration_ms = await body(run)
            except Exception as e:
                step = StepRecord(
                    agent=agent_name,
                    action=action,
                    started_at=started_at,
                    ended_at=utc_now(),
                    status=StepStatus.FAILED,
                    error=str(e),
                )
                run.running.steps.append(step)
                logger.error("Error in %s for task %s: %s", label, task_id, e)
                await self._tasks.add_task_log(task_id, f"Error in {label}: {e}")
                self._track(
                    AnalyticsEventType.SYSTEM_ERROR,
                    {
                        "system": "CompletionGateway",
                        "agent": agent_name,
                        "task_id": task_id,
                        "error": str(e),
                        "error_type": error_kind_of(e),
                    },
                )
                await self._publish(
                    task_id,
                    EventType.EXECUTION_STEP_FAILED,
                    {"agent": agent_name, "action": action, "error": str(e)},
                )
                raise

            step = StepRecord(
                agent=agent_name,
                action=action,
                started_at=started_at,
                ended_at=utc_now(),
                ai_duration_ms=ai_duration_ms,
                status=StepStatus.COMPLETED,
            )
            run.running.steps.append(step)
            await self._publish(
                task_id,
                EventType.EXECUTION_STEP_COMPLETED,
                {"agent": agent_name, "action": action, "duration_ms": step.duration_ms},
            )

    # ------------------------------------------------------------------
    # Stages (each returns the time spent waiting on the model, in ms)
    # ------------------------------------------------------------------

    async def _analyze(self, run: PipelineRun) -> int:
        task = run.task
        await self._tasks.add_task_log(task.id, "Admin agent analyzing task...")
        agent = self._agents.require("Admin")

        text, ai_ms = await self._generate(
            agent, prompts.analysis_prompt(agent.system_prompt, task)
        )
        await self._tasks.add_task_log(task.id, "Admin agent completed analysis")
        await self._knowledge.add_agent_knowledge(
            "Admin", text, {"type": "task_analysis", "task_id": task.id}
        )
        run.analysis = text
        return ai_ms

    async def _plan(self, run: PipelineRun) -> int:
        task = run.task
        await self._tasks.add_task_log(task.id, "Config agent creating task plan...")
        agent = self._agents.require("Config")

        latest = await self._knowledge.query_agent_knowledge(
            "Admin", task_id=task.id, limit=1, record_type="task_analysis"
        )
        analysis = latest[0].document if latest else ""

        text, ai_ms = await self._generate(
            agent,
            prompts.planning_prompt(agent.system_prompt, task, analysis),
            max_tokens=4000,
        )
        plan = parse_implementation_plan(text)
        await self._tasks.add_task_log(
            task.id, f"Config agent completed task plan with {len(plan.steps)} steps"
        )
        await self._knowledge.add_agent_knowledge(
            "Config", text, {"type": "task_plan", "task_id": task.id}
        )
        run.plan = plan
        return ai_ms

    async def _implement(self, run: PipelineRun) -> int:
        task = run.task
        plan = run.plan
        await self._tasks.add_task_log(task.id, "Developer agent implementing plan steps...")
        agent = self._agents.require("Developer")
        total_ai_ms = 0

        steps = plan.steps if plan is not None else []
        for index, step in enumerate(steps, start=1):
            await self._tasks.add_task_log(
                task.id, f"Executing step {index}/{len(steps)}: {step.description}"
            )
            for file in step.files:
                prompt = prompts.implementation_prompt(
                    agent.system_prompt,
                    task,
                    step,
                    file,
                    prompts.simulated_file_context(file),
                )
                text, ai_ms = await self._generate(agent, prompt, max_tokens=3000)
                total_ai_ms += ai_ms
                await self._tasks.add_task_log(task.id, f"Generated implementation for {file}")
                await self._knowledge.add_agent_knowledge(
                    "Developer",
                    text,
                    {"type": "implementation", "task_id": task.id, "file": file, "step": index},
                )
                run.implementation_count += 1
                run.record_file(file)
                await self._publish(
                    task.id,
                    EventType.FILE_OPERATION,
                    {"operation": "generate", "file": file, "step": index},
                )

        await self._tasks.add_task_log(
            task.id, "Developer agent completed all implementation steps"
        )
        return total_ai_ms

    async def _validate(self, run: PipelineRun) -> int:
        task = run.task
        await self._tasks.add_task_log(task.id, "Validator agent testing implementation...")
        agent = self._agents.require("Validator")

        records: list[KnowledgeRecord] = []
        if run.implementation_count:
            records = await self._knowledge.query_agent_knowledge(
                "Developer",
                task_id=task.id,
                limit=run.implementation_count,
                record_type="implementation",
            )
        # Newest first from the store, prompt lists them in generation order
        implementations = list(reversed(records))

        text, ai_ms = await self._generate(
            agent,
            prompts.validation_prompt(agent.system_prompt, task, implementations),
            max_tokens=3000,
        )
        await self._tasks.add_task_log(task.id, "Validator agent completed testing")
        await self._knowledge.add_agent_knowledge(
            "Validator", text, {"type": "validation", "task_id": task.id}
        )
        run.validation = text
        return ai_ms

    async def _integrate(self, run: PipelineRun) -> int:
        task = run.task
        await self._tasks.add_task_log(task.id, "Git agent creating PR...")
        agent = self._agents.require("Git")

        analysis = await self._knowledge.query_agent_knowledge(
            "Admin", task_id=task.id, limit=1, record_type="task_analysis"
        )
        validation = await self._knowledge.query_agent_knowledge(
            "Validator", task_id=task.id, limit=1, record_type="validation"
        )
        text, ai_ms = await self._generate(
            agent,
            prompts.pull_request_prompt(
                agent.system_prompt,
                task,
                analysis[0].document if analysis else None,
                validation[0].document if validation else None,
            ),
        )
        await self._tasks.add_task_log(task.id, "Git agent created PR description")
        run.pr_description = text
        run.pr_title = extract_title(text) or task.title

        await self._apply_version_control(run)

        fields: dict[str, Any] = {
            "pr_title": run.pr_title,
            "pr_description": text,
            "pr_branch": run.branch,
        }
        if run.pull_request is not None:
            fields["pr_number"] = run.pull_request.number
            fields["pr_url"] = run.pull_request.url
        if run.commit_hash is not None:
            fields["commit_hash"] = run.commit_hash
        await self._tasks.update_task(task.id, fields)

        await self._knowledge.add_agent_knowledge(
            "Git",
            text,
            {
                "type": "pull_request",
                "task_id": task.id,
                "branch": run.branch,
                "pr_number": fields.get("pr_number"),
                "pr_url": fields.get("pr_url"),
            },
        )
        if run.pull_request is not None:
            await self._tasks.add_task_log(task.id, f"PR created: {run.pull_request.url}")
        return ai_ms

    async def _apply_version_control(self, run: PipelineRun) -> None:
        """Branch, stage, commit, push and open the PR.

        Each operation that fails is logged to the task as a warning and
        the remaining operations still run.
        """
        task = run.task
        vcs = self._vcs
        if vcs is None:
            await self._tasks.add_task_log(
                task.id, "Version control not configured, skipping pull request creation"
            )
            return
        available = await self._vcs_call(run, "check repository", vcs.is_repository())
        if not available:
            await self._tasks.add_task_log(
                task.id, "Git not available, skipping pull request creation"
            )
            return

        branch = branch_name(task)
        if await self._vcs_call(run, "create git branch", vcs.create_branch(branch), True):
            run.branch = branch
            await self._tasks.add_task_log(task.id, f"Created and checked out git branch: {branch}")
            await self._publish_git(task.id, "create_branch", branch=branch)

        if run.changed_files:
            staged = await self._vcs_call(
                run, "stage files", vcs.stage_files(list(run.changed_files)), True
            )
            if staged:
                await self._tasks.add_task_log(
                    task.id, f"Staged {len(run.changed_files)} files for commit"
                )
                await self._publish_git(task.id, "stage_files", files=list(run.changed_files))
                commit_message = f"{task.title}\n\nImplement changes for task {task.id}"
                commit_hash = await self._vcs_call(
                    run, "create commit", vcs.create_commit(commit_message)
                )
                if commit_hash:
                    run.commit_hash = commit_hash
                    await self._tasks.add_task_log(task.id, f"Created commit: {commit_hash}")
                    await self._publish_git(task.id, "create_commit", hash=commit_hash)

        head = run.branch or await self._vcs_call(run, "read current branch", vcs.current_branch())
        if not head:
            return
        pushed = await self._vcs_call(
            run, "push branch to remote", vcs.push_changes("origin", head, True), True
        )
        if pushed:
            await self._tasks.add_task_log(task.id, f"Pushed branch {head} to remote")
            await self._publish_git(task.id, "push_changes", branch=head)

        pr = await self._vcs_call(
            run,
            "create pull request",
            vcs.create_pull_request(
                title=run.pr_title or task.title,
                body=run.pr_description or "",
                head=head,
                base=self._settings.pr_base_branch,
            ),
        )
        if pr is not None:
            run.pull_request = pr
            await self._tasks.add_task_log(task.id, f"Created pull request #{pr.number}: {pr.url}")
            await self._publish_git(task.id, "create_pull_request", number=pr.number, url=pr.url)

    async def _vcs_call(
        self, run: PipelineRun, what: str, call: Awaitable[Any], success: Any = None
    ) -> Any:
        """Await a VCS operation, turning failures into task warnings.

        Returns ``success`` (when given) or the call's result, None on failure.
        """
        try:
            result = await call
        except Exception as e:
            logger.warning("VCS operation failed (%s): %s", what, e)
            await self._tasks.add_task_log(run.task.id, f"Warning: Failed to {what}: {e}")
            return None
        return result if success is None else success

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _generate(
        self, agent: AgentConfig, prompt: str, max_tokens: int = 2000
    ) -> tuple[str, int]:
        # Stage prompts start with the shared system prompt, so the
        # prefix-keyed response cache would conflate different tasks.
        start = time.monotonic()
        text = await self._gateway.generate(
            prompt,
            model=agent.model,
            provider=agent.provider,
            temperature=agent.temperature,
            max_tokens=max_tokens,
            use_cache=False,
        )
        return text, int((time.monotonic() - start) * 1000)

    async def _publish(self, task_id: str, event_type: EventType, data: dict[str, Any]) -> None:
        if self._event_bus is not None:
            await self._event_bus.publish(task_id, event_type, data)

    async def _publish_git(self, task_id: str, operation: str, **data: Any) -> None:
        await self._publish(task_id, EventType.GIT_OPERATION, {"operation": operation, **data})

    def _track(self, event_type: AnalyticsEventType, payload: dict[str, Any]) -> None:
        """Dispatch an analytics event in the background."""
        if self._analytics is None:
            return
        payload = {**payload, "timestamp": utc_now().isoformat()}
        dispatch = asyncio.ensure_future(self._analytics.track_event(event_type, payload))
        self._telemetry.add(dispatch)
        dispatch.add_done_callback(self._on_telemetry_done)

    def _on_telemetry_done(self, dispatch: asyncio.Future[Any]) -> None:
        self._telemetry.discard(dispatch)  # type: ignore[arg-type]
        if dispatch.cancelled():
            return
        exc = dispatch.exception()
        if exc is not None:
            logger.warning("Analytics dispatch failed: %s", exc)
