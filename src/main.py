# src/main.py — v2
"""CLI entry point: run, prompts, env commands.

Usage:
    arlo run --title <title> --description <text> [--tasks-dir DIR]
    arlo prompts show <agent>
    arlo prompts set <agent> <text>
    arlo prompts reset <agent>
    arlo env
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from arlo.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="arlo",
        description=f"ARLO v{__version__} - multi-agent task orchestration",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- run ---
    p_run = subparsers.add_parser("run", help="Create a task and run the pipeline")
    p_run.add_argument("--title", required=True, help="Task title")
    p_run.add_argument("--description", required=True, help="Task description")
    p_run.add_argument(
        "--tasks-dir", type=Path, default=None,
        help="Task store directory (default: TASKS_DIR)",
    )
    p_run.set_defaults(func=_cmd_run)

    # --- prompts ---
    p_prompts = subparsers.add_parser("prompts", help="Manage agent system prompts")
    prompt_cmds = p_prompts.add_subparsers(dest="prompt_command", required=True)

    p_show = prompt_cmds.add_parser("show", help="Print an agent's system prompt")
    p_show.add_argument("agent", help="Agent name (e.g. Developer)")
    p_show.set_defaults(func=_cmd_prompt_show)

    p_set = prompt_cmds.add_parser("set", help="Replace an agent's system prompt")
    p_set.add_argument("agent", help="Agent name")
    p_set.add_argument("text", help="New prompt text (at least 10 characters)")
    p_set.set_defaults(func=_cmd_prompt_set)

    p_reset = prompt_cmds.add_parser("reset", help="Restore an agent's default prompt")
    p_reset.add_argument("agent", help="Agent name")
    p_reset.set_defaults(func=_cmd_prompt_reset)

    # --- env ---
    p_env = subparsers.add_parser("env", help="Check provider configuration")
    p_env.set_defaults(func=_cmd_env)

    return parser


async def _cmd_run(args: argparse.Namespace) -> int:
    """Create one task and run it to completion."""
    from arlo.api.facade import build_orchestrator
    from arlo.config.settings import load_settings
    from arlo.events.bus import EventBus
    from arlo.storage.json_task_store import JsonTaskStore

    overrides = {"tasks_dir": args.tasks_dir} if args.tasks_dir else {}
    settings = load_settings(**overrides)
    event_bus = EventBus()
    task_store = JsonTaskStore(settings.tasks_dir, event_bus=event_bus)
    orchestrator = build_orchestrator(settings, task_store=task_store, event_bus=event_bus)

    await orchestrator.initialize()
    task = await task_store.create_task(args.title, args.description)
    logger.info("Running task %s", task.id)
    try:
        report = await orchestrator.start_execution(task.id)
    finally:
        await orchestrator.flush_telemetry()

    final = await task_store.get_task_by_id(task.id)
    print(f"\nTask {task.id}: {report.status.value}")
    for step in report.steps:
        line = f"  {step.agent:<10s} {step.action:<24s} {step.status.value:<9s} {step.duration_ms} ms"
        if step.error:
            line += f"  ({step.error})"
        print(line)
    if final is not None and final.pr_url:
        print(f"  PR: {final.pr_url}")
    if report.error:
        print(f"  Error: {report.error}")
    return 0 if report.status.value == "completed" else 2


async def _cmd_prompt_show(args: argparse.Namespace) -> int:
    registry = _load_registry()
    config = registry.get_agent_config(args.agent)
    if config is None:
        logger.error("Unknown agent: %s", args.agent)
        return 1
    print(config.system_prompt)
    return 0


async def _cmd_prompt_set(args: argparse.Namespace) -> int:
    registry = _load_registry()
    registry.update_system_prompt(args.agent, args.text)
    print(f"Updated system prompt for {args.agent}")
    return 0


async def _cmd_prompt_reset(args: argparse.Namespace) -> int:
    registry = _load_registry()
    registry.reset_system_prompt(args.agent)
    print(f"Reset system prompt for {args.agent}")
    return 0


async def _cmd_env(args: argparse.Namespace) -> int:
    """Print environment warnings and errors."""
    from arlo.config.settings import load_settings
    from arlo.pipeline.environment import validate_environment

    registry = _load_registry(load_saved=False)
    status = validate_environment(load_settings(), registry.configs())
    for warning in status.warnings:
        print(f"warning: {warning}")
    for error in status.errors:
        print(f"error: {error}")
    print("Environment OK" if status.is_valid else "Environment invalid")
    return 0 if status.is_valid else 1


def _load_registry(load_saved: bool = True):
    from arlo.config.settings import load_settings
    from arlo.pipeline.agent_registry import AgentRegistry
    from arlo.pipeline.prompt_store import PromptStore

    settings = load_settings()
    registry = AgentRegistry(settings, PromptStore(settings.prompts_dir))
    if load_saved:
        registry.load_saved_prompts()
    return registry


def _setup_logging(verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from arlo.config.settings import load_settings
    from arlo.logging.logger import setup_logging

    try:
        settings = load_settings()
    except Exception as exc:
        # Fall back to console logging so the error itself gets reported
        logging.basicConfig(level=logging.INFO, stream=sys.stderr)
        logger.warning("Could not load settings for logging: %s", exc)
        return

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


if __name__ == "__main__":
    sys.exit(main())
