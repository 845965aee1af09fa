# src/pipeline/prompts.py — v1
"""Stage prompt templates.

Every prompt starts with the agent's system prompt followed by a
"# Task" section; stage-specific sections follow.
"""

from __future__ import annotations

from arlo.core.models import KnowledgeRecord, PlanStep, Task

CODEBASE_CONTEXT = (
    "AssembleJS is a framework for building web components with multi-framework "
    "support. The ARLO system is an AI agent system for maintaining and extending "
    "the AssembleJS framework."
)


def _header(system_prompt: str, task: Task, with_description: bool = True) -> str:
    parts = [system_prompt, "", "# Task", task.title]
    if with_description:
        parts += ["", task.description]
    return "\n".join(parts)


def analysis_prompt(system_prompt: str, task: Task) -> str:
    return (
        f"{_header(system_prompt, task)}\n\n"
        "# Analysis Requirements\n"
        "1. Analyze what this task is asking for\n"
        "2. Determine which specialist agents should be involved\n"
        "3. Identify key components or files that will need to be modified\n"
        "4. Assess complexity and potential challenges\n"
        "5. Provide an overall assessment of the task\n\n"
        "Your analysis:\n"
    )


def planning_prompt(
    system_prompt: str, task: Task, admin_analysis: str, codebase_context: str = CODEBASE_CONTEXT
) -> str:
    return (
        f"{_header(system_prompt, task)}\n\n"
        f"# Admin Analysis\n{admin_analysis}\n\n"
        f"# Codebase Context\n{codebase_context}\n\n"
        "# Planning Requirements\n"
        "Create a detailed implementation plan for this task. Break it down into "
        "specific steps.\n\n"
        "Your plan should include:\n"
        "1. An overview of the approach\n"
        "2. Step-by-step implementation tasks with specific file paths where relevant\n"
        "3. Testing strategy\n"
        "4. Potential risks or edge cases\n\n"
        "Your implementation plan:\n"
    )


def implementation_prompt(
    system_prompt: str, task: Task, step: PlanStep, file: str, file_context: str
) -> str:
    return (
        f"{_header(system_prompt, task, with_description=False)}\n\n"
        f"# Implementation Step\n{step.description}\n\n"
        f"# Step Details\n{step.details}\n\n"
        f"# File to Modify\n{file}\n\n"
        f"# Current File Content\n```\n{file_context}\n```\n\n"
        "Generate the code implementation for this step. Provide ONLY the code to "
        "add or modify,\nusing proper syntax, indentation, and following the style "
        "of the existing code.\n"
    )


def validation_prompt(
    system_prompt: str, task: Task, implementations: list[KnowledgeRecord]
) -> str:
    blocks = "\n\n".join(
        f"## File: {record.metadata.get('file')}\n```\n{record.document}\n```\n"
        for record in implementations
    )
    return (
        f"{_header(system_prompt, task)}\n\n"
        f"# Implementations to Validate\n{blocks}\n\n"
        "Validate the implementation and provide a test report with the following "
        "sections:\n"
        "1. Overview of testing approach\n"
        "2. Issues found (if any)\n"
        "3. Suggestions for improvement\n"
        "4. Overall assessment\n\n"
        "Your validation report:\n"
    )


def pull_request_prompt(
    system_prompt: str, task: Task, admin_analysis: str | None, validation: str | None
) -> str:
    return (
        f"{_header(system_prompt, task)}\n\n"
        f"# Admin Analysis\n{admin_analysis or 'No analysis available'}\n\n"
        f"# Validation Results\n{validation or 'No validation results available'}\n\n"
        "Create a pull request description for this task. Include:\n"
        "1. A clear and descriptive title\n"
        "2. Summary of changes\n"
        "3. Testing performed\n"
        "4. Any notes for reviewers\n\n"
        "Start the description with a level-one markdown heading holding the title.\n\n"
        "Your PR description:\n"
    )


def simulated_file_context(file: str) -> str:
    """Placeholder file content used until workspace reads are wired in."""
    return f"// Current content of {file} is not available"
