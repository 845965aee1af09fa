# src/llm/assistant.py — v1
"""Prompt-templating convenience operations on top of the gateway."""

from __future__ import annotations

from arlo.core.models import ImplementationPlan, PlanStep, ValidationReport
from arlo.llm.gateway import CompletionGateway
from arlo.llm.parsing import parse_implementation_plan, parse_validation_report


class CodeAssistant:
    """Code analysis, planning, implementation and review prompts."""

    def __init__(self, gateway: CompletionGateway) -> None:
        self._gateway = gateway

    async def analyze_code(self, code: str, language: str, question: str) -> str:
        """Answer a question about a code snippet. Results are cached."""
        prompt = (
            f"You are a code analysis expert for {language} code.\n"
            f"Analyze the following code and {question}\n\n"
            f"```{language}\n{code}\n```\n\n"
            "Your analysis:\n"
        )
        return await self._gateway.generate(prompt, temperature=0.1, use_cache=True)

    async def generate_task_plan(
        self, title: str, description: str, codebase_context: str
    ) -> ImplementationPlan:
        """Draft and parse an implementation plan (never cached)."""
        prompt = (
            "You are a software engineering planning expert. Given this task and "
            "codebase context,\ncreate a detailed implementation plan. Break down the "
            "task into concrete steps.\n\n"
            f"# Task\n{title}\n\n{description}\n\n"
            f"# Codebase Context\n{codebase_context}\n\n"
            "# Implementation Plan Format\n"
            "1. Provide an overview of the approach.\n"
            "2. List each step with file paths that need modification.\n"
            "3. For each file change, describe what needs to be added, modified, or deleted.\n"
            "4. Include any tests that need to be created or updated.\n"
            "5. Note any potential risks or edge cases to handle.\n\n"
            "Your detailed implementation plan:\n"
        )
        text = await self._gateway.generate(
            prompt, temperature=0.2, max_tokens=4000, use_cache=False
        )
        return parse_implementation_plan(text)

    async def generate_code_implementation(self, step: PlanStep, file_context: str) -> str:
        """Code for one plan step against the current file content."""
        prompt = (
            "You are an expert software engineer implementing a task in a codebase.\n"
            "Generate code for the following step, considering the current file content.\n\n"
            f"# Step Description\n{step.description}\n\n"
            f"# File Context (Current Content)\n```\n{file_context}\n```\n\n"
            f"# Implementation Details\n{step.details}\n\n"
            "Generate the code implementation for this step. Provide ONLY the code to "
            "add or modify,\nusing proper syntax, indentation, and following the style "
            "of the existing code.\nDo not include explanations or extra formatting.\n"
        )
        return await self._gateway.generate(
            prompt, temperature=0.1, max_tokens=3000, use_cache=False
        )

    async def validate_code_change(
        self, old_code: str, new_code: str, step: PlanStep
    ) -> ValidationReport:
        prompt = (
            "You are a code reviewer validating a code change.\n"
            "Review the changes and identify any issues, bugs, or improvements.\n\n"
            f"# Implementation Step\n{step.description}\n\n"
            f"# Original Code\n```\n{old_code}\n```\n\n"
            f"# New Code\n```\n{new_code}\n```\n\n"
            "Provide a validation report with the following sections:\n"
            "1. Valid (Yes/No)\n"
            "2. Issues Found (list any bugs, errors, or problems)\n"
            "3. Suggestions (list any improvements)\n"
            "4. Security Concerns (list any security issues)\n"
        )
        text = await self._gateway.generate(prompt, temperature=0.1, use_cache=False)
        return parse_validation_report(text)
