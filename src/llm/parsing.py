# src/llm/parsing.py — v1
"""Tolerant parsers turning free-text model output into structured models.

Model output is never trusted to follow the requested format: missing or
malformed sections yield empty collections instead of errors.
"""

from __future__ import annotations

import re

from arlo.core.models import ImplementationPlan, PlanStep, ValidationReport

_HEADING_SPLIT_RE = re.compile(r"\n#+\s+")
_LEADING_HASHES_RE = re.compile(r"^#+\s*")
_NUMBERED_RE = re.compile(r"^\s*\d+\.")
_NUMBERED_PREFIX_RE = re.compile(r"^\s*\d+\.\s*")
_BULLET_RE = re.compile(r"^\s*[-*]\s*")
_SOURCE_FILE_RE = re.compile(r"[A-Za-z0-9/_.-]+\.(?:jsx|tsx|js|ts)\b")
_TITLE_RE = re.compile(r"^#\s+(.*)$", re.MULTILINE)


def parse_implementation_plan(text: str) -> ImplementationPlan:
    """Parse a plan written as markdown sections.

    Recognized section titles (case-insensitive substring match):
    overview/approach, step/implementation, risk/edge, test.
    """
    plan = ImplementationPlan()
    if not text:
        return plan

    for section in _HEADING_SPLIT_RE.split(text):
        lines = section.strip().split("\n")
        title = _LEADING_HASHES_RE.sub("", lines[0]).lower()
        body = lines[1:]

        if "overview" in title or "approach" in title:
            plan.overview = "\n".join(body).strip()
        elif "step" in title or "implementation" in title:
            plan.steps.extend(_parse_steps(body))
        elif "risk" in title or "edge" in title:
            plan.risks = _bullet_items(body)
        elif "test" in title:
            plan.tests = _bullet_items(body)

    return plan


def _parse_steps(lines: list[str]) -> list[PlanStep]:
    steps: list[PlanStep] = []
    current: PlanStep | None = None
    for line in lines:
        if _NUMBERED_RE.match(line):
            current = PlanStep(description=_NUMBERED_PREFIX_RE.sub("", line).strip())
            _add_files(current, line)
            steps.append(current)
        elif current is None:
            continue
        elif _SOURCE_FILE_RE.search(line):
            _add_files(current, line)
        else:
            current.details += line + "\n"
    return steps


def _add_files(step: PlanStep, line: str) -> None:
    for match in _SOURCE_FILE_RE.findall(line):
        if match not in step.files:
            step.files.append(match)


def _bullet_items(lines: list[str]) -> list[str]:
    return [_BULLET_RE.sub("", line).strip() for line in lines if line.strip()]


def extract_section(text: str, name: str) -> list[str]:
    """Items listed under ``name`` until the next numbered section or heading.

    Args:
        text: Full model output.
        name: Section label, matched case-insensitively (e.g. "Issues Found").

    Returns:
        Stripped, non-empty lines with bullet markers removed.
    """
    if not text:
        return []
    match = re.search(re.escape(name), text, re.IGNORECASE)
    if match is None:
        return []

    rest = text[match.end():]
    # Content on the label line itself ("Issues Found: none")
    first, _, remainder = rest.partition("\n")
    candidates = [first.lstrip(":").strip()]
    for line in remainder.split("\n"):
        stripped = line.strip()
        if _NUMBERED_RE.match(stripped) or stripped.startswith("#"):
            break
        candidates.append(stripped)

    items: list[str] = []
    for line in candidates:
        if not line or line.lower().startswith(name.lower()):
            continue
        item = _BULLET_RE.sub("", line).strip()
        if item:
            items.append(item)
    return items


def parse_validation_report(text: str) -> ValidationReport:
    """Validation verdict plus its issue, suggestion and security lists."""
    text = text or ""
    return ValidationReport(
        valid="valid: yes" in text.lower(),
        issues=extract_section(text, "Issues Found"),
        suggestions=extract_section(text, "Suggestions"),
        security_concerns=extract_section(text, "Security Concerns"),
    )


def extract_title(markdown: str) -> str | None:
    """First level-one heading of a markdown document."""
    match = _TITLE_RE.search(markdown or "")
    if match is None:
        return None
    title = match.group(1).strip()
    return title or None
