# src/pipeline/prompt_store.py — v1
"""File persistence for per-agent system prompt overrides.

One UTF-8 file per agent under PROMPTS_DIR, named
<sanitized lowercase agent name>.prompt.txt, holding the raw prompt.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

logger = logging.getLogger(__name__)

PROMPT_SUFFIX = ".prompt.txt"

_UNSAFE_RE = re.compile(r"[^a-zA-Z0-9_-]")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")


def prompt_file_name(agent_name: str) -> str:
    """File name for an agent's prompt override."""
    return f"{_UNSAFE_RE.sub('_', agent_name).lower()}{PROMPT_SUFFIX}"


def normalize_agent_key(name: str) -> str:
    """Case- and punctuation-insensitive key used to match files to agents."""
    return _NON_ALNUM_RE.sub("", name.lower())


class PromptStore:
    """Reads and writes prompt files in a single directory."""

    def __init__(self, prompts_dir: Path) -> None:
        self._root = Path(prompts_dir).expanduser()

    @property
    def root(self) -> Path:
        return self._root

    def ensure_dir(self) -> None:
        """Create the prompts directory if missing (raises OSError if unusable)."""
        self._root.mkdir(parents=True, exist_ok=True)

    def path_for(self, agent_name: str) -> Path:
        return self._root / prompt_file_name(agent_name)

    def exists(self, agent_name: str) -> bool:
        return self.path_for(agent_name).is_file()

    def read(self, agent_name: str) -> str | None:
        path = self.path_for(agent_name)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def read_all(self) -> dict[str, str]:
        """All saved prompts keyed by normalized file stem."""
        prompts: dict[str, str] = {}
        if not self._root.is_dir():
            return prompts
        for path in sorted(self._root.glob(f"*{PROMPT_SUFFIX}")):
            stem = path.name[: -len(PROMPT_SUFFIX)]
            try:
                prompts[normalize_agent_key(stem)] = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.error("Error reading prompt file %s: %s", path.name, e)
        return prompts

    def write(self, agent_name: str, text: str) -> Path:
        self.ensure_dir()
        path = self.path_for(agent_name)
        path.write_text(text, encoding="utf-8")
        return path

    def delete(self, agent_name: str) -> bool:
        """Remove an override. Returns False when there was none."""
        try:
            self.path_for(agent_name).unlink()
        except FileNotFoundError:
            return False
        return True
