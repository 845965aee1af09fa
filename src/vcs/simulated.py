# src/vcs/simulated.py — v1
"""Version control that records operations instead of touching a repository.

Pull requests get a random number in [100, 1099] and a URL under the
configured repository URL.
"""

from __future__ import annotations

import hashlib
import logging
import random
from typing import Any

from arlo.core.errors import VCSError
from arlo.core.models import PullRequestInfo
from arlo.vcs.base_vcs import BaseVersionControl

logger = logging.getLogger(__name__)


class SimulatedVersionControl(BaseVersionControl):
    """Records every operation in ``operations`` as (name, arguments)."""

    def __init__(
        self,
        repository_url: str,
        default_branch: str = "main",
        is_repo: bool = True,
        rng: random.Random | None = None,
    ) -> None:
        self._repository_url = repository_url.rstrip("/")
        self._branch = default_branch
        self._is_repo = is_repo
        self._rng = rng or random.Random()
        self._branches: set[str] = {default_branch}
        self._staged: list[str] = []
        self.operations: list[tuple[str, dict[str, Any]]] = []

    async def is_repository(self) -> bool:
        return self._is_repo

    async def current_branch(self) -> str | None:
        return self._branch if self._is_repo else None

    async def create_branch(self, name: str, base: str | None = None) -> None:
        self._ensure_repo()
        if name in self._branches:
            logger.debug("Branch %s already exists, checking it out", name)
        self._branches.add(name)
        self._branch = name
        self._record("create_branch", name=name, base=base)

    async def stage_files(self, files: list[str]) -> None:
        self._ensure_repo()
        for f in files:
            if f not in self._staged:
                self._staged.append(f)
        self._record("stage_files", files=list(files))

    async def create_commit(self, message: str) -> str:
        self._ensure_repo()
        if not self._staged:
            raise VCSError("Failed to create commit: nothing staged")
        digest = hashlib.sha1(  # noqa: S324
            f"{self._branch}\n{message}\n{len(self.operations)}".encode("utf-8")
        ).hexdigest()
        self._staged.clear()
        self._record("create_commit", message=message, hash=digest)
        return digest

    async def push_changes(
        self, remote: str = "origin", branch: str | None = None, set_upstream: bool = False
    ) -> None:
        self._ensure_repo()
        self._record(
            "push_changes", remote=remote, branch=branch or self._branch, set_upstream=set_upstream
        )

    async def create_pull_request(
        self, title: str, body: str, head: str, base: str = "main"
    ) -> PullRequestInfo:
        self._ensure_repo()
        if not title or not body or not head:
            raise VCSError("Missing required pull request options")
        number = self._rng.randint(100, 1099)
        pr = PullRequestInfo(
            number=number,
            url=f"{self._repository_url}/pull/{number}",
            title=title,
            branch=head,
            base=base,
        )
        self._record("create_pull_request", title=title, head=head, base=base, number=number)
        return pr

    def operation_names(self) -> list[str]:
        return [name for name, _ in self.operations]

    def _ensure_repo(self) -> None:
        if not self._is_repo:
            raise VCSError("Not a git repository")

    def _record(self, operation: str, /, **arguments: Any) -> None:
        self.operations.append((operation, arguments))
