# src/vcs/base_vcs.py — v1
"""Abstract version-control interface used by the integration stage."""

from __future__ import annotations

from abc import ABC, abstractmethod

from arlo.core.models import PullRequestInfo


class BaseVersionControl(ABC):
    """Branch, commit, push and pull-request operations.

    Implementations raise VCSError on failure.
    """

    @abstractmethod
    async def is_repository(self) -> bool:
        """Whether operations can run at all."""

    @abstractmethod
    async def current_branch(self) -> str | None:
        """Name of the checked-out branch."""

    @abstractmethod
    async def create_branch(self, name: str, base: str | None = None) -> None:
        """Create and check out a branch (checks out an existing one)."""

    @abstractmethod
    async def stage_files(self, files: list[str]) -> None:
        """Stage paths for the next commit."""

    @abstractmethod
    async def create_commit(self, message: str) -> str:
        """Commit staged changes and return the commit hash."""

    @abstractmethod
    async def push_changes(
        self, remote: str = "origin", branch: str | None = None, set_upstream: bool = False
    ) -> None:
        """Push a branch to a remote."""

    @abstractmethod
    async def create_pull_request(
        self, title: str, body: str, head: str, base: str = "main"
    ) -> PullRequestInfo:
        """Open a pull request from ``head`` into ``base``."""
