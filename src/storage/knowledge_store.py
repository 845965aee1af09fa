# src/storage/knowledge_store.py — v1
"""Agent knowledge records: documents written by agents, tagged with task ids."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from arlo.core.models import KnowledgeRecord, utc_now


class BaseKnowledgeStore(ABC):
    """Unified interface for agent knowledge backends."""

    @abstractmethod
    async def add_agent_knowledge(
        self, agent: str, document: str, metadata: dict[str, Any] | None = None
    ) -> KnowledgeRecord:
        """Store a document under an agent."""

    @abstractmethod
    async def query_agent_knowledge(
        self,
        agent: str,
        task_id: str | None = None,
        limit: int = 10,
        record_type: str | None = None,
    ) -> list[KnowledgeRecord]:
        """Records of an agent, newest first."""


class InMemoryKnowledgeStore(BaseKnowledgeStore):
    """List-backed knowledge store."""

    def __init__(self) -> None:
        self._records: list[KnowledgeRecord] = []

    async def add_agent_knowledge(
        self, agent: str, document: str, metadata: dict[str, Any] | None = None
    ) -> KnowledgeRecord:
        now = utc_now()
        meta = {**(metadata or {}), "timestamp": now.isoformat()}
        record = KnowledgeRecord(agent=agent, document=document, metadata=meta, created_at=now)
        self._records.append(record)
        return record

    async def query_agent_knowledge(
        self,
        agent: str,
        task_id: str | None = None,
        limit: int = 10,
        record_type: str | None = None,
    ) -> list[KnowledgeRecord]:
        matches = [
            r
            for r in reversed(self._records)
            if r.agent == agent
            and (task_id is None or r.task_id == task_id)
            and (record_type is None or r.type == record_type)
        ]
        return matches[:limit]

    def __len__(self) -> int:
        return len(self._records)
