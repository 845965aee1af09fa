# src/cache/models.py — v2
"""Cache domain models: CacheEntry, CacheStats."""

from __future__ import annotations

from pydantic import BaseModel


class CacheEntry(BaseModel):
    """Cached generation result with its insertion time (clock seconds)."""

    value: str
    inserted_at: float

    def is_expired(self, now: float, ttl_s: float) -> bool:
        return now - self.inserted_at > ttl_s


class CacheStats(BaseModel):
    """Counters for a ResponseCache instance."""

    size: int = 0
    max_size: int = 0
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    expirations: int = 0
