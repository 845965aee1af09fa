# src/cache/response_cache.py — v1
"""Bounded, time-expiring, insertion-ordered response cache.

Eviction is FIFO: when a new key arrives at capacity, the entry inserted
first goes, whether or not it was read recently. Expired entries are
dropped lazily on lookup. Owned by a single gateway instance; all
operations are synchronous so no locking is needed on the event loop.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from typing import Callable

from arlo.cache.models import CacheEntry, CacheStats

logger = logging.getLogger(__name__)


class ResponseCache:
    """In-memory FIFO cache with TTL."""

    def __init__(
        self,
        max_size: int = 1000,
        ttl_ms: int = 60 * 60 * 1000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_size <= 0:
            raise ValueError("max_size must be > 0")
        if ttl_ms <= 0:
            raise ValueError("ttl_ms must be > 0")
        self._max_size = max_size
        self._ttl_s = ttl_ms / 1000.0
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._stats = CacheStats(max_size=max_size)

    def get(self, key: str) -> str | None:
        """Return the cached value, or None when absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            self._stats.misses += 1
            return None
        if entry.is_expired(self._clock(), self._ttl_s):
            del self._entries[key]
            self._stats.expirations += 1
            self._stats.misses += 1
            logger.debug("Cache entry expired: %s", key[:12])
            return None
        self._stats.hits += 1
        return entry.value

    def put(self, key: str, value: str) -> None:
        """Store a value. Evicts the oldest entry when adding a new key at capacity."""
        now = self._clock()
        if key in self._entries:
            # Replace in place, insertion position unchanged
            self._entries[key] = CacheEntry(value=value, inserted_at=now)
            return
        while len(self._entries) >= self._max_size:
            oldest, _ = self._entries.popitem(last=False)
            self._stats.evictions += 1
            logger.debug("Cache full, evicted %s", oldest[:12])
        self._entries[key] = CacheEntry(value=value, inserted_at=now)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        entry = self._entries.get(key)  # type: ignore[arg-type]
        if entry is None:
            return False
        return not entry.is_expired(self._clock(), self._ttl_s)

    def keys(self) -> list[str]:
        """Keys in insertion order (oldest first), expired ones included."""
        return list(self._entries)

    @property
    def stats(self) -> CacheStats:
        return self._stats.model_copy(update={"size": len(self._entries)})
