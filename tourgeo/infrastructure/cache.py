"""
In-memory read-through TTL cache for expensive query results.

Lifecycle of an entry
---------------------
* created on a miss, with ``created_at = now``;
* served while ``now - created_at < ttl``;
* afterwards treated as absent and replaced by the next computation.
  Expired entries are swept on every write, and past ``max_entries`` the
  oldest entry is evicted, so memory stays bounded.

Failures are never cached: if ``compute`` raises, nothing is stored and
the exception reaches the caller unchanged.

Concurrent misses on one key are serialised through ``KeyedLock``; the
waiter re-checks the entry after acquiring, so ``compute`` runs at most
once per key at a time.
"""

from __future__ import annotations

import inspect
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar, Union

from .locks import KeyedLock

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    key: str
    value: T
    created_at: float
    ttl: float

    def is_live(self, now: float) -> bool:
        return now - self.created_at < self.ttl


class ResultCache:
    """One instance per application; injected wherever results are cached."""

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = 1024,
    ) -> None:
        self._clock = clock
        self._max_entries = max_entries
        self._entries: dict[str, CacheEntry[Any]] = {}
        self._locks = KeyedLock()
        self.hits = 0
        self.misses = 0

    async def get_or_compute(
        self,
        key: str,
        ttl_seconds: float,
        compute: Callable[[], Union[T, Awaitable[T]]],
    ) -> T:
        entry = self._live_entry(key)
        if entry is not None:
            self.hits += 1
            logger.debug("cache hit %s", key)
            return entry.value

        async with self._locks.hold(key):
            # Another coroutine may have filled the entry while we waited.
            entry = self._live_entry(key)
            if entry is not None:
                self.hits += 1
                return entry.value

            self.misses += 1
            logger.debug("cache miss %s", key)
            value = compute()
            if inspect.isawaitable(value):
                value = await value
            self._store(CacheEntry(key=key, value=value, created_at=self._clock(), ttl=ttl_seconds))
            return value

    def peek(self, key: str) -> Optional[Any]:
        """Live value for *key* or ``None``; does not touch the counters."""
        entry = self._live_entry(key)
        return entry.value if entry is not None else None

    def invalidate(self, prefix: Optional[str] = None) -> int:
        """Drop entries whose key starts with *prefix* (all when ``None``)."""
        doomed = [k for k in self._entries if prefix is None or k.startswith(prefix)]
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    @property
    def stats(self) -> dict[str, int]:
        now = self._clock()
        live = sum(1 for e in self._entries.values() if e.is_live(now))
        return {
            "entries": len(self._entries),
            "live_entries": live,
            "hits": self.hits,
            "misses": self.misses,
        }

    def _store(self, entry: CacheEntry[Any]) -> None:
        now = self._clock()
        expired = [k for k, e in self._entries.items() if not e.is_live(now)]
        for key in expired:
            del self._entries[key]
        self._entries.pop(entry.key, None)
        self._entries[entry.key] = entry
        # Oldest first: dicts keep insertion order.
        while len(self._entries) > self._max_entries:
            del self._entries[next(iter(self._entries))]

    def _live_entry(self, key: str) -> Optional[CacheEntry[Any]]:
        entry = self._entries.get(key)
        if entry is None or not entry.is_live(self._clock()):
            return None
        return entry
