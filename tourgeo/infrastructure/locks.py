"""
Per-key asyncio lock.

Used by ``ResultCache`` so concurrent misses on the same key run the
expensive computation once while misses on different keys proceed in
parallel.  Locks are created on first use and dropped when the last holder
or waiter leaves, so the table never grows beyond the keys in flight.
"""

from __future__ import annotations

import asyncio
from typing import Hashable


class KeyedLock:
    def __init__(self) -> None:
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._users: dict[Hashable, int] = {}

    def hold(self, key: Hashable) -> "_KeyGuard":
        """``async with keyed.hold(key): ...``"""
        return _KeyGuard(self, key)

    async def acquire(self, key: Hashable) -> None:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            await lock.acquire()
        except BaseException:
            self._leave(key)
            raise

    def release(self, key: Hashable) -> None:
        self._locks[key].release()
        self._leave(key)

    def locked(self, key: Hashable) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)

    def _leave(self, key: Hashable) -> None:
        self._users[key] -= 1
        if self._users[key] == 0:
            del self._users[key]
            del self._locks[key]


class _KeyGuard:
    def __init__(self, owner: KeyedLock, key: Hashable):
        self.owner = owner
        self.key = key

    async def __aenter__(self):
        await self.owner.acquire(self.key)
        return self

    async def __aexit__(self, *args):
        self.owner.release(self.key)
