from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class KeyedLock:
    """In-process advisory lock keyed by an identifier.

    Entries are dropped once no task holds or waits on them.
    """

    def __init__(self) -> None:
        self._guard = asyncio.Lock()
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    def is_locked(self, key: str) -> bool:
        lock = self._locks.get(str(key))
        return bool(lock is not None and lock.locked())

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        key = str(key)
        async with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = asyncio.Lock()
                self._locks[key] = lock
            self._waiters[key] = int(self._waiters.get(key, 0)) + 1
        try:
            async with lock:
                yield
        finally:
            async with self._guard:
                remaining = int(self._waiters.get(key, 0)) - 1
                if remaining <= 0:
                    self._waiters.pop(key, None)
                    self._locks.pop(key, None)
                else:
                    self._waiters[key] = remaining
