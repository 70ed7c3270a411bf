"""
Keyed asyncio lock

In-process replacement for a distributed lock: one `asyncio.Lock` per key, created on first use
and dropped once nobody holds or waits for it, so the table never grows with the key space.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Hashable

from ticketing_core.platform.logging.loguru_io import Logger


class KeyedLock:
    def __init__(self, name: str) -> None:
        self._name = name
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._refcounts: dict[Hashable, int] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._refcounts[key] = self._refcounts.get(key, 0) + 1

        try:
            if lock.locked():
                Logger.base.debug(f'⏳ [LOCK:{self._name}] Waiting for {key}')
            async with lock:
                yield
        finally:
            remaining = self._refcounts[key] - 1
            if remaining:
                self._refcounts[key] = remaining
            else:
                del self._refcounts[key]
                del self._locks[key]

    def is_held(self, key: Hashable) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)
