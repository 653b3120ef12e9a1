"""Named locks serializing the refresh critical section."""

from __future__ import annotations

import abc
import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional


class LockManager(abc.ABC):
    """Named mutual exclusion with blocking ``acquire`` and idempotent ``release``."""

    @abc.abstractmethod
    async def acquire(self, name: str) -> None:  # pragma: no cover - interface
        """Block until the lock called ``name`` is held by the caller."""
        raise NotImplementedError

    @abc.abstractmethod
    async def release(self, name: str) -> None:  # pragma: no cover - interface
        """Release ``name``; releasing a lock the caller does not hold is a no-op."""
        raise NotImplementedError

    @asynccontextmanager
    async def lock(self, name: str) -> AsyncIterator[None]:
        await self.acquire(name)
        try:
            yield
        finally:
            await self.release(name)


class AsyncioLockManager(LockManager):
    """In-process locks backed by :class:`asyncio.Lock`.

    Waiters are woken in the order they called ``acquire`` (FIFO). The holder is
    the task that acquired; ``release`` from any other task raises
    ``RuntimeError`` and leaves the lock held.
    """

    def __init__(self) -> None:
        self._locks: Dict[str, asyncio.Lock] = {}
        self._owners: Dict[str, Optional[asyncio.Task]] = {}

    def _get(self, name: str) -> asyncio.Lock:
        lock = self._locks.get(name)
        if lock is None:
            lock = self._locks[name] = asyncio.Lock()
        return lock

    async def acquire(self, name: str) -> None:
        await self._get(name).acquire()
        self._owners[name] = asyncio.current_task()

    async def release(self, name: str) -> None:
        lock = self._locks.get(name)
        if lock is None or not lock.locked():
            return
        if self._owners.get(name) is not asyncio.current_task():
            raise RuntimeError(f"Lock {name!r} is held by another task")
        del self._owners[name]
        lock.release()

    def locked(self, name: str) -> bool:
        lock = self._locks.get(name)
        return lock is not None and lock.locked()
