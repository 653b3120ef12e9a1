"""Redis-based named lock using SET NX PX semantics."""

from __future__ import annotations

import asyncio
import os
import uuid
from typing import Dict, Optional, Tuple

from redis.asyncio import Redis

from .locks import LockManager


_RELEASE_SCRIPT = """
if redis.call('get', KEYS[1]) == ARGV[1] then
    return redis.call('del', KEYS[1])
else
    return 0
end
"""

# Longer than the default transport timeout so a slow refresh keeps its lock.
DEFAULT_TTL_MS = 60000

_Holder = Tuple[str, Optional["asyncio.Task[object]"]]


class RedisLockManager(LockManager):
    """Lock shared by every process talking to the same Redis.

    ``acquire`` polls until the key is free; fairness between waiters is
    unspecified. Each acquisition gets its own token, remembered per task, so a
    holder whose TTL lapsed can never delete the key a later holder now owns.
    Keep ``ttl_ms`` above the transport timeout.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        *,
        redis: Optional[Redis] = None,
        ttl_ms: int = DEFAULT_TTL_MS,
        poll_interval: float = 0.05,
    ) -> None:
        self._redis = redis or Redis.from_url(url or os.getenv("REDIS_URL", "redis://localhost:6379/0"))
        self._ttl_ms = ttl_ms
        self._poll_interval = poll_interval
        self._tokens: Dict[_Holder, str] = {}

    @staticmethod
    def _key(name: str) -> str:
        return f"lock:{name}"

    @staticmethod
    def _holder(name: str) -> _Holder:
        return name, asyncio.current_task()

    async def acquire(self, name: str) -> None:
        token = str(uuid.uuid4())
        while not await self._redis.set(self._key(name), token, px=self._ttl_ms, nx=True):
            await asyncio.sleep(self._poll_interval)
        self._tokens[self._holder(name)] = token

    async def release(self, name: str) -> None:
        token = self._tokens.pop(self._holder(name), None)
        if token is None:
            return
        # release only if token matches
        await self._redis.eval(_RELEASE_SCRIPT, 1, self._key(name), token)

    async def close(self) -> None:
        await self._redis.aclose()
