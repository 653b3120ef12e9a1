from __future__ import annotations

import asyncio

import pytest

from sessionguard.core.locks import AsyncioLockManager
from sessionguard.core.locks_redis import RedisLockManager


class FakeRedis:
    """Implements the two commands RedisLockManager relies on."""

    def __init__(self) -> None:
        self.values = {}

    async def set(self, key, value, px=None, nx=False):
        if nx and key in self.values:
            return None
        self.values[key] = value
        return True

    async def eval(self, script, numkeys, key, token):
        if self.values.get(key) == token:
            del self.values[key]
            return 1
        return 0


@pytest.mark.asyncio
async def test_asyncio_lock_serializes_holders_in_order():
    locks = AsyncioLockManager()
    events = []

    async def worker(idx: int) -> None:
        async with locks.lock("refresh"):
            events.append(("in", idx))
            await asyncio.sleep(0.01)
            events.append(("out", idx))

    await asyncio.gather(*(worker(i) for i in range(3)))

    assert events == [("in", 0), ("out", 0), ("in", 1), ("out", 1), ("in", 2), ("out", 2)]
    assert not locks.locked("refresh")


@pytest.mark.asyncio
async def test_asyncio_release_is_idempotent():
    locks = AsyncioLockManager()
    await locks.release("never-acquired")
    await locks.acquire("name")
    await locks.release("name")
    await locks.release("name")
    assert not locks.locked("name")


@pytest.mark.asyncio
async def test_lock_released_when_body_raises():
    locks = AsyncioLockManager()
    with pytest.raises(RuntimeError):
        async with locks.lock("name"):
            raise RuntimeError("fail")
    assert not locks.locked("name")


@pytest.mark.asyncio
async def test_release_from_other_task_keeps_lock_held():
    locks = AsyncioLockManager()
    await locks.acquire("refresh")

    with pytest.raises(RuntimeError):
        await asyncio.create_task(locks.release("refresh"))

    assert locks.locked("refresh")
    await locks.release("refresh")
    assert not locks.locked("refresh")


@pytest.mark.asyncio
async def test_redis_lock_blocks_until_released():
    redis = FakeRedis()
    first = RedisLockManager(redis=redis, poll_interval=0.001)
    second = RedisLockManager(redis=redis, poll_interval=0.001)
    second_holds = asyncio.Event()
    done = asyncio.Event()

    async def second_holder() -> None:
        await second.acquire("refresh")
        second_holds.set()
        await done.wait()
        await second.release("refresh")
        await second.release("refresh")

    await first.acquire("refresh")
    waiter = asyncio.create_task(second_holder())
    await asyncio.sleep(0.01)
    assert not second_holds.is_set()

    await first.release("refresh")
    await asyncio.wait_for(second_holds.wait(), timeout=1)
    assert "lock:refresh" in redis.values

    done.set()
    await asyncio.wait_for(waiter, timeout=1)
    assert redis.values == {}


@pytest.mark.asyncio
async def test_expired_holder_cannot_release_next_holders_lock():
    redis = FakeRedis()
    manager = RedisLockManager(redis=redis, poll_interval=0.001)
    b_holds = asyncio.Event()
    b_done = asyncio.Event()

    async def holder_b() -> None:
        await manager.acquire("refresh")
        b_holds.set()
        await b_done.wait()
        await manager.release("refresh")

    await manager.acquire("refresh")
    task_b = asyncio.create_task(holder_b())
    await asyncio.sleep(0.01)

    # the first holder's TTL lapses while it is still working
    redis.values.clear()
    await asyncio.wait_for(b_holds.wait(), timeout=1)
    await manager.release("refresh")

    assert "lock:refresh" in redis.values

    b_done.set()
    await asyncio.wait_for(task_b, timeout=1)
    assert redis.values == {}


@pytest.mark.asyncio
async def test_redis_release_does_not_steal_foreign_lock():
    redis = FakeRedis()
    manager = RedisLockManager(redis=redis)
    redis.values["lock:refresh"] = "someone-else"

    manager._tokens[("refresh", asyncio.current_task())] = "mine"
    await manager.release("refresh")

    assert redis.values["lock:refresh"] == "someone-else"
