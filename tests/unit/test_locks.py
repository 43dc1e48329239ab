"""Unit tests for KeyedLock."""

import asyncio

import pytest

from src.bk_common.locks import KeyedLock


class TestKeyedLock:
    async def test_same_key_is_serialized(self) -> None:
        locks = KeyedLock()
        order: list[str] = []

        async def worker(name: str) -> None:
            async with locks.hold("A1"):
                order.append(f"{name}-in")
                await asyncio.sleep(0)
                order.append(f"{name}-out")

        await asyncio.gather(worker("a"), worker("b"))
        assert order == ["a-in", "a-out", "b-in", "b-out"]

    async def test_idle_keys_are_dropped(self) -> None:
        locks = KeyedLock()
        for i in range(100):
            async with locks.hold(f"A{i}"):
                assert locks.locked(f"A{i}")
        assert len(locks) == 0

    async def test_lock_kept_while_a_waiter_is_queued(self) -> None:
        locks = KeyedLock()
        release = asyncio.Event()

        async def holder() -> None:
            async with locks.hold("A1"):
                await release.wait()

        first = asyncio.create_task(holder())
        await asyncio.sleep(0)
        second = asyncio.create_task(holder())
        await asyncio.sleep(0)
        assert len(locks) == 1
        release.set()
        await asyncio.gather(first, second)
        assert len(locks) == 0

    async def test_dropped_after_exception(self) -> None:
        locks = KeyedLock()
        with pytest.raises(RuntimeError):
            async with locks.hold("A1"):
                raise RuntimeError("boom")
        assert not locks.locked("A1")
        assert len(locks) == 0
