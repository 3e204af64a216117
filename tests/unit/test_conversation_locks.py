"""
Unit tests for the per-conversation lock registry.
"""

import asyncio

import pytest

from haven.services.conversation_locks import ConversationLockRegistry


@pytest.mark.asyncio
async def test_same_key_runs_one_at_a_time():
    locks = ConversationLockRegistry()
    events: list[str] = []

    async def worker(name: str):
        async with locks.hold("chat-1"):
            events.append(f"{name}:start")
            await asyncio.sleep(0.01)
            events.append(f"{name}:end")

    await asyncio.gather(worker("a"), worker("b"), worker("c"))

    for i in range(0, len(events), 2):
        assert events[i].split(":")[0] == events[i + 1].split(":")[0]


@pytest.mark.asyncio
async def test_different_keys_do_not_wait_on_each_other():
    locks = ConversationLockRegistry()
    release = asyncio.Event()
    entered = asyncio.Event()

    async def holder():
        async with locks.hold("chat-1"):
            await release.wait()

    async def other():
        async with locks.hold("chat-2"):
            entered.set()

    holder_task = asyncio.create_task(holder())
    await asyncio.sleep(0)
    await asyncio.wait_for(other(), timeout=1)

    assert entered.is_set()
    release.set()
    await holder_task


@pytest.mark.asyncio
async def test_locks_are_released_after_use():
    locks = ConversationLockRegistry()

    async with locks.hold("chat-1"):
        assert locks.active_keys() == 1

    assert locks.active_keys() == 0


@pytest.mark.asyncio
async def test_lock_released_when_body_raises():
    locks = ConversationLockRegistry()

    with pytest.raises(RuntimeError):
        async with locks.hold("chat-1"):
            raise RuntimeError("boom")

    assert locks.active_keys() == 0
    async with locks.hold("chat-1"):
        pass
