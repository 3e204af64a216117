"""
Unit tests for ChatSession rollback with stubbed API clients.
"""

import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from haven.client import ChatSession, SyncStatus
from haven.client.state import InvalidTransitionError
from haven.models.conversation import Conversation, Message
from haven.models.enums import ChatMode, MessageRole

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _server_conversation() -> Conversation:
    return Conversation(
        id=uuid4(),
        user_id="test_user",
        mode=ChatMode.GENERAL,
        title="Hello",
        messages=[
            Message(role=MessageRole.USER, content="hello", timestamp=NOW),
            Message(role=MessageRole.ASSISTANT, content="Hi there.", timestamp=NOW),
        ],
        created_at=NOW,
        updated_at=NOW,
    )


def _session(client) -> ChatSession:
    return ChatSession(client, "general", clock=lambda: NOW)


@pytest.mark.asyncio
async def test_cancelled_first_send_rolls_back_to_idle():
    async def slow_create(*args, **kwargs):
        await asyncio.sleep(10)

    client = MagicMock()
    client.create_conversation = AsyncMock(side_effect=slow_create)
    session = _session(client)

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(session.send("hello"), 0.05)

    assert session.state.status == SyncStatus.IDLE
    assert session.state.rolled_back is True
    assert session.state.conversation is None


@pytest.mark.asyncio
async def test_malformed_response_rolls_back_to_idle():
    client = MagicMock()
    client.create_conversation = AsyncMock(side_effect=KeyError("conversation"))
    session = _session(client)

    with pytest.raises(KeyError):
        await session.send("hello")

    assert session.state.status == SyncStatus.IDLE
    assert session.state.error == "'conversation'"


@pytest.mark.asyncio
async def test_failed_append_on_unexpected_error_keeps_committed_snapshot():
    committed = _server_conversation()
    client = MagicMock()
    client.create_conversation = AsyncMock(return_value=committed)
    client.send_message = AsyncMock(side_effect=RuntimeError())
    session = _session(client)
    await session.send("hello")

    with pytest.raises(RuntimeError):
        await session.send("still there?")

    assert session.state.status == SyncStatus.COMMITTED
    assert session.state.messages == committed.messages
    assert session.state.error == "RuntimeError"


@pytest.mark.asyncio
async def test_session_usable_after_rollback():
    client = MagicMock()
    client.create_conversation = AsyncMock(
        side_effect=[KeyError("conversation"), _server_conversation()]
    )
    session = _session(client)

    with pytest.raises(KeyError):
        await session.send("hello")
    conversation = await session.send("hello")

    assert session.state.status == SyncStatus.COMMITTED
    assert session.state.conversation == conversation


@pytest.mark.asyncio
async def test_delete_open_conversation_clears_session():
    committed = _server_conversation()
    client = MagicMock()
    client.create_conversation = AsyncMock(return_value=committed)
    client.delete_conversation = AsyncMock(return_value={"id": str(committed.id)})
    session = _session(client)
    await session.send("hello")

    await session.delete()

    client.delete_conversation.assert_awaited_once_with(committed.id)
    assert session.state.status == SyncStatus.IDLE
    assert session.conversation_id is None


@pytest.mark.asyncio
async def test_delete_other_conversation_keeps_session():
    committed = _server_conversation()
    other_id = uuid4()
    client = MagicMock()
    client.create_conversation = AsyncMock(return_value=committed)
    client.delete_conversation = AsyncMock(return_value={"id": str(other_id)})
    session = _session(client)
    await session.send("hello")

    await session.delete(other_id)

    client.delete_conversation.assert_awaited_once_with(other_id)
    assert session.state.conversation == committed


@pytest.mark.asyncio
async def test_delete_without_conversation():
    client = MagicMock()
    client.delete_conversation = AsyncMock()
    session = _session(client)

    with pytest.raises(ValueError):
        await session.delete()
    client.delete_conversation.assert_not_awaited()


@pytest.mark.asyncio
async def test_delete_rejected_while_sending():
    started = asyncio.Event()

    async def slow_create(*args, **kwargs):
        started.set()
        await asyncio.sleep(10)

    client = MagicMock()
    client.create_conversation = AsyncMock(side_effect=slow_create)
    client.delete_conversation = AsyncMock()
    session = _session(client)

    send_task = asyncio.create_task(session.send("hello"))
    await started.wait()
    with pytest.raises(InvalidTransitionError):
        await session.delete(uuid4())
    send_task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await send_task

    client.delete_conversation.assert_not_awaited()
    assert session.state.status == SyncStatus.IDLE
