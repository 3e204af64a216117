"""
Unit tests for the optimistic update state machine.
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from haven.client.state import (
    BookmarkChanged,
    ChatState,
    Cleared,
    ConversationLoaded,
    InvalidTransitionError,
    SendFailed,
    SendStarted,
    SendSucceeded,
    SyncStatus,
    reduce,
)
from haven.models.conversation import Conversation, Message
from haven.models.enums import ChatMode, MessageRole

NOW = datetime(2024, 7, 1, 10, 0, tzinfo=timezone.utc)


def _server_conversation(*contents: str, conversation_id=None) -> Conversation:
    messages = [
        Message(
            role=MessageRole.USER if i % 2 == 0 else MessageRole.ASSISTANT,
            content=content,
            timestamp=NOW + timedelta(seconds=i),
        )
        for i, content in enumerate(contents)
    ]
    return Conversation(
        id=conversation_id or uuid4(),
        user_id="owner",
        mode=ChatMode.MENTAL_HEALTH,
        title="Feeling Anxious",
        messages=messages,
        created_at=NOW,
        updated_at=messages[-1].timestamp,
    )


def _start(text: str, mode=ChatMode.MENTAL_HEALTH) -> SendStarted:
    return SendStarted(text=text, at=NOW + timedelta(minutes=5), mode=mode)


def test_new_conversation_shows_only_the_optimistic_message():
    state = reduce(ChatState(), _start("I feel anxious"))

    assert state.status == SyncStatus.PENDING
    assert state.committed is None
    assert state.temporary_id == state.conversation.id
    assert [(m.role, m.content) for m in state.messages] == [(MessageRole.USER, "I feel anxious")]


def test_new_conversation_success_replaces_local_state():
    pending = reduce(ChatState(), _start("I feel anxious"))
    server = _server_conversation("I feel anxious", "I'm sorry you're feeling that way.")

    state = reduce(pending, SendSucceeded(conversation=server))

    assert state.status == SyncStatus.COMMITTED
    assert state.conversation == server
    assert state.committed == server
    assert state.temporary_id is None
    assert [m.content for m in state.messages].count("I feel anxious") == 1


def test_new_conversation_failure_discards_temporary_conversation():
    pending = reduce(ChatState(), _start("I feel anxious"))

    state = reduce(pending, SendFailed(error="AI responder timed out"))

    assert state.status == SyncStatus.IDLE
    assert state.conversation is None
    assert state.messages == []
    assert state.rolled_back is True
    assert state.error == "AI responder timed out"


def test_new_conversation_requires_mode():
    with pytest.raises(InvalidTransitionError):
        reduce(ChatState(), _start("hello", mode=None))


def test_append_shows_committed_plus_one_optimistic_message():
    committed = reduce(ChatState(), ConversationLoaded(_server_conversation("a", "b")))

    state = reduce(committed, _start("c"))

    assert [m.content for m in state.messages] == ["a", "b", "c"]
    assert state.committed == committed.committed


def test_append_success_never_duplicates_the_optimistic_message():
    conversation_id = uuid4()
    committed = reduce(
        ChatState(),
        ConversationLoaded(_server_conversation("a", "b", conversation_id=conversation_id)),
    )
    pending = reduce(committed, _start("c"))
    server = _server_conversation("a", "b", "c", "d", conversation_id=conversation_id)

    state = reduce(pending, SendSucceeded(conversation=server))

    assert [m.content for m in state.messages] == ["a", "b", "c", "d"]


def test_append_failure_removes_only_the_optimistic_message():
    server = _server_conversation("a", "b")
    committed = reduce(ChatState(), ConversationLoaded(server))
    pending = reduce(committed, _start("c"))

    state = reduce(pending, SendFailed(error="boom"))

    assert state.status == SyncStatus.COMMITTED
    assert state.messages == server.messages
    assert state.committed == server
    assert state.rolled_back is True


def test_send_after_rollback_starts_clean():
    committed = reduce(ChatState(), ConversationLoaded(_server_conversation("a", "b")))
    rolled_back = reduce(reduce(committed, _start("c")), SendFailed(error="boom"))

    state = reduce(rolled_back, _start("c again"))

    assert [m.content for m in state.messages] == ["a", "b", "c again"]
    assert state.error is None
    assert state.rolled_back is False


def test_second_send_while_pending_is_rejected():
    pending = reduce(ChatState(), _start("first"))

    with pytest.raises(InvalidTransitionError):
        reduce(pending, _start("second"))


@pytest.mark.parametrize(
    "event",
    [SendSucceeded(conversation=_server_conversation("a", "b")), SendFailed(error="x")],
)
def test_outcome_without_pending_send_is_rejected(event):
    with pytest.raises(InvalidTransitionError):
        reduce(ChatState(), event)


def test_load_and_clear_are_rejected_while_pending():
    pending = reduce(ChatState(), _start("first"))

    with pytest.raises(InvalidTransitionError):
        reduce(pending, ConversationLoaded(_server_conversation("a", "b")))
    with pytest.raises(InvalidTransitionError):
        reduce(pending, Cleared())


def test_bookmark_change_updates_matching_conversation():
    server = _server_conversation("a", "b")
    committed = reduce(ChatState(), ConversationLoaded(server))

    state = reduce(committed, BookmarkChanged(conversation_id=server.id, is_bookmarked=True))
    unrelated = reduce(committed, BookmarkChanged(conversation_id=uuid4(), is_bookmarked=True))

    assert state.conversation.is_bookmarked is True
    assert state.committed.is_bookmarked is True
    assert unrelated.conversation.is_bookmarked is False


def test_clear_returns_to_idle():
    committed = reduce(ChatState(), ConversationLoaded(_server_conversation("a", "b")))

    assert reduce(committed, Cleared()) == ChatState()


def test_states_are_immutable():
    state = ChatState()

    with pytest.raises(AttributeError):
        state.status = SyncStatus.PENDING
