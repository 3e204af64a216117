"""
Optimistic update state machine for one conversation in progress.

    IDLE --send--> PENDING --success--> COMMITTED --send--> PENDING ...
                      |
                      +--failure--> rolled back to IDLE (new conversation)
                                    or to the prior COMMITTED snapshot

State is immutable; ``reduce`` returns a new state for every event.
Only the user's message is ever applied optimistically. The assistant reply
appears once the server's authoritative conversation replaces the local one.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Optional, Union
from uuid import UUID, uuid4

from haven.core.exceptions import HavenError
from haven.models.conversation import DEFAULT_TITLE, Conversation, Message
from haven.models.enums import ChatMode, MessageRole


class SyncStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    COMMITTED = "committed"


class InvalidTransitionError(HavenError):
    """Event not allowed in the current state."""

    code = "invalid_transition"


@dataclass(frozen=True)
class ChatState:
    status: SyncStatus = SyncStatus.IDLE
    # What the user sees: authoritative state plus at most one optimistic message.
    conversation: Optional[Conversation] = None
    # Last server-confirmed conversation.
    committed: Optional[Conversation] = None
    # Local placeholder id while a brand-new conversation is pending.
    temporary_id: Optional[UUID] = None
    rolled_back: bool = False
    error: Optional[str] = None

    @property
    def messages(self) -> list[Message]:
        return list(self.conversation.messages) if self.conversation else []

    @property
    def is_pending(self) -> bool:
        return self.status == SyncStatus.PENDING


# ===========================================
# Events
# ===========================================


@dataclass(frozen=True)
class SendStarted:
    text: str
    at: datetime
    mode: Optional[ChatMode] = None
    sub_category: Optional[str] = None


@dataclass(frozen=True)
class SendSucceeded:
    conversation: Conversation


@dataclass(frozen=True)
class SendFailed:
    error: str


@dataclass(frozen=True)
class ConversationLoaded:
    conversation: Conversation


@dataclass(frozen=True)
class BookmarkChanged:
    conversation_id: UUID
    is_bookmarked: bool


@dataclass(frozen=True)
class Cleared:
    pass


Event = Union[SendStarted, SendSucceeded, SendFailed, ConversationLoaded, BookmarkChanged, Cleared]


# ===========================================
# Reducer
# ===========================================


def _temporary_conversation(event: SendStarted, message: Message) -> tuple[UUID, Conversation]:
    if event.mode is None:
        raise InvalidTransitionError("A new conversation needs a mode")
    temporary_id = uuid4()
    conversation = Conversation(
        id=temporary_id,
        user_id="",
        mode=event.mode,
        sub_category=event.sub_category,
        title=DEFAULT_TITLE,
        messages=[message],
        created_at=event.at,
        updated_at=event.at,
    )
    return temporary_id, conversation


def _on_send_started(state: ChatState, event: SendStarted) -> ChatState:
    if state.is_pending:
        raise InvalidTransitionError("A message is already being sent")

    optimistic = Message(role=MessageRole.USER, content=event.text, timestamp=event.at)

    if state.committed is None:
        temporary_id, conversation = _temporary_conversation(event, optimistic)
        return ChatState(
            status=SyncStatus.PENDING,
            conversation=conversation,
            committed=None,
            temporary_id=temporary_id,
        )

    visible = state.committed.model_copy(
        update={"messages": [*state.committed.messages, optimistic]}
    )
    return ChatState(
        status=SyncStatus.PENDING,
        conversation=visible,
        committed=state.committed,
    )


def _on_send_succeeded(state: ChatState, event: SendSucceeded) -> ChatState:
    if not state.is_pending:
        raise InvalidTransitionError("No send in progress")
    # Replace wholesale; the optimistic message is superseded, never merged.
    return ChatState(
        status=SyncStatus.COMMITTED,
        conversation=event.conversation,
        committed=event.conversation,
    )


def _on_send_failed(state: ChatState, event: SendFailed) -> ChatState:
    if not state.is_pending:
        raise InvalidTransitionError("No send in progress")

    if state.committed is None:
        return ChatState(status=SyncStatus.IDLE, rolled_back=True, error=event.error)

    # Drop exactly the optimistic message: the last one, appended on send.
    visible = state.conversation
    restored = visible.model_copy(update={"messages": visible.messages[:-1]})
    return ChatState(
        status=SyncStatus.COMMITTED,
        conversation=restored,
        committed=state.committed,
        rolled_back=True,
        error=event.error,
    )


def _on_loaded(state: ChatState, event: ConversationLoaded) -> ChatState:
    if state.is_pending:
        raise InvalidTransitionError("Cannot switch conversations while sending")
    return ChatState(
        status=SyncStatus.COMMITTED,
        conversation=event.conversation,
        committed=event.conversation,
    )


def _on_bookmark(state: ChatState, event: BookmarkChanged) -> ChatState:
    def apply(conversation: Optional[Conversation]) -> Optional[Conversation]:
        if conversation is None or conversation.id != event.conversation_id:
            return conversation
        return conversation.model_copy(update={"is_bookmarked": event.is_bookmarked})

    return replace(state, conversation=apply(state.conversation), committed=apply(state.committed))


def reduce(state: ChatState, event: Event) -> ChatState:
    """Apply one event."""
    if isinstance(event, SendStarted):
        return _on_send_started(state, event)
    if isinstance(event, SendSucceeded):
        return _on_send_succeeded(state, event)
    if isinstance(event, SendFailed):
        return _on_send_failed(state, event)
    if isinstance(event, ConversationLoaded):
        return _on_loaded(state, event)
    if isinstance(event, BookmarkChanged):
        return _on_bookmark(state, event)
    if isinstance(event, Cleared):
        if state.is_pending:
            raise InvalidTransitionError("Cannot clear while sending")
        return ChatState()
    raise TypeError(f"Unknown event: {event!r}")
