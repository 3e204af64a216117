"""
Conversation and message models.

A conversation exclusively owns its ordered, append-only message log.
Construction helpers in this module are the only validation gate: they raise
the typed validation errors before anything reaches the store or responder.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from haven.core.exceptions import (
    InvalidMessageError,
    InvalidModeError,
    InvalidRoleError,
    ValidationError,
)
from haven.models.enums import ChatMode, MessageRole

MAX_MESSAGE_LENGTH = 100000
MAX_TITLE_LENGTH = 200
MAX_SUB_CATEGORY_LENGTH = 200
DEFAULT_TITLE = "New Chat"


class Message(BaseModel):
    """One turn of a conversation."""

    role: MessageRole
    content: str
    timestamp: datetime


class ConversationBase(BaseModel):
    """Base conversation fields."""

    mode: ChatMode
    sub_category: Optional[str] = Field(None, max_length=MAX_SUB_CATEGORY_LENGTH)
    title: str = Field(DEFAULT_TITLE, max_length=MAX_TITLE_LENGTH)


class Conversation(ConversationBase):
    """Conversation model (full record including messages)."""

    id: UUID
    user_id: str = Field(..., description="Owner user ID")
    messages: list[Message] = Field(default_factory=list)
    is_bookmarked: bool = False
    created_at: datetime
    updated_at: datetime


class ConversationSummary(ConversationBase):
    """Conversation without message bodies, for list views."""

    id: UUID
    is_bookmarked: bool = False
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_conversation(cls, conversation: Conversation) -> "ConversationSummary":
        return cls(
            id=conversation.id,
            mode=conversation.mode,
            sub_category=conversation.sub_category,
            title=conversation.title,
            is_bookmarked=conversation.is_bookmarked,
            created_at=conversation.created_at,
            updated_at=conversation.updated_at,
        )


class ConversationPage(BaseModel):
    """One page of conversation summaries."""

    items: list[ConversationSummary]
    total_count: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return -(-self.total_count // self.page_size)


class AppendResult(BaseModel):
    """Messages appended by a single appendMessage call."""

    user_message: Message
    assistant_message: Message
    conversation: Conversation


# ===========================================
# Construction / validation
# ===========================================


def parse_mode(value: str | ChatMode) -> ChatMode:
    """Resolve a mode value or raise InvalidModeError."""
    if isinstance(value, ChatMode):
        return value
    try:
        return ChatMode(value)
    except ValueError:
        raise InvalidModeError(
            f"Unknown chat mode: {value!r}",
            details={"allowed": [mode.value for mode in ChatMode]},
        ) from None


def parse_role(value: str | MessageRole) -> MessageRole:
    """Resolve a role value or raise InvalidRoleError."""
    if isinstance(value, MessageRole):
        return value
    try:
        return MessageRole(value)
    except ValueError:
        raise InvalidRoleError(f"Unknown message role: {value!r}") from None


def validate_content(content: Optional[str]) -> str:
    if content is None or not content.strip():
        raise InvalidMessageError("Message content must not be empty")
    if len(content) > MAX_MESSAGE_LENGTH:
        raise InvalidMessageError(
            f"Message content exceeds {MAX_MESSAGE_LENGTH} characters"
        )
    return content


def validate_sub_category(sub_category: Optional[str]) -> Optional[str]:
    if not sub_category:
        return None
    if len(sub_category) > MAX_SUB_CATEGORY_LENGTH:
        raise ValidationError(
            f"sub_category exceeds {MAX_SUB_CATEGORY_LENGTH} characters"
        )
    return sub_category


def new_message(role: str | MessageRole, content: Optional[str], timestamp: datetime) -> Message:
    """Build a validated message."""
    return Message(
        role=parse_role(role),
        content=validate_content(content),
        timestamp=timestamp,
    )


def next_timestamp(messages: list[Message], now: datetime) -> datetime:
    """Keep timestamps non-decreasing within a conversation."""
    if messages and messages[-1].timestamp > now:
        return messages[-1].timestamp
    return now


def new_conversation(
    user_id: str,
    mode: str | ChatMode,
    sub_category: Optional[str],
    first_message: Message,
) -> Conversation:
    """Start a conversation holding only the triggering user message."""
    return Conversation(
        id=uuid4(),
        user_id=user_id,
        mode=parse_mode(mode),
        sub_category=validate_sub_category(sub_category),
        title=DEFAULT_TITLE,
        messages=[first_message],
        is_bookmarked=False,
        created_at=first_message.timestamp,
        updated_at=first_message.timestamp,
    )
