"""
Enum definitions for the application.

These enums are used across models and provide type-safe values on the wire.
"""

from enum import Enum


class ChatMode(str, Enum):
    """
    Conversation category.

    Fixes which system prompt and welcome text apply to a conversation.
    """

    MENTAL_HEALTH = "mental-health"
    SPIRITUAL = "spiritual"
    GENERAL = "general"


class MessageRole(str, Enum):
    """Author of a message."""

    USER = "user"
    ASSISTANT = "assistant"


class ExportFormat(str, Enum):
    """Conversation export rendering."""

    JSON = "json"  # structured
    TEXT = "text"  # human-readable


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SortField(str, Enum):
    """Sortable top-level conversation fields for history queries."""

    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"
    TITLE = "title"
    MODE = "mode"
    IS_BOOKMARKED = "is_bookmarked"
    MESSAGE_COUNT = "message_count"


class EngagementLevel(str, Enum):
    """Engagement derived from average messages per conversation."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
