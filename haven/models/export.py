"""
Conversation export document.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from haven.models.enums import ChatMode, MessageRole


class ExportedMessage(BaseModel):
    message_number: int
    role: MessageRole
    content: str
    timestamp: datetime
    time_from_start_ms: int


class ConversationExport(BaseModel):
    chat_id: UUID
    title: str
    mode: ChatMode
    sub_category: Optional[str] = None
    created_at: datetime
    message_count: int
    conversation: list[ExportedMessage]
    exported_at: datetime
    exported_by: str


class ExportResult(BaseModel):
    """Rendered export ready to be sent as an attachment."""

    content: bytes
    media_type: str
    filename: str
