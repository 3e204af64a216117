"""
History query models.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from haven.models.analytics import HistoryStatistics
from haven.models.conversation import ConversationSummary, Message
from haven.models.enums import SortField, SortOrder

MODE_ALL = "all"


class HistoryQuery(BaseModel):
    """Composable history filters plus sort and offset pagination."""

    mode: str = Field(MODE_ALL, description='Chat mode or "all"')
    search: Optional[str] = Field(None, description="Case-insensitive text in title or messages")
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    sort_by: SortField = SortField.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC
    page: int = 1
    page_size: int = 20


class HistoryItem(ConversationSummary):
    """Conversation summary enriched with message statistics."""

    message_count: int
    first_message: Optional[Message] = None
    last_message: Optional[Message] = None
    user_message_count: int
    ai_message_count: int
    conversation_duration_ms: int = Field(
        0, description="Milliseconds between first and last message"
    )


class Pagination(BaseModel):
    current_page: int
    page_size: int
    total_pages: int
    total_count: int
    has_next: bool
    has_prev: bool


class HistoryFilters(BaseModel):
    """Filters as applied, echoed back to the caller."""

    mode: str
    search: Optional[str] = None
    sort_by: SortField
    sort_order: SortOrder
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None


class HistoryPage(BaseModel):
    items: list[HistoryItem]
    pagination: Pagination
    statistics: HistoryStatistics
    filters: HistoryFilters
