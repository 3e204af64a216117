"""
History query engine.

Filters, searches, sorts and paginates an owner's conversations and enriches
each returned summary with message statistics.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from haven.core.exceptions import InvalidQueryError
from haven.interfaces.conversation_repository import IConversationRepository
from haven.models.conversation import Conversation, parse_mode
from haven.models.enums import ChatMode, MessageRole, SortField, SortOrder
from haven.models.history import (
    MODE_ALL,
    HistoryFilters,
    HistoryItem,
    HistoryPage,
    HistoryQuery,
    Pagination,
)
from haven.services.analytics_service import build_history_statistics
from haven.utils.datetime_utils import ensure_utc, millis_between

MAX_PAGE_SIZE = 100


def _resolve_mode(value: Optional[str]) -> Optional[ChatMode]:
    if not value or value == MODE_ALL:
        return None
    return parse_mode(value)


def validate_query(query: HistoryQuery) -> None:
    _resolve_mode(query.mode)
    if query.page < 1:
        raise InvalidQueryError("page must be at least 1")
    if query.page_size < 1 or query.page_size > MAX_PAGE_SIZE:
        raise InvalidQueryError(f"page_size must be between 1 and {MAX_PAGE_SIZE}")
    if query.date_from and query.date_to and ensure_utc(query.date_from) > ensure_utc(query.date_to):
        raise InvalidQueryError("date_from must not be after date_to")


def matches(conversation: Conversation, query: HistoryQuery, mode: Optional[ChatMode]) -> bool:
    """Apply every filter of the query. All of them must hold."""
    if mode is not None and conversation.mode != mode:
        return False

    if query.date_from and conversation.created_at < ensure_utc(query.date_from):
        return False
    if query.date_to and conversation.created_at > ensure_utc(query.date_to):
        return False

    if query.search:
        needle = query.search.casefold()
        if needle not in conversation.title.casefold() and not any(
            needle in message.content.casefold() for message in conversation.messages
        ):
            return False

    return True


def _sort_key(field: SortField):
    def key(conversation: Conversation) -> Any:
        if field == SortField.MESSAGE_COUNT:
            return len(conversation.messages)
        if field == SortField.TITLE:
            return conversation.title.casefold()
        if field == SortField.MODE:
            return conversation.mode.value
        return getattr(conversation, field.value)

    return key


def sort_conversations(
    conversations: Iterable[Conversation],
    sort_by: SortField = SortField.CREATED_AT,
    sort_order: SortOrder = SortOrder.DESC,
) -> list[Conversation]:
    """Stable sort; created_at breaks ties in the same direction."""
    reverse = sort_order == SortOrder.DESC
    ordered = sorted(conversations, key=lambda c: c.created_at, reverse=reverse)
    if sort_by != SortField.CREATED_AT:
        ordered.sort(key=_sort_key(sort_by), reverse=reverse)
    return ordered


def to_history_item(conversation: Conversation) -> HistoryItem:
    messages = conversation.messages
    user_count = sum(1 for message in messages if message.role == MessageRole.USER)
    duration = 0
    if len(messages) > 1:
        duration = millis_between(messages[0].timestamp, messages[-1].timestamp)

    return HistoryItem(
        id=conversation.id,
        mode=conversation.mode,
        sub_category=conversation.sub_category,
        title=conversation.title,
        is_bookmarked=conversation.is_bookmarked,
        created_at=conversation.created_at,
        updated_at=conversation.updated_at,
        message_count=len(messages),
        first_message=messages[0] if messages else None,
        last_message=messages[-1] if messages else None,
        user_message_count=user_count,
        ai_message_count=len(messages) - user_count,
        conversation_duration_ms=duration,
    )


def paginate(total: int, page: int, page_size: int) -> Pagination:
    return Pagination(
        current_page=page,
        page_size=page_size,
        total_pages=-(-total // page_size),
        total_count=total,
        has_next=page * page_size < total,
        has_prev=page > 1,
    )


def run_history_query(conversations: list[Conversation], query: HistoryQuery) -> HistoryPage:
    """Evaluate a history query against an owner's full conversation set."""
    validate_query(query)
    mode = _resolve_mode(query.mode)

    matched = [c for c in conversations if matches(c, query, mode)]
    ordered = sort_conversations(matched, query.sort_by, query.sort_order)
    start = (query.page - 1) * query.page_size
    page_items = ordered[start : start + query.page_size]

    return HistoryPage(
        items=[to_history_item(c) for c in page_items],
        pagination=paginate(len(matched), query.page, query.page_size),
        statistics=build_history_statistics(conversations),
        filters=HistoryFilters(
            mode=mode.value if mode else MODE_ALL,
            search=query.search,
            sort_by=query.sort_by,
            sort_order=query.sort_order,
            date_from=query.date_from,
            date_to=query.date_to,
        ),
    )


class HistoryService:
    """History queries over the persisted store."""

    def __init__(self, repo: IConversationRepository):
        self.repo = repo

    async def query(self, user_id: str, query: HistoryQuery) -> HistoryPage:
        validate_query(query)
        conversations = await self.repo.list_conversations(user_id)
        return run_history_query(conversations, query)
