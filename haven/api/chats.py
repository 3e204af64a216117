"""
Chats API endpoints.

Conversation store, history and analytics surface. Every endpoint except the
welcome message requires an authenticated user and only ever touches that
user's conversations.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Query, Response, status
from pydantic import BaseModel, Field

from haven.api.deps import AnalyticsSvc, ConversationSvc, CurrentUser, HistorySvc
from haven.models.analytics import StatisticsReport
from haven.models.conversation import Conversation, ConversationSummary, Message
from haven.models.enums import ChatMode, ExportFormat, SortField, SortOrder
from haven.models.history import MODE_ALL, HistoryPage, HistoryQuery
from haven.services.conversation_service import ConversationService

router = APIRouter()


# ===========================================
# Request / Response Models
# ===========================================


class CreateConversationRequest(BaseModel):
    message: str = Field(..., description="First user message")
    mode: str = Field(..., description="mental-health | spiritual | general")
    sub_category: Optional[str] = Field(None, max_length=200)


class SendMessageRequest(BaseModel):
    message: str


class WelcomeResponse(BaseModel):
    success: bool = True
    mode: ChatMode
    welcome_message: str


class ConversationResponse(BaseModel):
    success: bool = True
    conversation: Conversation


class ListPagination(BaseModel):
    current_page: int
    page_size: int
    total_pages: int
    total_count: int


class ConversationListResponse(BaseModel):
    success: bool = True
    conversations: list[ConversationSummary]
    pagination: ListPagination


class SendMessageResponse(BaseModel):
    success: bool = True
    user_message: Message
    assistant_message: Message
    conversation: Conversation


class BookmarkResponse(BaseModel):
    success: bool = True
    is_bookmarked: bool


class DeletedConversation(BaseModel):
    id: UUID
    title: str
    mode: ChatMode


class DeleteResponse(BaseModel):
    success: bool = True
    deleted: DeletedConversation


class HistoryResponse(HistoryPage):
    success: bool = True


class StatisticsResponse(StatisticsReport):
    success: bool = True


# ===========================================
# Endpoints
# ===========================================


@router.get("/welcome/{mode}", response_model=WelcomeResponse)
async def get_welcome_message(mode: str):
    """Greeting for a chat mode. Public."""
    text = ConversationService.welcome_message(mode)
    return WelcomeResponse(mode=ChatMode(mode), welcome_message=text)


@router.post("", response_model=ConversationResponse, status_code=status.HTTP_201_CREATED)
async def create_conversation(
    request: CreateConversationRequest,
    user: CurrentUser,
    service: ConversationSvc,
):
    """
    Start a conversation with its first message.

    The reply and title are generated before the conversation is stored.
    """
    conversation = await service.create_conversation(
        user_id=user.id,
        mode=request.mode,
        sub_category=request.sub_category,
        first_message=request.message,
    )
    return ConversationResponse(conversation=conversation)


@router.get("", response_model=ConversationListResponse)
async def list_conversations(
    user: CurrentUser,
    service: ConversationSvc,
    mode: Optional[str] = Query(None, description="Filter by chat mode"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    """List conversation summaries, newest first."""
    result = await service.list_conversations(user.id, mode=mode, page=page, page_size=page_size)
    return ConversationListResponse(
        conversations=result.items,
        pagination=ListPagination(
            current_page=result.page,
            page_size=result.page_size,
            total_pages=result.total_pages,
            total_count=result.total_count,
        ),
    )


@router.get("/history", response_model=HistoryResponse)
async def get_history(
    user: CurrentUser,
    service: HistorySvc,
    mode: str = Query(MODE_ALL),
    search: Optional[str] = Query(None),
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    sort_by: SortField = Query(SortField.CREATED_AT),
    sort_order: SortOrder = Query(SortOrder.DESC),
    page: int = Query(1),
    page_size: int = Query(20),
):
    """Filtered, searchable, paginated conversation history with statistics."""
    query = HistoryQuery(
        mode=mode,
        search=search or None,
        date_from=date_from,
        date_to=date_to,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        page_size=page_size,
    )
    result = await service.query(user.id, query)
    return HistoryResponse.model_validate(result.model_dump())


@router.get("/statistics", response_model=StatisticsResponse)
async def get_statistics(
    user: CurrentUser,
    service: AnalyticsSvc,
    period_days: Optional[int] = Query(30, description="Trailing window in days"),
):
    """Statistics, daily activity and insights for the trailing period."""
    report = await service.get_statistics(user.id, period_days=period_days)
    return StatisticsResponse.model_validate(report.model_dump())


@router.get("/{conversation_id}", response_model=ConversationResponse)
async def get_conversation(
    conversation_id: UUID,
    user: CurrentUser,
    service: ConversationSvc,
):
    conversation = await service.get_conversation(user.id, conversation_id)
    return ConversationResponse(conversation=conversation)


@router.post("/{conversation_id}/messages", response_model=SendMessageResponse)
async def send_message(
    conversation_id: UUID,
    request: SendMessageRequest,
    user: CurrentUser,
    service: ConversationSvc,
):
    """Append a user message and the assistant reply."""
    result = await service.append_message(user.id, conversation_id, request.message)
    return SendMessageResponse(
        user_message=result.user_message,
        assistant_message=result.assistant_message,
        conversation=result.conversation,
    )


@router.patch("/{conversation_id}/bookmark", response_model=BookmarkResponse)
async def toggle_bookmark(
    conversation_id: UUID,
    user: CurrentUser,
    service: ConversationSvc,
):
    is_bookmarked = await service.toggle_bookmark(user.id, conversation_id)
    return BookmarkResponse(is_bookmarked=is_bookmarked)


@router.delete("/{conversation_id}", response_model=DeleteResponse)
async def delete_conversation(
    conversation_id: UUID,
    user: CurrentUser,
    service: ConversationSvc,
):
    deleted = await service.delete_conversation(user.id, conversation_id)
    return DeleteResponse(
        deleted=DeletedConversation(id=deleted.id, title=deleted.title, mode=deleted.mode)
    )


@router.get("/{conversation_id}/export")
async def export_conversation(
    conversation_id: UUID,
    user: CurrentUser,
    service: ConversationSvc,
    format: ExportFormat = Query(ExportFormat.JSON),
):
    """Download a conversation as JSON or plain text."""
    result = await service.export_conversation(user.id, conversation_id, format)
    return Response(
        content=result.content,
        media_type=result.media_type,
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )
