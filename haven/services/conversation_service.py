"""
Conversation store service.

Owns the create/append/read/bookmark/delete/export operations. Every
operation is scoped to the caller's user_id. Mutations of one conversation
are serialized through the lock registry; the responder is called while the
lock is held so that one call's user/assistant pair is never interleaved
with another's.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional
from uuid import UUID

from haven.core.config import Settings, get_settings
from haven.core.exceptions import InvalidQueryError, NotFoundError
from haven.core.logger import setup_logger
from haven.interfaces.conversation_repository import IConversationRepository
from haven.models.conversation import (
    AppendResult,
    Conversation,
    ConversationPage,
    new_conversation,
    new_message,
    next_timestamp,
    parse_mode,
    validate_content,
)
from haven.models.enums import ChatMode, ExportFormat, MessageRole
from haven.models.export import ExportResult
from haven.models.history import MODE_ALL
from haven.services.context_window import build_context_window
from haven.services.conversation_locks import ConversationLockRegistry, conversation_locks
from haven.services.export_service import render_export
from haven.services.prompts import get_welcome_message
from haven.services.responder import AIResponder
from haven.utils.datetime_utils import now_utc

logger = setup_logger(__name__)


class ConversationService:
    """Conversation store operations."""

    def __init__(
        self,
        repo: IConversationRepository,
        responder: AIResponder,
        locks: Optional[ConversationLockRegistry] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.repo = repo
        self.responder = responder
        self.locks = locks or conversation_locks
        self.settings = settings or get_settings()
        self._clock = clock

    @staticmethod
    def welcome_message(mode: str | ChatMode) -> str:
        """Greeting shown before the first message of a mode."""
        return get_welcome_message(parse_mode(mode))

    async def create_conversation(
        self,
        user_id: str,
        mode: str | ChatMode,
        sub_category: Optional[str],
        first_message: str,
    ) -> Conversation:
        """
        Create a conversation from its first user message.

        The reply and title are generated before anything is stored; the
        conversation is persisted in one step or not at all.
        """
        chat_mode = parse_mode(mode)
        user_message = new_message(MessageRole.USER, first_message, self._clock())
        conversation = new_conversation(user_id, chat_mode, sub_category, user_message)

        window = build_context_window(conversation.messages, self.settings.CONTEXT_WINDOW_SIZE)
        reply = await self.responder.generate_reply(chat_mode, window)
        title = await self.responder.generate_title(user_message.content)

        assistant_message = new_message(
            MessageRole.ASSISTANT,
            reply,
            next_timestamp(conversation.messages, self._clock()),
        )
        conversation = conversation.model_copy(
            update={
                "title": title,
                "messages": [user_message, assistant_message],
                "updated_at": assistant_message.timestamp,
            }
        )

        stored = await self.repo.create(conversation)
        logger.info(f"Created conversation {stored.id} ({chat_mode.value}) for {user_id}")
        return stored

    async def append_message(self, user_id: str, conversation_id: UUID, text: str) -> AppendResult:
        """
        Append a user message and the responder's reply.

        Raises:
            NotFoundError: conversation absent, foreign, or deleted mid-call
            AIResponderUnavailableError: reply failed; nothing is stored
        """
        validate_content(text)

        async with self.locks.hold(conversation_id):
            conversation = await self.repo.get(user_id, conversation_id)
            if not conversation:
                raise NotFoundError(f"Conversation {conversation_id} not found")

            user_message = new_message(
                MessageRole.USER,
                text,
                next_timestamp(conversation.messages, self._clock()),
            )
            messages = [*conversation.messages, user_message]
            window = build_context_window(messages, self.settings.CONTEXT_WINDOW_SIZE)

            reply = await self.responder.generate_reply(conversation.mode, window)
            assistant_message = new_message(
                MessageRole.ASSISTANT,
                reply,
                next_timestamp(messages, self._clock()),
            )

            updated = await self.repo.append_messages(
                user_id,
                conversation_id,
                [user_message, assistant_message],
                updated_at=assistant_message.timestamp,
            )
            if not updated:
                raise NotFoundError(f"Conversation {conversation_id} not found")

        return AppendResult(
            user_message=user_message,
            assistant_message=assistant_message,
            conversation=updated,
        )

    async def get_conversation(self, user_id: str, conversation_id: UUID) -> Conversation:
        conversation = await self.repo.get(user_id, conversation_id)
        if not conversation:
            raise NotFoundError(f"Conversation {conversation_id} not found")
        return conversation

    async def list_conversations(
        self,
        user_id: str,
        mode: Optional[str | ChatMode] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> ConversationPage:
        """Conversation summaries, newest first."""
        if page < 1 or page_size < 1:
            raise InvalidQueryError("page and page_size must be positive")
        chat_mode = None if not mode or mode == MODE_ALL else parse_mode(mode)

        items, total = await self.repo.list_summaries(
            user_id,
            mode=chat_mode,
            limit=page_size,
            offset=(page - 1) * page_size,
        )
        return ConversationPage(items=items, total_count=total, page=page, page_size=page_size)

    async def toggle_bookmark(self, user_id: str, conversation_id: UUID) -> bool:
        """Flip the bookmark flag and return its new value."""
        async with self.locks.hold(conversation_id):
            conversation = await self.repo.get(user_id, conversation_id)
            if not conversation:
                raise NotFoundError(f"Conversation {conversation_id} not found")

            updated = await self.repo.set_bookmark(
                user_id,
                conversation_id,
                not conversation.is_bookmarked,
                updated_at=max(self._clock(), conversation.updated_at),
            )
            if not updated:
                raise NotFoundError(f"Conversation {conversation_id} not found")
            return updated.is_bookmarked

    async def delete_conversation(self, user_id: str, conversation_id: UUID) -> Conversation:
        deleted = await self.repo.delete(user_id, conversation_id)
        if not deleted:
            raise NotFoundError(f"Conversation {conversation_id} not found")
        logger.info(f"Deleted conversation {conversation_id} for {user_id}")
        return deleted

    async def export_conversation(
        self,
        user_id: str,
        conversation_id: UUID,
        export_format: ExportFormat = ExportFormat.JSON,
    ) -> ExportResult:
        conversation = await self.get_conversation(user_id, conversation_id)
        result = render_export(conversation, export_format, user_id, self._clock())
        logger.info(f"Exported conversation {conversation_id} as {export_format.value}")
        return result
