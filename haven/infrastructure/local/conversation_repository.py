"""
SQLite implementation of the conversation repository.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Iterable, Optional
from uuid import UUID

from sqlalchemy import and_, delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from haven.core.exceptions import PersistenceError
from haven.core.logger import setup_logger
from haven.infrastructure.local.database import (
    ConversationMessageORM,
    ConversationORM,
    get_session_factory,
)
from haven.interfaces.conversation_repository import IConversationRepository
from haven.models.conversation import Conversation, ConversationSummary, Message
from haven.models.enums import ChatMode, MessageRole
from haven.utils.datetime_utils import ensure_utc, to_naive_utc

logger = setup_logger(__name__)


class SqliteConversationRepository(IConversationRepository):
    """SQLite implementation of conversation repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    @asynccontextmanager
    async def _session(self, action: str) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as session:
                yield session
        except SQLAlchemyError as e:
            logger.error(f"Conversation store failed to {action}: {e}")
            raise PersistenceError(f"Failed to {action}") from e

    # ===========================================
    # Mapping
    # ===========================================

    def _message_orm_to_model(self, orm: ConversationMessageORM) -> Message:
        return Message(
            role=MessageRole(orm.role),
            content=orm.content,
            timestamp=ensure_utc(orm.timestamp),
        )

    def _orm_to_model(
        self,
        orm: ConversationORM,
        messages: Iterable[ConversationMessageORM],
    ) -> Conversation:
        """Convert ORM rows to Pydantic model."""
        return Conversation(
            id=UUID(orm.id),
            user_id=orm.user_id,
            mode=ChatMode(orm.mode),
            sub_category=orm.sub_category,
            title=orm.title,
            messages=[self._message_orm_to_model(m) for m in messages],
            is_bookmarked=bool(orm.is_bookmarked),
            created_at=ensure_utc(orm.created_at),
            updated_at=ensure_utc(orm.updated_at),
        )

    def _summary_orm_to_model(self, orm: ConversationORM) -> ConversationSummary:
        return ConversationSummary(
            id=UUID(orm.id),
            mode=ChatMode(orm.mode),
            sub_category=orm.sub_category,
            title=orm.title,
            is_bookmarked=bool(orm.is_bookmarked),
            created_at=ensure_utc(orm.created_at),
            updated_at=ensure_utc(orm.updated_at),
        )

    def _message_rows(
        self,
        conversation_id: str,
        messages: list[Message],
        start_position: int,
    ) -> list[ConversationMessageORM]:
        return [
            ConversationMessageORM(
                conversation_id=conversation_id,
                position=start_position + index,
                role=message.role.value,
                content=message.content,
                timestamp=to_naive_utc(message.timestamp),
            )
            for index, message in enumerate(messages)
        ]

    async def _load_many(self, session: AsyncSession, *conditions) -> list[Conversation]:
        """
        Load conversations and their messages with a single statement so the
        result is one consistent snapshot.
        """
        query = (
            select(ConversationORM, ConversationMessageORM)
            .outerjoin(
                ConversationMessageORM,
                ConversationMessageORM.conversation_id == ConversationORM.id,
            )
            .where(and_(*conditions))
            .order_by(
                ConversationORM.created_at.desc(),
                ConversationORM.id,
                ConversationMessageORM.position.asc(),
            )
        )
        result = await session.execute(query)

        grouped: dict[str, tuple[ConversationORM, list[ConversationMessageORM]]] = {}
        for conversation_orm, message_orm in result.all():
            _, messages = grouped.setdefault(conversation_orm.id, (conversation_orm, []))
            if message_orm is not None:
                messages.append(message_orm)
        return [self._orm_to_model(orm, messages) for orm, messages in grouped.values()]

    async def _load(
        self,
        session: AsyncSession,
        user_id: str,
        conversation_id: UUID,
    ) -> Optional[Conversation]:
        conversations = await self._load_many(
            session,
            ConversationORM.id == str(conversation_id),
            ConversationORM.user_id == user_id,
        )
        return conversations[0] if conversations else None

    async def _get_orm(
        self,
        session: AsyncSession,
        user_id: str,
        conversation_id: UUID,
    ) -> Optional[ConversationORM]:
        result = await session.execute(
            select(ConversationORM).where(
                and_(
                    ConversationORM.id == str(conversation_id),
                    ConversationORM.user_id == user_id,
                )
            )
        )
        return result.scalar_one_or_none()

    # ===========================================
    # Operations
    # ===========================================

    async def create(self, conversation: Conversation) -> Conversation:
        """Persist a new conversation with all of its messages atomically."""
        async with self._session("create conversation") as session:
            orm = ConversationORM(
                id=str(conversation.id),
                user_id=conversation.user_id,
                mode=conversation.mode.value,
                sub_category=conversation.sub_category,
                title=conversation.title,
                is_bookmarked=conversation.is_bookmarked,
                created_at=to_naive_utc(conversation.created_at),
                updated_at=to_naive_utc(conversation.updated_at),
            )
            session.add(orm)
            session.add_all(self._message_rows(orm.id, conversation.messages, 0))
            await session.commit()

            stored = await self._load(session, conversation.user_id, conversation.id)
            return stored or conversation

    async def get(self, user_id: str, conversation_id: UUID) -> Optional[Conversation]:
        """Get a conversation with its messages."""
        async with self._session("load conversation") as session:
            return await self._load(session, user_id, conversation_id)

    async def list_summaries(
        self,
        user_id: str,
        mode: Optional[ChatMode] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[ConversationSummary], int]:
        """List conversation summaries, newest first."""
        conditions = [ConversationORM.user_id == user_id]
        if mode is not None:
            conditions.append(ConversationORM.mode == mode.value)

        async with self._session("list conversations") as session:
            total = await session.scalar(
                select(func.count()).select_from(ConversationORM).where(and_(*conditions))
            )
            query = (
                select(ConversationORM)
                .where(and_(*conditions))
                .order_by(ConversationORM.created_at.desc(), ConversationORM.id)
                .limit(limit)
                .offset(offset)
            )
            result = await session.execute(query)
            items = [self._summary_orm_to_model(orm) for orm in result.scalars().all()]
            return items, int(total or 0)

    async def list_conversations(
        self,
        user_id: str,
        created_from: Optional[datetime] = None,
    ) -> list[Conversation]:
        """Load every conversation of an owner with messages."""
        conditions = [ConversationORM.user_id == user_id]
        if created_from is not None:
            conditions.append(ConversationORM.created_at >= to_naive_utc(created_from))

        async with self._session("list conversations") as session:
            return await self._load_many(session, *conditions)

    async def append_messages(
        self,
        user_id: str,
        conversation_id: UUID,
        messages: list[Message],
        updated_at: datetime,
    ) -> Optional[Conversation]:
        """Append messages at the end of the log in one transaction."""
        async with self._session("append messages") as session:
            orm = await self._get_orm(session, user_id, conversation_id)
            if not orm:
                return None

            last_position = await session.scalar(
                select(func.max(ConversationMessageORM.position)).where(
                    ConversationMessageORM.conversation_id == orm.id
                )
            )
            start = 0 if last_position is None else last_position + 1
            session.add_all(self._message_rows(orm.id, messages, start))
            orm.updated_at = to_naive_utc(updated_at)

            await session.commit()
            return await self._load(session, user_id, conversation_id)

    async def set_bookmark(
        self,
        user_id: str,
        conversation_id: UUID,
        is_bookmarked: bool,
        updated_at: datetime,
    ) -> Optional[Conversation]:
        """Set the bookmark flag."""
        async with self._session("update bookmark") as session:
            orm = await self._get_orm(session, user_id, conversation_id)
            if not orm:
                return None

            orm.is_bookmarked = is_bookmarked
            orm.updated_at = to_naive_utc(updated_at)

            await session.commit()
            return await self._load(session, user_id, conversation_id)

    async def delete(self, user_id: str, conversation_id: UUID) -> Optional[Conversation]:
        """Hard delete a conversation and its messages."""
        async with self._session("delete conversation") as session:
            existing = await self._load(session, user_id, conversation_id)
            if not existing:
                return None

            await session.execute(
                delete(ConversationMessageORM).where(
                    ConversationMessageORM.conversation_id == str(conversation_id)
                )
            )
            await session.execute(
                delete(ConversationORM).where(
                    and_(
                        ConversationORM.id == str(conversation_id),
                        ConversationORM.user_id == user_id,
                    )
                )
            )
            await session.commit()
            return existing
