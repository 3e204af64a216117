"""
SQLite database configuration and ORM models.

This module defines the SQLAlchemy ORM models and database initialization.
"""

from datetime import datetime
from functools import lru_cache
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from haven.core.config import get_settings


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


# ===========================================
# ORM Models
# ===========================================


class ConversationORM(Base):
    """Conversation ORM model."""

    __tablename__ = "conversations"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(255), nullable=False, index=True)
    mode = Column(String(20), nullable=False, index=True)
    sub_category = Column(String(200), nullable=True)
    title = Column(String(200), nullable=False, default="New Chat")
    is_bookmarked = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow)


class ConversationMessageORM(Base):
    """Conversation message ORM model. position is the append order."""

    __tablename__ = "conversation_messages"
    __table_args__ = (
        UniqueConstraint("conversation_id", "position", name="uq_conversation_message_position"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    conversation_id = Column(
        String(36),
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position = Column(Integer, nullable=False)
    role = Column(String(20), nullable=False)
    content = Column(Text, nullable=False)
    timestamp = Column(DateTime, nullable=False)


# ===========================================
# Database Session Management
# ===========================================


@lru_cache()
def get_engine() -> AsyncEngine:
    """Get async engine instance."""
    settings = get_settings()
    return create_async_engine(settings.DATABASE_URL, echo=settings.DEBUG)


def get_session_factory(engine: AsyncEngine | None = None):
    """Get async session factory."""
    return async_sessionmaker(engine or get_engine(), class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine | None = None):
    """Initialize database tables."""
    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
