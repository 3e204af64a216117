"""
Conversation repository interface.

Defines the contract for conversation persistence. Every method is scoped by
the owner's user_id; a conversation owned by someone else behaves exactly
like a missing one.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from haven.models.conversation import Conversation, ConversationSummary, Message
from haven.models.enums import ChatMode


class IConversationRepository(ABC):
    """Abstract interface for conversation persistence."""

    @abstractmethod
    async def create(self, conversation: Conversation) -> Conversation:
        """
        Persist a new conversation with all of its messages atomically.

        Args:
            conversation: Fully built conversation

        Returns:
            Stored conversation
        """
        pass

    @abstractmethod
    async def get(self, user_id: str, conversation_id: UUID) -> Optional[Conversation]:
        """
        Get a conversation with its messages.

        Args:
            user_id: Owner user ID
            conversation_id: Conversation ID

        Returns:
            Conversation if found and owned by user_id, else None
        """
        pass

    @abstractmethod
    async def list_summaries(
        self,
        user_id: str,
        mode: Optional[ChatMode] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[ConversationSummary], int]:
        """
        List conversation summaries, newest first.

        Args:
            user_id: Owner user ID
            mode: Optional mode filter
            limit: Page size
            offset: Pagination offset

        Returns:
            (summaries, total matching count)
        """
        pass

    @abstractmethod
    async def list_conversations(
        self,
        user_id: str,
        created_from: Optional[datetime] = None,
    ) -> list[Conversation]:
        """
        Load every conversation of an owner, with messages, in one snapshot.

        Args:
            user_id: Owner user ID
            created_from: Only conversations created at or after this instant

        Returns:
            List of conversations
        """
        pass

    @abstractmethod
    async def append_messages(
        self,
        user_id: str,
        conversation_id: UUID,
        messages: list[Message],
        updated_at: datetime,
    ) -> Optional[Conversation]:
        """
        Append messages to the end of a conversation in one transaction.

        Returns:
            Updated conversation, or None if it no longer exists
        """
        pass

    @abstractmethod
    async def set_bookmark(
        self,
        user_id: str,
        conversation_id: UUID,
        is_bookmarked: bool,
        updated_at: datetime,
    ) -> Optional[Conversation]:
        """Set the bookmark flag. Returns None if not found."""
        pass

    @abstractmethod
    async def delete(self, user_id: str, conversation_id: UUID) -> Optional[Conversation]:
        """
        Hard delete a conversation and its messages.

        Returns:
            The deleted conversation, or None if not found
        """
        pass
