"""
Client-side chat session.

Drives the optimistic update state machine around API calls: the user's
message is shown immediately, then replaced by the server's conversation on
success or rolled back on failure.
"""

from datetime import datetime
from typing import Any, Callable, Optional
from uuid import UUID

from haven.client.api_client import HavenApiClient
from haven.client.state import (
    BookmarkChanged,
    ChatState,
    Cleared,
    ConversationLoaded,
    Event,
    InvalidTransitionError,
    SendFailed,
    SendStarted,
    SendSucceeded,
    reduce,
)
from haven.core.logger import setup_logger
from haven.models.conversation import Conversation, parse_mode
from haven.models.enums import ChatMode
from haven.utils.datetime_utils import now_utc

logger = setup_logger(__name__)

StateListener = Callable[[ChatState], None]


class ChatSession:
    """One open conversation on the client."""

    def __init__(
        self,
        client: HavenApiClient,
        mode: ChatMode | str,
        sub_category: Optional[str] = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.client = client
        self.mode = parse_mode(mode)
        self.sub_category = sub_category
        self.state = ChatState()
        self._clock = clock
        self._listeners: list[StateListener] = []

    def subscribe(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def _dispatch(self, event: Event) -> ChatState:
        self.state = reduce(self.state, event)
        for listener in self._listeners:
            listener(self.state)
        return self.state

    @property
    def conversation_id(self) -> Optional[UUID]:
        committed = self.state.committed
        return committed.id if committed else None

    async def send(self, text: str) -> Conversation:
        """
        Send a message, creating the conversation on first send.

        Raises:
            ApiError: server rejected the message; local state is rolled back
            httpx.HTTPError: transport failure; local state is rolled back

        Any other failure, cancellation included, also rolls back before
        propagating.
        """
        conversation_id = self.conversation_id
        self._dispatch(
            SendStarted(
                text=text,
                at=self._clock(),
                mode=self.mode,
                sub_category=self.sub_category,
            )
        )

        try:
            if conversation_id is None:
                conversation = await self.client.create_conversation(
                    text, self.mode, self.sub_category
                )
            else:
                result = await self.client.send_message(conversation_id, text)
                conversation = result.conversation
        except BaseException as e:
            # Cancellation and malformed responses roll back too.
            logger.warning(f"Send failed, rolling back: {e!r}")
            self._dispatch(SendFailed(error=str(e) or type(e).__name__))
            raise

        self._dispatch(SendSucceeded(conversation=conversation))
        return conversation

    async def load(self, conversation_id: UUID) -> Conversation:
        conversation = await self.client.get_conversation(conversation_id)
        self.mode = conversation.mode
        self.sub_category = conversation.sub_category
        self._dispatch(ConversationLoaded(conversation=conversation))
        return conversation

    async def toggle_bookmark(self) -> bool:
        conversation_id = self.conversation_id
        if conversation_id is None:
            raise ValueError("No conversation to bookmark")
        is_bookmarked = await self.client.toggle_bookmark(conversation_id)
        self._dispatch(BookmarkChanged(conversation_id=conversation_id, is_bookmarked=is_bookmarked))
        return is_bookmarked

    def clear(self) -> None:
        """Start over with an empty conversation."""
        self._dispatch(Cleared())

    async def delete(self, conversation_id: Optional[UUID] = None) -> dict[str, Any]:
        """
        Delete a conversation, the open one by default.

        Deleting the open conversation clears the session so the next send
        starts a new one.
        """
        if self.state.is_pending:
            raise InvalidTransitionError("Cannot delete while sending")
        target = conversation_id or self.conversation_id
        if target is None:
            raise ValueError("No conversation to delete")

        deleted = await self.client.delete_conversation(target)
        if target == self.conversation_id:
            self._dispatch(Cleared())
        return deleted
