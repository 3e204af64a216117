"""Client for the chats API with optimistic local state."""

from haven.client.api_client import ApiError, HavenApiClient
from haven.client.session import ChatSession
from haven.client.state import ChatState, InvalidTransitionError, SyncStatus, reduce

__all__ = [
    "ApiError",
    "ChatSession",
    "ChatState",
    "HavenApiClient",
    "InvalidTransitionError",
    "SyncStatus",
    "reduce",
]
