"""Abstract interfaces for infrastructure abstraction."""

from haven.interfaces.auth_provider import IAuthProvider, User
from haven.interfaces.conversation_repository import IConversationRepository
from haven.interfaces.llm_provider import ILLMProvider

__all__ = [
    "IAuthProvider",
    "IConversationRepository",
    "ILLMProvider",
    "User",
]
