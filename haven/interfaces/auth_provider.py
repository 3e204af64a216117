"""
Authentication provider interface.

Identity is issued elsewhere; providers only turn a bearer credential into
the caller's user id.
"""

from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel


class User(BaseModel):
    """Authenticated caller."""

    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None


class IAuthProvider(ABC):
    """Abstract interface for authentication providers."""

    @abstractmethod
    async def verify_token(self, token: str) -> User:
        """
        Verify a bearer token.

        Args:
            token: Raw bearer token

        Returns:
            Authenticated user

        Raises:
            Exception if the token is invalid
        """
        pass

    @abstractmethod
    def is_enabled(self) -> bool:
        """Check if authentication is enforced."""
        pass
