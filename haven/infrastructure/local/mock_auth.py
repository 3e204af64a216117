"""
Mock authentication provider for local development.
"""

from haven.interfaces.auth_provider import IAuthProvider, User


class MockAuthProvider(IAuthProvider):
    """Mock auth provider: the bearer token is the user id."""

    def __init__(self, enabled: bool = True):
        """
        Initialize mock auth provider.

        Args:
            enabled: Whether a bearer token is required
        """
        self._enabled = enabled

    async def verify_token(self, token: str) -> User:
        """
        Verify token - in mock mode, token is treated as user_id.

        Args:
            token: User ID (in mock mode)

        Returns:
            Mock user
        """
        if not token:
            raise ValueError("Empty token")
        if "@" in token:
            return User(id=token, email=token, display_name=token)
        return User(id=token, email=f"{token}@example.com", display_name=token)

    def is_enabled(self) -> bool:
        """Check if authentication is enabled."""
        return self._enabled
