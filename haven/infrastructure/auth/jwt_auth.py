"""
Stateless JWT authentication provider.

Tokens are issued by the identity service; this provider only verifies the
signature and reads the subject. Nothing is cached between requests.
"""

from __future__ import annotations

from jose import JWTError

from haven.core.config import Settings
from haven.core.security import decode_access_token
from haven.interfaces.auth_provider import IAuthProvider, User


class JwtAuthProvider(IAuthProvider):
    """Auth provider with HMAC JWT validation."""

    def __init__(self, settings: Settings):
        if not settings.JWT_SECRET:
            raise ValueError("JWT_SECRET must be set for jwt auth")
        self._settings = settings

    async def verify_token(self, token: str) -> User:
        claims = decode_access_token(token, self._settings)
        subject = claims.get("sub")
        if not subject:
            raise JWTError("Missing subject")
        email = claims.get("email")
        name = claims.get("name")
        return User(
            id=str(subject),
            email=str(email) if email else None,
            display_name=str(name) if name else None,
        )

    def is_enabled(self) -> bool:
        return True
