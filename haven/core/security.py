"""
Token helpers for stateless bearer authentication.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from jose import jwt

from haven.core.config import Settings


def create_access_token(user_id: str, settings: Settings, expires_minutes: int | None = None) -> str:
    """Create a signed JWT whose subject is the user id."""
    now = datetime.now(timezone.utc)
    expires = now + timedelta(minutes=expires_minutes or settings.JWT_EXPIRE_MINUTES)
    payload = {
        "sub": user_id,
        "iat": int(now.timestamp()),
        "exp": int(expires.timestamp()),
    }
    if settings.JWT_ISSUER:
        payload["iss"] = settings.JWT_ISSUER
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> dict[str, object]:
    """Verify signature, expiry and issuer. Raises jose.JWTError on failure."""
    options = {"verify_iss": bool(settings.JWT_ISSUER)}
    return jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=[settings.JWT_ALGORITHM],
        issuer=settings.JWT_ISSUER or None,
        options=options,
    )
