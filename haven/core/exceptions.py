"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class HavenError(Exception):
    """Base exception for haven."""

    code = "internal_error"

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(HavenError):
    """Resource not found (or owned by someone else)."""

    code = "not_found"


class ValidationError(HavenError):
    """Validation error."""

    code = "validation_error"


class InvalidModeError(ValidationError):
    """Conversation mode is not one of the known modes."""

    code = "invalid_mode"


class InvalidMessageError(ValidationError):
    """Message content is empty or too long."""

    code = "invalid_message"


class InvalidRoleError(ValidationError):
    """Message role is not user/assistant."""

    code = "invalid_role"


class InvalidQueryError(ValidationError):
    """History or statistics query parameters are malformed."""

    code = "invalid_query"


class LLMError(HavenError):
    """LLM-related error."""

    code = "llm_error"


class AIResponderUnavailableError(LLMError):
    """The AI responder failed or timed out while producing a reply."""

    code = "ai_responder_unavailable"


class AuthenticationError(HavenError):
    """Authentication failed."""

    code = "authentication_failed"


class InfrastructureError(HavenError):
    """Infrastructure-related error (DB, external services, etc.)."""

    code = "infrastructure_error"


class PersistenceError(InfrastructureError):
    """Storage layer failure. The operation had no effect."""

    code = "persistence_failure"
