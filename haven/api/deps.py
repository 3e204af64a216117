"""
Dependency injection for API endpoints.

This module provides FastAPI dependencies that inject the correct
infrastructure implementations based on environment configuration.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header

from haven.core.config import get_settings
from haven.core.exceptions import AuthenticationError
from haven.core.logger import setup_logger
from haven.interfaces.auth_provider import IAuthProvider, User
from haven.interfaces.conversation_repository import IConversationRepository
from haven.interfaces.llm_provider import ILLMProvider
from haven.services.analytics_service import AnalyticsService
from haven.services.conversation_service import ConversationService
from haven.services.history_service import HistoryService
from haven.services.responder import AIResponder

logger = setup_logger(__name__)


# ===========================================
# Repository Dependencies
# ===========================================


@lru_cache()
def get_conversation_repository() -> IConversationRepository:
    """Get conversation repository instance."""
    settings = get_settings()
    if settings.is_gcp:
        raise NotImplementedError("Conversation repository not implemented for GCP")
    else:
        from haven.infrastructure.local.conversation_repository import SqliteConversationRepository
        return SqliteConversationRepository()


# ===========================================
# Provider Dependencies
# ===========================================


@lru_cache()
def get_llm_provider() -> ILLMProvider:
    """Get LLM provider instance based on LLM_PROVIDER setting."""
    settings = get_settings()

    if settings.LLM_PROVIDER == "litellm":
        from haven.infrastructure.local.litellm_provider import LiteLLMProvider
        return LiteLLMProvider(
            settings.LITELLM_MODEL,
            api_base=settings.LITELLM_API_BASE,
            api_key=settings.LITELLM_API_KEY,
        )

    raise ValueError(f"Unknown LLM_PROVIDER: {settings.LLM_PROVIDER}")


@lru_cache()
def get_auth_provider() -> IAuthProvider:
    """Get auth provider instance."""
    settings = get_settings()
    if settings.AUTH_PROVIDER == "jwt":
        from haven.infrastructure.auth.jwt_auth import JwtAuthProvider

        return JwtAuthProvider(settings)

    from haven.infrastructure.local.mock_auth import MockAuthProvider
    return MockAuthProvider(enabled=True)


# ===========================================
# Service Dependencies
# ===========================================


def get_conversation_service(
    repo: IConversationRepository = Depends(get_conversation_repository),
    llm_provider: ILLMProvider = Depends(get_llm_provider),
) -> ConversationService:
    return ConversationService(repo=repo, responder=AIResponder(llm_provider))


def get_history_service(
    repo: IConversationRepository = Depends(get_conversation_repository),
) -> HistoryService:
    return HistoryService(repo)


def get_analytics_service(
    repo: IConversationRepository = Depends(get_conversation_repository),
) -> AnalyticsService:
    return AnalyticsService(repo)


# ===========================================
# User Authentication
# ===========================================


async def get_current_user(
    authorization: Annotated[str | None, Header()] = None,
    auth_provider: IAuthProvider = Depends(get_auth_provider),
) -> User:
    """
    Resolve the caller from the bearer token.

    Verification is stateless: the token is checked on every request.
    """
    if not auth_provider.is_enabled():
        # Mock user for development
        return User(id="dev_user", email="dev@example.com", display_name="Developer")

    if not authorization:
        raise AuthenticationError("Authorization header required")

    # Extract token from "Bearer <token>"
    try:
        scheme, token = authorization.split()
        if scheme.lower() != "bearer":
            raise ValueError("Invalid scheme")
    except ValueError:
        raise AuthenticationError("Invalid authorization header format")

    try:
        return await auth_provider.verify_token(token)
    except Exception as e:
        logger.info(f"Rejected bearer token: {e}")
        raise AuthenticationError("Invalid token") from e


# ===========================================
# Type Aliases for Dependency Injection
# ===========================================

ConversationSvc = Annotated[ConversationService, Depends(get_conversation_service)]
HistorySvc = Annotated[HistoryService, Depends(get_history_service)]
AnalyticsSvc = Annotated[AnalyticsService, Depends(get_analytics_service)]
CurrentUser = Annotated[User, Depends(get_current_user)]
