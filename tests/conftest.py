"""
Shared fixtures.
"""

import asyncio
from typing import Optional

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from haven.core.config import Settings
from haven.infrastructure.local.conversation_repository import SqliteConversationRepository
from haven.infrastructure.local.database import get_session_factory, init_db
from haven.interfaces.llm_provider import ILLMProvider
from haven.services.conversation_locks import ConversationLockRegistry
from haven.services.conversation_service import ConversationService
from haven.services.prompts import TITLE_SYSTEM_PROMPT
from haven.services.responder import AIResponder


class FakeLLMProvider(ILLMProvider):
    """Scripted LLM: records every call and answers with a counter."""

    def __init__(
        self,
        reply: str = "I hear you.",
        title: str = "Feeling Anxious",
        delay: float = 0.0,
        fail_replies: bool = False,
        fail_titles: bool = False,
    ):
        self.reply = reply
        self.title = title
        self.delay = delay
        self.fail_replies = fail_replies
        self.fail_titles = fail_titles
        self.calls: list[dict] = []

    async def complete(self, system_prompt, messages, max_tokens, temperature) -> str:
        is_title = system_prompt == TITLE_SYSTEM_PROMPT
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "messages": list(messages),
                "max_tokens": max_tokens,
                "is_title": is_title,
            }
        )
        if self.delay:
            await asyncio.sleep(self.delay)
        if is_title:
            if self.fail_titles:
                raise RuntimeError("title model down")
            return self.title
        if self.fail_replies:
            raise RuntimeError("chat model down")
        reply_count = sum(1 for call in self.calls if not call["is_title"])
        return f"{self.reply} ({reply_count})"

    def get_model_name(self) -> str:
        return "fake"

    @property
    def reply_calls(self) -> list[dict]:
        return [call for call in self.calls if not call["is_title"]]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        LLM_TIMEOUT_SECONDS=2.0,
        AUTH_PROVIDER="mock",
        JWT_SECRET="test-secret",
    )


@pytest.fixture
async def session_factory(tmp_path):
    """File-backed SQLite so concurrent sessions share one database."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'haven.db'}")
    await init_db(engine)

    yield get_session_factory(engine)

    await engine.dispose()


@pytest.fixture
def conversation_repo(session_factory) -> SqliteConversationRepository:
    return SqliteConversationRepository(session_factory)


@pytest.fixture
def llm() -> FakeLLMProvider:
    return FakeLLMProvider()


@pytest.fixture
def test_user_id() -> str:
    return "test_user"


def make_service(
    repo,
    llm: ILLMProvider,
    settings: Settings,
    locks: Optional[ConversationLockRegistry] = None,
) -> ConversationService:
    return ConversationService(
        repo=repo,
        responder=AIResponder(llm, settings),
        locks=locks or ConversationLockRegistry(),
        settings=settings,
    )


@pytest.fixture
def conversation_service(conversation_repo, llm, settings) -> ConversationService:
    return make_service(conversation_repo, llm, settings)


@pytest.fixture
def make_llm():
    return FakeLLMProvider


@pytest.fixture
def service_factory(conversation_repo, settings):
    """Build a service around a custom LLM and, optionally, a shared lock registry."""

    def factory(llm: ILLMProvider, locks: Optional[ConversationLockRegistry] = None):
        return make_service(conversation_repo, llm, settings, locks)

    return factory
