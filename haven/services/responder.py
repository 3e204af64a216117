"""
AI responder access with timeouts.

Reply generation failures abort the caller's operation; title generation
failures degrade to a fallback title.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from haven.core.config import Settings, get_settings
from haven.core.exceptions import AIResponderUnavailableError
from haven.core.logger import setup_logger
from haven.interfaces.llm_provider import ILLMProvider
from haven.models.enums import ChatMode
from haven.services.prompts import (
    FALLBACK_TITLE,
    TITLE_SYSTEM_PROMPT,
    build_title_request,
    get_system_prompt,
)

logger = setup_logger(__name__)

MAX_TITLE_LENGTH = 200


def clean_title(raw: Optional[str]) -> str:
    """Strip quotes and whitespace; fall back when nothing is left."""
    title = (raw or "").replace('"', "").replace("'", "").strip()
    if not title:
        return FALLBACK_TITLE
    return title[:MAX_TITLE_LENGTH]


class AIResponder:
    """Wraps an LLM provider with the reply and title policies."""

    def __init__(self, llm_provider: ILLMProvider, settings: Optional[Settings] = None):
        self._llm = llm_provider
        self._settings = settings or get_settings()

    async def generate_reply(self, mode: ChatMode, window: list[dict[str, str]]) -> str:
        """
        Produce the assistant reply for a context window.

        Raises:
            AIResponderUnavailableError: on provider error, timeout or empty reply
        """
        try:
            reply = await asyncio.wait_for(
                self._llm.complete(
                    system_prompt=get_system_prompt(mode),
                    messages=window,
                    max_tokens=self._settings.CHAT_MAX_TOKENS,
                    temperature=self._settings.CHAT_TEMPERATURE,
                ),
                timeout=self._settings.LLM_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError as e:
            logger.warning(
                f"Responder timed out after {self._settings.LLM_TIMEOUT_SECONDS}s "
                f"({self._llm.get_model_name()})"
            )
            raise AIResponderUnavailableError("AI responder timed out") from e
        except Exception as e:
            logger.warning(f"Responder failed ({self._llm.get_model_name()}): {e}")
            raise AIResponderUnavailableError("Failed to generate AI response") from e

        if not reply or not reply.strip():
            raise AIResponderUnavailableError("AI responder returned an empty reply")
        return reply.strip()

    async def generate_title(self, first_message: str) -> str:
        """Produce a short title, or the fallback title on any failure."""
        try:
            raw = await asyncio.wait_for(
                self._llm.complete(
                    system_prompt=TITLE_SYSTEM_PROMPT,
                    messages=build_title_request(first_message),
                    max_tokens=self._settings.TITLE_MAX_TOKENS,
                    temperature=self._settings.TITLE_TEMPERATURE,
                ),
                timeout=self._settings.LLM_TIMEOUT_SECONDS,
            )
        except Exception as e:
            logger.warning(f"Title generation failed, using fallback: {e!r}")
            return FALLBACK_TITLE
        return clean_title(raw)
