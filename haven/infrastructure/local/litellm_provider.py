"""
LiteLLM provider implementation.

Supports Groq, OpenAI, Bedrock, and other providers via LiteLLM.
Includes support for custom endpoints (api_base) for proxy servers.
"""

import os
from typing import Any, Optional

import litellm

from haven.core.config import get_settings
from haven.core.logger import setup_logger
from haven.interfaces.llm_provider import ILLMProvider

logger = setup_logger(__name__)


class LiteLLMProvider(ILLMProvider):
    """LiteLLM provider with custom endpoint support."""

    def __init__(
        self,
        model_name: str,
        api_base: Optional[str] = None,
        api_key: Optional[str] = None,
    ):
        """
        Initialize LiteLLM provider.

        Args:
            model_name: LiteLLM model identifier (e.g., "groq/llama3-8b-8192")
            api_base: Custom API endpoint URL (optional, for proxy servers)
                     Note: Do NOT include /v1 suffix - LiteLLM adds it automatically
            api_key: Custom API key (optional, overrides default)
        """
        self._model_name = model_name
        self._settings = get_settings()
        self._api_base = api_base or self._settings.LITELLM_API_BASE or None
        self._api_key = api_key or self._settings.LITELLM_API_KEY or None

        # Enable debug logging if DEBUG is set
        if self._settings.DEBUG:
            os.environ["LITELLM_LOG"] = "DEBUG"

    def get_model_id(self) -> str:
        """Get the raw LiteLLM model identifier."""
        return self._model_name

    def get_model_name(self) -> str:
        """Get human-readable model name."""
        if self._api_base:
            return f"LiteLLM ({self._model_name} @ {self._api_base})"
        return f"LiteLLM ({self._model_name})"

    async def complete(
        self,
        system_prompt: str,
        messages: list[dict[str, str]],
        max_tokens: int,
        temperature: float,
    ) -> str:
        """Call the model with a system prompt followed by the messages."""
        kwargs: dict[str, Any] = {
            "model": self._model_name,
            "messages": [{"role": "system", "content": system_prompt}, *messages],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if self._api_base:
            kwargs["api_base"] = self._api_base
        if self._api_key:
            kwargs["api_key"] = self._api_key

        response = await litellm.acompletion(**kwargs)
        return response.choices[0].message.content or ""
