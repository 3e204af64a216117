"""Prompt and greeting catalogue for each chat mode."""

from haven.services.prompts.mode_prompts import (
    FALLBACK_TITLE,
    SYSTEM_PROMPTS,
    TITLE_SYSTEM_PROMPT,
    WELCOME_MESSAGES,
    build_title_request,
    get_system_prompt,
    get_welcome_message,
)

__all__ = [
    "FALLBACK_TITLE",
    "SYSTEM_PROMPTS",
    "TITLE_SYSTEM_PROMPT",
    "WELCOME_MESSAGES",
    "build_title_request",
    "get_system_prompt",
    "get_welcome_message",
]
