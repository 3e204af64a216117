"""
Context window construction.

The responder only ever sees the most recent messages, reduced to role and
content. Older messages are dropped first.
"""

from typing import Sequence

from haven.models.conversation import Message

DEFAULT_WINDOW_SIZE = 10


def build_context_window(
    messages: Sequence[Message],
    size: int = DEFAULT_WINDOW_SIZE,
) -> list[dict[str, str]]:
    """
    Build the message slice sent to the responder.

    Args:
        messages: Full ordered message log
        size: Maximum number of messages to keep

    Returns:
        Last min(len(messages), size) messages as {"role", "content"} dicts,
        in original order
    """
    if size <= 0:
        return []
    recent = messages[-size:]
    return [{"role": message.role.value, "content": message.content} for message in recent]
