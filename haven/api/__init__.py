"""API routers."""

from haven.api import chats

__all__ = [
    "chats",
]
