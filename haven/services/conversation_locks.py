"""
Per-conversation mutual exclusion.

Mutations of one conversation run one at a time; different conversations
never wait on each other. Locks are dropped once nobody holds or awaits them.
Scope is a single process.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Hashable


class ConversationLockRegistry:
    def __init__(self) -> None:
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._users: dict[Hashable, int] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def active_keys(self) -> int:
        """Number of keys currently held or awaited."""
        return len(self._locks)


conversation_locks = ConversationLockRegistry()
