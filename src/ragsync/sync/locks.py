"""Per-key mutual exclusion with a FIFO wait queue.

Concurrent holders of different keys proceed independently; callers of
the same key are served strictly in arrival order instead of being
rejected.
"""

from __future__ import annotations

import asyncio
import collections
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class KeyedFifoLock:
    """Async lock keyed by name.

    Usage::

        locks = KeyedFifoLock()
        async with locks.hold("national-security-documents-store"):
            ...
    """

    def __init__(self) -> None:
        self._held: set[str] = set()
        self._waiters: dict[str, collections.deque[asyncio.Future[None]]] = {}

    def locked(self, key: str) -> bool:
        return key in self._held

    def waiting(self, key: str) -> int:
        """Number of callers queued behind the current holder of *key*."""
        return sum(1 for f in self._waiters.get(key, ()) if not f.done())

    async def acquire(self, key: str) -> None:
        if key not in self._held:
            self._held.add(key)
            return

        fut: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        queue = self._waiters.setdefault(key, collections.deque())
        queue.append(fut)
        try:
            await fut
        except asyncio.CancelledError:
            if fut.done() and not fut.cancelled():
                # Ownership was handed over just before the cancel landed.
                self.release(key)
            elif fut in queue:
                queue.remove(fut)
            raise

    def release(self, key: str) -> None:
        """Hand *key* to the oldest waiter, or free it when nobody waits."""
        if key not in self._held:
            raise RuntimeError(f"Lock {key!r} is not held")
        queue = self._waiters.get(key)
        while queue:
            fut = queue.popleft()
            if not fut.done():
                fut.set_result(None)
                return
        self._waiters.pop(key, None)
        self._held.discard(key)

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        await self.acquire(key)
        try:
            yield
        finally:
            self.release(key)
