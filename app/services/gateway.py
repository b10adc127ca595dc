"""Bounded-concurrency admission for remote Notion calls.

Every remote fetch made while formatting content goes through a single
:class:`Gateway`.  At most ``max_concurrent`` operations run at once; the
rest wait in FIFO order and are started as slots free up.  A failing
operation only fails its own caller.

The cap limits calls *in flight*, not calls per second: a burst of fast
responses can still exceed a strict per-second quota.
"""

import asyncio
import logging
from collections import deque
from typing import Awaitable, Callable, Deque, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Gateway:
    def __init__(self, max_concurrent: int = 3, timeout: Optional[float] = None) -> None:
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        self.max_concurrent = max_concurrent
        self.timeout = timeout
        self._active = 0
        self._waiters: Deque[asyncio.Future] = deque()

    @property
    def active(self) -> int:
        """Number of operations currently holding a slot."""
        return self._active

    @property
    def pending(self) -> int:
        """Number of callers waiting for a slot."""
        return sum(1 for waiter in self._waiters if not waiter.done())

    async def enqueue(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run *operation* once a slot is free and return its result.

        Exceptions raised by *operation* propagate to this caller only.  When
        the gateway has a ``timeout``, an operation running longer than that
        fails with :class:`asyncio.TimeoutError`.
        """
        await self._acquire()
        logger.debug("Gateway: started operation (%d active, %d waiting)", self._active, self.pending)
        try:
            if self.timeout is not None:
                return await asyncio.wait_for(operation(), self.timeout)
            return await operation()
        finally:
            self._release()

    async def _acquire(self) -> None:
        # No await between the check and the increment, so the event loop
        # cannot interleave another caller here.
        if self._active < self.max_concurrent and not self.pending:
            self._active += 1
            return

        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                # A slot was handed over just before the cancellation landed.
                self._release()
            raise

    def _release(self) -> None:
        # Hand the slot straight to the oldest live waiter; the active count
        # only drops when nobody is waiting.
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(None)
                return
        self._active -= 1
