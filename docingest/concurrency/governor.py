"""Counting-semaphore admission control for heavyweight pipeline stages."""

import asyncio
from collections import deque
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, suppress
from dataclasses import dataclass

from docingest.config.settings import Settings
from docingest.logging.logger import Log


class SemaphoreGovernor:
    """Counting semaphore with a FIFO wait queue.

    release() hands the permit straight to the oldest waiter instead of
    returning it to the free pool, so a newcomer can never overtake a task
    that is already queued.
    """

    def __init__(self, name: str, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"Governor '{name}' capacity must be >= 1, got {capacity}")
        self._name = name
        self._capacity = capacity
        self._free = capacity
        self._waiters: deque[asyncio.Future[None]] = deque()

    @property
    def name(self) -> str:
        return self._name

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def free(self) -> int:
        return self._free

    @property
    def waiting(self) -> int:
        return sum(1 for waiter in self._waiters if not waiter.done())

    async def acquire(self) -> None:
        """Wait until a permit is available and take it."""
        if self._free > 0 and not self._waiters:
            self._free -= 1
            return

        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        Log.debug(f"Governor '{self._name}' full, {len(self._waiters)} waiting")
        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                # The permit was handed over before the cancellation landed.
                self.release()
            else:
                with suppress(ValueError):
                    self._waiters.remove(waiter)
            raise

    def release(self) -> None:
        """Give the permit to the oldest live waiter, or back to the pool."""
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(None)
                return
        if self._free >= self._capacity:
            raise RuntimeError(f"Governor '{self._name}' released more times than acquired")
        self._free += 1

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        await self.acquire()
        try:
            yield
        finally:
            self.release()


@dataclass(frozen=True)
class Governors:
    """The two process-wide governors, built once at startup."""

    extraction: SemaphoreGovernor
    ocr: SemaphoreGovernor

    @classmethod
    def from_settings(cls, settings: Settings) -> "Governors":
        return cls(
            extraction=SemaphoreGovernor("extraction", settings.extraction_concurrency),
            ocr=SemaphoreGovernor("ocr", settings.ocr_concurrency),
        )
