import asyncio
import threading
from collections.abc import Callable
from typing import TypeVar

T = TypeVar("T")


class OperationCancelledError(Exception):
    """Raised inside a worker thread once its token has been cancelled."""


class CancellationToken:
    """Thread-safe flag checked by blocking work at page boundaries."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError("operation was cancelled")


async def run_cancellable(
    func: Callable[..., T],
    *args: object,
    timeout_seconds: float,
) -> T:
    """Run blocking ``func(*args, token)`` in a thread under a deadline.

    On timeout or cancellation the token is cancelled so the thread stops at
    its next checkpoint, and the TimeoutError/CancelledError propagates.
    """
    token = CancellationToken()
    try:
        async with asyncio.timeout(timeout_seconds):
            return await asyncio.to_thread(func, *args, token)
    finally:
        token.cancel()
