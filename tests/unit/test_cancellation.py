import threading
import time

import pytest

from docingest.concurrency.cancellation import (
    CancellationToken,
    OperationCancelledError,
    run_cancellable,
)


class TestCancellationToken:
    def test_starts_uncancelled(self) -> None:
        token = CancellationToken()
        assert token.cancelled is False
        token.raise_if_cancelled()

    def test_raises_once_cancelled(self) -> None:
        token = CancellationToken()
        token.cancel()
        with pytest.raises(OperationCancelledError):
            token.raise_if_cancelled()


class TestRunCancellable:
    @pytest.mark.asyncio
    async def test_returns_result_and_passes_token_last(self) -> None:
        def work(a: int, b: int, token: CancellationToken) -> int:
            assert isinstance(token, CancellationToken)
            return a + b

        assert await run_cancellable(work, 2, 3, timeout_seconds=1) == 5

    @pytest.mark.asyncio
    async def test_timeout_cancels_worker_token(self) -> None:
        stopped = threading.Event()

        def work(token: CancellationToken) -> None:
            deadline = time.monotonic() + 2
            while time.monotonic() < deadline:
                if token.cancelled:
                    stopped.set()
                    return
                time.sleep(0.01)

        with pytest.raises(TimeoutError):
            await run_cancellable(work, timeout_seconds=0.05)

        assert stopped.wait(timeout=1)
