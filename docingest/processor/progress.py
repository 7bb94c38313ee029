import asyncio

from docingest.logging.logger import Log
from docingest.processor.models import Phase, ProgressCallback, ProgressEvent


def report(
    on_progress: ProgressCallback | None,
    phase: Phase,
    current: int = 0,
    total: int = 0,
) -> None:
    """Invoke the caller's progress callback; its failures never break a run."""
    if on_progress is None:
        return
    try:
        on_progress(ProgressEvent(phase=phase, current=current, total=total))
    except Exception as exc:
        Log.warning(f"Progress callback failed during {phase}: {exc}")


def threadsafe(on_progress: ProgressCallback | None) -> ProgressCallback | None:
    """Wrap a callback so worker threads hand events back to the event loop."""
    if on_progress is None:
        return None
    loop = asyncio.get_running_loop()

    def _forward(event: ProgressEvent) -> None:
        # An abandoned thread may outlive the loop it reports to.
        if loop.is_closed():
            return
        loop.call_soon_threadsafe(report, on_progress, event.phase, event.current, event.total)

    return _forward
