"""Page-by-page OCR under the OCR governor.

Rendering goes through a dedicated single-thread executor because the open
document is not safe to share between threads; recognition runs in the
default thread pool. Each page is bounded by the per-page timeout and by
whatever is left of the total deadline, so a single stuck page never stalls
the run. Pages that fail or time out leave an empty placeholder and the run
moves on.
"""

import asyncio
import math
import time
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

from docingest.concurrency.governor import SemaphoreGovernor
from docingest.config.limits import OcrConfig, PipelineConfig
from docingest.logging.logger import Log
from docingest.ocr.base import BaseRecognizer
from docingest.ocr.exceptions import OcrRecognitionError
from docingest.ocr.models import OcrResult
from docingest.pdf.base import BasePdfParser, PdfDocument
from docingest.pdf.exceptions import PdfExtractionError
from docingest.processor.messages import format_message
from docingest.processor.models import FailureReason, OcrEstimate, Phase, ProgressCallback
from docingest.processor.progress import report

PAGE_SEPARATOR = "\f"
SECONDS_PER_PAGE = 10


def estimate_ocr(page_count: int, config: PipelineConfig) -> OcrEstimate:
    """Rough OCR cost estimate shown to the user before OCR is requested."""
    estimated_time_seconds = page_count * SECONDS_PER_PAGE
    can_run_sync = page_count <= config.max_pages_scanned_sync
    minutes = math.ceil(estimated_time_seconds / 60)

    if page_count > config.max_pages_scanned_async:
        warning = (
            f"This document has {page_count} pages, exceeding the maximum of "
            f"{config.max_pages_scanned_async} pages for OCR."
        )
    elif can_run_sync:
        warning = f"OCR will take approximately {minutes} minute(s) for {page_count} pages."
    else:
        warning = (
            f"OCR will run as a background job (~{minutes} minutes for {page_count} pages)."
        )

    return OcrEstimate(
        estimated_time_seconds=estimated_time_seconds,
        page_count=page_count,
        warning=warning,
        can_run_sync=can_run_sync,
    )


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def _with_text(pages: dict[int, str]) -> int:
    return sum(1 for text in pages.values() if text)


class _PageRenderer:
    """Owns the open document and the single thread allowed to touch it.

    A render that overruns its timeout keeps that thread busy, so the
    renderer is restarted on a fresh thread instead of queueing later pages
    behind the stuck one.
    """

    def __init__(self, parser: BasePdfParser, pdf_bytes: bytes) -> None:
        self._parser = parser
        self._pdf_bytes = pdf_bytes
        self._executor: ThreadPoolExecutor | None = None
        self._document: PdfDocument | None = None

    @property
    def page_count(self) -> int:
        assert self._document is not None
        return self._document.page_count

    async def open(self) -> None:
        loop = asyncio.get_running_loop()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="ocr-render")
        self._document = await loop.run_in_executor(
            self._executor, self._parser.open, self._pdf_bytes
        )

    async def render(self, index: int, scale: float) -> bytes:
        assert self._executor is not None and self._document is not None
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self._executor, self._document.render_page, index, scale
        )

    def close(self) -> None:
        if self._executor is None:
            return
        if self._document is not None:
            # Queued behind any render still running on this thread.
            self._executor.submit(self._document.close)
        self._executor.shutdown(wait=False)
        self._executor = None
        self._document = None


class OcrEngine:
    """Renders and recognizes PDF pages with bounded time and concurrency."""

    def __init__(
        self,
        parser: BasePdfParser,
        recognizer: BaseRecognizer,
        governor: SemaphoreGovernor,
        config: OcrConfig,
    ) -> None:
        self._parser = parser
        self._recognizer = recognizer
        self._governor = governor
        self._config = config

    async def run(
        self,
        pdf_bytes: bytes,
        page_indices: Sequence[int] | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> OcrResult:
        """OCR the given zero-based pages, or every page when none are given.

        ``pages_processed`` counts only the pages that produced text.
        """
        started = time.monotonic()
        async with self._governor.slot():
            return await self._run(pdf_bytes, page_indices, on_progress, started)

    async def _run(
        self,
        pdf_bytes: bytes,
        page_indices: Sequence[int] | None,
        on_progress: ProgressCallback | None,
        started: float,
    ) -> OcrResult:
        renderer = _PageRenderer(self._parser, pdf_bytes)
        try:
            if not await self._open(renderer, self._config.page_timeout_seconds):
                return self._failure(FailureReason.RENDER_FAILED, "RENDER_FAILED", 0, started)

            targets = list(page_indices) if page_indices is not None else list(
                range(renderer.page_count)
            )
            if len(targets) > self._config.max_pages:
                return self._failure(
                    FailureReason.TOO_MANY_PAGES,
                    "TOO_MANY_PAGES_OCR_ASYNC",
                    len(targets),
                    started,
                    limit=self._config.max_pages,
                )

            return await self._recognize_pages(renderer, targets, on_progress, started)
        finally:
            renderer.close()

    @staticmethod
    async def _open(renderer: _PageRenderer, timeout_seconds: float) -> bool:
        try:
            async with asyncio.timeout(timeout_seconds):
                await renderer.open()
        except (TimeoutError, PdfExtractionError) as exc:
            Log.warning(f"OCR could not open document for rendering: {exc!r}")
            return False
        return True

    async def _recognize_pages(
        self,
        renderer: _PageRenderer,
        targets: list[int],
        on_progress: ProgressCallback | None,
        started: float,
    ) -> OcrResult:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._config.total_timeout_seconds
        pages: dict[int, str] = {}
        timed_out = False

        Log.info(f"OCR starting on {len(targets)} pages")
        for position, index in enumerate(targets, start=1):
            remaining = deadline - loop.time()
            if remaining <= 0:
                timed_out = True
                Log.warning(
                    f"OCR total deadline of {self._config.total_timeout_seconds}s reached "
                    f"after {len(pages)}/{len(targets)} pages"
                )
                break

            page_budget = min(self._config.page_timeout_seconds, remaining)
            rendered = False
            render_stuck = False
            try:
                async with asyncio.timeout(page_budget):
                    image = await renderer.render(index, self._config.scale)
                    rendered = True
                    text = await asyncio.to_thread(
                        self._recognizer.recognize, image, page_budget
                    )
            except TimeoutError:
                render_stuck = not rendered
                stage = "recognition" if rendered else "rendering"
                Log.warning(f"OCR page {index + 1} {stage} exceeded {page_budget:.1f}s, skipping")
                text = ""
            except (PdfExtractionError, OcrRecognitionError) as exc:
                Log.warning(f"OCR page {index + 1} failed: {exc}")
                text = ""

            pages[index] = text.strip()
            report(on_progress, Phase.OCR, position, len(targets))
            if position % self._config.batch_size == 0:
                Log.debug(f"OCR progress: {position}/{len(targets)} pages")

            if render_stuck and position < len(targets):
                renderer.close()
                budget = min(self._config.page_timeout_seconds, deadline - loop.time())
                if budget <= 0:
                    timed_out = True
                    break
                if not await self._open(renderer, budget):
                    Log.warning(f"OCR renderer could not restart after page {index + 1}")
                    break

        processed = _with_text(pages)
        text = PAGE_SEPARATOR.join(pages[index] for index in targets if index in pages)
        if processed == 0:
            if timed_out:
                return self._failure(
                    FailureReason.TIMEOUT, "OCR_TIMEOUT", len(targets), started, pages, True
                )
            return self._failure(
                FailureReason.OCR_FAILED, "OCR_FAILED", len(targets), started, pages
            )

        Log.info(
            f"OCR finished: {processed}/{len(targets)} pages with text, {len(text)} chars "
            f"in {_elapsed_ms(started)}ms"
        )
        return OcrResult(
            success=True,
            text=text,
            page_count=len(targets),
            pages_processed=processed,
            processing_time_ms=_elapsed_ms(started),
            user_message=format_message("OCR_PARTIAL" if timed_out else "OCR_SUCCESS"),
            pages=pages,
            timed_out=timed_out,
        )

    @staticmethod
    def _failure(
        reason: FailureReason,
        message_key: str,
        page_count: int,
        started: float,
        pages: dict[int, str] | None = None,
        timed_out: bool = False,
        **limits: object,
    ) -> OcrResult:
        return OcrResult(
            success=False,
            text="",
            page_count=page_count,
            pages_processed=_with_text(pages or {}),
            processing_time_ms=_elapsed_ms(started),
            user_message=format_message(message_key, **limits),
            failure_reason=reason,
            pages=pages or {},
            timed_out=timed_out,
        )
