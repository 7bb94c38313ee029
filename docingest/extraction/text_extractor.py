"""Native (no OCR) text extraction for text-based and mixed PDFs."""

import re
from dataclasses import dataclass, field

from docingest.concurrency.cancellation import CancellationToken, run_cancellable
from docingest.config.limits import PipelineConfig
from docingest.logging.logger import Log
from docingest.pdf.base import BasePdfParser, PdfDocument, decode_fragment
from docingest.pdf.exceptions import PdfEncryptedError, PdfExtractionError
from docingest.processor.exceptions import IngestionError
from docingest.processor.messages import format_message
from docingest.processor.models import FailureReason, Phase, ProgressCallback, ProgressEvent

PAGE_SEPARATOR = "\f"

# Some producers emit a visual page-break marker as real text.
_PAGE_BREAK_SENTINEL = re.compile(r"-{4,}\s*Page\s*\(\d+\)\s*Break\s*-{4,}", re.IGNORECASE)
_HORIZONTAL_WHITESPACE = re.compile(r"[ \t]+")


@dataclass
class NativeText:
    """Per-page native text, in page order."""

    pages: list[str]
    warnings: list[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return PAGE_SEPARATOR.join(self.pages)

    @property
    def page_count(self) -> int:
        return len(self.pages)


def clean_page_text(fragments: list[str]) -> str:
    text = " ".join(fragments)
    text = _PAGE_BREAK_SENTINEL.sub(" ", text)
    text = _HORIZONTAL_WHITESPACE.sub(" ", text)
    return text.strip()


class TextExtractor:
    """Extracts text page by page under a hard deadline."""

    def __init__(self, parser: BasePdfParser) -> None:
        self._parser = parser

    async def extract(
        self,
        pdf_bytes: bytes,
        page_count: int,
        config: PipelineConfig,
        on_progress: ProgressCallback | None = None,
    ) -> NativeText:
        """Extract every page's text.

        Raises:
            IngestionError: TOO_MANY_PAGES, TIMEOUT, ENCRYPTED or CORRUPTED.
        """
        if page_count > config.max_pages_text_based:
            raise IngestionError(
                FailureReason.TOO_MANY_PAGES,
                format_message("TOO_MANY_PAGES_TEXT", limit=config.max_pages_text_based),
            )

        try:
            result = await run_cancellable(
                self._extract_pages,
                pdf_bytes,
                config,
                on_progress,
                timeout_seconds=config.timeout_seconds,
            )
        except TimeoutError as exc:
            Log.warning(f"Text extraction exceeded {config.timeout_seconds}s deadline")
            raise IngestionError(FailureReason.TIMEOUT) from exc
        except PdfEncryptedError as exc:
            raise IngestionError(FailureReason.ENCRYPTED) from exc
        except PdfExtractionError as exc:
            Log.warning(f"Text extraction failed: {exc}")
            raise IngestionError(FailureReason.CORRUPTED) from exc

        Log.info(
            f"Extracted {len(result.text)} chars from {result.page_count} pages "
            f"({len(result.warnings)} warnings)"
        )
        return result

    def _extract_pages(
        self,
        pdf_bytes: bytes,
        config: PipelineConfig,
        on_progress: ProgressCallback | None,
        token: CancellationToken,
    ) -> NativeText:
        result = NativeText(pages=[])
        with self._parser.open(pdf_bytes) as document:
            total = document.page_count
            batch_size = max(config.batch_size, 1)
            for batch_start in range(0, total, batch_size):
                batch_end = min(batch_start + batch_size, total)
                for index in range(batch_start, batch_end):
                    token.raise_if_cancelled()
                    result.pages.append(self._page_text(document, index, result.warnings))
                Log.debug(f"Text extraction batch done: pages {batch_start + 1}-{batch_end}")
                if on_progress is not None:
                    on_progress(ProgressEvent(Phase.EXTRACTING, batch_end, total))
        return result

    @staticmethod
    def _page_text(document: PdfDocument, index: int, warnings: list[str]) -> str:
        try:
            fragments = document.page_fragments(index)
        except PdfExtractionError as exc:
            # One unreadable page should not sink the rest of the document.
            warnings.append(str(exc))
            return ""

        kept: list[str] = []
        for fragment in fragments:
            decoded = decode_fragment(fragment)
            if decoded is None:
                warnings.append(f"page {index + 1}: skipped undecodable text fragment")
                continue
            kept.append(decoded)
        return clean_page_text(kept)

