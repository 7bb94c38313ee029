"""Cheap, deterministic classification pass over the first pages of a PDF.

Classification decides which extraction pipeline runs, so it must never
guess: the label is a pure function of the sampled-page statistics, and
parse warnings are recorded without influencing it.
"""

from collections.abc import Sequence

from docingest.concurrency.cancellation import CancellationToken, run_cancellable
from docingest.config.limits import PipelineConfig
from docingest.logging.logger import Log
from docingest.pdf.base import BasePdfParser, PdfDocument, decode_fragment
from docingest.pdf.exceptions import PdfEncryptedError, PdfExtractionError
from docingest.processor.models import Classification, ClassificationResult

# A page needs more than this many characters to count as "with text".
NOISE_FLOOR_CHARS = 20


def page_has_text(text_length: int) -> bool:
    return text_length > NOISE_FLOOR_CHARS


def classify_samples(
    page_count: int,
    sample_lengths: Sequence[int],
    config: PipelineConfig,
    warnings: Sequence[str] = (),
) -> ClassificationResult:
    """Apply the classification rules, in order, to sampled page lengths."""
    if page_count == 0:
        return _empty_result(Classification.CORRUPTED, warnings)

    total_text_length = sum(sample_lengths)
    pages_with_text = sum(1 for length in sample_lengths if page_has_text(length))
    text_density = pages_with_text / len(sample_lengths) if sample_lengths else 0.0

    if total_text_length == 0:
        label = Classification.SCANNED
    elif text_density < config.mixed_text_ratio:
        label = Classification.MIXED
    elif total_text_length < config.min_text_threshold:
        label = Classification.SCANNED
    else:
        label = Classification.TEXT_BASED

    return ClassificationResult(
        type=label,
        page_count=page_count,
        total_text_length=total_text_length,
        pages_with_text=pages_with_text,
        text_density=text_density,
        warnings=tuple(warnings),
    )


def _empty_result(label: Classification, warnings: Sequence[str] = ()) -> ClassificationResult:
    return ClassificationResult(
        type=label,
        page_count=0,
        total_text_length=0,
        pages_with_text=0,
        text_density=0.0,
        warnings=tuple(warnings),
    )


class Classifier:
    """Samples pages through a PDF parser and labels the document."""

    def __init__(self, parser: BasePdfParser) -> None:
        self._parser = parser

    async def classify(self, pdf_bytes: bytes, config: PipelineConfig) -> ClassificationResult:
        try:
            result = await run_cancellable(
                self._sample,
                pdf_bytes,
                config,
                timeout_seconds=config.classification_timeout_seconds,
            )
        except TimeoutError:
            Log.warning(
                f"Classification timed out after {config.classification_timeout_seconds}s"
            )
            return _empty_result(Classification.CORRUPTED)
        except PdfEncryptedError:
            Log.warning("Classification: document is password-protected")
            return _empty_result(Classification.ENCRYPTED)
        except PdfExtractionError as exc:
            Log.warning(f"Classification: document could not be opened: {exc}")
            return _empty_result(Classification.CORRUPTED)

        Log.info(
            f"Classification {result.type}: {result.page_count} pages, "
            f"{result.total_text_length} chars, {result.text_density:.0%} text density"
        )
        if result.warnings:
            Log.info(
                f"Classification collected {len(result.warnings)} warnings "
                "(ignored for classification)"
            )
        return result

    def _sample(
        self,
        pdf_bytes: bytes,
        config: PipelineConfig,
        token: CancellationToken,
    ) -> ClassificationResult:
        warnings: list[str] = []
        with self._parser.open(pdf_bytes) as document:
            page_count = document.page_count
            sample_lengths: list[int] = []
            for index in range(min(config.classification_pages, page_count)):
                token.raise_if_cancelled()
                sample_lengths.append(self._page_text_length(document, index, warnings))
        return classify_samples(page_count, sample_lengths, config, warnings)

    @staticmethod
    def _page_text_length(document: PdfDocument, index: int, warnings: list[str]) -> int:
        try:
            fragments = document.page_fragments(index)
        except PdfExtractionError as exc:
            warnings.append(str(exc))
            return 0

        length = 0
        for fragment in fragments:
            decoded = decode_fragment(fragment)
            if decoded is None:
                warnings.append(f"page {index + 1}: skipped undecodable text fragment")
                continue
            length += len(decoded)
        return length
