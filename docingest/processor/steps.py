import asyncio
import time

from docingest.extraction.classifier import Classifier, page_has_text
from docingest.extraction.formats import detect_format, extract_text
from docingest.extraction.guardrails import GuardrailValidator
from docingest.extraction.text_extractor import PAGE_SEPARATOR, TextExtractor
from docingest.logging.logger import Log
from docingest.ocr.engine import OcrEngine, estimate_ocr
from docingest.processor.exceptions import IngestionError
from docingest.processor.messages import format_message, message_for
from docingest.processor.models import (
    Classification,
    ClassificationResult,
    ExtractedDocument,
    ExtractionSource,
    ExtractionStatus,
    FailureReason,
    OcrEstimate,
    Phase,
)
from docingest.processor.pipeline import PipelineContext, PipelineStep
from docingest.processor.progress import report, threadsafe

MIN_TEXT_CHARS = 10


def elapsed_ms(context: PipelineContext) -> int:
    return int((time.monotonic() - context.started) * 1000)


def has_usable_text(text: str) -> bool:
    return len(text.replace(PAGE_SEPARATOR, "").strip()) >= MIN_TEXT_CHARS


class ValidateStep(PipelineStep):
    async def run(self, context: PipelineContext) -> PipelineContext:
        report(context.on_progress, Phase.VALIDATING)
        document = context.document
        context.document_format = detect_format(document.mime_type, document.filename)

        validator = GuardrailValidator(context.config.max_size_bytes)
        reason = validator.validate(document.content, context.document_format)
        if reason is FailureReason.TOO_LARGE:
            limit_mb = context.config.max_size_bytes // (1024 * 1024)
            raise IngestionError(reason, format_message("TOO_LARGE", limit_mb=limit_mb))
        if reason is not None:
            raise IngestionError(reason)

        Log.info(f"Validated {document.filename} as {context.document_format}")
        return context


class PlainFormatStep(PipelineStep):
    """DOCX, CSV and plain text bypass classification entirely."""

    async def run(self, context: PipelineContext) -> PipelineContext:
        if context.is_pdf or context.document_format is None:
            return context

        report(context.on_progress, Phase.EXTRACTING)
        try:
            text = await asyncio.to_thread(
                extract_text, context.document_format, context.document.content
            )
        except Exception as exc:
            Log.warning(f"Could not read {context.document_format} document: {exc}")
            raise IngestionError(FailureReason.CORRUPTED) from exc

        context.text = text.strip()
        context.page_count = 1
        context.classification = ClassificationResult(
            type=Classification.TEXT_BASED,
            page_count=1,
            total_text_length=len(context.text),
            pages_with_text=1 if page_has_text(len(context.text)) else 0,
            text_density=1.0 if page_has_text(len(context.text)) else 0.0,
        )
        Log.info(f"Extracted {len(context.text)} chars from {context.document_format} document")
        return context


class ClassifyStep(PipelineStep):
    def __init__(self, classifier: Classifier) -> None:
        self._classifier = classifier

    async def run(self, context: PipelineContext) -> PipelineContext:
        if not context.is_pdf:
            return context

        report(context.on_progress, Phase.CLASSIFYING)
        classification = await self._classifier.classify(
            context.document.content, context.config
        )
        context.classification = classification
        context.page_count = classification.page_count
        context.warnings.extend(classification.warnings)

        if classification.type is Classification.ENCRYPTED:
            raise IngestionError(FailureReason.ENCRYPTED)
        if classification.type is Classification.CORRUPTED:
            raise IngestionError(FailureReason.CORRUPTED)
        return context


class ExtractTextStep(PipelineStep):
    def __init__(self, text_extractor: TextExtractor) -> None:
        self._text_extractor = text_extractor

    async def run(self, context: PipelineContext) -> PipelineContext:
        if not context.is_pdf or context.classification is None:
            return context
        if context.classification.type not in (Classification.TEXT_BASED, Classification.MIXED):
            return context

        report(context.on_progress, Phase.EXTRACTING, 0, context.page_count)
        native = await self._text_extractor.extract(
            context.document.content,
            context.page_count,
            context.config,
            threadsafe(context.on_progress),
        )
        context.native = native
        context.text = native.text
        context.source = ExtractionSource.NATIVE
        context.warnings.extend(native.warnings)
        return context


class OcrStep(PipelineStep):
    """Decides whether OCR may run and, if so, runs it.

    Page limits are checked first and apply even with OCR disabled. A MIXED
    document that already has native text never fails here: whatever OCR
    could not add, the native pages are kept and the result is PARTIAL.
    """

    def __init__(self, ocr_engine: OcrEngine) -> None:
        self._ocr_engine = ocr_engine

    async def run(self, context: PipelineContext) -> PipelineContext:
        if not context.is_pdf or context.classification is None:
            return context

        targets = self._target_pages(context)
        if not targets:
            return context

        config = context.config
        estimate = estimate_ocr(len(targets), config)
        if len(targets) > config.max_pages_scanned_async:
            return self._requires_ocr(
                context,
                FailureReason.TOO_MANY_PAGES,
                format_message("TOO_MANY_PAGES_OCR_ASYNC", limit=config.max_pages_scanned_async),
                estimate,
            )
        if not config.ocr_enabled:
            Log.info(f"OCR disabled, returning estimate of {estimate.estimated_time_seconds}s")
            return self._requires_ocr(
                context,
                FailureReason.SCANNED,
                format_message("SCANNED_OCR_REQUIRED"),
                estimate,
            )
        if len(targets) > config.max_pages_scanned_sync and not config.background:
            return self._requires_ocr(
                context,
                FailureReason.SCANNED,
                format_message("TOO_MANY_PAGES_OCR_SYNC", limit=config.max_pages_scanned_sync),
                estimate,
            )

        report(context.on_progress, Phase.OCR, 0, len(targets))
        result = await self._ocr_engine.run(
            context.document.content, targets, context.on_progress
        )
        if not result.success:
            if has_usable_text(context.text):
                context.warnings.append(result.user_message)
                context.extraction_status = ExtractionStatus.PARTIAL
                context.user_message = format_message("MIXED_PARTIAL")
                return context
            raise IngestionError(
                result.failure_reason or FailureReason.OCR_FAILED, result.user_message
            )

        complete = result.pages_processed == len(targets)
        context.extraction_status = (
            ExtractionStatus.COMPLETE if complete else ExtractionStatus.PARTIAL
        )
        if context.native is not None:
            pages = list(context.native.pages)
            for index, text in result.pages.items():
                if text and index < len(pages):
                    pages[index] = text
            context.text = PAGE_SEPARATOR.join(pages)
            context.source = ExtractionSource.HYBRID
            context.user_message = format_message("HYBRID_SUCCESS")
        else:
            context.text = result.text
            context.source = ExtractionSource.OCR
            context.user_message = result.user_message
        Log.info(
            f"OCR added text for {result.pages_processed} of "
            f"{len(targets)} pages (source={context.source})"
        )
        return context

    @staticmethod
    def _target_pages(context: PipelineContext) -> list[int]:
        assert context.classification is not None
        if context.classification.type is Classification.SCANNED:
            return list(range(context.page_count))
        if context.classification.type is Classification.MIXED and context.native is not None:
            return [
                index
                for index, text in enumerate(context.native.pages)
                if not page_has_text(len(text))
            ]
        return []

    @staticmethod
    def _requires_ocr(
        context: PipelineContext,
        reason: FailureReason,
        user_message: str,
        estimate: OcrEstimate,
    ) -> PipelineContext:
        context.requires_ocr = True
        context.ocr_estimate = estimate
        if has_usable_text(context.text):
            Log.info(f"Keeping native text; {estimate.page_count} pages still need OCR")
            context.extraction_status = ExtractionStatus.PARTIAL
            context.user_message = format_message("MIXED_PARTIAL")
            return context

        assert context.classification is not None
        Log.info(f"Document requires OCR ({reason})")
        context.result = ExtractedDocument(
            success=False,
            text="",
            page_count=context.page_count,
            source=ExtractionSource.OCR,
            classification=context.classification.type,
            processing_time_ms=elapsed_ms(context),
            user_message=user_message,
            warnings=list(context.warnings),
            failure_reason=reason,
            requires_ocr=True,
            ocr_estimate=context.ocr_estimate,
            extraction_status=ExtractionStatus.REQUIRES_OCR,
        )
        return context


class FinalizeStep(PipelineStep):
    async def run(self, context: PipelineContext) -> PipelineContext:
        if not has_usable_text(context.text):
            raise IngestionError(FailureReason.EMPTY)
        assert context.classification is not None

        mixed = context.classification.type is Classification.MIXED
        status = context.extraction_status or (
            ExtractionStatus.PARTIAL if mixed else ExtractionStatus.COMPLETE
        )
        user_message = context.user_message or format_message(
            "MIXED_PARTIAL" if mixed else "TEXT_BASED_SUCCESS"
        )
        context.result = ExtractedDocument(
            success=True,
            text=context.text,
            page_count=context.page_count,
            source=context.source,
            classification=context.classification.type,
            processing_time_ms=elapsed_ms(context),
            user_message=user_message,
            warnings=list(context.warnings),
            requires_ocr=context.requires_ocr,
            ocr_estimate=context.ocr_estimate,
            extraction_status=status,
        )
        Log.info(
            f"Extraction finished: {len(context.text)} chars, source={context.source}, "
            f"status={status} in {context.result.processing_time_ms}ms"
        )
        return context


def failure_result(
    context: PipelineContext,
    reason: FailureReason,
    user_message: str | None = None,
) -> ExtractedDocument:
    classification = (
        context.classification.type if context.classification else Classification.CORRUPTED
    )
    return ExtractedDocument(
        success=False,
        text="",
        page_count=context.page_count,
        source=context.source,
        classification=classification,
        processing_time_ms=elapsed_ms(context),
        user_message=user_message or message_for(reason),
        warnings=list(context.warnings),
        failure_reason=reason,
        requires_ocr=context.requires_ocr,
        ocr_estimate=context.ocr_estimate,
    )
