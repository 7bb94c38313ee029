from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from docingest.config.limits import PipelineConfig
from docingest.extraction.formats import DocumentFormat
from docingest.extraction.text_extractor import NativeText
from docingest.processor.models import (
    ClassificationResult,
    ExtractedDocument,
    ExtractionSource,
    ExtractionStatus,
    OcrEstimate,
    ProgressCallback,
    RawDocument,
)


@dataclass(slots=True)
class PipelineContext:
    document: RawDocument
    config: PipelineConfig
    started: float
    on_progress: ProgressCallback | None = None
    document_format: DocumentFormat | None = None
    classification: ClassificationResult | None = None
    page_count: int = 0
    native: NativeText | None = None
    text: str = ""
    source: ExtractionSource = ExtractionSource.NATIVE
    warnings: list[str] = field(default_factory=list)
    requires_ocr: bool = False
    ocr_estimate: OcrEstimate | None = None
    extraction_status: ExtractionStatus | None = None
    user_message: str | None = None
    # Set by the step that ends the pipeline; later steps are skipped.
    result: ExtractedDocument | None = None

    @property
    def is_pdf(self) -> bool:
        return self.document_format is DocumentFormat.PDF


class PipelineStep(ABC):
    @abstractmethod
    async def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
