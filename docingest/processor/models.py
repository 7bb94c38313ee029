from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum


class Classification(StrEnum):
    TEXT_BASED = "TEXT_BASED"
    SCANNED = "SCANNED"
    MIXED = "MIXED"
    ENCRYPTED = "ENCRYPTED"
    CORRUPTED = "CORRUPTED"


class ExtractionSource(StrEnum):
    NATIVE = "native"
    OCR = "ocr"
    HYBRID = "hybrid"


class ExtractionStatus(StrEnum):
    COMPLETE = "COMPLETE"
    PARTIAL = "PARTIAL"
    REQUIRES_OCR = "REQUIRES_OCR"


class FailureReason(StrEnum):
    CORRUPTED = "CORRUPTED"
    ENCRYPTED = "ENCRYPTED"
    TOO_LARGE = "TOO_LARGE"
    TOO_MANY_PAGES = "TOO_MANY_PAGES"
    TIMEOUT = "TIMEOUT"
    EMPTY = "EMPTY"
    SCANNED = "SCANNED"
    RENDER_FAILED = "RENDER_FAILED"
    OCR_FAILED = "OCR_FAILED"


class PageQuality(StrEnum):
    AUTHORITATIVE = "authoritative"
    SYNTHESIZED = "synthesized"


class Phase(StrEnum):
    VALIDATING = "validating"
    CLASSIFYING = "classifying"
    EXTRACTING = "extracting"
    OCR = "ocr"
    CHUNKING = "chunking"
    EMBEDDING = "embedding"
    STORING = "storing"
    COMPLETE = "complete"


@dataclass(frozen=True)
class RawDocument:
    """Uploaded bytes plus what the uploader claimed about them."""

    content: bytes
    mime_type: str
    filename: str

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class ClassificationResult:
    """Statistics from the sampled pages and the label derived from them."""

    type: Classification
    page_count: int
    total_text_length: int
    pages_with_text: int
    text_density: float
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class OcrEstimate:
    estimated_time_seconds: int
    page_count: int
    warning: str
    can_run_sync: bool


@dataclass
class ExtractedDocument:
    """Unified result returned by every extraction path."""

    success: bool
    text: str
    page_count: int
    source: ExtractionSource
    classification: Classification
    processing_time_ms: int
    user_message: str
    warnings: list[str] = field(default_factory=list)
    failure_reason: FailureReason | None = None
    requires_ocr: bool = False
    ocr_estimate: OcrEstimate | None = None
    extraction_status: ExtractionStatus | None = None


@dataclass(frozen=True)
class PageText:
    page_number: int
    text: str
    source: ExtractionSource
    quality: PageQuality = PageQuality.AUTHORITATIVE


@dataclass(slots=True)
class ChunkRecord:
    """A page-scoped unit of text; embedding is attached once it succeeds."""

    document_id: str
    page: int
    chunk_index: int
    content: str
    source: ExtractionSource
    document_name: str | None = None
    page_quality: PageQuality = PageQuality.AUTHORITATIVE
    embedding: list[float] | None = None

    @property
    def chunk_id(self) -> str:
        return chunk_id(self.document_id, self.page, self.chunk_index)


@dataclass
class VectorizationResult:
    success: bool
    document_id: str
    total_pages: int
    total_chunks: int
    processing_time_ms: int
    user_message: str
    failure_reason: str | None = None
    synthesized_pages: bool = False


@dataclass
class IngestionResult:
    extracted: ExtractedDocument
    vectorization: VectorizationResult | None = None


@dataclass(frozen=True)
class ProgressEvent:
    phase: Phase
    current: int = 0
    total: int = 0


ProgressCallback = Callable[[ProgressEvent], None]


def chunk_id(document_id: str, page: int, chunk_index: int) -> str:
    """Stable key for idempotent upserts: documentId:page:chunkIndex."""
    return f"{document_id}:{page}:{chunk_index}"
