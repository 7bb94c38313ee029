"""Per-invocation limits derived from Settings.

Settings is read once at startup; these frozen records are what the pipeline
components actually receive, so a caller can tweak a single request with
dataclasses.replace() without touching the environment.
"""

from dataclasses import dataclass

from docingest.config.settings import Settings


@dataclass(frozen=True)
class PipelineConfig:
    """Limits for validation, classification, extraction and OCR routing."""

    max_size_bytes: int = 50 * 1024 * 1024
    timeout_seconds: float = 30.0
    batch_size: int = 10
    classification_pages: int = 5
    classification_timeout_seconds: float = 10.0
    min_text_threshold: int = 100
    mixed_text_ratio: float = 0.3
    max_pages_text_based: int = 200
    max_pages_scanned_sync: int = 30
    max_pages_scanned_async: int = 100
    ocr_enabled: bool = False
    # True when this invocation already runs as a background job, which lifts
    # the sync OCR page limit up to the async one.
    background: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "PipelineConfig":
        return cls(
            max_size_bytes=settings.max_size_bytes,
            timeout_seconds=settings.extraction_timeout_seconds,
            batch_size=settings.batch_size,
            classification_pages=settings.classification_pages,
            classification_timeout_seconds=settings.classification_timeout_seconds,
            min_text_threshold=settings.min_text_threshold,
            mixed_text_ratio=settings.mixed_text_ratio,
            max_pages_text_based=settings.max_pages_text_based,
            max_pages_scanned_sync=settings.max_pages_scanned_sync,
            max_pages_scanned_async=settings.max_pages_scanned_async,
            ocr_enabled=settings.ocr_enabled,
        )


@dataclass(frozen=True)
class OcrConfig:
    """Limits for a single OCR run."""

    page_timeout_seconds: float = 30.0
    total_timeout_seconds: float = 300.0
    batch_size: int = 3
    scale: float = 2.0
    language: str = "eng"
    max_pages: int = 100

    @classmethod
    def from_settings(cls, settings: Settings) -> "OcrConfig":
        return cls(
            page_timeout_seconds=settings.ocr_page_timeout_seconds,
            total_timeout_seconds=settings.ocr_total_timeout_seconds,
            scale=settings.ocr_scale,
            language=settings.ocr_language,
            max_pages=settings.max_pages_scanned_async,
        )


@dataclass(frozen=True)
class VectorizationConfig:
    """Chunking, embedding budget and rate limit."""

    chunk_size: int = 500
    chunk_overlap: int = 50
    max_chunks_per_document: int = 500
    embedding_batch_size: int = 20
    embedding_rate_limit_seconds: float = 0.1
    target_page_size: int = 3000

    @classmethod
    def from_settings(cls, settings: Settings) -> "VectorizationConfig":
        return cls(
            chunk_size=settings.chunk_size,
            chunk_overlap=settings.chunk_overlap,
            max_chunks_per_document=settings.max_chunks_per_document,
            embedding_batch_size=settings.embedding_batch_size,
            embedding_rate_limit_seconds=settings.embedding_rate_limit_ms / 1000,
            target_page_size=settings.target_page_size,
        )
