from dataclasses import dataclass, field

from docingest.processor.models import FailureReason


@dataclass
class OcrResult:
    """Outcome of one OCR run over a set of pages."""

    success: bool
    text: str
    page_count: int
    pages_processed: int
    processing_time_ms: int
    user_message: str
    failure_reason: FailureReason | None = None
    # Recognized text keyed by zero-based page index; failed pages map to "".
    # pages_processed counts only the pages that produced text.
    pages: dict[int, str] = field(default_factory=dict)
    timed_out: bool = False
