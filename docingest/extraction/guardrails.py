from docingest.extraction.formats import DocumentFormat
from docingest.logging.logger import Log
from docingest.processor.models import FailureReason

MAGIC_SIGNATURES: dict[DocumentFormat, bytes] = {
    DocumentFormat.PDF: b"%PDF",
    DocumentFormat.DOCX: b"PK\x03\x04",
}


class GuardrailValidator:
    """Cheap structural checks run before any parser touches the bytes."""

    def __init__(self, max_size_bytes: int) -> None:
        self._max_size_bytes = max_size_bytes

    def validate(self, content: bytes, document_format: DocumentFormat) -> FailureReason | None:
        """Return the failure reason, or None when the buffer may be parsed."""
        if len(content) > self._max_size_bytes:
            size_mb = len(content) / (1024 * 1024)
            Log.warning(f"Guardrails rejected document: {size_mb:.2f}MB exceeds limit")
            return FailureReason.TOO_LARGE

        signature = MAGIC_SIGNATURES.get(document_format)
        if signature is not None and not content.startswith(signature):
            Log.warning(f"Guardrails rejected document: missing {document_format} signature")
            return FailureReason.CORRUPTED

        return None
