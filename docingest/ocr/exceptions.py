class OcrError(Exception):
    """Base exception for OCR failures."""


class OcrRecognitionError(OcrError):
    """Raised when the recognizer fails or times out on a single page."""
