class PdfExtractionError(Exception):
    """Raised when a PDF cannot be read or a page cannot be processed."""


class PdfCorruptedError(PdfExtractionError):
    """Raised when the parser cannot open the document at all."""


class PdfEncryptedError(PdfExtractionError):
    """Raised when the document requires a password to open."""
