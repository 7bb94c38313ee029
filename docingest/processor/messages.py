"""User-facing messages. Internal error detail never goes in here."""

from docingest.processor.models import FailureReason

USER_MESSAGES: dict[str, str] = {
    "TEXT_BASED_SUCCESS": "Text extracted successfully",
    "OCR_SUCCESS": "OCR completed successfully",
    "OCR_PARTIAL": "OCR finished early. Text from the processed pages was kept.",
    "HYBRID_SUCCESS": "Extracted text from text-based pages and ran OCR on scanned pages.",
    "SCANNED_OCR_REQUIRED": (
        'This PDF is scanned and requires OCR. Click "Run OCR" to extract text.'
    ),
    "MIXED_PARTIAL": (
        "Extracted text from text-based pages. "
        "Some scanned pages could not be processed without OCR."
    ),
    "ENCRYPTED": "This PDF is password-protected and cannot be processed.",
    "CORRUPTED": "This file is not a valid document or is corrupted.",
    "TIMEOUT": "Processing timed out. The document may be too complex.",
    "TOO_LARGE": "File size exceeds the maximum allowed ({limit_mb}MB).",
    "TOO_LARGE_ANY": "File size exceeds the maximum allowed.",
    "TOO_MANY_PAGES_TEXT": (
        "PDF has too many pages for text extraction. Maximum is {limit} pages."
    ),
    "TOO_MANY_PAGES_OCR_SYNC": (
        "PDF has too many pages for sync OCR. Maximum is {limit} pages. Try async OCR."
    ),
    "TOO_MANY_PAGES_OCR_ASYNC": "PDF has too many pages for OCR. Maximum is {limit} pages.",
    "TOO_MANY_PAGES_ANY": "This document has too many pages to process.",
    "EMPTY": "No text could be extracted from this document.",
    "RENDER_FAILED": "Failed to render PDF pages for OCR.",
    "OCR_FAILED": "Text recognition failed.",
    "OCR_TIMEOUT": "OCR processing timed out. Try with fewer pages.",
    "VECTORIZE_SUCCESS": "Successfully indexed {chunks} text chunks from {pages} pages",
    "VECTORIZE_EMPTY": "No chunks could be embedded",
    "VECTORIZE_FAILED": "Vectorization failed",
}

_GENERIC_KEYS = {
    FailureReason.SCANNED: "SCANNED_OCR_REQUIRED",
    FailureReason.TOO_LARGE: "TOO_LARGE_ANY",
    FailureReason.TOO_MANY_PAGES: "TOO_MANY_PAGES_ANY",
}


def message_for(reason: FailureReason) -> str:
    """Generic user message for a reason raised without a specific one.

    Messages that quote a limit are built by the caller with format_message.
    """
    return format_message(_GENERIC_KEYS.get(reason, str(reason)))


def format_message(key: str, **values: object) -> str:
    return USER_MESSAGES[key].format(**values)
