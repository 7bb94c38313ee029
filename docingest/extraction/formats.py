"""Format detection and text extraction for non-PDF uploads."""

import csv
import io
import json
from enum import StrEnum

import docx

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
CSV_MIMES = frozenset({"text/csv", "application/csv"})


class DocumentFormat(StrEnum):
    PDF = "pdf"
    DOCX = "docx"
    CSV = "csv"
    TEXT = "text"


def detect_format(mime_type: str, filename: str) -> DocumentFormat:
    """Pick the format from the declared mime type, falling back to the extension."""
    mime = mime_type.split(";", 1)[0].strip().lower()
    name = filename.lower()
    if mime == PDF_MIME or name.endswith(".pdf"):
        return DocumentFormat.PDF
    if mime == DOCX_MIME or name.endswith(".docx"):
        return DocumentFormat.DOCX
    if mime in CSV_MIMES or name.endswith(".csv"):
        return DocumentFormat.CSV
    return DocumentFormat.TEXT


def extract_text(document_format: DocumentFormat, content: bytes) -> str:
    """Extract plain text from a non-PDF document.

    Raises:
        ValueError: for PDF input, which goes through the PDF pipeline.
        Any parser error from python-docx or csv for malformed input.
    """
    if document_format is DocumentFormat.DOCX:
        return _extract_docx(content)
    if document_format is DocumentFormat.CSV:
        return _extract_csv(content)
    if document_format is DocumentFormat.TEXT:
        return content.decode("utf-8", errors="replace")
    raise ValueError(f"{document_format} documents are not handled here")


def _extract_docx(content: bytes) -> str:
    document = docx.Document(io.BytesIO(content))
    paragraphs = [p.text for p in document.paragraphs if p.text.strip()]
    return "\n\n".join(paragraphs)


def _extract_csv(content: bytes) -> str:
    reader = csv.DictReader(io.StringIO(content.decode("utf-8-sig", errors="replace")))
    return json.dumps(list(reader), indent=2, ensure_ascii=False)
