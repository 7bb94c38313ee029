import io

import pdfplumber
from pdfminer.pdfdocument import PDFEncryptionError, PDFPasswordIncorrect

from docingest.pdf.base import BasePdfParser, PdfDocument
from docingest.pdf.exceptions import PdfCorruptedError, PdfEncryptedError, PdfExtractionError

_PASSWORD_ERRORS = (PDFPasswordIncorrect, PDFEncryptionError)


def _is_password_error(exc: BaseException | None) -> bool:
    """pdfplumber wraps pdfminer errors, so walk args and the cause chain."""
    seen: set[int] = set()
    while exc is not None and id(exc) not in seen:
        seen.add(id(exc))
        if isinstance(exc, _PASSWORD_ERRORS):
            return True
        if any(isinstance(arg, _PASSWORD_ERRORS) for arg in exc.args):
            return True
        exc = exc.__cause__ or exc.__context__
    return False


class PdfPlumberDocument(PdfDocument):
    def __init__(self, pdf: pdfplumber.PDF) -> None:
        self._pdf = pdf

    @property
    def page_count(self) -> int:
        return len(self._pdf.pages)

    def page_fragments(self, index: int) -> list[str]:
        try:
            page = self._pdf.pages[index]
            lines = page.extract_text_lines(return_chars=False)
        except Exception as exc:
            raise PdfExtractionError(
                f"pdfplumber could not read page {index + 1}: {exc}"
            ) from exc
        return [line["text"] for line in lines if line.get("text")]

    def render_page(self, index: int, scale: float) -> bytes:
        try:
            page = self._pdf.pages[index]
            image = page.to_image(resolution=int(72 * scale)).original
            buffer = io.BytesIO()
            image.save(buffer, format="PNG")
            return buffer.getvalue()
        except Exception as exc:
            raise PdfExtractionError(
                f"pdfplumber could not render page {index + 1}: {exc}"
            ) from exc

    def close(self) -> None:
        self._pdf.close()


class PdfPlumberAdapter(BasePdfParser):
    """Opens PDFs with pdfplumber."""

    def open(self, pdf_bytes: bytes) -> PdfDocument:
        try:
            pdf = pdfplumber.open(io.BytesIO(pdf_bytes))
        except Exception as exc:
            if _is_password_error(exc):
                raise PdfEncryptedError("document is password-protected") from exc
            raise PdfCorruptedError(f"pdfplumber could not open document: {exc}") from exc
        return PdfPlumberDocument(pdf)
