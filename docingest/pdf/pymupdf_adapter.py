import pymupdf

from docingest.pdf.base import BasePdfParser, PdfDocument
from docingest.pdf.exceptions import PdfCorruptedError, PdfEncryptedError, PdfExtractionError


class PyMuPdfDocument(PdfDocument):
    def __init__(self, document: pymupdf.Document) -> None:
        self._document = document

    @property
    def page_count(self) -> int:
        return int(self._document.page_count)

    def page_fragments(self, index: int) -> list[str]:
        try:
            page = self._document.load_page(index)
            layout = page.get_text("dict")
        except Exception as exc:
            raise PdfExtractionError(f"pymupdf could not read page {index + 1}: {exc}") from exc

        fragments: list[str] = []
        for block in layout.get("blocks", []):
            # Image blocks carry no "lines".
            for line in block.get("lines", []):
                text = "".join(span.get("text", "") for span in line.get("spans", []))
                if text:
                    fragments.append(text)
        return fragments

    def render_page(self, index: int, scale: float) -> bytes:
        try:
            page = self._document.load_page(index)
            pixmap = page.get_pixmap(matrix=pymupdf.Matrix(scale, scale))
            return bytes(pixmap.tobytes("png"))
        except Exception as exc:
            raise PdfExtractionError(f"pymupdf could not render page {index + 1}: {exc}") from exc

    def close(self) -> None:
        self._document.close()


class PyMuPdfAdapter(BasePdfParser):
    """Opens PDFs with PyMuPDF."""

    def open(self, pdf_bytes: bytes) -> PdfDocument:
        try:
            document = pymupdf.open(stream=pdf_bytes, filetype="pdf")  # type: ignore[no-untyped-call]
        except Exception as exc:
            raise PdfCorruptedError(f"pymupdf could not open document: {exc}") from exc
        if document.needs_pass:
            document.close()
            raise PdfEncryptedError("document is password-protected")
        return PyMuPdfDocument(document)
