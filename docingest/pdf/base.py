from abc import ABC, abstractmethod
from types import TracebackType


class PdfDocument(ABC):
    """An opened PDF, read one page at a time."""

    @property
    @abstractmethod
    def page_count(self) -> int:
        """Number of pages in the document."""

    @abstractmethod
    def page_fragments(self, index: int) -> list[str]:
        """Return the raw text fragments of the zero-based page ``index``.

        Raises:
            PdfExtractionError: if the page content cannot be read.
        """

    @abstractmethod
    def render_page(self, index: int, scale: float) -> bytes:
        """Render the zero-based page ``index`` to PNG bytes.

        Raises:
            PdfExtractionError: if rendering fails.
        """

    @abstractmethod
    def close(self) -> None:
        """Release parser resources."""

    def __enter__(self) -> "PdfDocument":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class BasePdfParser(ABC):
    """Contract for all PDF parser adapters."""

    @abstractmethod
    def open(self, pdf_bytes: bytes) -> PdfDocument:
        """Open PDF bytes for page-wise access.

        Raises:
            PdfEncryptedError: if the document is password-protected.
            PdfCorruptedError: if the document cannot be parsed.
        """


def decode_fragment(fragment: str) -> str | None:
    """Return the fragment if it is valid text, None if it cannot be encoded.

    Parsers surface broken font encodings as lone surrogates, which would blow
    up any downstream encode; such fragments are dropped.
    """
    try:
        fragment.encode("utf-8")
    except UnicodeEncodeError:
        return None
    return fragment
