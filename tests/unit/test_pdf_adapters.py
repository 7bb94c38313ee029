from collections.abc import Callable
from unittest.mock import patch

import pytest

from docingest.pdf.base import BasePdfParser, decode_fragment
from docingest.pdf.exceptions import PdfCorruptedError, PdfEncryptedError, PdfExtractionError
from docingest.pdf.factory import PdfParserFactory
from docingest.pdf.pdfplumber_adapter import PdfPlumberAdapter
from docingest.pdf.pymupdf_adapter import PyMuPdfAdapter

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

ADAPTERS = [PyMuPdfAdapter, PdfPlumberAdapter]

Adapter = type[BasePdfParser]


def _make_settings(pdf_engine: str):  # type: ignore[no-untyped-def]
    """Create a minimal Settings-like object with only pdf_engine."""
    with patch("docingest.config.settings.Settings") as mock_cls:
        settings = mock_cls.return_value
        settings.pdf_engine = pdf_engine
        return settings


@pytest.mark.parametrize("adapter_cls", ADAPTERS)
class TestPdfAdapters:
    def test_page_count(self, adapter_cls: Adapter, text_pdf_bytes: bytes) -> None:
        with adapter_cls().open(text_pdf_bytes) as document:
            assert document.page_count == 2

    def test_page_fragments_contain_text(
        self, adapter_cls: Adapter, sample_pdf_bytes: bytes
    ) -> None:
        with adapter_cls().open(sample_pdf_bytes) as document:
            fragments = document.page_fragments(0)
        assert "Hello PDF World" in " ".join(fragments)

    def test_blank_page_has_no_fragments(
        self, adapter_cls: Adapter, blank_pdf_factory: Callable[[int], bytes]
    ) -> None:
        with adapter_cls().open(blank_pdf_factory(1)) as document:
            assert document.page_fragments(0) == []

    def test_render_page_returns_png(self, adapter_cls: Adapter, sample_pdf_bytes: bytes) -> None:
        with adapter_cls().open(sample_pdf_bytes) as document:
            image = document.render_page(0, scale=0.5)
        assert image.startswith(PNG_SIGNATURE)

    def test_open_raises_on_invalid_bytes(self, adapter_cls: Adapter) -> None:
        with pytest.raises(PdfCorruptedError):
            adapter_cls().open(b"not a pdf")

    def test_missing_page_raises_extraction_error(
        self, adapter_cls: Adapter, sample_pdf_bytes: bytes
    ) -> None:
        with adapter_cls().open(sample_pdf_bytes) as document:
            with pytest.raises(PdfExtractionError):
                document.page_fragments(5)



class TestEncryptedPdf:
    def test_pymupdf_reports_password_protected(self, encrypted_pdf_bytes: bytes) -> None:
        with pytest.raises(PdfEncryptedError):
            PyMuPdfAdapter().open(encrypted_pdf_bytes)


class TestDecodeFragment:
    def test_keeps_valid_text(self) -> None:
        assert decode_fragment("Revenue 5.4") == "Revenue 5.4"

    def test_drops_lone_surrogates(self) -> None:
        assert decode_fragment("bad \udc80 glyph") is None


class TestPdfParserFactory:
    def test_creates_pdfplumber_adapter(self) -> None:
        settings = _make_settings("pdfplumber")
        assert isinstance(PdfParserFactory.create(settings), PdfPlumberAdapter)

    def test_creates_pymupdf_adapter(self) -> None:
        settings = _make_settings("pymupdf")
        assert isinstance(PdfParserFactory.create(settings), PyMuPdfAdapter)

    def test_is_case_insensitive(self) -> None:
        settings = _make_settings("PdfPlumber")
        assert isinstance(PdfParserFactory.create(settings), PdfPlumberAdapter)

    def test_raises_for_unknown_engine(self) -> None:
        settings = _make_settings("unknown")
        with pytest.raises(ValueError, match="Unknown PDF engine"):
            PdfParserFactory.create(settings)
