import io
from collections.abc import Callable

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

LINE_TEXT = ("The quick brown fox jumps over the lazy dog " * 2)[:50]


def _draw_full_page(c: canvas.Canvas, page_number: int) -> None:
    c.setFont("Helvetica", 9)
    for line in range(50):
        c.drawString(40, 750 - line * 14, f"{page_number}-{line:02d} " + LINE_TEXT[5:])


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Hello PDF World")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def text_pdf_bytes() -> bytes:
    """Two pages, each with 50 lines of 50 characters (~2,500 chars per page)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    for page_number in (1, 2):
        _draw_full_page(c, page_number)
        c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def blank_pdf_factory() -> Callable[[int], bytes]:
    """Build a PDF of n text-free pages, standing in for a scanned document."""

    def _build(pages: int) -> bytes:
        buf = io.BytesIO()
        c = canvas.Canvas(buf, pagesize=letter)
        for _ in range(pages):
            c.rect(72, 72, 200, 200, fill=1)
            c.showPage()
        c.save()
        return buf.getvalue()

    return _build


@pytest.fixture()
def mixed_pdf_bytes() -> bytes:
    """One text page followed by four text-free pages."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    _draw_full_page(c, 1)
    c.showPage()
    for _ in range(4):
        c.rect(72, 72, 200, 200, fill=1)
        c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def encrypted_pdf_bytes() -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter, encrypt="secret")
    c.drawString(72, 720, "Top secret content")
    c.save()
    return buf.getvalue()
