"""Recovers page boundaries from a single text blob.

Boundary signals are tried in a fixed order: form feeds, textual
"---Page N---" markers, then (for OCR text only) runs of three or more
newlines. With no signal at all, paragraphs are packed into pseudo-pages of
roughly target_page_size characters; those pages are marked SYNTHESIZED so
consumers know the numbering does not match the source document.
"""

import re

from docingest.processor.models import ExtractionSource, PageQuality, PageText

MIN_PAGE_CHARS = 10
DEFAULT_TARGET_PAGE_SIZE = 3000

_FORM_FEED = "\f"
_PAGE_MARKER = re.compile(r"\n*-{3}\s*Page\s*\d+\s*-{3}\n*", re.IGNORECASE)
_OCR_PAGE_GAP = re.compile(r"\n{3,}")
_PARAGRAPH_BREAK = re.compile(r"\n\n+")


def split_into_pages(
    text: str,
    source: ExtractionSource,
    target_page_size: int = DEFAULT_TARGET_PAGE_SIZE,
) -> list[PageText]:
    if _FORM_FEED in text:
        return _number(text.split(_FORM_FEED), source, PageQuality.AUTHORITATIVE)

    if _PAGE_MARKER.search(text):
        parts = _PAGE_MARKER.split(text)
        # A marker at the very start opens page 1 rather than closing a page.
        if not parts[0].strip():
            parts = parts[1:]
        return _number(parts, source, PageQuality.AUTHORITATIVE)

    if source is ExtractionSource.OCR:
        ocr_pages = _OCR_PAGE_GAP.split(text)
        if len(ocr_pages) > 1:
            return _number(ocr_pages, source, PageQuality.SYNTHESIZED)

    return _number(_pack_paragraphs(text, target_page_size), source, PageQuality.SYNTHESIZED)


def _pack_paragraphs(text: str, target_page_size: int) -> list[str]:
    if len(text) <= target_page_size:
        return [text]

    pages: list[str] = []
    current = ""
    for paragraph in _PARAGRAPH_BREAK.split(text):
        if current and len(current) + len(paragraph) > target_page_size:
            pages.append(current)
            current = paragraph
        else:
            current = f"{current}\n\n{paragraph}" if current else paragraph
    if current:
        pages.append(current)
    return pages


def _number(
    texts: list[str],
    source: ExtractionSource,
    quality: PageQuality,
) -> list[PageText]:
    """Drop near-empty pages, then number the survivors 1..n without gaps.

    Dropping a page ahead of a kept one shifts the numbers away from the
    source document, so such a set is downgraded to SYNTHESIZED.
    """
    keep = [len(page.strip()) >= MIN_PAGE_CHARS for page in texts]
    kept = [page for page, ok in zip(texts, keep) if ok]
    if quality is PageQuality.AUTHORITATIVE and False in keep:
        last_kept = max((i for i, ok in enumerate(keep) if ok), default=-1)
        if keep.index(False) < last_kept:
            quality = PageQuality.SYNTHESIZED
    return [
        PageText(page_number=number, text=page, source=source, quality=quality)
        for number, page in enumerate(kept, start=1)
    ]
