import re

from langchain_text_splitters import RecursiveCharacterTextSplitter

from docingest.processor.models import ChunkRecord, PageText

MIN_CHUNKABLE_CHARS = 10

_CRLF = re.compile(r"\r\n")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")
_HORIZONTAL_WHITESPACE = re.compile(r"[ \t]+")
_LINE_EDGE_SPACES = re.compile(r"^ +| +$", re.MULTILINE)


def normalize_text(text: str) -> str:
    text = _CRLF.sub("\n", text)
    text = _EXCESS_NEWLINES.sub("\n\n", text)
    text = _HORIZONTAL_WHITESPACE.sub(" ", text)
    text = _LINE_EDGE_SPACES.sub("", text)
    return text.strip()


class Chunker:
    """Splits one page at a time into overlapping, page-scoped chunks."""

    def __init__(self, chunk_size: int, chunk_overlap: int) -> None:
        self._splitter = RecursiveCharacterTextSplitter(
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
        )

    def chunk_page(
        self,
        page: PageText,
        document_id: str,
        document_name: str | None = None,
        prefix_document_name: bool = False,
    ) -> list[ChunkRecord]:
        """Chunk a single page; near-empty pages yield no chunks.

        When prefix_document_name is set and a name is given, the first chunk
        carries a "Document: <name>" header so the name is searchable.
        """
        normalized = normalize_text(page.text)
        if len(normalized) < MIN_CHUNKABLE_CHARS:
            return []

        chunks = [
            ChunkRecord(
                document_id=document_id,
                page=page.page_number,
                chunk_index=index,
                content=content,
                source=page.source,
                document_name=document_name,
                page_quality=page.quality,
            )
            for index, content in enumerate(self._splitter.split_text(normalized))
        ]
        if chunks and prefix_document_name and document_name:
            chunks[0].content = f"Document: {document_name}\n\n{chunks[0].content}"
        return chunks
