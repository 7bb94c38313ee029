from docingest.processor.models import ChunkRecord
from docingest.storage.base import BaseChunkStore


class MemoryChunkStore(BaseChunkStore):
    """Keeps chunks in a dict keyed by chunk id; re-storing a chunk overwrites it."""

    def __init__(self) -> None:
        self.chunks: dict[str, ChunkRecord] = {}

    async def store(self, chunk: ChunkRecord) -> bool:
        if chunk.embedding is None:
            return False
        self.chunks[chunk.chunk_id] = chunk
        return True

    def for_document(self, document_id: str) -> list[ChunkRecord]:
        """Chunks of one document in page and chunk order."""
        return sorted(
            (chunk for chunk in self.chunks.values() if chunk.document_id == document_id),
            key=lambda chunk: (chunk.page, chunk.chunk_index),
        )
