import asyncio

from docingest.database.connection import close_pool
from docingest.database.repositories.chunk_repository import ChunkRepository
from docingest.processor.models import ChunkRecord
from docingest.storage.base import BaseChunkStore


class PostgresChunkStore(BaseChunkStore):
    """Writes chunks through the pooled psycopg repository off the event loop."""

    def __init__(self, repository: ChunkRepository) -> None:
        self._repository = repository

    async def store(self, chunk: ChunkRecord) -> bool:
        return await asyncio.to_thread(self._repository.insert, chunk)

    def close(self) -> None:
        close_pool()
