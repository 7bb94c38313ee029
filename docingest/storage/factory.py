from docingest.config.settings import Settings
from docingest.database.connection import init_pool
from docingest.database.repositories.chunk_repository import ChunkRepository
from docingest.storage.base import BaseChunkStore
from docingest.storage.memory_store import MemoryChunkStore
from docingest.storage.postgres_store import PostgresChunkStore


class ChunkStoreFactory:
    """Creates the configured chunk store."""

    BACKENDS = ("memory", "postgres")

    @classmethod
    def create(cls, settings: Settings) -> BaseChunkStore:
        backend = settings.storage_backend.lower()
        if backend == "memory":
            return MemoryChunkStore()
        if backend == "postgres":
            init_pool(settings)
            return PostgresChunkStore(ChunkRepository(settings.db_chunks_table))
        raise ValueError(
            f"Unknown storage backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )
