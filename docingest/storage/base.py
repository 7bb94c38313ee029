from abc import ABC, abstractmethod

from docingest.processor.models import ChunkRecord


class BaseChunkStore(ABC):
    """Sink receiving one embedded chunk at a time."""

    @abstractmethod
    async def store(self, chunk: ChunkRecord) -> bool:
        """Persist a single embedded chunk; return False if it was not stored."""

    def close(self) -> None:
        """Release any resources held by the store."""
