from abc import ABC, abstractmethod


class BaseEmbedder(ABC):
    """Contract for embedding providers."""

    @abstractmethod
    async def embed(self, text: str) -> list[float] | None:
        """Return the embedding vector for text, or None if none was produced.

        Raises:
            EmbeddingError: if the provider call fails.
        """
