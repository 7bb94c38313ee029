class EmbeddingError(Exception):
    """Raised when an embedding call fails."""


class EmbeddingNetworkError(EmbeddingError):
    """Raised when the embedding provider call fails due to network/infrastructure issues."""
