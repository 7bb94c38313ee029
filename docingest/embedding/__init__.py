from docingest.embedding.base import BaseEmbedder
from docingest.embedding.factory import EmbedderFactory
from docingest.embedding.orchestrator import EmbeddingOrchestrator, EmbeddingRun

__all__ = ["BaseEmbedder", "EmbedderFactory", "EmbeddingOrchestrator", "EmbeddingRun"]
