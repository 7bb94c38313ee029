"""Example embedding adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseEmbedder and register the provider in EmbedderFactory.
"""

import hashlib
import math

from docingest.embedding.base import BaseEmbedder


class ExampleEmbeddingAdapter(BaseEmbedder):
    """Deterministic hash-derived vectors.

    No network calls. The same text always maps to the same unit vector,
    which is enough for local development and tests.
    """

    def __init__(self, dimensions: int = 384) -> None:
        self._dimensions = dimensions

    async def embed(self, text: str) -> list[float] | None:
        if not text.strip():
            return None
        values: list[float] = []
        counter = 0
        while len(values) < self._dimensions:
            digest = hashlib.sha256(f"{counter}:{text}".encode()).digest()
            values.extend((byte - 127.5) / 127.5 for byte in digest)
            counter += 1
        vector = values[: self._dimensions]
        norm = math.sqrt(sum(v * v for v in vector)) or 1.0
        return [v / norm for v in vector]
