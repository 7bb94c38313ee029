"""Batched, rate-limited embedding with immediate per-chunk storage.

Within a sub-batch every chunk is embedded and stored concurrently; between
sub-batches a fixed delay respects the provider's rate limit. A chunk whose
embedding fails or comes back empty is dropped and never retried, and a
failed store is only counted. Neither ever aborts the batch.
"""

import asyncio
from collections.abc import Sequence

from docingest.config.limits import VectorizationConfig
from docingest.embedding.base import BaseEmbedder
from docingest.logging.logger import Log
from docingest.processor.models import ChunkRecord, Phase, ProgressCallback
from docingest.processor.progress import report
from docingest.storage.base import BaseChunkStore


class EmbeddingRun:
    """Counters and pacing state for one document."""

    def __init__(
        self,
        embedder: BaseEmbedder,
        store: BaseChunkStore,
        document_id: str,
        config: VectorizationConfig,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self._embedder = embedder
        self._store = store
        self._document_id = document_id
        self._batch_size = max(config.embedding_batch_size, 1)
        self._rate_limit_seconds = config.embedding_rate_limit_seconds
        self._on_progress = on_progress
        self._batches_sent = 0
        self.submitted = 0
        self.embedded = 0
        self.dropped = 0
        self.stored = 0
        self.store_failures = 0

    async def submit(self, chunks: Sequence[ChunkRecord]) -> int:
        """Embed and store chunks in sub-batches; return how many were stored."""
        stored_before = self.stored
        for start in range(0, len(chunks), self._batch_size):
            batch = chunks[start : start + self._batch_size]
            if self._batches_sent > 0 and self._rate_limit_seconds > 0:
                await asyncio.sleep(self._rate_limit_seconds)
            self._batches_sent += 1
            self.submitted += len(batch)

            report(self._on_progress, Phase.EMBEDDING, self.embedded, self.submitted)
            await asyncio.gather(*(self._embed_and_store(chunk) for chunk in batch))
            report(self._on_progress, Phase.STORING, self.stored, self.submitted)
        return self.stored - stored_before

    async def _embed_and_store(self, chunk: ChunkRecord) -> None:
        try:
            embedding = await self._embedder.embed(chunk.content)
        except Exception as exc:
            Log.warning(f"Embedding failed for chunk {chunk.chunk_id}, dropping: {exc}")
            self.dropped += 1
            return
        if not embedding:
            Log.warning(f"Empty embedding for chunk {chunk.chunk_id}, dropping")
            self.dropped += 1
            return

        chunk.embedding = embedding
        self.embedded += 1
        try:
            stored = await self._store.store(chunk)
        except Exception as exc:
            Log.warning(f"Storing chunk {chunk.chunk_id} failed: {exc}")
            stored = False
        if stored:
            self.stored += 1
        else:
            self.store_failures += 1


class EmbeddingOrchestrator:
    """Holds the injected embedder and store; one EmbeddingRun per document."""

    def __init__(self, embedder: BaseEmbedder, store: BaseChunkStore) -> None:
        self._embedder = embedder
        self._store = store

    def start(
        self,
        document_id: str,
        config: VectorizationConfig,
        on_progress: ProgressCallback | None = None,
    ) -> EmbeddingRun:
        return EmbeddingRun(self._embedder, self._store, document_id, config, on_progress)
