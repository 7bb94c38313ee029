import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from docingest.config.limits import VectorizationConfig
from docingest.embedding.base import BaseEmbedder
from docingest.embedding.exceptions import EmbeddingNetworkError
from docingest.embedding.orchestrator import EmbeddingOrchestrator
from docingest.processor.models import ChunkRecord, ExtractionSource
from docingest.storage.base import BaseChunkStore
from docingest.storage.memory_store import MemoryChunkStore


def _chunks(count: int, page: int = 1) -> list[ChunkRecord]:
    return [
        ChunkRecord(
            document_id="doc",
            page=page,
            chunk_index=i,
            content=f"chunk {i}",
            source=ExtractionSource.NATIVE,
        )
        for i in range(count)
    ]


def _embedder(*results: object) -> AsyncMock:
    embedder = AsyncMock(spec=BaseEmbedder)
    embedder.embed.side_effect = list(results)
    return embedder


NO_DELAY = VectorizationConfig(embedding_batch_size=20, embedding_rate_limit_seconds=0)


class TestEmbeddingRun:
    @pytest.mark.asyncio
    async def test_embeds_and_stores_every_chunk(self) -> None:
        store = MemoryChunkStore()
        embedder = _embedder(*([[0.1, 0.2]] * 3))
        run = EmbeddingOrchestrator(embedder, store).start("doc", NO_DELAY)

        stored = await run.submit(_chunks(3))

        assert stored == 3
        assert run.stored == 3
        assert sorted(store.chunks) == ["doc:1:0", "doc:1:1", "doc:1:2"]
        assert all(c.embedding == [0.1, 0.2] for c in store.chunks.values())

    @pytest.mark.asyncio
    async def test_null_and_failed_embeddings_are_dropped(self) -> None:
        store = MemoryChunkStore()
        embedder = _embedder([1.0], None, EmbeddingNetworkError("down"), [], [2.0])
        run = EmbeddingOrchestrator(embedder, store).start("doc", NO_DELAY)

        stored = await run.submit(_chunks(5))

        assert stored == 2
        assert run.dropped == 3
        assert embedder.embed.await_count == 5

    @pytest.mark.asyncio
    async def test_store_failures_are_counted_not_raised(self) -> None:
        store = AsyncMock(spec=BaseChunkStore)
        store.store.side_effect = [True, False, RuntimeError("db gone")]
        run = EmbeddingOrchestrator(_embedder(*([[1.0]] * 3)), store).start("doc", NO_DELAY)

        stored = await run.submit(_chunks(3))

        assert stored == 1
        assert run.store_failures == 2

    @pytest.mark.asyncio
    async def test_chunks_without_embedding_never_reach_store(self) -> None:
        store = AsyncMock(spec=BaseChunkStore)
        store.store.return_value = True
        run = EmbeddingOrchestrator(_embedder(None, [1.0]), store).start("doc", NO_DELAY)

        await run.submit(_chunks(2))

        stored_chunks = [call.args[0] for call in store.store.await_args_list]
        assert [c.chunk_index for c in stored_chunks] == [1]
        assert stored_chunks[0].embedding == [1.0]

    @pytest.mark.asyncio
    async def test_rate_limit_between_sub_batches_only(self) -> None:
        config = VectorizationConfig(embedding_batch_size=2, embedding_rate_limit_seconds=0.1)
        run = EmbeddingOrchestrator(_embedder(*([[1.0]] * 10)), MemoryChunkStore()).start(
            "doc", config
        )

        with patch(
            "docingest.embedding.orchestrator.asyncio.sleep", new_callable=AsyncMock
        ) as mock_sleep:
            await run.submit(_chunks(5))
            await run.submit(_chunks(1, page=2))

        # Batches: [0,1] [2,3] [4] on page 1, then [0] on page 2.
        assert mock_sleep.await_count == 3
        mock_sleep.assert_awaited_with(0.1)

    @pytest.mark.asyncio
    async def test_sub_batch_embeds_concurrently(self) -> None:
        in_flight = 0
        peak = 0

        class SlowEmbedder(BaseEmbedder):
            async def embed(self, text: str) -> list[float] | None:
                nonlocal in_flight, peak
                in_flight += 1
                peak = max(peak, in_flight)
                await asyncio.sleep(0.01)
                in_flight -= 1
                return [1.0]

        config = VectorizationConfig(embedding_batch_size=4, embedding_rate_limit_seconds=0)
        run = EmbeddingOrchestrator(SlowEmbedder(), MemoryChunkStore()).start("doc", config)

        await run.submit(_chunks(8))

        assert peak == 4
