from unittest.mock import AsyncMock, patch

import pytest

from docingest.config.limits import VectorizationConfig
from docingest.embedding.base import BaseEmbedder
from docingest.embedding.example_embedding_adapter import ExampleEmbeddingAdapter
from docingest.embedding.orchestrator import EmbeddingOrchestrator
from docingest.processor.models import ExtractionSource, Phase, ProgressEvent
from docingest.storage.memory_store import MemoryChunkStore
from docingest.vectorization.vectorizer import Vectorizer

CONFIG = VectorizationConfig(embedding_rate_limit_seconds=0)

TWELVE_PAGES = "\f".join(f"Page {n} describes the quarterly results." for n in range(1, 13))


def _vectorizer(embedder: BaseEmbedder, store: MemoryChunkStore) -> Vectorizer:
    return Vectorizer(EmbeddingOrchestrator(embedder, store), CONFIG)


class TestVectorizer:
    @pytest.mark.asyncio
    async def test_indexes_every_page(self) -> None:
        store = MemoryChunkStore()

        result = await _vectorizer(ExampleEmbeddingAdapter(8), store).vectorize(
            TWELVE_PAGES, "doc", ExtractionSource.NATIVE
        )

        assert result.success is True
        assert result.total_pages == 12
        assert result.total_chunks == 12
        assert result.user_message == "Successfully indexed 12 text chunks from 12 pages"
        assert result.synthesized_pages is False
        assert [c.page for c in store.for_document("doc")] == list(range(1, 13))

    @pytest.mark.asyncio
    async def test_null_embeddings_drop_only_their_chunks(self) -> None:
        embedder = AsyncMock(spec=BaseEmbedder)
        embedder.embed.side_effect = [
            None if n in (2, 5, 9) else [0.5, 0.5] for n in range(12)
        ]
        store = MemoryChunkStore()

        result = await _vectorizer(embedder, store).vectorize(
            TWELVE_PAGES, "doc", ExtractionSource.NATIVE
        )

        assert result.success is True
        assert result.total_chunks == 9
        assert len(store.chunks) == 9

    @pytest.mark.asyncio
    async def test_chunk_budget_stops_later_pages(self) -> None:
        store = MemoryChunkStore()
        embedder = ExampleEmbeddingAdapter(8)
        config = VectorizationConfig(max_chunks_per_document=5, embedding_rate_limit_seconds=0)
        vectorizer = Vectorizer(EmbeddingOrchestrator(embedder, store), config)

        with patch.object(embedder, "embed", wraps=embedder.embed) as spy:
            result = await vectorizer.vectorize(TWELVE_PAGES, "doc", ExtractionSource.NATIVE)

        assert result.total_chunks == 5
        assert spy.await_count == 5
        assert max(c.page for c in store.chunks.values()) == 5

    @pytest.mark.asyncio
    async def test_document_name_prefixed_once(self) -> None:
        store = MemoryChunkStore()

        await _vectorizer(ExampleEmbeddingAdapter(8), store).vectorize(
            TWELVE_PAGES, "doc", ExtractionSource.NATIVE, document_name="handbook.pdf"
        )

        prefixed = [c for c in store.chunks.values() if c.content.startswith("Document: ")]
        assert [c.chunk_id for c in prefixed] == ["doc:1:0"]

    @pytest.mark.asyncio
    async def test_nothing_stored_is_empty_failure(self) -> None:
        embedder = AsyncMock(spec=BaseEmbedder)
        embedder.embed.return_value = None

        result = await _vectorizer(embedder, MemoryChunkStore()).vectorize(
            TWELVE_PAGES, "doc", ExtractionSource.NATIVE
        )

        assert result.success is False
        assert result.failure_reason == "EMPTY"
        assert result.user_message == "No chunks could be embedded"

    @pytest.mark.asyncio
    async def test_unexpected_error_reports_type_name_only(self) -> None:
        vectorizer = _vectorizer(ExampleEmbeddingAdapter(8), MemoryChunkStore())

        with patch(
            "docingest.vectorization.vectorizer.split_into_pages",
            side_effect=KeyError("secret internals"),
        ):
            result = await vectorizer.vectorize(TWELVE_PAGES, "doc", ExtractionSource.NATIVE)

        assert result.success is False
        assert result.failure_reason == "KeyError"
        assert result.user_message == "Vectorization failed"

    @pytest.mark.asyncio
    async def test_unmarked_text_flagged_as_synthesized(self) -> None:
        result = await _vectorizer(ExampleEmbeddingAdapter(8), MemoryChunkStore()).vectorize(
            "A single paragraph without any page markers at all.", "doc", ExtractionSource.NATIVE
        )

        assert result.synthesized_pages is True

    @pytest.mark.asyncio
    async def test_progress_phases(self) -> None:
        events: list[ProgressEvent] = []

        await _vectorizer(ExampleEmbeddingAdapter(8), MemoryChunkStore()).vectorize(
            "first page text\fsecond page text",
            "doc",
            ExtractionSource.NATIVE,
            on_progress=events.append,
        )

        phases = [e.phase for e in events]
        assert phases == [
            Phase.CHUNKING,
            Phase.EMBEDDING,
            Phase.STORING,
            Phase.CHUNKING,
            Phase.EMBEDDING,
            Phase.STORING,
        ]
