from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import openai
import pytest

from docingest.config.settings import Settings
from docingest.embedding.example_embedding_adapter import ExampleEmbeddingAdapter
from docingest.embedding.exceptions import EmbeddingError, EmbeddingNetworkError
from docingest.embedding.factory import EmbedderFactory
from docingest.embedding.openai_embedding_adapter import OpenAIEmbeddingAdapter


def _make_mock_response(vectors: list[list[float]]) -> MagicMock:
    response = MagicMock()
    response.data = [MagicMock(embedding=vector) for vector in vectors]
    return response


def _adapter_with(mock_client: MagicMock) -> OpenAIEmbeddingAdapter:
    with patch(
        "docingest.embedding.openai_embedding_adapter.openai.AsyncOpenAI",
        return_value=mock_client,
    ):
        return OpenAIEmbeddingAdapter(api_key="k", model="m", timeout_seconds=30)


class TestOpenAIEmbeddingAdapter:
    @pytest.mark.asyncio
    async def test_returns_first_vector(self) -> None:
        mock_client = MagicMock()
        mock_client.embeddings.create = AsyncMock(return_value=_make_mock_response([[0.1, 0.2]]))

        vector = await _adapter_with(mock_client).embed("quarterly report")

        assert vector == [0.1, 0.2]
        mock_client.embeddings.create.assert_awaited_once_with(model="m", input="quarterly report")

    @pytest.mark.asyncio
    async def test_raises_error_for_empty_data(self) -> None:
        mock_client = MagicMock()
        mock_client.embeddings.create = AsyncMock(return_value=_make_mock_response([]))

        with pytest.raises(EmbeddingError, match="no data"):
            await _adapter_with(mock_client).embed("quarterly report")

    @pytest.mark.asyncio
    async def test_raises_network_error_on_connection_failure(self) -> None:
        mock_client = MagicMock()
        mock_client.embeddings.create = AsyncMock(
            side_effect=openai.APIConnectionError(request=MagicMock())
        )

        with pytest.raises(EmbeddingNetworkError):
            await _adapter_with(mock_client).embed("quarterly report")

    @pytest.mark.asyncio
    async def test_raises_network_error_on_timeout(self) -> None:
        mock_client = MagicMock()
        mock_client.embeddings.create = AsyncMock(side_effect=httpx.TimeoutException("slow"))

        with pytest.raises(EmbeddingNetworkError, match="network error"):
            await _adapter_with(mock_client).embed("quarterly report")


class TestExampleEmbeddingAdapter:
    @pytest.mark.asyncio
    async def test_vector_has_configured_dimensions(self) -> None:
        vector = await ExampleEmbeddingAdapter(dimensions=48).embed("text")
        assert vector is not None
        assert len(vector) == 48

    @pytest.mark.asyncio
    async def test_same_text_same_vector(self) -> None:
        adapter = ExampleEmbeddingAdapter()
        assert await adapter.embed("abc") == await adapter.embed("abc")
        assert await adapter.embed("abc") != await adapter.embed("abd")

    @pytest.mark.asyncio
    async def test_vector_is_unit_length(self) -> None:
        vector = await ExampleEmbeddingAdapter(dimensions=16).embed("norm")
        assert vector is not None
        assert sum(v * v for v in vector) == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_blank_text_has_no_embedding(self) -> None:
        assert await ExampleEmbeddingAdapter().embed("   ") is None


class TestEmbedderFactory:
    def test_creates_example_adapter(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EMBEDDING_PROVIDER", "example")
        assert isinstance(EmbedderFactory.create(Settings()), ExampleEmbeddingAdapter)

    def test_creates_openai_adapter(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EMBEDDING_PROVIDER", "openai")
        monkeypatch.setenv("EMBEDDING_API_KEY", "sk-test")
        assert isinstance(EmbedderFactory.create(Settings()), OpenAIEmbeddingAdapter)

    def test_ollama_uses_local_base_url(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EMBEDDING_PROVIDER", "ollama")
        with patch(
            "docingest.embedding.openai_embedding_adapter.openai.AsyncOpenAI"
        ) as mock_client_cls:
            EmbedderFactory.create(Settings())
        _, kwargs = mock_client_cls.call_args
        assert kwargs["base_url"] == "http://localhost:11434/v1"
        assert kwargs["api_key"] == "ollama"

    def test_openai_compatible_requires_base_url(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EMBEDDING_PROVIDER", "openai_compatible")
        monkeypatch.setenv("EMBEDDING_API_KEY", "k")
        with pytest.raises(ValueError, match="embedding_base_url is required"):
            EmbedderFactory.create(Settings())

    def test_raises_for_unknown_provider(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EMBEDDING_PROVIDER", "nope")
        with pytest.raises(ValueError, match="Unknown embedding provider"):
            EmbedderFactory.create(Settings())
