import httpx
import openai

from docingest.embedding.base import BaseEmbedder
from docingest.embedding.exceptions import EmbeddingError, EmbeddingNetworkError


class OpenAIEmbeddingAdapter(BaseEmbedder):
    """Embedding adapter built on the OpenAI-compatible embeddings API."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._model = model
        self._client = openai.AsyncOpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )

    async def embed(self, text: str) -> list[float] | None:
        try:
            response = await self._client.embeddings.create(model=self._model, input=text)
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise EmbeddingNetworkError(f"Embedding provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise EmbeddingNetworkError(f"Embedding provider API error: {exc}") from exc

        if not response.data:
            raise EmbeddingError("Embedding provider returned no data")
        return list(response.data[0].embedding) or None
