from typing import ClassVar

from docingest.config.settings import Settings
from docingest.embedding.base import BaseEmbedder
from docingest.embedding.example_embedding_adapter import ExampleEmbeddingAdapter
from docingest.embedding.openai_embedding_adapter import OpenAIEmbeddingAdapter


class EmbedderFactory:
    """Creates the configured embedding adapter."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "ollama": "http://localhost:11434/v1",
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseEmbedder:
        provider = settings.embedding_provider.lower()
        if provider == "example":
            return ExampleEmbeddingAdapter(dimensions=settings.embedding_dimensions)
        return OpenAIEmbeddingAdapter(
            api_key=cls._resolve_api_key(provider, settings),
            model=settings.embedding_model_name,
            timeout_seconds=settings.embedding_timeout_seconds,
            base_url=cls._resolve_base_url(provider, settings),
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return None
        if provider == "openai_compatible":
            url = settings.embedding_base_url.strip()
            if not url:
                raise ValueError(
                    "embedding_base_url is required for embedding_provider=openai_compatible"
                )
            return url
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return settings.embedding_base_url.strip() or default_base_url
        supported = [
            "example",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(f"Unknown embedding provider '{provider}'. Choose from: {supported}")

    @classmethod
    def _resolve_api_key(cls, provider: str, settings: Settings) -> str:
        key = settings.embedding_api_key
        if not key and provider in cls.OPENAI_COMPATIBLE_BASE_URLS:
            # Local servers ignore the key, but the client refuses an empty one.
            return provider
        return key
