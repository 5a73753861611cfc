"""
Embedding providers and factory.
"""

from foodrag.config import Settings, settings as default_settings
from foodrag.embeddings.client import (
    EmbeddingProvider,
    OllamaEmbeddingProvider,
    OpenAIEmbeddingProvider,
    StoreManagedEmbeddingProvider,
)
from foodrag.errors import ProviderInitializationError


def create_embedding_provider(settings: Settings | None = None) -> EmbeddingProvider:
    settings = settings or default_settings
    provider = settings.embedding_provider.lower()
    if provider == "none":
        return StoreManagedEmbeddingProvider()
    if provider == "ollama":
        return OllamaEmbeddingProvider(settings)
    if provider == "openai":
        return OpenAIEmbeddingProvider(settings)
    raise ProviderInitializationError(f"Unsupported embedding provider: {provider}")


__all__ = [
    "create_embedding_provider",
    "EmbeddingProvider",
    "StoreManagedEmbeddingProvider",
    "OllamaEmbeddingProvider",
    "OpenAIEmbeddingProvider",
]
