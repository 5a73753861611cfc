"""
Embedding providers: OpenAI, Ollama, and a stub for stores that embed internally.
"""

from __future__ import annotations

import logging
from typing import List, Protocol

import httpx
from openai import AsyncOpenAI

from foodrag.config import Settings, settings as default_settings
from foodrag.errors import EmbeddingProviderError, ProviderInitializationError

logger = logging.getLogger(__name__)


class EmbeddingProvider(Protocol):
    async def get_embedding(self, text: str) -> List[float]:
        ...


class StoreManagedEmbeddingProvider:
    """Placeholder used when the vector store computes embeddings itself."""

    async def get_embedding(self, text: str) -> List[float]:
        raise EmbeddingProviderError(
            "External embedding providers are deprecated: the vector store handles embeddings internally."
        )


class OpenAIEmbeddingProvider:
    def __init__(self, settings: Settings | None = None, client: AsyncOpenAI | None = None) -> None:
        settings = settings or default_settings
        self.model = settings.embedding_model
        if client is None:
            if not settings.openai_api_key:
                raise ProviderInitializationError("OpenAI API key is required for OpenAI embeddings")
            client = AsyncOpenAI(
                api_key=settings.openai_api_key.get_secret_value(),
                timeout=settings.request_timeout_sec,
            )
        self.client = client

    async def get_embedding(self, text: str) -> List[float]:
        response = await self.client.embeddings.create(model=self.model, input=[text])
        if not response.data:
            raise EmbeddingProviderError("OpenAI returned no embedding")
        return list(response.data[0].embedding)


class OllamaEmbeddingProvider:
    def __init__(self, settings: Settings | None = None, client: httpx.AsyncClient | None = None) -> None:
        settings = settings or default_settings
        self.base_url = settings.ollama_base_url.rstrip("/")
        self.model = settings.embedding_model
        self.timeout = settings.request_timeout_sec
        self.client = client

    async def get_embedding(self, text: str) -> List[float]:
        payload = {"model": self.model, "prompt": text}
        url = f"{self.base_url}/api/embeddings"
        if self.client is not None:
            response = await self.client.post(url, json=payload)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(url, json=payload)

        if response.is_error:
            raise EmbeddingProviderError(f"Ollama embedding failed: {response.reason_phrase}")

        embedding = response.json().get("embedding") or []
        if not embedding:
            raise EmbeddingProviderError("Ollama returned an empty embedding")
        return [float(x) for x in embedding]


__all__ = [
    "EmbeddingProvider",
    "StoreManagedEmbeddingProvider",
    "OpenAIEmbeddingProvider",
    "OllamaEmbeddingProvider",
]
