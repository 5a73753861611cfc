"""
Process-wide provider handles, built lazily and memoised.

Construction is guarded by an asyncio.Lock so concurrent first requests
build the providers once. If anything fails while building, every handle
is dropped so the next call starts from scratch.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable

from foodrag.config import Settings, settings as default_settings
from foodrag.embeddings import EmbeddingProvider, create_embedding_provider
from foodrag.llm import LLMProvider, create_llm_provider
from foodrag.vector_store import VectorStore, create_vector_store

logger = logging.getLogger(__name__)


@dataclass
class Providers:
    store: VectorStore
    embedder: EmbeddingProvider
    llm: LLMProvider | None = None


class ProviderRegistry:
    def __init__(
        self,
        settings: Settings | None = None,
        vector_store_factory: Callable[[Settings], VectorStore] = create_vector_store,
        embedding_factory: Callable[[Settings], EmbeddingProvider] = create_embedding_provider,
        llm_factory: Callable[[Settings], LLMProvider] = create_llm_provider,
    ) -> None:
        self.settings = settings or default_settings
        self._vector_store_factory = vector_store_factory
        self._embedding_factory = embedding_factory
        self._llm_factory = llm_factory
        self._lock = asyncio.Lock()
        self.reset()

    def reset(self) -> None:
        self._store: VectorStore | None = None
        self._store_ready = False
        self._embedder: EmbeddingProvider | None = None
        self._llm: LLMProvider | None = None

    @property
    def initialized(self) -> bool:
        return self._store_ready

    async def acquire(self, with_llm: bool = True) -> Providers:
        """Return the shared providers, building whatever is missing."""
        async with self._lock:
            try:
                if self._store is None:
                    logger.info("Creating vector store", extra={"backend": self.settings.vector_db_type})
                    self._store = self._vector_store_factory(self.settings)
                if not self._store_ready:
                    await self._store.initialize()
                    self._store_ready = True
                if self._embedder is None:
                    logger.info("Creating embedding provider", extra={"provider": self.settings.embedding_provider})
                    self._embedder = self._embedding_factory(self.settings)
                if with_llm and self._llm is None:
                    logger.info("Creating LLM provider", extra={"provider": self.settings.llm_provider})
                    self._llm = self._llm_factory(self.settings)
            except Exception:
                logger.exception("Provider initialization failed; resetting all providers")
                self.reset()
                raise

            return Providers(store=self._store, embedder=self._embedder, llm=self._llm if with_llm else None)


__all__ = ["Providers", "ProviderRegistry"]
