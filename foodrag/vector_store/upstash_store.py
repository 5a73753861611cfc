"""
Upstash Vector (hosted) VectorStore implementation.

The index is created with a built-in embedding model, so documents and
text queries are embedded server-side.
"""

from __future__ import annotations

import asyncio
import logging
import random
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Sequence, TypeVar

from upstash_vector import AsyncIndex

from foodrag.config import Settings, settings as default_settings
from foodrag.errors import ProviderInitializationError
from foodrag.vector_store.base import SearchResult, VectorRecord, VectorStore
from foodrag.vector_store.retry import with_retry

T = TypeVar("T")

# Upstash caps top_k at 1000
ID_SCAN_TOP_K = 1000

logger = logging.getLogger(__name__)


class AttributeKeywordFilter:
    """
    Soft relevance guard for free-text queries: if the question mentions one
    of the keywords, candidates whose text doesn't mention it are dropped.
    Literal substring match, so synonyms are missed.
    """

    def __init__(self, keywords: Sequence[str]) -> None:
        self.keywords = [k.lower() for k in keywords if k]

    def accepts(self, query: str, document: str) -> bool:
        q = query.lower()
        text = document.lower()
        for keyword in self.keywords:
            if keyword in q and keyword not in text:
                return False
        return True


class UpstashVectorStore(VectorStore):
    embeds_text = True

    def __init__(
        self,
        settings: Settings | None = None,
        index: Any | None = None,
        filter_policy: AttributeKeywordFilter | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.settings = settings or default_settings
        self.index = index
        self.filter_policy = filter_policy
        self._sleep = sleep

    async def initialize(self) -> None:
        if self.index is not None:
            return

        url = self.settings.upstash_vector_rest_url
        token = self.settings.upstash_vector_rest_token
        if not url or not token:
            raise ProviderInitializationError("Upstash Vector URL and TOKEN are required")

        self.index = AsyncIndex(url=url, token=token.get_secret_value())
        logger.info("Upstash vector store initialised", extra={"url": url})

    async def add_documents(self, records: Sequence[VectorRecord]) -> None:
        index = self._require_index()
        if not records:
            return

        timestamp = datetime.now(timezone.utc).isoformat()
        vectors = []
        for record in records:
            metadata: Dict[str, Any] = {"document": record.text, "id": record.id, "timestamp": timestamp}
            metadata.update({k: v for k, v in record.metadata.items() if v is not None})
            vectors.append((record.id, record.index_text, metadata))

        await self._retry(lambda: index.upsert(vectors=vectors), "upsert")
        logger.info("Upserted documents into Upstash", extra={"count": len(vectors)})

    async def query(self, query: str | Sequence[float], n_results: int) -> SearchResult:
        index = self._require_index()
        if n_results <= 0:
            return SearchResult(documents=[], ids=[], distances=[], metadatas=[])

        is_text = isinstance(query, str)
        use_filter = is_text and self.filter_policy is not None
        top_k = n_results * 2 if use_filter else n_results

        async def run_query() -> list:
            if is_text:
                return await index.query(data=query, top_k=top_k, include_metadata=True)
            return await index.query(vector=list(query), top_k=top_k, include_metadata=True)

        raw = await self._retry(run_query, "query")

        results = []
        for item in raw:
            metadata = item.metadata or {}
            document = metadata.get("document") or ""
            if use_filter and not self.filter_policy.accepts(query, document):
                continue
            results.append((item, metadata, document))
        results = results[:n_results]

        return SearchResult(
            documents=[document for _, _, document in results],
            ids=[str(item.id) for item, _, _ in results],
            distances=[1.0 - (item.score or 0.0) for item, _, _ in results],
            metadatas=[metadata for _, metadata, _ in results],
        )

    async def get_existing_ids(self) -> List[str]:
        """
        Approximation: Upstash has no "list all ids" call used here, so a random
        probe vector with a large top_k is issued and the returned ids are
        collected. Not guaranteed to be complete for big indexes.
        """
        index = self._require_index()
        probe = [random.random() for _ in range(self.settings.embedding_dimension)]
        raw = await self._retry(
            lambda: index.query(vector=probe, top_k=ID_SCAN_TOP_K, include_metadata=False),
            "id_scan",
        )
        return [str(item.id) for item in raw]

    def _require_index(self) -> Any:
        if self.index is None:
            raise ProviderInitializationError("Upstash Vector not initialized")
        return self.index

    async def _retry(self, operation: Callable[[], Awaitable[T]], description: str) -> T:
        timeout = self.settings.request_timeout_sec

        async def attempt() -> T:
            return await asyncio.wait_for(operation(), timeout=timeout)

        return await with_retry(
            attempt,
            attempts=self.settings.retry_attempts,
            base_delay=self.settings.retry_base_delay_sec,
            sleep=self._sleep,
            description=f"upstash.{description}",
        )


__all__ = ["UpstashVectorStore", "AttributeKeywordFilter", "ID_SCAN_TOP_K"]
