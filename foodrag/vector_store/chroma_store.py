"""
Chroma-based VectorStore implementation (local persistent collection).

chromadb's client is synchronous, so every call runs in a worker thread
via asyncio.to_thread to keep the event loop free.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Sequence

import chromadb

from foodrag.config import settings
from foodrag.errors import ProviderInitializationError, UnsupportedQueryError
from foodrag.vector_store.base import SearchResult, VectorRecord, VectorStore

logger = logging.getLogger(__name__)


class ChromaVectorStore(VectorStore):
    embeds_text = False

    def __init__(
        self,
        persist_directory: str | None = None,
        collection_name: str | None = None,
        client: Any | None = None,
    ) -> None:
        self.persist_directory = persist_directory or settings.chroma_path
        self.collection_name = collection_name or settings.chroma_collection
        self.client = client
        self.collection = None

    async def initialize(self) -> None:
        try:
            self.collection = await asyncio.to_thread(self._open_collection)
        except Exception as exc:
            raise ProviderInitializationError(f"Chroma initialization failed: {exc}") from exc
        logger.info(
            "ChromaVectorStore initialised",
            extra={"persist_directory": self.persist_directory, "collection": self.collection_name},
        )

    def _open_collection(self) -> Any:
        if self.client is None:
            self.client = chromadb.PersistentClient(path=self.persist_directory)
        # cosine space so that distance == 1 - cosine similarity
        return self.client.get_or_create_collection(self.collection_name, metadata={"hnsw:space": "cosine"})

    async def add_documents(self, records: Sequence[VectorRecord]) -> None:
        collection = self._require_collection()
        if not records:
            return

        for record in records:
            if not record.embedding:
                raise ValueError(f"Record {record.id} has no embedding; Chroma store expects vectors")

        await asyncio.to_thread(
            collection.upsert,
            ids=[r.id for r in records],
            embeddings=[list(r.embedding) for r in records],
            metadatas=[{k: v for k, v in r.metadata.items() if v is not None} or None for r in records],
            documents=[r.text for r in records],
        )
        logger.info("Upserted documents into Chroma", extra={"count": len(records), "collection": self.collection_name})

    async def query(self, query: str | Sequence[float], n_results: int) -> SearchResult:
        collection = self._require_collection()
        if isinstance(query, str):
            raise UnsupportedQueryError("ChromaVectorStore does not support text queries. Please provide vector embeddings.")
        if n_results <= 0:
            return SearchResult(documents=[], ids=[], distances=[], metadatas=[])

        result = await asyncio.to_thread(
            collection.query,
            query_embeddings=[list(query)],
            n_results=n_results,
            include=["documents", "metadatas", "distances"],
        )

        ids = (result.get("ids") or [[]])[0] or []
        texts = (result.get("documents") or [[]])[0] or []
        metadatas = (result.get("metadatas") or [[]])[0] or []
        distances = (result.get("distances") or [[]])[0] or []

        return SearchResult(
            documents=list(texts),
            ids=[str(doc_id) for doc_id in ids],
            distances=[float(d) for d in distances],
            metadatas=[dict(m) if m else None for m in metadatas] or None,
        )

    async def get_existing_ids(self) -> List[str]:
        collection = self._require_collection()
        result = await asyncio.to_thread(collection.get, include=[])
        return [str(doc_id) for doc_id in result.get("ids") or []]

    def _require_collection(self) -> Any:
        if self.collection is None:
            raise ProviderInitializationError("Chroma collection not initialized")
        return self.collection


__all__ = ["ChromaVectorStore"]
