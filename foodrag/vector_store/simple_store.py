"""
Local fallback VectorStore: brute-force cosine similarity over a JSON file.

The whole record set is rewritten on every mutation, which is O(n) per write.
Fine for the small demo collection; not meant to scale.
"""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Sequence

from foodrag.config import settings
from foodrag.errors import ProviderInitializationError, UnsupportedQueryError
from foodrag.vector_store.base import SearchResult, VectorRecord, VectorStore

logger = logging.getLogger(__name__)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    if len(a) != len(b):
        raise ValueError(f"Vectors must have the same length ({len(a)} != {len(b)})")

    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


class SimpleVectorStore(VectorStore):
    embeds_text = False

    def __init__(self, data_file: str | Path | None = None) -> None:
        self.data_file = Path(data_file or settings.simple_db_path)
        self.documents: List[Dict[str, Any]] = []

    async def initialize(self) -> None:
        if not self.data_file.exists():
            self.documents = []
            logger.info("Simple vector store initialised (empty)", extra={"path": str(self.data_file)})
            return

        try:
            data = json.loads(self.data_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ProviderInitializationError(f"Simple vector store initialization failed: {exc}") from exc

        self.documents = list(data.get("documents") or [])
        logger.info(
            "Simple vector store initialised",
            extra={"path": str(self.data_file), "count": len(self.documents)},
        )

    async def add_documents(self, records: Sequence[VectorRecord]) -> None:
        if not records:
            return

        dimension = len(self.documents[0]["embedding"]) if self.documents else None
        for record in records:
            if not record.embedding:
                raise ValueError(f"Record {record.id} has no embedding; the simple store cannot embed text")
            if dimension is None:
                dimension = len(record.embedding)
            elif len(record.embedding) != dimension:
                raise ValueError(
                    f"Record {record.id} embedding has {len(record.embedding)} dimensions, store uses {dimension}"
                )

        # a rejected batch must leave both memory and file untouched
        documents = list(self.documents)
        for record in records:
            documents = [doc for doc in documents if doc["id"] != record.id]
            documents.append({"id": record.id, "text": record.text, "embedding": list(record.embedding)})

        self._save(documents)
        self.documents = documents
        logger.info("Added documents to simple vector store", extra={"count": len(records)})

    async def query(self, query: str | Sequence[float], n_results: int) -> SearchResult:
        if isinstance(query, str):
            raise UnsupportedQueryError(
                "SimpleVectorStore does not support text queries. Please provide vector embeddings."
            )
        if not self.documents or n_results <= 0:
            return SearchResult(documents=[], ids=[], distances=[])

        scored = [(doc, cosine_similarity(query, doc["embedding"])) for doc in self.documents]
        # list.sort is stable, so ties keep insertion order
        scored.sort(key=lambda item: item[1], reverse=True)
        top = scored[:n_results]

        return SearchResult(
            documents=[doc["text"] for doc, _ in top],
            ids=[doc["id"] for doc, _ in top],
            distances=[1.0 - similarity for _, similarity in top],
        )

    async def get_existing_ids(self) -> List[str]:
        return [doc["id"] for doc in self.documents]

    def _save(self, documents: List[Dict[str, Any]]) -> None:
        self.data_file.parent.mkdir(parents=True, exist_ok=True)
        self.data_file.write_text(json.dumps({"documents": documents}, indent=2), encoding="utf-8")


__all__ = ["SimpleVectorStore", "cosine_similarity"]
