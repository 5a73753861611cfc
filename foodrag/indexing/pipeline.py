"""
Ingestion pipeline: load food records, diff against the store, embed and upsert in batches.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Sequence

from tqdm import tqdm

from foodrag.config import Settings, settings as default_settings
from foodrag.embeddings import EmbeddingProvider
from foodrag.indexing.data import load_food_items
from foodrag.models.schemas import EmbeddingResult, EmbeddingStatus, FoodItem
from foodrag.providers import ProviderRegistry
from foodrag.vector_store.base import VectorRecord, VectorStore

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 5


def enrich_text(item: FoodItem) -> str:
    """Text used for indexing: the record text plus sentences built from region/type."""
    text = item.text
    if item.region:
        text += f" This food is popular in {item.region}."
    if item.type:
        text += f" It is a type of {item.type}."
    return text


async def _fetch_existing_ids(store: VectorStore) -> List[str]:
    try:
        ids = await store.get_existing_ids()
    except Exception:
        logger.warning("Could not get existing ids, treating store as empty", exc_info=True)
        return []
    logger.info("Found existing embeddings", extra={"count": len(ids)})
    return ids


async def embed_food_items(
    items: Sequence[FoodItem],
    store: VectorStore,
    embedder: EmbeddingProvider,
    force: bool = False,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> EmbeddingResult:
    existing_ids: List[str] = []
    if force:
        new_items = list(items)
    else:
        existing_ids = await _fetch_existing_ids(store)
        known = set(existing_ids)
        new_items = [item for item in items if item.id not in known]

    if not new_items:
        return EmbeddingResult(success=True, message="All food items are already embedded", count=len(existing_ids))

    logger.info("Embedding new items", extra={"count": len(new_items), "force": force})
    processed = 0

    for i in tqdm(range(0, len(new_items), batch_size), desc="Embedding", unit="batch"):
        batch = new_items[i : i + batch_size]
        records: List[VectorRecord] = []

        for item in batch:
            try:
                indexed_text = enrich_text(item)
                embedding: List[float] = []
                if not store.embeds_text:
                    embedding = await embedder.get_embedding(indexed_text)
                records.append(
                    VectorRecord(
                        id=item.id,
                        text=item.text,
                        embedding=embedding,
                        indexed_text=indexed_text,
                        metadata={"region": item.region, "type": item.type},
                    )
                )
                processed += 1
                logger.debug("Prepared item", extra={"id": item.id, "processed": processed, "total": len(new_items)})
            except Exception:
                logger.exception("Failed to process item", extra={"id": item.id})

        if records:
            await store.add_documents(records)
            logger.info("Saved batch", extra={"count": len(records), "offset": i})

    return EmbeddingResult(success=True, message=f"Successfully embedded {processed} food items", count=processed)


class IngestionService:
    """Runs the embedding job and reports embedding progress against the record collection."""

    def __init__(
        self,
        registry: ProviderRegistry,
        settings: Settings | None = None,
        loader: Callable[[], List[FoodItem]] | None = None,
        logger_: logging.Logger | None = None,
    ) -> None:
        self.registry = registry
        self.settings = settings or registry.settings or default_settings
        self.loader = loader or (lambda: load_food_items(self.settings.foods_path))
        self.logger = logger_ or logging.getLogger(__name__)

    async def run(self, force: bool = False) -> EmbeddingResult:
        started = time.perf_counter()
        try:
            providers = await self.registry.acquire(with_llm=False)
            items = self.loader()
            self.logger.info("Processing food items", extra={"count": len(items)})
            result = await embed_food_items(
                items,
                providers.store,
                providers.embedder,
                force=force,
                batch_size=self.settings.embed_batch_size,
            )
        except Exception as exc:
            self.logger.exception("Failed to embed foods data")
            return EmbeddingResult(success=False, message="Failed to embed foods data", error=str(exc) or "Unknown error")

        self.logger.info(
            "Embedding job completed",
            extra={"count": result.count, "elapsed_sec": round(time.perf_counter() - started, 2)},
        )
        return result

    async def status(self) -> EmbeddingStatus:
        try:
            providers = await self.registry.acquire(with_llm=False)
            items = self.loader()
            existing = set(await _fetch_existing_ids(providers.store))
        except Exception as exc:
            self.logger.exception("Failed to get embedding status")
            return EmbeddingStatus(success=False, error=str(exc) or "Failed to get embedding status")

        total = len(items)
        embedded = sum(1 for item in items if item.id in existing)
        return EmbeddingStatus(
            success=True,
            total=total,
            embedded=embedded,
            remaining=total - embedded,
            # half-up, not banker's rounding
            percentage=int(embedded * 100 / total + 0.5) if total else 0,
        )


__all__ = ["IngestionService", "embed_food_items", "enrich_text", "DEFAULT_BATCH_SIZE"]
