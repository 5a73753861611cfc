"""
Vector store abstractions and factories.
"""

from foodrag.config import Settings, settings as default_settings
from foodrag.errors import ProviderInitializationError
from foodrag.vector_store.base import SearchResult, VectorRecord, VectorStore
from foodrag.vector_store.chroma_store import ChromaVectorStore
from foodrag.vector_store.simple_store import SimpleVectorStore
from foodrag.vector_store.upstash_store import AttributeKeywordFilter, UpstashVectorStore


def create_vector_store(settings: Settings | None = None) -> VectorStore:
    """
    Factory to obtain the configured VectorStore instance.
    Pure selection: nothing is connected until `initialize()` is awaited.
    """
    settings = settings or default_settings
    backend = settings.vector_db_type.lower()
    if backend == "upstash":
        filter_policy = (
            AttributeKeywordFilter(settings.attribute_filter_keywords)
            if settings.attribute_filter_enabled
            else None
        )
        return UpstashVectorStore(settings=settings, filter_policy=filter_policy)
    if backend == "simple":
        return SimpleVectorStore(settings.simple_db_path)
    if backend == "chroma":
        return ChromaVectorStore(settings.chroma_path, settings.chroma_collection)
    raise ProviderInitializationError(f"Unsupported vector store backend: {backend}")


__all__ = [
    "create_vector_store",
    "VectorStore",
    "VectorRecord",
    "SearchResult",
    "SimpleVectorStore",
    "UpstashVectorStore",
    "ChromaVectorStore",
    "AttributeKeywordFilter",
]
