"""
Vector store interface and shared types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol, Sequence


@dataclass
class VectorRecord:
    id: str
    text: str
    embedding: List[float] = field(default_factory=list)
    # Text handed to the index; `text` is what gets displayed back.
    indexed_text: str | None = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def index_text(self) -> str:
        return self.indexed_text if self.indexed_text is not None else self.text


@dataclass
class SearchResult:
    """Parallel arrays in rank order (most similar first)."""

    documents: List[str] = field(default_factory=list)
    ids: List[str] = field(default_factory=list)
    distances: List[float] | None = None
    metadatas: List[Dict[str, Any] | None] | None = None

    def __post_init__(self) -> None:
        size = len(self.documents)
        for name in ("ids", "distances", "metadatas"):
            values = getattr(self, name)
            if values is not None and len(values) != size:
                raise ValueError(f"SearchResult.{name} has {len(values)} items, expected {size}")

    def __len__(self) -> int:
        return len(self.documents)


class VectorStore(Protocol):
    # True when the store embeds raw text itself (query accepts a string).
    embeds_text: bool

    async def initialize(self) -> None:
        ...

    async def add_documents(self, records: Sequence[VectorRecord]) -> None:
        ...

    async def query(self, query: str | Sequence[float], n_results: int) -> SearchResult:
        ...

    async def get_existing_ids(self) -> List[str]:
        ...


__all__ = ["VectorRecord", "SearchResult", "VectorStore"]
