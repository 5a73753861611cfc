from __future__ import annotations

from typing import Dict, List, Literal

from pydantic import BaseModel, Field


# Records
class FoodItem(BaseModel):
    """A single record of the source collection."""

    id: str
    text: str
    region: str | None = None
    type: str | None = None


class FoodStats(BaseModel):
    total: int = Field(..., ge=0)
    regions: int = Field(..., ge=0, description="Distinct regions")
    types: int = Field(..., ge=0, description="Distinct food types")
    with_region: int = Field(..., ge=0)
    with_type: int = Field(..., ge=0)


# Admin / ingestion
class EmbedRequest(BaseModel):
    force: bool = Field(default=False, description="Re-embed every record, ignoring existing ids")


class EmbeddingResult(BaseModel):
    success: bool
    message: str
    count: int | None = Field(default=None, ge=0)
    error: str | None = None


class EmbeddingStatus(BaseModel):
    success: bool
    total: int | None = None
    embedded: int | None = None
    remaining: int | None = None
    percentage: int | None = None
    error: str | None = None


# RAG
class QueryRequest(BaseModel):
    question: str = Field(..., min_length=1, description="User question")


class GenerateRequest(BaseModel):
    question: str = Field(..., min_length=1)
    context: str = Field(..., description="Newline-joined retrieved documents")


class RagDetails(BaseModel):
    documents: List[str]
    ids: List[str]
    similarities: List[float] | None = None
    processing_time: int = Field(..., ge=0, description="Milliseconds")
    result_count: int = Field(..., ge=0)


class RagQueryResponse(BaseModel):
    success: bool
    llm_response: str | None = None
    rag_details: RagDetails | None = None
    error: str | None = None


class LlmGeneration(BaseModel):
    success: bool
    response: str | None = None
    processing_time: int | None = Field(default=None, ge=0)
    error: str | None = None


class ProviderCheck(BaseModel):
    status: Literal["connected", "skipped"]
    detail: Dict[str, object] = Field(default_factory=dict)


class ConnectionReport(BaseModel):
    success: bool
    tests: Dict[str, ProviderCheck] | None = None
    error: str | None = None


__all__ = [
    "FoodItem",
    "FoodStats",
    "EmbedRequest",
    "EmbeddingResult",
    "EmbeddingStatus",
    "QueryRequest",
    "GenerateRequest",
    "RagDetails",
    "RagQueryResponse",
    "LlmGeneration",
    "ProviderCheck",
    "ConnectionReport",
]
