from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from foodrag.config import Settings
from foodrag.errors import DataLoadError
from foodrag.indexing.data import food_stats, get_food_by_id, load_food_items
from foodrag.indexing.pipeline import IngestionService
from foodrag.models.schemas import (
    ConnectionReport,
    EmbeddingResult,
    EmbeddingStatus,
    EmbedRequest,
    FoodItem,
    FoodStats,
    GenerateRequest,
    LlmGeneration,
    QueryRequest,
    RagQueryResponse,
)
from foodrag.providers import ProviderRegistry
from foodrag.rag.pipeline import RAGService

router = APIRouter()
logger = logging.getLogger(__name__)


def get_registry(request: Request) -> ProviderRegistry:
    return request.app.state.registry


def get_settings(registry: ProviderRegistry = Depends(get_registry)) -> Settings:
    return registry.settings


def get_rag_service(registry: ProviderRegistry = Depends(get_registry)) -> RAGService:
    return RAGService(registry)


def get_ingestion_service(registry: ProviderRegistry = Depends(get_registry)) -> IngestionService:
    return IngestionService(registry)


def _check_admin_token(settings: Settings, x_admin_token: str | None) -> None:
    if not settings.admin_token:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Admin token is not configured",
        )
    if x_admin_token != settings.admin_token.get_secret_value():
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


def _load_foods(settings: Settings) -> list[FoodItem]:
    try:
        return load_food_items(settings.foods_path)
    except DataLoadError as exc:
        logger.exception("Foods data unavailable")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc


@router.post("/api/v1/search", response_model=RagQueryResponse, summary="Retrieve documents for a question")
async def search(request: QueryRequest, service: RAGService = Depends(get_rag_service)) -> RagQueryResponse:
    logger.info("Search request", extra={"len": len(request.question)})
    return await service.search(request.question)


@router.post("/api/v1/generate", response_model=LlmGeneration, summary="Answer a question from given context")
async def generate(request: GenerateRequest, service: RAGService = Depends(get_rag_service)) -> LlmGeneration:
    logger.info("Generate request", extra={"len": len(request.question), "context_len": len(request.context)})
    return await service.generate(request.question, request.context)


@router.post("/api/v1/ask", response_model=RagQueryResponse, summary="Search and answer in one call")
async def ask(request: QueryRequest, service: RAGService = Depends(get_rag_service)) -> RagQueryResponse:
    logger.info("Ask request", extra={"len": len(request.question)})
    return await service.answer(request.question)


@router.get("/api/v1/embeddings/status", response_model=EmbeddingStatus, summary="Embedding progress")
async def embedding_status(service: IngestionService = Depends(get_ingestion_service)) -> EmbeddingStatus:
    return await service.status()


@router.post("/admin/embed", response_model=EmbeddingResult, summary="Embed food records")
async def admin_embed(
    embed_request: EmbedRequest,
    service: IngestionService = Depends(get_ingestion_service),
    settings: Settings = Depends(get_settings),
    x_admin_token: str | None = Header(default=None, alias="X-Admin-Token"),
) -> EmbeddingResult:
    _check_admin_token(settings, x_admin_token)
    logger.info("Admin embed requested", extra={"force": embed_request.force})
    result = await service.run(force=embed_request.force)
    logger.info("Admin embed finished", extra={"success": result.success, "count": result.count})
    return result


@router.get("/api/v1/foods/stats", response_model=FoodStats, summary="Record collection statistics")
def foods_stats(settings: Settings = Depends(get_settings)) -> FoodStats:
    return food_stats(_load_foods(settings))


@router.get("/api/v1/foods/{food_id}", response_model=FoodItem, summary="Look up a record by id")
def food_by_id(food_id: str, settings: Settings = Depends(get_settings)) -> FoodItem:
    item = get_food_by_id(_load_foods(settings), food_id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Food item {food_id} not found")
    return item


@router.get("/api/v1/test-connection", response_model=ConnectionReport, summary="Check all providers")
async def test_connection(service: RAGService = Depends(get_rag_service)) -> ConnectionReport:
    return await service.test_connection()


__all__ = ["router", "get_registry"]
