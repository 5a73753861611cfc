"""
RAG pipeline: validate question, search the vector store, prompt the LLM.

Two invocation shapes are offered: `answer()` runs search and generation in
one call; `search()` followed by `generate()` lets the caller render the
retrieved documents before the answer is ready.
"""

from __future__ import annotations

import enum
import logging
import time
from typing import Callable, List, Sequence

from foodrag.config import Settings, settings as default_settings
from foodrag.errors import QuestionValidationError
from foodrag.models.schemas import (
    ConnectionReport,
    LlmGeneration,
    ProviderCheck,
    RagDetails,
    RagQueryResponse,
)
from foodrag.providers import Providers, ProviderRegistry
from foodrag.vector_store.base import SearchResult

logger = logging.getLogger(__name__)

NO_RESULTS_ERROR = "No relevant information found in the database"
UNKNOWN_ERROR = "Unknown error occurred"

PROMPT_TEMPLATE = """Use the following context to answer the question.

Context:
{context}

Question: {question}
Answer:"""


class QueryState(str, enum.Enum):
    IDLE = "idle"
    SEARCHING = "searching"
    SEARCHED = "searched"
    GENERATING = "generating"
    DONE = "done"
    ERROR = "error"


StateListener = Callable[[QueryState], None]


def build_context(documents: Sequence[str]) -> str:
    return "\n".join(documents)


def build_prompt(question: str, context: str) -> str:
    return PROMPT_TEMPLATE.format(context=context, question=question)


def distances_to_similarities(distances: Sequence[float] | None) -> List[float] | None:
    if distances is None:
        return None
    return [max(0.0, 1.0 - float(d)) for d in distances]


def _error_message(exc: BaseException) -> str:
    return str(exc) or UNKNOWN_ERROR


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


class RAGService:
    """Query orchestrator over the shared providers."""

    def __init__(
        self,
        registry: ProviderRegistry,
        settings: Settings | None = None,
        on_state: StateListener | None = None,
    ) -> None:
        self.registry = registry
        self.settings = settings or registry.settings or default_settings
        self.on_state = on_state
        self.state = QueryState.IDLE

    # --- Public API ---
    async def answer(self, question: str) -> RagQueryResponse:
        """Search and generate in one go."""
        started = time.perf_counter()
        self._set_state(QueryState.IDLE)
        try:
            question = self.validate_question(question)
        except QuestionValidationError as exc:
            return RagQueryResponse(success=False, error=str(exc))

        try:
            self._set_state(QueryState.SEARCHING)
            providers = await self.registry.acquire()
            results = await self._retrieve(providers, question)
            if not results.documents:
                return self._fail(NO_RESULTS_ERROR)
            self._set_state(QueryState.SEARCHED)

            self._set_state(QueryState.GENERATING)
            prompt = build_prompt(question, build_context(results.documents))
            llm_response = await providers.llm.generate_response(prompt)
        except Exception as exc:
            logger.exception("RAG query failed")
            return self._fail(_error_message(exc))

        total = _elapsed_ms(started)
        self._set_state(QueryState.DONE)
        logger.info("RAG query completed", extra={"elapsed_ms": total, "results": len(results)})
        return RagQueryResponse(
            success=True,
            llm_response=llm_response.response,
            rag_details=self._details(results, total),
        )

    async def search(self, question: str) -> RagQueryResponse:
        """First step of the progressive mode: retrieval only."""
        started = time.perf_counter()
        self._set_state(QueryState.IDLE)
        try:
            question = self.validate_question(question)
        except QuestionValidationError as exc:
            return RagQueryResponse(success=False, error=str(exc))

        try:
            self._set_state(QueryState.SEARCHING)
            providers = await self.registry.acquire()
            results = await self._retrieve(providers, question)
        except Exception as exc:
            logger.exception("RAG search failed")
            return self._fail(_error_message(exc))

        if not results.documents:
            return self._fail(NO_RESULTS_ERROR)

        elapsed = _elapsed_ms(started)
        self._set_state(QueryState.SEARCHED)
        logger.info("RAG search completed", extra={"elapsed_ms": elapsed, "results": len(results)})
        return RagQueryResponse(success=True, rag_details=self._details(results, elapsed))

    async def generate(self, question: str, context: str | Sequence[str]) -> LlmGeneration:
        """Second step of the progressive mode: answer from already retrieved context."""
        started = time.perf_counter()
        try:
            question = self.validate_question(question)
        except QuestionValidationError as exc:
            return LlmGeneration(success=False, error=str(exc))

        if not isinstance(context, str):
            context = build_context(context)
        try:
            self._set_state(QueryState.GENERATING)
            providers = await self.registry.acquire()
            llm_response = await providers.llm.generate_response(build_prompt(question, context))
        except Exception as exc:
            logger.exception("LLM response failed")
            self._set_state(QueryState.ERROR)
            return LlmGeneration(success=False, error=_error_message(exc))

        elapsed = _elapsed_ms(started)
        self._set_state(QueryState.DONE)
        logger.info("LLM response completed", extra={"elapsed_ms": elapsed})
        return LlmGeneration(success=True, response=llm_response.response, processing_time=elapsed)

    async def test_connection(self) -> ConnectionReport:
        try:
            providers = await self.registry.acquire()
            existing_ids = await providers.store.get_existing_ids()

            if providers.store.embeds_text:
                embedding_check = ProviderCheck(status="skipped", detail={"reason": "vector store embeds text"})
            else:
                vector = await providers.embedder.get_embedding("test")
                embedding_check = ProviderCheck(status="connected", detail={"dimensions": len(vector)})

            reply = await providers.llm.generate_response('Say "Hello, I am working!" in one sentence.')
        except Exception as exc:
            logger.exception("Connection test failed")
            return ConnectionReport(success=False, error=_error_message(exc))

        return ConnectionReport(
            success=True,
            tests={
                "database": ProviderCheck(status="connected", detail={"embedded_documents": len(existing_ids)}),
                "embedding": embedding_check,
                "llm": ProviderCheck(
                    status="connected",
                    detail={"response": reply.response, "processing_time": reply.processing_time},
                ),
            },
        )

    # --- Steps ---
    @staticmethod
    def normalize_question(text: str) -> str:
        """Trim and collapse whitespace."""
        return " ".join(text.strip().split())

    def validate_question(self, question: object) -> str:
        if not isinstance(question, str):
            raise QuestionValidationError("Question must be a string")
        normalized = self.normalize_question(question)
        if not normalized:
            raise QuestionValidationError("Question cannot be empty")
        return normalized

    async def _retrieve(self, providers: Providers, question: str) -> SearchResult:
        store = providers.store
        if store.embeds_text:
            query = question
        else:
            query = await providers.embedder.get_embedding(question)

        results = await store.query(query, self.settings.rag_results)
        logger.info(
            "Retrieved documents",
            extra={
                "requested": self.settings.rag_results,
                "returned": len(results),
                "results": [
                    {"id": doc_id, "distance": round(results.distances[i], 4) if results.distances else None}
                    for i, doc_id in enumerate(results.ids)
                ],
            },
        )
        return results

    @staticmethod
    def _details(results: SearchResult, elapsed_ms: int) -> RagDetails:
        return RagDetails(
            documents=list(results.documents),
            ids=list(results.ids),
            similarities=distances_to_similarities(results.distances),
            processing_time=elapsed_ms,
            result_count=len(results),
        )

    def _fail(self, message: str) -> RagQueryResponse:
        self._set_state(QueryState.ERROR)
        return RagQueryResponse(success=False, error=message)

    def _set_state(self, state: QueryState) -> None:
        self.state = state
        logger.debug("Query state changed", extra={"state": state.value})
        if self.on_state is not None:
            self.on_state(state)


__all__ = [
    "RAGService",
    "QueryState",
    "PROMPT_TEMPLATE",
    "NO_RESULTS_ERROR",
    "build_context",
    "build_prompt",
    "distances_to_similarities",
]
