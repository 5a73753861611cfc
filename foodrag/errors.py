"""
Exception types raised by providers, the RAG pipeline and ingestion.
"""

from __future__ import annotations


class FoodRagError(Exception):
    """Base class for all application errors."""


class QuestionValidationError(FoodRagError, ValueError):
    pass


class DataLoadError(FoodRagError):
    pass


class ProviderInitializationError(FoodRagError):
    """A provider is misconfigured or failed to start."""


class UnsupportedQueryError(FoodRagError):
    """The vector store cannot handle the given query shape."""


class EmbeddingProviderError(FoodRagError):
    pass


class LLMProviderError(FoodRagError):
    """Upstream language-model call failed."""

    def __init__(self, message: str, status_code: int | None = None, status_text: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.status_text = status_text


class RetryExhaustedError(FoodRagError):
    def __init__(self, attempts: int, last_error: BaseException) -> None:
        super().__init__(f"Operation failed after {attempts} attempts. Last error: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


__all__ = [
    "FoodRagError",
    "QuestionValidationError",
    "DataLoadError",
    "ProviderInitializationError",
    "UnsupportedQueryError",
    "EmbeddingProviderError",
    "LLMProviderError",
    "RetryExhaustedError",
]
