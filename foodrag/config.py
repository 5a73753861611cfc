"""
Application configuration loaded from environment variables.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

VectorDbType = Literal["upstash", "simple", "chroma"]
EmbeddingProviderType = Literal["none", "ollama", "openai"]
LlmProviderType = Literal["ollama", "groq"]


class Settings(BaseSettings):
    """Centralised application settings."""

    model_config = SettingsConfigDict(
        env_file=(".env",),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Vector store
    vector_db_type: VectorDbType = Field(default="upstash", alias="VECTOR_DB_TYPE")
    upstash_vector_rest_url: str | None = Field(default=None, alias="UPSTASH_VECTOR_REST_URL")
    upstash_vector_rest_token: SecretStr | None = Field(default=None, alias="UPSTASH_VECTOR_REST_TOKEN")
    simple_db_path: str = Field(default="./simple_vector_db.json", alias="SIMPLE_DB_PATH")
    chroma_path: str = Field(default="./data/vector_store", alias="CHROMA_PATH")
    chroma_collection: str = Field(default="foods", alias="CHROMA_COLLECTION")

    # Embeddings
    embedding_provider: EmbeddingProviderType = Field(default="none", alias="EMBEDDING_PROVIDER")
    embedding_model: str = Field(default="nomic-embed-text", alias="EMBEDDING_MODEL")
    embedding_dimension: int = Field(default=1024, gt=0, alias="EMBEDDING_DIMENSION")
    openai_api_key: SecretStr | None = Field(default=None, alias="OPENAI_API_KEY")

    # LLM
    llm_provider: LlmProviderType = Field(default="ollama", alias="LLM_PROVIDER")
    ollama_base_url: str = Field(default="http://localhost:11434", alias="OLLAMA_BASE_URL")
    llm_model: str = Field(default="llama3.2", alias="LLM_MODEL")
    groq_api_key: SecretStr | None = Field(default=None, alias="GROQ_API_KEY")
    groq_model: str = Field(default="llama-3.2-3b-preview", alias="GROQ_MODEL")
    groq_base_url: str = Field(default="https://api.groq.com/openai/v1", alias="GROQ_BASE_URL")
    llm_temperature: float = Field(default=0.1, alias="LLM_TEMPERATURE")
    llm_max_tokens: int = Field(default=1000, gt=0, alias="LLM_MAX_TOKENS")

    # Retrieval / remote calls
    rag_results: int = Field(default=3, gt=0, alias="RAG_RESULTS")
    request_timeout_sec: float = Field(default=60.0, gt=0, alias="REQUEST_TIMEOUT_SEC")
    retry_attempts: int = Field(default=3, gt=0, alias="RETRY_ATTEMPTS")
    retry_base_delay_sec: float = Field(default=1.0, ge=0, alias="RETRY_BASE_DELAY_SEC")
    attribute_filter_enabled: bool = Field(default=True, alias="ATTRIBUTE_FILTER_ENABLED")
    attribute_filter_keywords: List[str] = Field(
        default_factory=lambda: ["yellow", "sweet", "fruit"],
        alias="ATTRIBUTE_FILTER_KEYWORDS",
    )

    # Ingestion
    embed_batch_size: int = Field(default=5, gt=0, alias="EMBED_BATCH_SIZE")
    foods_path: str = Field(default="./data/foods.json", alias="FOODS_PATH")

    admin_token: SecretStr | None = Field(default=None, alias="ADMIN_TOKEN")

    app_host: str = Field(default="0.0.0.0", alias="APP_HOST")
    app_port: int = Field(default=8000, alias="APP_PORT")


settings = Settings()


def setup_logging() -> logging.Logger:
    """
    Configure base logging for the app.
    """
    logging.basicConfig(
        level=logging.INFO,
        format="[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
    )
    return logging.getLogger("foodrag")


def public_settings(current: Settings | None = None) -> Dict[str, Any]:
    """
    Return settings without secrets for safe logging/inspection.
    """
    current = current or settings
    return current.model_dump(
        exclude={"upstash_vector_rest_token", "openai_api_key", "groq_api_key", "admin_token"},
        exclude_none=True,
    )


__all__ = ["Settings", "settings", "setup_logging", "public_settings"]
