"""
Language-model providers: local Ollama daemon and hosted Groq.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Protocol

import httpx
from openai import APIStatusError, AsyncOpenAI

from foodrag.config import Settings, settings as default_settings
from foodrag.errors import LLMProviderError, ProviderInitializationError

logger = logging.getLogger(__name__)


@dataclass
class LlmResponse:
    response: str
    processing_time: int  # ms


class LLMProvider(Protocol):
    async def generate_response(self, prompt: str) -> LlmResponse:
        ...


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


class OllamaLLM:
    def __init__(self, settings: Settings | None = None, client: httpx.AsyncClient | None = None) -> None:
        settings = settings or default_settings
        self.base_url = settings.ollama_base_url.rstrip("/")
        self.model = settings.llm_model
        self.timeout = settings.request_timeout_sec
        self.client = client

    async def generate_response(self, prompt: str) -> LlmResponse:
        payload = {"model": self.model, "prompt": prompt, "stream": False}
        url = f"{self.base_url}/api/generate"

        started = time.perf_counter()
        if self.client is not None:
            response = await self.client.post(url, json=payload)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(url, json=payload)

        if response.is_error:
            logger.error("Ollama LLM call failed", extra={"status": response.status_code})
            raise LLMProviderError(
                f"Ollama LLM failed: {response.reason_phrase}",
                status_code=response.status_code,
                status_text=response.reason_phrase,
            )

        data = response.json()
        elapsed = _elapsed_ms(started)
        logger.info("Ollama LLM responded", extra={"model": self.model, "elapsed_ms": elapsed})
        return LlmResponse(response=(data.get("response") or "").strip(), processing_time=elapsed)


class GroqLLM:
    """Groq exposes an OpenAI-compatible API, so the OpenAI SDK is used as transport."""

    def __init__(self, settings: Settings | None = None, client: AsyncOpenAI | None = None) -> None:
        settings = settings or default_settings
        self.model = settings.groq_model
        self.temperature = settings.llm_temperature
        self.max_tokens = settings.llm_max_tokens
        if client is None:
            if not settings.groq_api_key:
                raise ProviderInitializationError("Groq API key is required")
            client = AsyncOpenAI(
                api_key=settings.groq_api_key.get_secret_value(),
                base_url=settings.groq_base_url,
                timeout=settings.request_timeout_sec,
            )
        self.client = client

    async def generate_response(self, prompt: str) -> LlmResponse:
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }

        started = time.perf_counter()
        try:
            completion = await self.client.chat.completions.create(**kwargs)
        except APIStatusError as exc:
            logger.error("Groq LLM call failed", extra={"status": exc.status_code})
            status_text = exc.response.reason_phrase if exc.response is not None else None
            raise LLMProviderError(
                f"Groq LLM failed: {status_text or exc.message}",
                status_code=exc.status_code,
                status_text=status_text,
            ) from exc

        elapsed = _elapsed_ms(started)
        content = completion.choices[0].message.content if completion.choices else None
        logger.info("Groq LLM responded", extra={"model": self.model, "elapsed_ms": elapsed})
        return LlmResponse(response=(content or "").strip(), processing_time=elapsed)


__all__ = ["LLMProvider", "LlmResponse", "OllamaLLM", "GroqLLM"]
