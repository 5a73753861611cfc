"""
Language-model providers and factory.
"""

from foodrag.config import Settings, settings as default_settings
from foodrag.errors import ProviderInitializationError
from foodrag.llm.client import GroqLLM, LLMProvider, LlmResponse, OllamaLLM


def create_llm_provider(settings: Settings | None = None) -> LLMProvider:
    settings = settings or default_settings
    provider = settings.llm_provider.lower()
    if provider == "ollama":
        return OllamaLLM(settings)
    if provider == "groq":
        return GroqLLM(settings)
    raise ProviderInitializationError(f"Unsupported LLM provider: {provider}")


__all__ = ["create_llm_provider", "LLMProvider", "LlmResponse", "OllamaLLM", "GroqLLM"]
