"""Completion provider factory."""

from beyond_mask.core.config import settings
from beyond_mask.services.llm.base import BaseLLMProvider


def get_llm_provider() -> BaseLLMProvider:
    """Factory function that returns the configured completion provider."""
    if settings.llm_provider == "gemini":
        from beyond_mask.services.llm.gemini import GeminiProvider
        return GeminiProvider()
    else:
        raise ValueError(f"Unknown LLM provider: {settings.llm_provider}")
