"""
LLM provider abstraction layer.

Supports:
- OpenRouter (default): pay-per-token access to Gemini, Claude, DeepSeek, etc.
- Any OpenAI-compatible server (LM Studio, vLLM) via a custom base URL
- Primary/fallback chaining of the above
"""

from page_translate_ai.llm.base import LLMProvider, LLMResponse
from page_translate_ai.llm.factory import (
    LLMProviderType,
    create_llm_provider,
    create_llm_provider_with_fallback,
)
from page_translate_ai.llm.fallback import FallbackLLMProvider

__all__ = [
    "FallbackLLMProvider",
    "LLMProvider",
    "LLMResponse",
    "LLMProviderType",
    "create_llm_provider",
    "create_llm_provider_with_fallback",
]
