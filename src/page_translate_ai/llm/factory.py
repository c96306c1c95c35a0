"""
LLM provider factory.

Creates the appropriate LLM provider based on configuration.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from page_translate_ai.llm.base import LLMProvider
from page_translate_ai.llm.fallback import FallbackLLMProvider, LogCallback
from page_translate_ai.llm.openrouter import OPENROUTER_BASE_URL, OpenRouterProvider


class LLMProviderType(str, Enum):
    """Available LLM provider types."""

    OPENROUTER = "openrouter"
    OPENAI_COMPATIBLE = "openai-compatible"


def _normalize(provider_type: LLMProviderType | str) -> LLMProviderType:
    if isinstance(provider_type, LLMProviderType):
        return provider_type
    value = provider_type.lower().replace("_", "-")
    try:
        return LLMProviderType(value)
    except ValueError:
        valid = [p.value for p in LLMProviderType]
        raise ValueError(f"Invalid provider type: {value}. Valid options: {valid}") from None


def create_llm_provider(
    provider_type: LLMProviderType | str,
    *,
    api_key: str | None = None,
    model: str = "default",
    base_url: str | None = None,
    **kwargs: Any,
) -> LLMProvider:
    """
    Create an LLM provider instance.

    Args:
        provider_type: "openrouter" or "openai-compatible".
        api_key: API key. Required for OpenRouter; local OpenAI-compatible
            servers accept any placeholder.
        model: Model name or alias.
        base_url: Endpoint for "openai-compatible" providers.
        **kwargs: Additional provider options (timeout, max_retries).

    Returns:
        LLMProvider instance.

    Raises:
        ValueError: If provider_type is invalid or required config is missing.

    Examples:
        provider = create_llm_provider("openrouter", api_key="sk-or-...")

        provider = create_llm_provider(
            "openai-compatible",
            base_url="http://localhost:1234/v1",
            model="local-model",
        )
    """
    provider_type = _normalize(provider_type)

    if provider_type == LLMProviderType.OPENROUTER:
        if not api_key:
            raise ValueError("OpenRouter provider requires an API key")
        return OpenRouterProvider(
            api_key=api_key,
            model=model,
            base_url=base_url or OPENROUTER_BASE_URL,
            **kwargs,
        )

    if not base_url:
        raise ValueError("OpenAI-compatible provider requires a base_url")
    return OpenRouterProvider(
        api_key=api_key or "not-needed",
        model=model,
        base_url=base_url,
        provider_name=provider_type.value,
        **kwargs,
    )


def create_llm_provider_with_fallback(
    primary_provider: LLMProviderType | str,
    fallback_provider: LLMProviderType | str,
    *,
    primary_api_key: str | None = None,
    fallback_api_key: str | None = None,
    primary_model: str = "default",
    fallback_model: str = "default",
    primary_base_url: str | None = None,
    fallback_base_url: str | None = None,
    log_callback: LogCallback | None = None,
    **kwargs: Any,
) -> LLMProvider:
    """
    Create an LLM provider with automatic fallback support.

    Returns:
        FallbackLLMProvider wrapping both providers.
    """
    primary = create_llm_provider(
        primary_provider,
        api_key=primary_api_key,
        model=primary_model,
        base_url=primary_base_url,
        **kwargs,
    )
    fallback = create_llm_provider(
        fallback_provider,
        api_key=fallback_api_key,
        model=fallback_model,
        base_url=fallback_base_url,
        **kwargs,
    )
    return FallbackLLMProvider(primary=primary, fallback=fallback, log_callback=log_callback)
