"""
Page translator using LLM providers.

Adapts an LLMProvider to the single-call backend interface the page
pipeline consumes: one prompt in, translated text (or nothing) out.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from page_translate_ai.llm import LLMProvider, LLMResponse, create_llm_provider
from page_translate_ai.llm.fallback import LogCallback

if TYPE_CHECKING:
    from page_translate_ai.config import Settings


class TranslationBackend(ABC):
    """Anything that turns a prompt into translated text."""

    @abstractmethod
    async def translate(self, prompt: str) -> str | None:
        """
        Translate a fully built prompt.

        Args:
            prompt: Complete prompt for one page.

        Returns:
            Translated text, or None if the backend produced no response.

        Raises:
            Exception: Any transport or API failure.
        """
        ...


@dataclass
class UsageStats:
    """Token usage accumulated across calls."""

    requests: int = 0
    input_tokens: int = 0
    output_tokens: int = 0
    latency_ms: float = 0.0
    fallback_requests: int = 0
    models: dict[str, int] = field(default_factory=dict)

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    def record(self, response: LLMResponse) -> None:
        self.requests += 1
        self.input_tokens += response.input_tokens
        self.output_tokens += response.output_tokens
        self.latency_ms += response.latency_ms
        if response.served_by_fallback:
            self.fallback_requests += 1
        self.models[response.model] = self.models.get(response.model, 0) + 1


class PageTranslator(TranslationBackend):
    """
    Translates page prompts with an LLM provider.

    Retries and fallback are the provider's concern; this class only sends
    the prompt and reports empty completions as no response.
    """

    def __init__(
        self,
        provider: LLMProvider,
        *,
        temperature: float = 0.3,
        max_tokens: int = 8192,
    ):
        """
        Initialize page translator.

        Args:
            provider: LLM provider to send prompts to.
            temperature: Sampling temperature.
            max_tokens: Maximum output tokens.
        """
        self._provider = provider
        self._temperature = temperature
        self._max_tokens = max_tokens
        self.usage = UsageStats()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        log_callback: LogCallback | None = None,
    ) -> PageTranslator:
        """
        Build a translator from application settings.

        Args:
            settings: Application settings.
            log_callback: Sink for fallback provider switch events.

        Raises:
            ValueError: If the provider configuration is incomplete.
        """
        from page_translate_ai.llm import create_llm_provider_with_fallback

        cfg = settings.translation
        common = {"timeout": cfg.timeout_seconds, "max_retries": cfg.max_retries}

        if cfg.fallback_provider is not None:
            provider = create_llm_provider_with_fallback(
                cfg.provider,
                cfg.fallback_provider,
                primary_api_key=cfg.api_key,
                fallback_api_key=cfg.api_key,
                primary_model=cfg.model,
                fallback_model=cfg.fallback_model or cfg.model,
                primary_base_url=cfg.base_url,
                fallback_base_url=cfg.fallback_base_url or cfg.base_url,
                log_callback=log_callback,
                **common,
            )
        else:
            provider = create_llm_provider(
                cfg.provider,
                api_key=cfg.api_key,
                model=cfg.model,
                base_url=cfg.base_url,
                **common,
            )

        return cls(provider, temperature=cfg.temperature, max_tokens=cfg.max_tokens)

    @property
    def model(self) -> str:
        return self._provider.model

    @property
    def provider_name(self) -> str:
        return self._provider.name

    async def translate(self, prompt: str) -> str | None:
        response = await self._provider.prompt(
            prompt,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
        )

        self.usage.record(response)

        if response.is_empty:
            return None
        return response.content
