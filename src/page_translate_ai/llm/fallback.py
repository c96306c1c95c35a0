"""
Fallback LLM provider wrapper.

Sends each request to a primary provider and, if it fails, to a fallback.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

from page_translate_ai.llm.base import ChatMessage, LLMProvider, LLMResponse

# (level, message, context)
LogCallback = Callable[[str, str, dict[str, Any]], None]


class FallbackLLMProvider(LLMProvider):
    """
    LLM provider wrapper with automatic fallback.

    Useful when the primary endpoint is rate limited: the page is still
    translated, only by the fallback model.
    """

    def __init__(
        self,
        primary: LLMProvider,
        fallback: LLMProvider,
        log_callback: LogCallback | None = None,
    ):
        """
        Initialize fallback provider wrapper.

        Args:
            primary: Provider tried first.
            fallback: Provider used when the primary raises.
            log_callback: Optional sink for provider switch events.
        """
        self._primary = primary
        self._fallback = fallback
        self._log_callback = log_callback

    @property
    def name(self) -> str:
        return f"{self._primary.name}+{self._fallback.name}"

    @property
    def model(self) -> str:
        return self._primary.model

    def _log(self, level: str, message: str, context: dict[str, Any] | None = None) -> None:
        if self._log_callback:
            self._log_callback(level, message, context or {})

    async def complete(
        self,
        messages: list[ChatMessage],
        *,
        temperature: float = 0.3,
        max_tokens: int = 4096,
        **kwargs: Any,
    ) -> LLMResponse:
        """
        Generate a completion, switching to the fallback on failure.

        Raises:
            Exception: The fallback's error if both providers fail.
        """
        start_time = time.perf_counter()

        try:
            response = await self._primary.complete(
                messages, temperature=temperature, max_tokens=max_tokens, **kwargs
            )
        except Exception as primary_error:
            self._log(
                "WARNING",
                f"Primary provider ({self._primary.name}) failed, "
                f"switching to fallback ({self._fallback.name})",
                {
                    "primary_model": self._primary.model,
                    "fallback_model": self._fallback.model,
                    "error": str(primary_error),
                    "error_type": type(primary_error).__name__,
                },
            )
        else:
            response.metadata["provider_used"] = "primary"
            return response

        try:
            response = await self._fallback.complete(
                messages, temperature=temperature, max_tokens=max_tokens, **kwargs
            )
        except Exception as fallback_error:
            self._log(
                "ERROR",
                "Both primary and fallback providers failed",
                {
                    "primary_provider": self._primary.name,
                    "fallback_provider": self._fallback.name,
                    "fallback_error": str(fallback_error),
                },
            )
            raise

        response.metadata["provider_used"] = "fallback"

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        self._log(
            "INFO",
            f"Fallback provider {self._fallback.name} ({self._fallback.model}) "
            f"succeeded after {elapsed_ms:.0f}ms",
            {"latency_ms": elapsed_ms},
        )
        return response
