"""
OpenAI-compatible LLM provider.

Talks to OpenRouter by default; any server exposing the OpenAI chat
completions API (LM Studio, vLLM, Gemini's compatibility endpoint) works by
changing ``base_url``.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any

from openai import AsyncOpenAI

from page_translate_ai.llm.base import ChatMessage, LLMProvider, LLMResponse

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class OpenRouterProvider(LLMProvider):
    """
    Chat completion provider over the OpenAI-compatible API.

    Retries failed requests with exponential backoff before giving up.
    """

    # Model aliases for convenience
    MODELS = {
        "default": "google/gemini-flash-1.5",
        "fast": "google/gemini-flash-1.5-8b",
        "quality": "anthropic/claude-sonnet-4.5",
        "deepseek": "deepseek/deepseek-chat",
    }

    def __init__(
        self,
        api_key: str,
        model: str = "default",
        base_url: str = OPENROUTER_BASE_URL,
        timeout: float = 120.0,
        max_retries: int = 3,
        provider_name: str = "openrouter",
    ):
        """
        Initialize provider.

        Args:
            api_key: API key for the endpoint.
            model: Model key (from MODELS) or full model name.
            base_url: API base URL.
            timeout: Request timeout in seconds.
            max_retries: Maximum attempts per request.
            provider_name: Name reported in logs.
        """
        self._model_name = self.MODELS.get(model, model)
        self._max_retries = max(1, max_retries)
        self._name = provider_name

        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            # Retries are handled here so backoff is visible in one place
            max_retries=0,
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def model(self) -> str:
        return self._model_name

    async def complete(
        self,
        messages: list[ChatMessage],
        *,
        temperature: float = 0.3,
        max_tokens: int = 4096,
        **kwargs: Any,
    ) -> LLMResponse:
        """
        Generate a completion.

        Args:
            messages: List of message dicts.
            temperature: Sampling temperature.
            max_tokens: Maximum output tokens.
            **kwargs: Additional options passed to the API.

        Returns:
            LLMResponse with content and usage stats.

        Raises:
            Exception: The last error once all attempts have failed.
        """
        start_time = time.perf_counter()
        last_error: Exception | None = None

        for attempt in range(self._max_retries):
            try:
                response = await self._client.chat.completions.create(
                    model=self._model_name,
                    messages=messages,  # type: ignore[arg-type]
                    temperature=temperature,
                    max_tokens=max_tokens,
                    **kwargs,
                )

                latency_ms = (time.perf_counter() - start_time) * 1000
                content = ""
                finish_reason = None
                if response.choices:
                    content = response.choices[0].message.content or ""
                    finish_reason = response.choices[0].finish_reason
                usage = response.usage

                return LLMResponse(
                    content=content.strip(),
                    input_tokens=usage.prompt_tokens if usage else 0,
                    output_tokens=usage.completion_tokens if usage else 0,
                    model=self._model_name,
                    latency_ms=latency_ms,
                    metadata={
                        "provider": self._name,
                        "finish_reason": finish_reason,
                        "attempt": attempt + 1,
                    },
                )

            except Exception as e:
                last_error = e
                if attempt < self._max_retries - 1:
                    # Exponential backoff
                    await asyncio.sleep(2**attempt)

        raise last_error or RuntimeError(f"{self._name} request failed after retries")
