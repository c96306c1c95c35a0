"""
Provider interface for chat-completion backends.

A provider turns a list of chat messages into one ``LLMResponse``.
Transport and API failures are raised; an empty completion is not a
failure and comes back as a response without content.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

# {"role": ..., "content": ...}
ChatMessage = dict[str, str]


@dataclass
class LLMResponse:
    """One completion with its token usage."""

    content: str
    input_tokens: int = 0
    output_tokens: int = 0
    model: str = ""
    latency_ms: float = 0.0
    # Provider extras, e.g. retry attempt or which side of a fallback answered
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.content or not self.content.strip()

    @property
    def served_by_fallback(self) -> bool:
        return self.metadata.get("provider_used") == "fallback"


class LLMProvider(ABC):
    """Chat-completion backend used by the page translator."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider identifier shown in logs and the CLI."""
        ...

    @property
    @abstractmethod
    def model(self) -> str:
        """Resolved model id sent with each request."""
        ...

    @abstractmethod
    async def complete(
        self,
        messages: list[ChatMessage],
        *,
        temperature: float = 0.3,
        max_tokens: int = 4096,
        **kwargs: Any,
    ) -> LLMResponse:
        """
        Request a completion for a conversation.

        Args:
            messages: Chat messages in order.
            temperature: Sampling temperature.
            max_tokens: Output token limit.
            **kwargs: Passed through to the underlying API.

        Raises:
            Exception: Any transport or API failure after the provider's
                own retries.
        """
        ...

    async def prompt(
        self,
        text: str,
        *,
        temperature: float = 0.3,
        max_tokens: int = 4096,
        **kwargs: Any,
    ) -> LLMResponse:
        """Send ``text`` as the only user message."""
        return await self.complete(
            [{"role": "user", "content": text}],
            temperature=temperature,
            max_tokens=max_tokens,
            **kwargs,
        )
