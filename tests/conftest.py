"""Shared fakes for page-translate-ai tests."""

from __future__ import annotations

import asyncio
import re

import pytest

from page_translate_ai.sources.base import DocumentSource
from page_translate_ai.translation.translator import TranslationBackend

_PAGE_BODY = re.compile(r"\[START\]\n(.*)\n\[END\]$", re.DOTALL)


def page_body(prompt: str) -> str:
    """Source text embedded in a page prompt."""
    match = _PAGE_BODY.search(prompt)
    assert match is not None, "prompt has no [START]/[END] block"
    return match.group(1)


class FakeSource(DocumentSource):
    """In-memory document; ``None`` entries are pages without text."""

    def __init__(self, pages: list[str | None], name: str = "book.pdf"):
        self._pages = pages
        self._name = name
        self.closed = False

    @property
    def name(self) -> str:
        return self._name

    def page_count(self) -> int:
        return len(self._pages)

    def page_text(self, index: int) -> str | None:
        if index < 0 or index >= len(self._pages):
            return None
        return self._pages[index]

    def close(self) -> None:
        self.closed = True


class FakeBackend(TranslationBackend):
    """
    Deterministic backend translating ``text`` to ``RU(text)``.

    Source texts listed in ``fail_on`` raise, those in ``empty_on`` get no
    response. Setting ``gate`` blocks every call until the event is set.
    """

    def __init__(
        self,
        fail_on: set[str] | None = None,
        empty_on: set[str] | None = None,
        replies: dict[str, str] | None = None,
    ):
        self.fail_on = set(fail_on or ())
        self.empty_on = set(empty_on or ())
        self.replies = dict(replies or {})
        self.prompts: list[str] = []
        self.gate: asyncio.Event | None = None

    @property
    def calls(self) -> int:
        return len(self.prompts)

    @property
    def bodies(self) -> list[str]:
        return [page_body(p) for p in self.prompts]

    async def translate(self, prompt: str) -> str | None:
        self.prompts.append(prompt)
        body = page_body(prompt)
        # Outcome is fixed when the call is made, not when the gate opens
        failing = body in self.fail_on
        empty = body in self.empty_on
        reply = self.replies.get(body, f"RU({body})")

        if self.gate is not None:
            await self.gate.wait()
        if failing:
            raise RuntimeError(f"backend unavailable for {body!r}")
        if empty:
            return None
        return reply


@pytest.fixture
def cache_dir(tmp_path):
    return tmp_path / "cache"
