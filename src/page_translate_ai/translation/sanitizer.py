"""
Cleanup of raw model output.

Models occasionally echo prompt scaffolding back (rule headers, the
[START]/[END] delimiters, wrapper tags, a "<Language> translation:" label).
``sanitize_response`` removes it.
"""

from __future__ import annotations

import re
from functools import lru_cache

from page_translate_ai.translation.context import language_name

# Removal order matters only for overlapping labels: longer labels first.
ARTIFACTS: tuple[str, ...] = (
    "CURRENT TEXT TO TRANSLATE:",
    "STRICT RULES:",
    "TERMINOLOGY:",
    "SEAMLESS FLOW:",
    "NO METADATA:",
    "NO WRAPPERS:",
    "TRANSLATION:",
    "NO TAGS:",
    "HEADERS:",
    "[START]",
    "[END]",
    "<blockquote>",
    "</blockquote>",
)

_ELLIPSIS = "..."


def _compile(artifact: str) -> re.Pattern[str]:
    return re.compile(re.escape(artifact), re.IGNORECASE)


@lru_cache(maxsize=16)
def _rules_for(target_lang: str) -> tuple[re.Pattern[str], ...]:
    # The language label must go before the bare "TRANSLATION:" rule
    label = _compile(f"{language_name(target_lang)} translation:")
    rules = [_compile(artifact) for artifact in ARTIFACTS]
    return (rules[0], label, *rules[1:])


def strip_artifacts(text: str, target_lang: str = "ru") -> str:
    """Remove every known artifact, repeating until none is left."""
    rules = _rules_for(target_lang)
    previous = None
    while previous != text:
        previous = text
        for rule in rules:
            text = rule.sub("", text)
    return text


def sanitize_response(raw: str | None, target_lang: str = "ru") -> str:
    """
    Normalize raw model output into display text.

    Args:
        raw: Text returned by the translation backend.
        target_lang: Target language code, used for the echoed
            "<Language> translation:" label.

    Returns:
        Cleaned text. Never raises.
    """
    if not raw:
        return ""

    cleaned = strip_artifacts(raw, target_lang).strip()

    # Backend quirk: continuing mid-sentence with a leading ellipsis
    while cleaned.startswith(_ELLIPSIS):
        cleaned = cleaned[len(_ELLIPSIS) :].strip()

    return cleaned
