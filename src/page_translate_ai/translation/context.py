"""
Context building for translation.

Provides continuity context from the previous page and assembles the
translation prompt for a single page.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_CONTEXT_WINDOW = 350

LANGUAGE_NAMES = {
    "ar": "Arabic",
    "de": "German",
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "it": "Italian",
    "ru": "Russian",
    "uk": "Ukrainian",
}


def language_name(code: str) -> str:
    """Human-readable language name for a language code."""
    return LANGUAGE_NAMES.get(code.lower(), code)


def trailing_window(text: str | None, window: int = DEFAULT_CONTEXT_WINDOW) -> str:
    """Return at most ``window`` trailing characters of ``text``."""
    if not text or window <= 0:
        return ""
    return text[-window:]


@dataclass(frozen=True)
class TranslationContext:
    """Everything the prompt needs for one page."""

    page_index: int
    source_text: str
    prior_source_tail: str = ""
    prior_translation_tail: str = ""

    @property
    def page_number(self) -> int:
        """1-based page number for display."""
        return self.page_index + 1


class ContextBuilder:
    """
    Derives continuity context for a page from its predecessor.

    Both hints are truncated to a fixed trailing window so the prompt size
    does not grow with page length.
    """

    def __init__(self, window: int = DEFAULT_CONTEXT_WINDOW):
        """
        Initialize context builder.

        Args:
            window: Maximum characters of previous-page text to include.
        """
        self.window = window

    def build_context(
        self,
        page_index: int,
        source_text: str,
        prior_source: str | None = None,
        prior_translation: str | None = None,
    ) -> TranslationContext:
        """
        Build translation context for a page.

        Args:
            page_index: 0-based page index.
            source_text: Full source text of the page.
            prior_source: Source text of the previous page.
            prior_translation: Stored translation of the previous page.

        Returns:
            TranslationContext with bounded continuity hints. The first page
            never carries hints.
        """
        if page_index == 0:
            return TranslationContext(page_index=0, source_text=source_text)

        return TranslationContext(
            page_index=page_index,
            source_text=source_text,
            prior_source_tail=trailing_window(prior_source, self.window),
            prior_translation_tail=trailing_window(prior_translation, self.window),
        )


def build_translation_prompt(
    context: TranslationContext,
    source_lang: str = "en",
    target_lang: str = "ru",
    domain: str = "psychology literature",
    glossary: Mapping[str, str] | None = None,
) -> str:
    """
    Build a complete translation prompt.

    Args:
        context: Translation context for the page.
        source_lang: Source language code.
        target_lang: Target language code.
        domain: Subject area the translator specializes in.
        glossary: Fixed term translations the model must use.

    Returns:
        Complete prompt string for the LLM.
    """
    source_name = language_name(source_lang)
    target_name = language_name(target_lang)

    rules = [
        f"OUTPUT ONLY the {target_name} translation.",
        'NEVER include labels like "STRICT RULES", "TERMINOLOGY", or "CURRENT TEXT".',
        f"NEVER include the {source_name} source text in your response.",
    ]
    for term, translation in (glossary or {}).items():
        rules.append(f"{term} = '{translation}'.")
    rules.append(
        f"Connect to the previous {target_name} context seamlessly without repetitions or dots."
    )
    rules.append("Start titles with '# '.")

    numbered_rules = "\n".join(f"{i}. {rule}" for i, rule in enumerate(rules, start=1))

    return f"""SYSTEM INSTRUCTION: You are a professional translator for {domain}.
Translate the text provided between [START] and [END] tags into {target_name}.

CONTINUITY:
Previous {source_name} ended: "{context.prior_source_tail}"
Previous {target_name} ended: "{context.prior_translation_tail}"

STRICT RULES:
{numbered_rules}

[START]
{context.source_text}
[END]"""
