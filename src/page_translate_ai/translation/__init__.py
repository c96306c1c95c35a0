"""
Translation pipeline for page-translate-ai.

Provides:
- Continuity-aware prompt building
- Cleanup of echoed prompt artifacts
- The sequential, resumable page pipeline
"""

from page_translate_ai.translation.context import (
    ContextBuilder,
    TranslationContext,
    build_translation_prompt,
)
from page_translate_ai.translation.pipeline import (
    PipelineConfig,
    PipelineSnapshot,
    TranslationPipeline,
)
from page_translate_ai.translation.sanitizer import sanitize_response
from page_translate_ai.translation.translator import PageTranslator, TranslationBackend

__all__ = [
    "ContextBuilder",
    "PageTranslator",
    "PipelineConfig",
    "PipelineSnapshot",
    "TranslationBackend",
    "TranslationContext",
    "TranslationPipeline",
    "build_translation_prompt",
    "sanitize_response",
]
