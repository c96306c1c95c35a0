"""
page-translate-ai: resumable page-by-page document translation with LLMs.

This package provides tools for:
- Extracting page text from PDFs and text files
- Translating pages sequentially with cross-page continuity context
- Caching per-page results so runs survive restarts
- Regenerating single pages and exporting finished translations
"""

__version__ = "0.1.0"

from page_translate_ai.config import Settings, load_config
from page_translate_ai.database import Database
from page_translate_ai.sources import DocumentSource, PyMuPDFSource, TextFileSource, open_source
from page_translate_ai.stats import PipelineStats, compute_stats
from page_translate_ai.store import PageRecord, PageStatus, PageStore
from page_translate_ai.translation import (
    PageTranslator,
    PipelineConfig,
    PipelineSnapshot,
    TranslationBackend,
    TranslationPipeline,
)

__all__ = [
    # Config
    "Settings",
    "load_config",
    # Event log
    "Database",
    # Sources
    "DocumentSource",
    "PyMuPDFSource",
    "TextFileSource",
    "open_source",
    # Store and stats
    "PageRecord",
    "PageStatus",
    "PageStore",
    "PipelineStats",
    "compute_stats",
    # Translation
    "PageTranslator",
    "PipelineConfig",
    "PipelineSnapshot",
    "TranslationBackend",
    "TranslationPipeline",
]
