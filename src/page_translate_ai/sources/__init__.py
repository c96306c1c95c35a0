"""
Document sources for page-translate-ai.

Provides page-level text access:
- PyMuPDFSource for PDF files (plain text or pymupdf4llm markdown)
- TextFileSource for plain text and markdown files split on form feeds
"""

from page_translate_ai.sources.base import DocumentSource, open_source
from page_translate_ai.sources.pymupdf import PyMuPDFSource
from page_translate_ai.sources.text import TextFileSource

__all__ = [
    "DocumentSource",
    "PyMuPDFSource",
    "TextFileSource",
    "open_source",
]
