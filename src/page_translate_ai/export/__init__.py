"""
Export module for page-translate-ai.

Only successfully translated pages are exported, in page order.
"""

from page_translate_ai.export.base import ExportResult, exportable_pages
from page_translate_ai.export.markdown import MarkdownExporter
from page_translate_ai.export.pdf import PDFExporter

__all__ = ["ExportResult", "MarkdownExporter", "PDFExporter", "exportable_pages"]
