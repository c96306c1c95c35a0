"""
PyMuPDF-based page text source for PDFs.

Plain text comes straight from PyMuPDF; markdown output uses pymupdf4llm.
"""

from __future__ import annotations

from pathlib import Path

import fitz  # PyMuPDF
import pymupdf4llm

from page_translate_ai.sources.base import DocumentSource


class PyMuPDFSource(DocumentSource):
    """
    Page text from a native PDF.

    The page count is read once on open and stays fixed for the lifetime
    of the source.
    """

    def __init__(self, file_path: Path | str, markdown: bool = False):
        """
        Open a PDF.

        Args:
            file_path: Path to the PDF file.
            markdown: Extract markdown-formatted text with pymupdf4llm.
        """
        self.file_path = Path(file_path)
        self.markdown = markdown
        self._doc = fitz.open(self.file_path)
        self._page_count = len(self._doc)

    @property
    def name(self) -> str:
        return self.file_path.name

    def page_count(self) -> int:
        return self._page_count

    def page_text(self, index: int) -> str | None:
        if index < 0 or index >= self._page_count:
            return None

        try:
            if self.markdown:
                chunks = pymupdf4llm.to_markdown(self._doc, pages=[index], page_chunks=True)
                content = ""
                if chunks:
                    page_data = chunks[0]
                    content = (
                        page_data.get("text", "") if isinstance(page_data, dict) else str(page_data)
                    )
            else:
                content = self._doc[index].get_text()
        except (RuntimeError, ValueError):
            # Damaged page objects surface as extraction errors
            return None

        if not content or not content.strip():
            return None
        return content

    def close(self) -> None:
        self._doc.close()
