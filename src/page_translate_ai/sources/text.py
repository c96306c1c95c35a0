"""
Direct text source for plain text and markdown files.

Pages are separated by form feed characters, the same separator
``pdftotext`` emits between pages. A file without form feeds is one page.
"""

from __future__ import annotations

from pathlib import Path

from page_translate_ai.sources.base import DocumentSource

PAGE_SEPARATOR = "\f"


class TextFileSource(DocumentSource):
    """Page text from a plain text or markdown file."""

    SUPPORTED_EXTENSIONS = {".md", ".markdown", ".txt"}

    def __init__(self, file_path: Path | str):
        self.file_path = Path(file_path)
        self._pages = self._read(self.file_path).split(PAGE_SEPARATOR)
        # A trailing separator does not start a new page
        if len(self._pages) > 1 and not self._pages[-1].strip():
            self._pages.pop()

    @staticmethod
    def _read(path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            return path.read_text(encoding="latin-1")

    @property
    def name(self) -> str:
        return self.file_path.name

    def page_count(self) -> int:
        return len(self._pages)

    def page_text(self, index: int) -> str | None:
        if index < 0 or index >= len(self._pages):
            return None
        content = self._pages[index]
        return content if content.strip() else None
