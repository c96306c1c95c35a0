"""
Base classes and interfaces for document sources.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path


class DocumentSource(ABC):
    """Read-only, page-addressable access to a document's text."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Document identity, used as the cache key."""
        ...

    @abstractmethod
    def page_count(self) -> int:
        """Total number of pages."""
        ...

    @abstractmethod
    def page_text(self, index: int) -> str | None:
        """
        Extracted text of one page.

        Args:
            index: 0-based page index.

        Returns:
            Page text, or None if the index is out of range or the page has
            no extractable text.
        """
        ...

    def close(self) -> None:
        """Release any underlying file handles."""


def open_source(file_path: Path | str, markdown: bool = False) -> DocumentSource:
    """
    Open a document source based on file extension.

    Args:
        file_path: Path to the document.
        markdown: For PDFs, extract markdown via pymupdf4llm instead of plain text.

    Returns:
        DocumentSource for the file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file type is not supported.
    """
    from page_translate_ai.sources.pymupdf import PyMuPDFSource
    from page_translate_ai.sources.text import TextFileSource

    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Document not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".pdf":
        return PyMuPDFSource(path, markdown=markdown)
    if suffix in TextFileSource.SUPPORTED_EXTENSIONS:
        return TextFileSource(path)

    raise ValueError(f"Unsupported document type: {suffix or path.name}")
