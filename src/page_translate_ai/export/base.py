"""
Shared export types.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from page_translate_ai.store import PageRecord, PageStatus


@dataclass
class ExportResult:
    """Result of an export operation."""

    document_name: str
    output_path: Path
    pages_exported: int
    success: bool
    error: str | None = None


def exportable_pages(records: Iterable[PageRecord]) -> list[PageRecord]:
    """Successful records sorted by page index."""
    return sorted(
        (r for r in records if r.status == PageStatus.SUCCESS),
        key=lambda r: r.index,
    )
