"""
Progress statistics derived from page records.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from page_translate_ai.store import PageRecord, PageStatus


@dataclass(frozen=True)
class PipelineStats:
    """Aggregate translation progress for one document."""

    page_count: int = 0
    success_count: int = 0
    error_count: int = 0
    pending_count: int = 0

    @property
    def progress(self) -> float:
        """Fraction of pages translated successfully, in [0, 1]."""
        if self.page_count <= 0:
            return 0.0
        return self.success_count / self.page_count

    @property
    def percent(self) -> int:
        return int(self.progress * 100)


def compute_stats(records: Iterable[PageRecord], page_count: int) -> PipelineStats:
    """
    Recompute statistics from scratch.

    Args:
        records: Current page records.
        page_count: Total pages in the document.

    Returns:
        PipelineStats for the given records.
    """
    success = error = pending = 0
    for record in records:
        if record.status == PageStatus.SUCCESS:
            success += 1
        elif record.status == PageStatus.ERROR:
            error += 1
        else:
            pending += 1
    return PipelineStats(
        page_count=max(page_count, 0),
        success_count=success,
        error_count=error,
        pending_count=pending,
    )
