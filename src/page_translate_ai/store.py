"""
Page store for page-translate-ai.

Holds one translation record per document page and persists the ordered
collection to a per-document JSON cache file.
"""

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path
from typing import Any


class PageStatus(str, Enum):
    """Translation status of a single page."""

    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class PageRecord:
    """Translation result for one document page."""

    index: int
    text: str = ""
    status: PageStatus = PageStatus.PENDING

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PageRecord:
        index = data["index"]
        if not isinstance(index, int) or isinstance(index, bool) or index < 0:
            raise ValueError(f"Invalid page index: {index!r}")
        text = data.get("text", "")
        if not isinstance(text, str):
            raise ValueError(f"Invalid page text for page {index}")
        return cls(index=index, text=text, status=PageStatus(data["status"]))


def sanitize_filename(name: str) -> str:
    """Replace characters that are unsafe in file names with underscores."""
    return "".join(c if c.isalnum() or c in "._- " else "_" for c in name)


def cache_file_name(document_name: str) -> str:
    """Map a document name to its cache file name."""
    return f"{sanitize_filename(document_name)}.json"


class PageStore:
    """
    Mapping of page index to PageRecord with an index-ordered view.

    The in-memory collection never holds two records for the same index.
    Persistence is best-effort: ``save`` reports failures through its
    return value and ``load`` treats any unreadable cache as absent.
    """

    def __init__(self, cache_dir: Path | str, records: list[PageRecord] | None = None):
        """
        Initialize page store.

        Args:
            cache_dir: Directory holding per-document cache files.
            records: Initial records. Later duplicates replace earlier ones.
        """
        self.cache_dir = Path(cache_dir)
        self._records: dict[int, PageRecord] = {}
        for record in records or []:
            self.upsert(record)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, index: object) -> bool:
        return index in self._records

    def get(self, index: int) -> PageRecord | None:
        """Get the record for a page index, if any."""
        return self._records.get(index)

    def upsert(self, record: PageRecord) -> None:
        """Insert or replace the record at ``record.index``."""
        if record.index < 0:
            raise ValueError(f"Page index must be non-negative: {record.index}")
        self._records[record.index] = record

    def ordered(self) -> list[PageRecord]:
        """Get all records sorted by page index."""
        return [self._records[i] for i in sorted(self._records)]

    def drop_beyond(self, page_count: int) -> list[int]:
        """Remove records whose index is outside ``0..page_count-1``."""
        stale = [i for i in self._records if i >= page_count]
        for index in stale:
            del self._records[index]
        return sorted(stale)

    def reset(self) -> None:
        """Forget all in-memory records."""
        self._records.clear()

    # ==================== Persistence ====================

    def path_for(self, document_name: str) -> Path:
        """Cache file path for a document."""
        return self.cache_dir / cache_file_name(document_name)

    @classmethod
    def load(cls, cache_dir: Path | str, document_name: str) -> PageStore | None:
        """
        Load a persisted store for a document.

        Args:
            cache_dir: Directory holding per-document cache files.
            document_name: Document identity used for the cache lookup.

        Returns:
            PageStore with the cached records, or None if there is no cache
            or it cannot be read.
        """
        store = cls(cache_dir)
        path = store.path_for(document_name)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(data, list):
                return None
            for item in data:
                store.upsert(PageRecord.from_dict(item))
        except (OSError, ValueError, KeyError, TypeError):
            # Missing or corrupt cache means a fresh start
            return None
        return store

    def save(self, document_name: str) -> bool:
        """
        Persist the ordered records for a document.

        The file is replaced atomically so a reader never sees a partial
        snapshot.

        Args:
            document_name: Document identity used for the cache file name.

        Returns:
            True if the cache file was written, False otherwise.
        """
        payload = json.dumps(
            [record.to_dict() for record in self.ordered()],
            ensure_ascii=False,
            indent=2,
        )
        path = self.path_for(document_name)
        tmp_name: str | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=path.parent,
                prefix=f".{path.stem}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_name = f.name
                f.write(payload)
            os.replace(tmp_name, path)
            return True
        except OSError:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            return False

    def clear(self, document_name: str) -> bool:
        """
        Delete the persisted cache for a document and all in-memory records.

        Returns:
            False if a cache file exists but could not be removed.
        """
        self.reset()
        try:
            self.path_for(document_name).unlink(missing_ok=True)
        except OSError:
            return False
        return True
