"""
Page-by-page translation pipeline.

Drives sequential translation of a loaded document with:
- Resume from the per-document page cache (completed pages are skipped)
- Continuity context carried from each page to the next
- Per-page error containment and single-page regeneration
- Observable progress snapshots for a presentation layer
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import TYPE_CHECKING, Any

from page_translate_ai.config import DEFAULT_ERROR_PLACEHOLDER
from page_translate_ai.sources.base import DocumentSource
from page_translate_ai.stats import PipelineStats, compute_stats
from page_translate_ai.store import PageRecord, PageStatus, PageStore
from page_translate_ai.translation.context import (
    DEFAULT_CONTEXT_WINDOW,
    ContextBuilder,
    build_translation_prompt,
)
from page_translate_ai.translation.sanitizer import sanitize_response
from page_translate_ai.translation.translator import TranslationBackend

if TYPE_CHECKING:
    from page_translate_ai.config import Settings
    from page_translate_ai.database import Database


@dataclass
class PipelineConfig:
    """Configuration for the translation pipeline."""

    source_lang: str = "en"
    target_lang: str = "ru"
    domain: str = "psychology literature"
    glossary: dict[str, str] = field(default_factory=dict)
    context_window: int = DEFAULT_CONTEXT_WINDOW
    # Seconds to wait after each translated page
    request_delay: float = 2.0
    error_placeholder: str = DEFAULT_ERROR_PLACEHOLDER

    @classmethod
    def from_settings(cls, settings: Settings) -> PipelineConfig:
        cfg = settings.translation
        return cls(
            source_lang=cfg.source_language,
            target_lang=cfg.target_language,
            domain=cfg.domain,
            glossary=dict(cfg.glossary),
            context_window=cfg.context_window,
            request_delay=settings.processing.request_delay,
            error_placeholder=cfg.error_placeholder,
        )


@dataclass
class DocumentSession:
    """Binding between a loaded document and its page store."""

    source: DocumentSource
    document_name: str
    page_count: int
    pages: PageStore


@dataclass(frozen=True)
class PipelineSnapshot:
    """Read-only view of pipeline state for observers."""

    document_name: str | None
    page_count: int
    pages: tuple[PageRecord, ...]
    is_running: bool
    stats: PipelineStats

    @property
    def progress(self) -> float:
        return self.stats.progress

    @property
    def error_count(self) -> int:
        return self.stats.error_count


SnapshotCallback = Callable[[PipelineSnapshot], None]


class TranslationPipeline:
    """
    Sequential page translation for one document at a time.

    State machine: idle -> running -> idle. Only one translation loop is
    active per session; ``start`` while running is a no-op. Cancellation is
    cooperative and observed between pages, never during a backend call.

    All store writes (upsert, persist, stats) happen under one asyncio lock,
    so the main loop and single-page regenerations never interleave a write.
    Results of work started before a reset or a new load are discarded.

    ``load``, ``start``, ``regenerate_one`` and ``reset`` schedule tasks and
    must be called with a running event loop.
    """

    def __init__(
        self,
        backend: TranslationBackend,
        cache_dir: Path | str,
        config: PipelineConfig | None = None,
        db: Database | None = None,
    ):
        """
        Initialize translation pipeline.

        Args:
            backend: Translation backend receiving one prompt per page.
            cache_dir: Directory for per-document cache files.
            config: Pipeline configuration.
            db: Optional event log.
        """
        self.backend = backend
        self.cache_dir = Path(cache_dir)
        self.config = config or PipelineConfig()
        self.db = db

        self._context_builder = ContextBuilder(window=self.config.context_window)
        self._session: DocumentSession | None = None
        self._lock = asyncio.Lock()
        # Identity of the active loop; None when idle or cancelled
        self._run_token: object | None = None
        # Loops and regenerations still in flight, including superseded ones
        self._tasks: set[asyncio.Task[Any]] = set()
        self._stats = PipelineStats()
        self._subscribers: list[SnapshotCallback] = []

    # ==================== Observable state ====================

    @property
    def session(self) -> DocumentSession | None:
        return self._session

    @property
    def is_running(self) -> bool:
        return self._run_token is not None

    @property
    def stats(self) -> PipelineStats:
        return self._stats

    def snapshot(self) -> PipelineSnapshot:
        """Current state for display."""
        session = self._session
        return PipelineSnapshot(
            document_name=session.document_name if session else None,
            page_count=session.page_count if session else 0,
            pages=tuple(session.pages.ordered()) if session else (),
            is_running=self.is_running,
            stats=self._stats,
        )

    def subscribe(self, callback: SnapshotCallback) -> Callable[[], None]:
        """
        Register a callback invoked with a snapshot after every state change.

        Returns:
            Function that removes the callback.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        if not self._subscribers:
            return
        snapshot = self.snapshot()
        for callback in list(self._subscribers):
            # A broken observer must not stop translation
            try:
                callback(snapshot)
            except Exception as e:
                self._log(
                    "ERROR",
                    "notify",
                    "Progress subscriber failed",
                    {"error": f"{type(e).__name__}: {e}"},
                )

    def _recompute_stats(self) -> None:
        session = self._session
        if session is None:
            self._stats = PipelineStats()
        else:
            self._stats = compute_stats(session.pages.ordered(), session.page_count)

    def _log(
        self,
        level: str,
        stage: str,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        if self.db is None:
            return
        document = self._session.document_name if self._session else None
        self.db.log(level=level, stage=stage, message=message, document=document, context=context)

    # ==================== Commands ====================

    def load(
        self,
        source: DocumentSource,
        document_name: str | None = None,
        auto_start: bool = True,
    ) -> asyncio.Task[None] | None:
        """
        Bind a document and restore its cached pages.

        Any previous session is cancelled and replaced. Translation starts
        automatically when the cache is incomplete or holds failed pages.

        Args:
            source: Document to translate.
            document_name: Cache identity. Defaults to ``source.name``.
            auto_start: Start translating if work remains.

        Returns:
            The translation loop task if one was started.
        """
        self.cancel()

        name = document_name or source.name
        page_count = source.page_count()

        store = PageStore.load(self.cache_dir, name)
        cache_state = "restored"
        if store is None:
            store = PageStore(self.cache_dir)
            cache_state = "unreadable" if store.path_for(name).exists() else "missing"

        self._session = DocumentSession(
            source=source,
            document_name=name,
            page_count=page_count,
            pages=store,
        )

        if cache_state == "unreadable":
            self._log("WARNING", "cache", "Cache file unreadable, starting fresh")
        dropped = store.drop_beyond(page_count)
        if dropped:
            self._log(
                "WARNING",
                "cache",
                f"Discarded {len(dropped)} cached pages beyond page count {page_count}",
                {"pages": [i + 1 for i in dropped]},
            )

        self._recompute_stats()
        self._log(
            "INFO",
            "load",
            f"Loaded {name}: {page_count} pages, {len(store)} cached",
            {"cache": cache_state, "progress": self._stats.progress},
        )
        self._notify()

        if auto_start and self.needs_translation():
            return self.start()
        return None

    def needs_translation(self) -> bool:
        """Whether any page is missing or not yet translated successfully."""
        session = self._session
        if session is None:
            return False
        if len(session.pages) < session.page_count:
            return True
        return any(record.status != PageStatus.SUCCESS for record in session.pages.ordered())

    def start(self) -> asyncio.Task[None] | None:
        """
        Start the sequential translation loop.

        Returns:
            The loop task, or None if no document is loaded or a loop is
            already running.
        """
        session = self._session
        if session is None or self.is_running:
            return None

        token = object()
        self._run_token = token
        self._notify()

        task = asyncio.create_task(self._run(session, token))
        self._track(task)
        return task

    def cancel(self) -> None:
        """Ask the running loop to stop before its next page."""
        if self._run_token is None:
            return
        self._run_token = None
        self._log("INFO", "run", "Cancellation requested")
        self._notify()

    def regenerate_one(self, index: int) -> asyncio.Task[PageRecord | None] | None:
        """
        Re-translate a single page, regardless of its status or a running loop.

        Args:
            index: 0-based page index.

        Returns:
            Task resolving to the stored record, or None if there is no
            session or the page has no source text.
        """
        session = self._session
        if session is None:
            return None

        source_text = session.source.page_text(index)
        if source_text is None:
            return None

        existing = session.pages.get(index)
        if existing is not None:
            session.pages.upsert(replace(existing, status=PageStatus.PENDING))
            self._recompute_stats()
            self._notify()

        self._log("INFO", "regenerate", f"Regenerating page {index + 1}")
        task = asyncio.create_task(self._process_page(session, index, source_text))
        self._track(task)
        return task

    def reset(self) -> asyncio.Task[None] | None:
        """
        Discard all cached and in-memory translations and start over.

        Returns:
            The new loop task, or None if no document is loaded.
        """
        session = self._session
        if session is None:
            return None

        self.cancel()
        if not session.pages.clear(session.document_name):
            self._log("WARNING", "cache", "Could not delete cache file during reset")

        self._session = DocumentSession(
            source=session.source,
            document_name=session.document_name,
            page_count=session.page_count,
            pages=PageStore(self.cache_dir),
        )
        self._recompute_stats()
        self._log("INFO", "reset", "Translation reset, starting from scratch")
        self._notify()

        return self.start()

    async def wait(self) -> None:
        """Wait until the loop and all regenerations have finished."""
        while True:
            pending = [task for task in self._tasks if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending)

    # ==================== Processing ====================

    def _track(self, task: asyncio.Task[Any]) -> None:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _is_active(self, token: object) -> bool:
        return self._run_token is token

    async def _run(self, session: DocumentSession, token: object) -> None:
        """Translate every page that is not yet successful, in index order."""
        processed = 0
        self._log(
            "INFO",
            "run",
            "Translation started",
            {"pages": session.page_count, "cached": len(session.pages)},
        )

        try:
            for index in range(session.page_count):
                if not self._is_active(token):
                    break

                existing = session.pages.get(index)
                if existing is not None and existing.status == PageStatus.SUCCESS:
                    continue

                source_text = session.source.page_text(index)
                if source_text is None:
                    self._log("WARNING", "extract", f"No text on page {index + 1}, skipped")
                    continue

                await self._process_page(session, index, source_text)
                processed += 1

                # Rate limit; cancellation is checked on both sides of the pause
                if not self._is_active(token):
                    break
                await asyncio.sleep(self.config.request_delay)

            completed = self._is_active(token)
        finally:
            if self._run_token is token:
                self._run_token = None
                self._notify()

        self._log(
            "INFO",
            "run",
            "Translation finished" if completed else "Translation stopped",
            {"processed": processed, "progress": self._stats.progress},
        )

    def _build_prompt(self, session: DocumentSession, index: int, source_text: str) -> str:
        prior_source: str | None = None
        prior_translation: str | None = None
        if index > 0:
            prior_source = session.source.page_text(index - 1)
            previous = session.pages.get(index - 1)
            # An error placeholder is not a translation
            if previous is not None and previous.status == PageStatus.SUCCESS:
                prior_translation = previous.text

        context = self._context_builder.build_context(
            index, source_text, prior_source, prior_translation
        )
        return build_translation_prompt(
            context,
            source_lang=self.config.source_lang,
            target_lang=self.config.target_lang,
            domain=self.config.domain,
            glossary=self.config.glossary,
        )

    async def _process_page(
        self,
        session: DocumentSession,
        index: int,
        source_text: str,
    ) -> PageRecord | None:
        """
        Translate one page and store the result.

        Returns:
            The stored record, or None if the session was replaced while the
            backend call was in flight.
        """
        prompt = self._build_prompt(session, index, source_text)

        error: str | None = None
        try:
            raw = await self.backend.translate(prompt)
        except Exception as e:
            raw = None
            error = f"{type(e).__name__}: {e}"

        if raw:
            text = sanitize_response(raw, self.config.target_lang)
            record = PageRecord(index=index, text=text, status=PageStatus.SUCCESS)
        else:
            record = PageRecord(
                index=index,
                text=self.config.error_placeholder,
                status=PageStatus.ERROR,
            )

        async with self._lock:
            if session is not self._session:
                return None
            session.pages.upsert(record)
            saved = session.pages.save(session.document_name)
            self._recompute_stats()

        if record.status == PageStatus.SUCCESS:
            self._log(
                "INFO",
                "translate",
                f"Translated page {index + 1}",
                {"chars": len(record.text)},
            )
        else:
            self._log(
                "ERROR",
                "translate",
                f"Translation failed for page {index + 1}",
                {"error": error or "empty response"},
            )
        if not saved:
            self._log("WARNING", "cache", f"Could not write cache after page {index + 1}")

        self._notify()
        return record
