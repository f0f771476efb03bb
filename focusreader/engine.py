"""
Reader engine.

This module provides ReaderEngine, the surface a host talks to. It wires
together:
- ContentExtractor (root selection, sanitizing, heading index, metadata)
- Annotator and Emphasizer (session-scoped enrichment)
- ProgressStore and TrailingThrottle (reading position persistence)

Each activation (extract or isolate) starts a new ReadingSession with a
fresh annotation cache. No operation raises to the host: failures come
back as None or as a result carrying an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from bs4 import BeautifulSoup, Tag

from focusreader.annotation.annotator import Annotator
from focusreader.annotation.cache import AnnotationState
from focusreader.annotation.collaborator import TextInferenceCollaborator
from focusreader.annotation.emphasis import Emphasizer
from focusreader.config import ReaderConfig
from focusreader.extractors.content import HTML_PARSER, ContentExtractor
from focusreader.models import (
    AnnotationKind,
    AnnotationResult,
    ExtractedDocument,
    ProgressRecord,
)
from focusreader.progress.store import KeyValueStore, MemoryStore
from focusreader.progress.throttle import TrailingThrottle
from focusreader.progress.tracker import ProgressMetadata, ProgressStore, now_ms
from focusreader.tables import HeuristicTables, default_tables

logger = logging.getLogger(__name__)

NO_DOCUMENT = "No active document"
NO_COLLABORATOR = "No text-inference collaborator configured"


@dataclass
class ReadingSession:
    """State for one reading-surface activation."""

    document: ExtractedDocument
    content: Tag  # Live reading surface
    state: AnnotationState = field(default_factory=AnnotationState)


class ReaderEngine:
    """
    Extracts, annotates, and tracks reading progress for one host.

    Example:
        >>> engine = ReaderEngine(collaborator, JSONFileStore(path))
        >>> doc = engine.extract(html, "https://example.com/post")
        >>> result = await engine.annotate("vocabulary")
        >>> await engine.record_progress(scroll_top=600, viewport_height=800,
        ...                              document_height=2000)
        >>> record = await engine.check_progress()
    """

    def __init__(
        self,
        collaborator: TextInferenceCollaborator | None = None,
        store: KeyValueStore | None = None,
        *,
        config: ReaderConfig | None = None,
        tables: HeuristicTables | None = None,
        clock=now_ms,
    ):
        """Initialize the engine.

        Args:
            collaborator: Text-inference collaborator for annotations.
            store: Persistent store for progress (default keeps it in memory).
            config: Engine configuration (default creates one).
            tables: Heuristic tables (default loads the packaged tables).
            clock: Returns the current time in epoch milliseconds.
        """
        self.config = config or ReaderConfig()
        self.tables = tables or default_tables()
        self.collaborator = collaborator
        self.extractor = ContentExtractor(config=self.config.extraction, tables=self.tables)
        self.progress = ProgressStore(store or MemoryStore(), self.config.progress, clock)
        self.throttle = TrailingThrottle(self.config.progress.throttle_seconds)
        self.session: ReadingSession | None = None

    @property
    def document(self) -> ExtractedDocument | None:
        return self.session.document if self.session else None

    @property
    def content(self) -> Tag | None:
        return self.session.content if self.session else None

    # ─────────────────────────────────────────────────────────────────────────
    # Activation
    # ─────────────────────────────────────────────────────────────────────────

    def extract(self, document: str | bytes | Tag, source_url: str = "") -> ExtractedDocument | None:
        """Extract readable content and start a new session.

        Returns:
            The extracted document, or None when the page has no readable
            content. A failed extraction leaves the current session alone.
        """
        extracted = self.extractor.extract(document, source_url)
        if extracted is not None:
            self._start_session(extracted)
        return extracted

    def isolate(self, selected_text: str, source_url: str = "") -> ExtractedDocument | None:
        """Start a session from selected text instead of extracting."""
        extracted = self.extractor.isolate(selected_text, source_url)
        if extracted is not None:
            self._start_session(extracted)
        return extracted

    def _start_session(self, document: ExtractedDocument) -> None:
        self.throttle.cancel()
        self.session = ReadingSession(document=document, content=document.content)
        logger.info(
            "Reading session started: %r (%d words)", document.title, document.word_count
        )

    def restore_content(self) -> Tag | None:
        """Rebuild the reading surface from the extraction snapshot.

        Resets every application flag; the annotation cache survives, so
        re-annotating is served from cache.
        """
        if self.session is None:
            return None
        fragment = BeautifulSoup(self.session.document.content_html, HTML_PARSER)
        content = fragment.find(True) or fragment
        self.session.content = content
        self.session.document = replace(self.session.document, content=content)
        self.session.state.reset_flags()
        return content

    # ─────────────────────────────────────────────────────────────────────────
    # Annotation
    # ─────────────────────────────────────────────────────────────────────────

    async def annotate(self, kind: AnnotationKind | str) -> AnnotationResult:
        """Annotate the reading surface with vocabulary or concept hints."""
        kind = AnnotationKind(kind)
        if self.session is None:
            return AnnotationResult(kind=kind, error=NO_DOCUMENT)
        if self.collaborator is None:
            return AnnotationResult(kind=kind, error=NO_COLLABORATOR)

        annotator = Annotator(
            self.collaborator,
            self.session.state,
            config=self.config.annotation,
            tables=self.tables,
        )
        return await annotator.annotate(kind, self.session.content)

    def emphasize(self) -> int:
        """Apply emphasis reading. Returns the number of text nodes rewritten."""
        if self.session is None:
            return 0
        emphasizer = Emphasizer(
            self.session.state, self.config.annotation.emphasis_ratio, self.tables
        )
        return emphasizer.apply(self.session.content)

    # ─────────────────────────────────────────────────────────────────────────
    # Progress
    # ─────────────────────────────────────────────────────────────────────────

    async def record_progress(
        self,
        scroll_top: float,
        viewport_height: float,
        document_height: float,
        url: str | None = None,
    ) -> ProgressRecord | None:
        """Persist the reading position for `url` (default: the active document)."""
        url = url or (self.document.source_url if self.document else "")
        if not url:
            return None
        return await self.progress.record_progress(
            url, scroll_top, viewport_height, document_height, self._progress_metadata()
        )

    def on_scroll(self, scroll_top: float, viewport_height: float, document_height: float) -> None:
        """Throttled record_progress for scroll events.

        Scroll events arriving outside a running event loop are dropped.
        """
        if self.session is None:
            return
        try:
            self.throttle.call(self.record_progress, scroll_top, viewport_height, document_height)
        except RuntimeError as e:
            logger.warning("Scroll position not recorded: %s", e)

    async def check_progress(self, url: str | None = None) -> ProgressRecord | None:
        """Resumable position for `url` (default: the active document)."""
        url = url or (self.document.source_url if self.document else "")
        if not url:
            return None
        return await self.progress.check_progress(url)

    async def dismiss_progress(self, url: str | None = None) -> None:
        """Forget the saved position (the reader declined to resume)."""
        url = url or (self.document.source_url if self.document else "")
        if url:
            await self.progress.dismiss(url)

    async def shelf(self) -> list[ProgressRecord]:
        return await self.progress.shelf()

    async def sweep_expired(self) -> int:
        return await self.progress.sweep_expired()

    async def close(self) -> None:
        """Flush any pending throttled write."""
        await self.throttle.flush()

    def _progress_metadata(self) -> ProgressMetadata:
        if self.document is None:
            return ProgressMetadata()
        return ProgressMetadata(
            title=self.document.title,
            reading_time_label=self.document.reading_time_label,
        )
