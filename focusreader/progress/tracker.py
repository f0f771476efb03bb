"""
Reading progress records and the in-progress shelf.

Every recorded tick upserts the per-document ProgressRecord. The shelf
is a secondary index holding only documents whose progress is strictly
between the shelf bounds (5% and 95% by default):
- inside the bounds: the entry is inserted or overwritten
- at or above the upper bound: the entry is removed
- at or below the lower bound: removed when clear_shelf_below_min is set,
  otherwise left as it was

Records older than the expiry window are ignored by check_progress()
and deleted by sweep_expired(), which also runs after every write.
"""

from __future__ import annotations

import hashlib
import logging
import math
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar
from urllib.parse import urlparse

from focusreader.config import ProgressConfig
from focusreader.exceptions import StoreUnavailable
from focusreader.models import ProgressRecord
from focusreader.progress.store import KeyValueStore, LoopLock

logger = logging.getLogger(__name__)

T = TypeVar("T")

KEY_DIGEST_LENGTH = 32
FAVICON_URL = "https://www.google.com/s2/favicons?domain={hostname}&sz=64"
UNTITLED = "Untitled"


@dataclass
class ProgressMetadata:
    """Display details stored alongside a reading position."""

    title: str = UNTITLED
    reading_time_label: str = ""


def progress_key(url: str, prefix: str = "focus-reading-progress-") -> str:
    """Stable, length-bounded store key for a document URL."""
    digest = hashlib.sha256(url.encode("utf-8")).hexdigest()
    return prefix + digest[:KEY_DIGEST_LENGTH]


def compute_progress_percent(
    scroll_top: float, viewport_height: float, document_height: float
) -> int:
    """
    Percentage of the scrollable height already passed.

    A document that does not scroll yields 0. Halves round up.

    Example:
        >>> compute_progress_percent(600, 800, 2000)
        50
        >>> compute_progress_percent(1150, 800, 2000)
        96
    """
    scrollable = max(document_height - viewport_height, 0)
    if scrollable <= 0:
        return 0
    return math.floor(scroll_top / scrollable * 100 + 0.5)


def favicon_url(hostname: str) -> str:
    return FAVICON_URL.format(hostname=hostname)


def now_ms() -> int:
    return int(time.time() * 1000)


class ProgressStore:
    """Persists reading positions and maintains the shelf.

    Store failures never propagate: a failed tick is logged and dropped.

    Usage:
        tracker = ProgressStore(JSONFileStore(path))
        await tracker.record_progress(url, scroll_top=600, viewport_height=800,
                                      document_height=2000)
        record = await tracker.check_progress(url)
        if record:
            print(f"Resume at {record.scroll_top}px ({record.progress_percent}%)")
    """

    def __init__(
        self,
        store: KeyValueStore,
        config: ProgressConfig | None = None,
        clock: Callable[[], int] = now_ms,
    ):
        """Initialize the progress store.

        Args:
            store: Persistent key-value store.
            config: Shelf bounds, expiry window, and key layout.
            clock: Returns the current time in epoch milliseconds.
        """
        self.store = store
        self.config = config or ProgressConfig()
        self.clock = clock
        # Held across every shelf read-modify-write
        self._shelf_lock = LoopLock()

    def key_for(self, url: str) -> str:
        return progress_key(url, self.config.record_key_prefix)

    def is_expired(self, record: ProgressRecord, now: int | None = None) -> bool:
        now = self.clock() if now is None else now
        return now - record.timestamp_ms >= self.config.expiry_ms

    def in_shelf_bounds(self, percent: int) -> bool:
        return self.config.shelf_min_percent < percent < self.config.shelf_max_percent

    async def record_progress(
        self,
        url: str,
        scroll_top: float,
        viewport_height: float,
        document_height: float,
        metadata: ProgressMetadata | None = None,
    ) -> ProgressRecord | None:
        """Upsert the record for `url` and update the shelf.

        Returns:
            The stored record, or None when the store was unavailable.
        """
        metadata = metadata or ProgressMetadata()
        hostname = urlparse(url).hostname or ""
        record = ProgressRecord(
            key=self.key_for(url),
            scroll_top=scroll_top,
            timestamp_ms=self.clock(),
            title=(metadata.title or UNTITLED)[: self.config.max_title_chars],
            favicon_url=favicon_url(hostname),
            progress_percent=compute_progress_percent(
                scroll_top, viewport_height, document_height
            ),
            reading_time_label=metadata.reading_time_label,
            hostname=hostname,
            source_url=url,
        )

        try:
            async with self._shelf_lock():
                items: dict[str, Any] = {record.key: record.to_dict()}
                shelf = self._next_shelf(await self._load_shelf(), record)
                if shelf is not None:
                    items[self.config.shelf_key] = shelf
                # Record and shelf land together or not at all
                await self._call(self.store.set(items))
        except StoreUnavailable as e:
            logger.warning("Progress not saved for %s: %s", url, e)
            return None

        logger.debug("Recorded %d%% for %s", record.progress_percent, url)
        await self.sweep_expired()
        return record

    def _next_shelf(
        self, shelf: dict[str, Any], record: ProgressRecord
    ) -> dict[str, Any] | None:
        """Shelf after recording `record`, or None when it is unchanged."""
        percent = record.progress_percent

        if self.in_shelf_bounds(percent):
            shelf[record.key] = record.to_dict()
        elif record.key not in shelf:
            return None
        elif percent >= self.config.shelf_max_percent:
            del shelf[record.key]
            logger.debug("Finished %s, removed from shelf", record.source_url)
        elif self.config.clear_shelf_below_min:
            del shelf[record.key]
        else:
            return None
        return shelf

    async def check_progress(self, url: str) -> ProgressRecord | None:
        """Return a resumable record for `url`.

        A record is resumable when it is inside the expiry window and
        scrolled past the resume threshold.
        """
        key = self.key_for(url)
        try:
            data = (await self._call(self.store.get([key]))).get(key)
        except StoreUnavailable as e:
            logger.warning("Cannot check progress for %s: %s", url, e)
            return None
        if data is None:
            return None

        try:
            record = ProgressRecord.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Dropping corrupt progress record for %s: %s", url, e)
            await self._remove_quietly([key])
            return None

        if self.is_expired(record):
            return None
        if record.scroll_top <= self.config.resume_min_scroll_top:
            return None
        return record

    async def dismiss(self, url: str) -> None:
        """Forget the saved position for `url` (the reader declined to resume)."""
        await self._remove_quietly([self.key_for(url)])

    async def shelf(self) -> list[ProgressRecord]:
        """Documents in progress, most recently read first."""
        try:
            shelf = await self._load_shelf()
        except StoreUnavailable as e:
            logger.warning("Cannot read shelf: %s", e)
            return []

        records = []
        for data in shelf.values():
            try:
                records.append(ProgressRecord.from_dict(data))
            except (KeyError, TypeError, ValueError):
                continue
        return sorted(records, key=lambda r: r.timestamp_ms, reverse=True)

    async def sweep_expired(self) -> int:
        """Delete expired or corrupt records, shelf entries included.

        Returns:
            Number of records removed.
        """
        now = self.clock()
        prefix = self.config.record_key_prefix
        try:
            keys = [k for k in await self._call(self.store.keys()) if k.startswith(prefix)]
            stored = await self._call(self.store.get(keys))
            stale = [k for k, v in stored.items() if self._is_stale(v, now)]
            if stale:
                await self._call(self.store.remove(stale))

            async with self._shelf_lock():
                shelf = await self._load_shelf()
                stale_shelf = [k for k, v in shelf.items() if self._is_stale(v, now)]
                if stale_shelf:
                    for k in stale_shelf:
                        del shelf[k]
                    await self._call(self.store.set({self.config.shelf_key: shelf}))
        except StoreUnavailable as e:
            logger.warning("Expiry sweep skipped: %s", e)
            return 0

        if stale:
            logger.debug("Swept %d expired progress records", len(stale))
        return len(stale)

    def _is_stale(self, data: Any, now: int) -> bool:
        try:
            return self.is_expired(ProgressRecord.from_dict(data), now)
        except (KeyError, TypeError, ValueError):
            return True

    async def _load_shelf(self) -> dict[str, Any]:
        key = self.config.shelf_key
        shelf = (await self._call(self.store.get([key]))).get(key)
        return shelf if isinstance(shelf, dict) else {}

    async def _remove_quietly(self, keys: list[str]) -> None:
        try:
            await self._call(self.store.remove(keys))
        except StoreUnavailable as e:
            logger.warning("Cannot remove progress records: %s", e)

    async def _call(self, operation: Awaitable[T]) -> T:
        """Await a store operation, reporting any failure as StoreUnavailable."""
        try:
            return await operation
        except StoreUnavailable:
            raise
        except Exception as e:
            raise StoreUnavailable(f"{self.store.name} store failed: {e}") from e
