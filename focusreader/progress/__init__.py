"""
Reading progress module.

- ProgressStore: per-document records, the in-progress shelf, expiry
- KeyValueStore: asynchronous persistence contract (MemoryStore, JSONFileStore)
- TrailingThrottle: collapses scroll bursts into one write
"""

from focusreader.progress.store import (
    JSONFileStore,
    KeyValueStore,
    MemoryStore,
)
from focusreader.progress.throttle import TrailingThrottle
from focusreader.progress.tracker import (
    ProgressMetadata,
    ProgressStore,
    compute_progress_percent,
    progress_key,
)

__all__ = [
    "ProgressStore",
    "ProgressMetadata",
    "compute_progress_percent",
    "progress_key",
    "KeyValueStore",
    "MemoryStore",
    "JSONFileStore",
    "TrailingThrottle",
]
