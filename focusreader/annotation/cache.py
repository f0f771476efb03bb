"""
Session-scoped annotation cache and application flags.

An AnnotationState lives for one reading-surface activation. It holds
the term cache (simplifications, concept explanations, or the SKIP
sentinel) and the per-feature flags that stop a pass from rewriting the
same content twice. The cache is never persisted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from focusreader.models import AnnotationKind

logger = logging.getLogger(__name__)


class _SkipSentinel:
    """Marks a term that was evaluated and intentionally left unannotated."""

    _instance: _SkipSentinel | None = None

    def __new__(cls) -> _SkipSentinel:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SKIP"

    def __bool__(self) -> bool:
        return False


SKIP = _SkipSentinel()

CacheValue = str | _SkipSentinel

EMPHASIS_FLAG = "emphasis"


class AnnotationCache:
    """
    Term cache for one reading session.

    Keys are cache keys from LexicalClassifier.cache_key(): lowercase for
    vocabulary, case-sensitive for concepts. Writes are last-write-wins.

    Example:
        >>> cache = AnnotationCache()
        >>> cache.store(AnnotationKind.VOCABULARY, "ubiquitous", "everywhere")
        >>> cache.get(AnnotationKind.VOCABULARY, "ubiquitous")
        'everywhere'
        >>> cache.store(AnnotationKind.CONCEPT, "THE", SKIP)
        >>> cache.get(AnnotationKind.CONCEPT, "THE") is SKIP
        True
    """

    def __init__(self) -> None:
        self._entries: dict[AnnotationKind, dict[str, CacheValue]] = {
            kind: {} for kind in AnnotationKind
        }

    def get(self, kind: AnnotationKind, key: str) -> CacheValue | None:
        """Cached value, SKIP, or None when the term was never evaluated."""
        return self._entries[kind].get(key)

    def contains(self, kind: AnnotationKind, key: str) -> bool:
        return key in self._entries[kind]

    def store(self, kind: AnnotationKind, key: str, value: CacheValue) -> None:
        """Record the collaborator's verdict for a term."""
        entries = self._entries[kind]
        if key in entries and entries[key] != value:
            logger.debug("Overwriting cached %s entry for %r", kind.value, key)
        entries[key] = value

    def resolved(self, kind: AnnotationKind) -> dict[str, str]:
        """All cached annotations of a kind, without SKIP entries."""
        return {k: v for k, v in self._entries[kind].items() if isinstance(v, str)}

    def size(self, kind: AnnotationKind | None = None) -> int:
        if kind is not None:
            return len(self._entries[kind])
        return sum(len(entries) for entries in self._entries.values())

    def clear(self) -> None:
        for entries in self._entries.values():
            entries.clear()


@dataclass
class AnnotationState:
    """
    Everything an annotation pass may remember within one activation.

    Flags are keyed by AnnotationKind value or EMPHASIS_FLAG and reset only
    when the base content is restored verbatim.
    """

    cache: AnnotationCache = field(default_factory=AnnotationCache)
    applied: dict[str, bool] = field(default_factory=dict)

    def is_applied(self, flag: str) -> bool:
        return self.applied.get(flag, False)

    def mark_applied(self, flag: str) -> None:
        self.applied[flag] = True

    def reset_flags(self) -> None:
        """Forget which passes ran. The cache survives."""
        self.applied.clear()
