"""
Data models for FocusReader.

These models represent the output of extraction, the outcome of an
annotation pass, and the persisted reading progress.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from bs4 import Tag


class AnnotationKind(str, Enum):
    """Kinds of collaborator-sourced annotation."""

    VOCABULARY = "vocabulary"
    CONCEPT = "concept"


@dataclass(frozen=True)
class Heading:
    """An outline entry for the reading surface."""

    level: int  # 1..4
    text: str  # Display text, truncated with an ellipsis
    anchor_id: str


def reading_time_minutes(word_count: int, words_per_minute: int = 200) -> int:
    """Minutes needed to read word_count words, never less than one."""
    return max(1, math.ceil(word_count / words_per_minute))


@dataclass(frozen=True)
class ExtractedDocument:
    """
    The main output of extraction.

    Built once per activation and replaced wholesale on re-activation.
    The sanitized `content` tree is the live reading surface and is
    rewritten by annotation passes; `content_html` is the verbatim
    snapshot used to restore it.

    Example:
        >>> doc = engine.extract(html, "https://example.com/post")
        >>> print(doc.title, doc.reading_time_label)
        >>> for heading in doc.headings:
        ...     print(heading.level, heading.text)
    """

    title: str
    site_name: str
    content: Tag
    content_html: str
    source_url: str
    word_count: int
    reading_time_minutes: int
    headings: tuple[Heading, ...] = ()
    author: str | None = None
    publish_date: date | None = None
    publish_date_label: str | None = None
    is_isolated: bool = False
    processing_log: tuple[str, ...] = field(default=(), compare=False)

    @property
    def reading_time_label(self) -> str:
        """Short label such as "5 min read"."""
        return f"{self.reading_time_minutes} min read"

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to dictionary for JSON serialization.

        Returns:
            Dictionary representation of the document
        """
        return {
            "title": self.title,
            "site_name": self.site_name,
            "author": self.author,
            "publish_date": self.publish_date.isoformat() if self.publish_date else None,
            "content": self.content_html,
            "headings": [
                {"level": h.level, "text": h.text, "anchor_id": h.anchor_id}
                for h in self.headings
            ],
            "word_count": self.word_count,
            "reading_time_minutes": self.reading_time_minutes,
            "source_url": self.source_url,
            "is_isolated": self.is_isolated,
        }


@dataclass
class AnnotationResult:
    """Outcome of one annotate() call."""

    kind: AnnotationKind
    skipped: bool = False  # True when the pass already ran for this content
    requested_terms: list[str] = field(default_factory=list)
    cached_terms: list[str] = field(default_factory=list)
    resolved_terms: dict[str, str] = field(default_factory=dict)
    nodes_rewritten: int = 0
    occurrences_annotated: int = 0
    error: str | None = None

    @property
    def requested(self) -> bool:
        """Whether a collaborator request was issued."""
        return bool(self.requested_terms)


@dataclass
class ProgressRecord:
    """Persisted reading position for one document."""

    key: str
    scroll_top: float
    timestamp_ms: int
    title: str
    favicon_url: str
    progress_percent: int
    reading_time_label: str
    hostname: str
    source_url: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "key": self.key,
            "scroll_top": self.scroll_top,
            "timestamp_ms": self.timestamp_ms,
            "title": self.title,
            "favicon_url": self.favicon_url,
            "progress_percent": self.progress_percent,
            "reading_time_label": self.reading_time_label,
            "hostname": self.hostname,
            "source_url": self.source_url,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProgressRecord:
        """
        Create from dictionary.

        Raises:
            KeyError, TypeError, ValueError: If the stored value is corrupt.
        """
        return cls(
            key=str(data["key"]),
            scroll_top=float(data["scroll_top"]),
            timestamp_ms=int(data["timestamp_ms"]),
            title=str(data.get("title", "Untitled")),
            favicon_url=str(data.get("favicon_url", "")),
            progress_percent=int(data["progress_percent"]),
            reading_time_label=str(data.get("reading_time_label", "")),
            hostname=str(data.get("hostname", "")),
            source_url=str(data["source_url"]),
        )
