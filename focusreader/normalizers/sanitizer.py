"""
Sanitizer for extracted content.

Strips noise subtrees and disallowed attributes from the winning root
so the reading surface carries only the article itself:

1. Remove noise (scripts, frames, landmarks, ads, social widgets, hidden nodes)
2. Strip attributes outside the allow-list
3. Normalize media (lazy loading, bounded sizing) and code blocks
4. Drop paragraphs empty of both text and media

Removal runs before attribute stripping so removed subtrees are never
visited twice.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from focusreader.config import ExtractionConfig
from focusreader.tables import HeuristicTables, default_tables

if TYPE_CHECKING:
    from bs4 import Tag

logger = logging.getLogger(__name__)

MEDIA_STYLE = "max-width: 100%; height: auto;"


@dataclass
class SanitizeStats:
    """Counters for one sanitize pass."""

    nodes_removed: int = 0
    attributes_stripped: int = 0
    media_normalized: int = 0
    code_blocks_marked: int = 0
    empty_paragraphs_removed: int = 0


class ContentSanitizer:
    """Cleans an extracted subtree in place and returns it.

    Usage:
        sanitizer = ContentSanitizer()
        cleaned = sanitizer.sanitize(copy.copy(article))
        print(sanitizer.last_stats.nodes_removed)
    """

    def __init__(
        self,
        tables: HeuristicTables | None = None,
        config: ExtractionConfig | None = None,
    ):
        self.tables = tables or default_tables()
        self.config = config or ExtractionConfig()
        self.last_stats = SanitizeStats()

    def sanitize(self, root: Tag) -> Tag:
        """Clean `root` and return it.

        Args:
            root: Subtree to clean. Pass a copy to keep the live tree intact.

        Returns:
            The same subtree, cleaned.
        """
        stats = SanitizeStats()

        for selector in self.tables.remove_selectors:
            stats.nodes_removed += _decompose_all(root.select(selector))

        for element in _elements(root):
            stats.attributes_stripped += self._strip_attributes(element)

        for media in root.find_all(list(self.tables.media_tags)):
            if media.name == "video":
                media["preload"] = "none"
            else:
                media["loading"] = "lazy"
            media["style"] = MEDIA_STYLE
            stats.media_normalized += 1

        for code in root.find_all(list(self.tables.code_tags)):
            classes = code.get("class") or []
            classes = classes.split() if isinstance(classes, str) else list(classes)
            if self.config.code_class not in classes:
                classes.append(self.config.code_class)
                code["class"] = classes
            stats.code_blocks_marked += 1

        empty = [
            p
            for p in root.find_all("p")
            if not p.get_text(strip=True) and p.find(list(self.tables.media_tags)) is None
        ]
        stats.empty_paragraphs_removed = _decompose_all(empty)

        self.last_stats = stats
        logger.debug(
            "Sanitized: removed %d nodes, stripped %d attributes, dropped %d empty paragraphs",
            stats.nodes_removed,
            stats.attributes_stripped,
            stats.empty_paragraphs_removed,
        )
        return root

    def _strip_attributes(self, element: Tag) -> int:
        allowed = self.tables.allowed_attributes
        prefix = self.config.internal_attribute_prefix
        kept = {
            name: value
            for name, value in element.attrs.items()
            if name in allowed or name.startswith(prefix)
        }
        stripped = len(element.attrs) - len(kept)
        if stripped:
            element.attrs = kept
        return stripped


def _elements(root: Tag) -> list[Tag]:
    return [root, *root.find_all(True)]


def _decompose_all(elements: Iterable[Tag]) -> int:
    """Decompose elements, skipping ones already destroyed with an ancestor."""
    count = 0
    for element in elements:
        if element.decomposed:
            continue
        element.decompose()
        count += 1
    return count


def sanitize(root: Tag, tables: HeuristicTables | None = None) -> Tag:
    """Convenience function for a one-off sanitize pass."""
    return ContentSanitizer(tables).sanitize(root)
