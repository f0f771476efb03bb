"""
Heading index and word counting for sanitized content.

The indexer walks h1-h4 in document order, gives each heading a stable
anchor id, and returns the outline. Whether to render a table of
contents is left to the reading surface.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from focusreader.models import Heading

if TYPE_CHECKING:
    from bs4 import Tag

INDEXED_HEADINGS = ("h1", "h2", "h3", "h4")
ELLIPSIS = "..."


class HeadingIndexer:
    """Assigns anchor ids to headings and builds the outline.

    Usage:
        indexer = HeadingIndexer()
        for heading in indexer.index(cleaned_root):
            print(f"{'  ' * (heading.level - 1)}{heading.text} -> #{heading.anchor_id}")
    """

    def __init__(self, anchor_prefix: str = "focus-heading-", max_chars: int = 60):
        """Initialize the indexer.

        Args:
            anchor_prefix: Prefix for synthetic anchor ids.
            max_chars: Display text longer than this is truncated.
        """
        self.anchor_prefix = anchor_prefix
        self.max_chars = max_chars

    def index(self, root: Tag) -> list[Heading]:
        """Index headings under `root`, writing ids onto headings that lack one."""
        headings = []
        for position, element in enumerate(root.find_all(INDEXED_HEADINGS)):
            text = " ".join(element.get_text().split())
            if not text:
                continue

            anchor_id = element.get("id")
            if not anchor_id:
                anchor_id = f"{self.anchor_prefix}{position}"
                element["id"] = anchor_id

            headings.append(
                Heading(
                    level=int(element.name[1]),
                    text=truncate(text, self.max_chars),
                    anchor_id=str(anchor_id),
                )
            )
        return headings


def truncate(text: str, max_chars: int) -> str:
    """Cut text to max_chars, marking the cut with an ellipsis."""
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + ELLIPSIS


def count_words(root: Tag) -> int:
    """Count whitespace-separated tokens in the subtree's text."""
    return len(root.get_text(" ").split())
