"""
Content scoring for extraction root selection.

Each element gets an additive "contentness" score built from text
volume, paragraph and heading counts, link density, and keyword hints
in its class list and id. Scores can be negative. Scoring is pure:
the same element always yields the same score.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from focusreader.tables import HeuristicTables, default_tables

if TYPE_CHECKING:
    from bs4 import Tag

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")

TEXT_LENGTH_DIVISOR = 100
MAX_TEXT_LENGTH_BONUS = 50
PARAGRAPH_BONUS = 3
HEADING_BONUS = 5
LINK_DENSITY_PENALTY = 50


class ContentScorer:
    """Scores elements for content likelihood.

    Usage:
        scorer = ContentScorer()
        score = scorer.score(soup.find("article"))
    """

    def __init__(self, tables: HeuristicTables | None = None):
        """Initialize the scorer.

        Args:
            tables: Keyword tables (default loads the packaged tables).
        """
        self.tables = tables or default_tables()

    def score(self, node: Tag | None) -> float:
        """Score an element. Missing elements score 0."""
        if node is None:
            return 0.0
        return self.score_with_evidence(node)[0]

    def score_with_evidence(self, node: Tag) -> tuple[float, dict]:
        """Score an element and report the contribution of each term.

        Returns (score, evidence dict).
        """
        text = node.get_text()
        text_length = len(text)
        evidence: dict = {"text_length": text_length}

        score = min(text_length / TEXT_LENGTH_DIVISOR, MAX_TEXT_LENGTH_BONUS)

        paragraphs = len(node.find_all("p"))
        headings = len(node.find_all(HEADING_TAGS))
        score += paragraphs * PARAGRAPH_BONUS
        score += headings * HEADING_BONUS
        evidence["paragraphs"] = paragraphs
        evidence["headings"] = headings

        # Link-only containers get the maximal penalty
        link_text = sum(len(a.get_text()) for a in node.find_all("a"))
        link_density = link_text / text_length if text_length > 0 else 1.0
        score -= link_density * LINK_DENSITY_PENALTY
        evidence["link_density"] = round(link_density, 3)

        hints = _hint_string(node)
        negative = [k for k in self.tables.negative_keywords if k in hints]
        positive = [k for k in self.tables.positive_keywords if k in hints]
        score += len(negative) * self.tables.negative_weight
        score += len(positive) * self.tables.positive_weight
        if negative:
            evidence["negative_keywords"] = negative
        if positive:
            evidence["positive_keywords"] = positive

        return score, evidence


def _hint_string(node: Tag) -> str:
    """Lowercased class list and id, separated so keywords can't span them."""
    classes = node.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    element_id = node.get("id") or ""
    return " ".join(classes).lower() + "\n" + str(element_id).lower()


def score_node(node: Tag | None, tables: HeuristicTables | None = None) -> float:
    """Convenience function for one-off scoring."""
    return ContentScorer(tables).score(node)
