"""
Emphasis reading: bold the leading part of every word.

A local transformation, no collaborator involved. It shares the guards
and the plan-then-apply rewrite of the annotator, and its own flag in
the session state keeps it from running twice on the same content.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from focusreader.annotation.cache import EMPHASIS_FLAG, AnnotationState
from focusreader.annotation.rewrite import (
    Guards,
    apply_rewrites,
    eligible_text_nodes,
    plan_emphasis,
    render_emphasis,
)
from focusreader.tables import HeuristicTables, default_tables

if TYPE_CHECKING:
    from bs4 import Tag

logger = logging.getLogger(__name__)


class Emphasizer:
    """Applies emphasis reading to a content tree."""

    def __init__(
        self,
        state: AnnotationState,
        ratio: float = 0.4,
        tables: HeuristicTables | None = None,
    ):
        self.state = state
        self.ratio = ratio
        tables = tables or default_tables()
        self.guards = Guards(classes=tables.guard_classes, tags=tables.guard_tags)

    def apply(self, root: Tag) -> int:
        """Emphasize words under `root`. Returns the number of nodes rewritten."""
        if self.state.is_applied(EMPHASIS_FLAG):
            return 0
        self.state.mark_applied(EMPHASIS_FLAG)

        ops = plan_emphasis(eligible_text_nodes(root, self.guards), self.ratio)
        rewritten = apply_rewrites(ops, render_emphasis)
        logger.debug("Emphasis rewrote %d text nodes", rewritten)
        return rewritten
