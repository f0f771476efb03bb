"""
Two-pass tree rewriting.

Planning walks the tree and returns RewriteOps without touching it;
applying replaces each target text node with rendered nodes. Keeping
the passes apart means the tree is never mutated while it is walked.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from bs4 import BeautifulSoup, NavigableString, PageElement, Tag
from bs4.element import PreformattedString

from focusreader.models import AnnotationKind

WHITESPACE_SPLIT_PATTERN = re.compile(r"(\s+)")


@dataclass(frozen=True)
class Segment:
    """A slice of a text node: plain text, or a marked term with its value."""

    text: str
    key: str | None = None  # Cache key for annotated terms
    value: str | None = None

    @property
    def marked(self) -> bool:
        return self.key is not None


@dataclass(frozen=True)
class RewriteOp:
    """Replace `target` with the rendered `segments`."""

    target: NavigableString
    segments: tuple[Segment, ...]

    @property
    def occurrences(self) -> int:
        return sum(1 for s in self.segments if s.marked)


Renderer = Callable[[BeautifulSoup, Segment], list[PageElement]]


@dataclass(frozen=True)
class Guards:
    """Ancestors whose text must not be rewritten."""

    classes: frozenset[str]
    tags: frozenset[str]

    def protects(self, node: PageElement) -> bool:
        """Whether any ancestor is a guard tag or carries a guard class."""
        for parent in node.parents:
            if parent.name in self.tags:
                return True
            classes = parent.get("class") or []
            if isinstance(classes, str):
                classes = classes.split()
            if self.classes.intersection(classes):
                return True
        return False


def eligible_text_nodes(root: Tag, guards: Guards) -> list[NavigableString]:
    """Text nodes under root, in document order, outside any guard."""
    return [
        node
        for node in root.find_all(string=True)
        if not isinstance(node, PreformattedString) and not guards.protects(node)
    ]


def term_pattern(keys: Iterable[str], ignore_case: bool) -> re.Pattern | None:
    """Whole-word alternation, longest term first so longer terms win."""
    ordered = sorted(set(keys), key=lambda k: (-len(k), k))
    if not ordered:
        return None
    flags = re.IGNORECASE if ignore_case else 0
    return re.compile(r"\b(?:" + "|".join(re.escape(k) for k in ordered) + r")\b", flags)


def plan_annotations(
    nodes: Iterable[NavigableString],
    resolved: dict[str, str],
    kind: AnnotationKind,
) -> list[RewriteOp]:
    """Plan a rewrite for every node containing a resolved term.

    Args:
        nodes: Eligible text nodes.
        resolved: Cache key -> annotation value.
        kind: Vocabulary matches ignore case; concepts match exactly.

    Returns:
        One RewriteOp per node with at least one match.
    """
    ignore_case = kind is AnnotationKind.VOCABULARY
    pattern = term_pattern(resolved, ignore_case)
    if pattern is None:
        return []

    ops = []
    for node in nodes:
        text = str(node)
        segments: list[Segment] = []
        cursor = 0
        for match in pattern.finditer(text):
            surface = match.group(0)
            key = surface.lower() if ignore_case else surface
            if key not in resolved:
                continue
            if match.start() > cursor:
                segments.append(Segment(text[cursor : match.start()]))
            segments.append(Segment(surface, key=key, value=resolved[key]))
            cursor = match.end()
        if not segments:
            continue
        if cursor < len(text):
            segments.append(Segment(text[cursor:]))
        ops.append(RewriteOp(target=node, segments=tuple(segments)))
    return ops


def plan_emphasis(nodes: Iterable[NavigableString], ratio: float) -> list[RewriteOp]:
    """Plan per-word emphasis for every non-blank node."""
    ops = []
    for node in nodes:
        text = str(node)
        if not text.strip():
            continue
        if node.parent is not None and node.parent.name == "strong":
            continue
        segments = []
        for piece in WHITESPACE_SPLIT_PATTERN.split(text):
            if not piece:
                continue
            if piece.isspace():
                segments.append(Segment(piece))
            else:
                # key carries the emphasized prefix, value the remainder
                bold = math.ceil(len(piece) * ratio)
                segments.append(Segment(piece, key=piece[:bold], value=piece[bold:]))
        ops.append(RewriteOp(target=node, segments=tuple(segments)))
    return ops


def apply_rewrites(ops: list[RewriteOp], render: Renderer) -> int:
    """Replace each planned node. Returns the number of nodes rewritten."""
    factory = BeautifulSoup("", "html.parser")
    rewritten = 0
    for op in ops:
        if op.target.parent is None:
            continue  # Detached since planning
        replacement: list[PageElement] = []
        for segment in op.segments:
            if segment.marked:
                replacement.extend(render(factory, segment))
            else:
                replacement.append(NavigableString(segment.text))
        op.target.replace_with(*replacement)
        rewritten += 1
    return rewritten


# =============================================================================
# RENDERERS
# =============================================================================


def _span(factory: BeautifulSoup, css_class: str, text: str | None = None) -> Tag:
    span = factory.new_tag("span", attrs={"class": css_class})
    if text is not None:
        span.string = text
    return span


def render_vocabulary(factory: BeautifulSoup, segment: Segment) -> list[PageElement]:
    """<span class="vocab-word">word<span class="vocab-tooltip">...</span></span>"""
    word = _span(factory, "vocab-word")
    word["data-focus-term"] = segment.key
    word.append(NavigableString(segment.text))
    tooltip = _span(factory, "vocab-tooltip")
    tooltip.append(_span(factory, "vocab-simple", segment.value))
    tooltip.append(NavigableString(" "))
    tooltip.append(_span(factory, "vocab-original", f"({segment.text})"))
    word.append(tooltip)
    return [word]


def render_concept(factory: BeautifulSoup, segment: Segment) -> list[PageElement]:
    """<span class="concept-word">TERM<span class="concept-tooltip">...</span></span>"""
    term = _span(factory, "concept-word")
    term["data-focus-term"] = segment.key
    term.append(NavigableString(segment.text))
    tooltip = _span(factory, "concept-tooltip")
    tooltip.append(_span(factory, "concept-label", "Concept"))
    tooltip.append(_span(factory, "concept-text", segment.value))
    term.append(tooltip)
    return [term]


def render_emphasis(factory: BeautifulSoup, segment: Segment) -> list[PageElement]:
    """<span class="bionic-word"><strong>he</strong>llo</span>"""
    word = _span(factory, "bionic-word")
    strong = factory.new_tag("strong")
    strong.string = segment.key
    word.append(strong)
    if segment.value:
        word.append(NavigableString(segment.value))
    return [word]


RENDERERS: dict[AnnotationKind, Renderer] = {
    AnnotationKind.VOCABULARY: render_vocabulary,
    AnnotationKind.CONCEPT: render_concept,
}
