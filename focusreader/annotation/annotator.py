"""
Incremental tree annotation backed by the session cache.

One annotate() call per kind and content snapshot:
1. Discover candidate terms in eligible text nodes
2. Serve cached terms from the cache, SKIP included
3. Ask the collaborator once for up to N unseen terms
4. Write every parsed answer into the cache
5. Plan and apply span rewrites for all resolved terms

The pass is guarded by an application flag. A second call for the same
kind is a no-op until the content is restored and the flags reset.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from focusreader.annotation.cache import SKIP, AnnotationState
from focusreader.annotation.collaborator import (
    TextInferenceCollaborator,
    ask,
    build_prompt,
    parse_response,
)
from focusreader.annotation.lexical import LexicalClassifier
from focusreader.annotation.rewrite import (
    RENDERERS,
    Guards,
    apply_rewrites,
    eligible_text_nodes,
    plan_annotations,
)
from focusreader.config import AnnotationConfig
from focusreader.exceptions import CollaboratorError
from focusreader.models import AnnotationKind, AnnotationResult
from focusreader.tables import HeuristicTables, default_tables

if TYPE_CHECKING:
    from bs4 import Tag

logger = logging.getLogger(__name__)


class Annotator:
    """Annotates sanitized content with collaborator-sourced enrichments.

    Usage:
        state = AnnotationState()
        annotator = Annotator(collaborator, state)
        result = await annotator.annotate(AnnotationKind.VOCABULARY, doc.content)
        print(result.nodes_rewritten, result.requested_terms)
    """

    def __init__(
        self,
        collaborator: TextInferenceCollaborator,
        state: AnnotationState,
        *,
        config: AnnotationConfig | None = None,
        tables: HeuristicTables | None = None,
        classifier: LexicalClassifier | None = None,
    ):
        """Initialize the annotator.

        Args:
            collaborator: Text-inference collaborator.
            state: Session cache and application flags.
            config: Batch limits and lexical thresholds (default creates one).
            tables: Common words and guard tables (default loads packaged tables).
            classifier: Candidate finder (default builds one from tables and config).
        """
        self.collaborator = collaborator
        self.state = state
        self.config = config or AnnotationConfig()
        self.tables = tables or default_tables()
        self.classifier = classifier or LexicalClassifier(
            self.tables.common_words, self.config
        )
        self.guards = Guards(classes=self.tables.guard_classes, tags=self.tables.guard_tags)

    def batch_limit(self, kind: AnnotationKind) -> int:
        if kind is AnnotationKind.VOCABULARY:
            return self.config.vocabulary_batch_limit
        return self.config.concept_batch_limit

    async def annotate(self, kind: AnnotationKind | str, root: Tag) -> AnnotationResult:
        """Annotate `root` in place.

        Never raises for collaborator failures: the error is recorded on
        the result, the cache is left untouched for the batch, and the
        tree is not rewritten.

        Args:
            kind: Vocabulary or concept.
            root: Sanitized content tree.

        Returns:
            AnnotationResult describing what was asked, served, and rewritten.
        """
        kind = AnnotationKind(kind)
        result = AnnotationResult(kind=kind)

        if self.state.is_applied(kind.value):
            logger.debug("%s annotation already applied, skipping", kind.value)
            result.skipped = True
            return result
        self.state.mark_applied(kind.value)

        nodes = eligible_text_nodes(root, self.guards)
        resolved, unseen = self._discover(kind, nodes)
        result.cached_terms = sorted(resolved)

        batch = unseen[: self.batch_limit(kind)]
        if batch:
            result.requested_terms = batch
            try:
                written = await self._request(kind, batch)
            except CollaboratorError as e:
                result.error = str(e)
                logger.warning("%s annotation skipped: %s", kind.value, e)
                return result
            resolved.update(written)

        result.resolved_terms = dict(resolved)
        if not resolved:
            return result

        # Rewrites start only after the whole response is in the cache
        ops = plan_annotations(nodes, resolved, kind)
        result.nodes_rewritten = apply_rewrites(ops, RENDERERS[kind])
        result.occurrences_annotated = sum(op.occurrences for op in ops)
        logger.debug(
            "%s annotation rewrote %d nodes (%d occurrences)",
            kind.value,
            result.nodes_rewritten,
            result.occurrences_annotated,
        )
        return result

    def _discover(self, kind: AnnotationKind, nodes: list) -> tuple[dict[str, str], list[str]]:
        """Split candidate terms into cached annotations and unseen keys.

        Returns:
            (resolved key -> value, unseen keys in order of first appearance)
        """
        cache = self.state.cache
        resolved: dict[str, str] = {}
        unseen: dict[str, None] = {}
        for node in nodes:
            for term in self.classifier.candidates(kind, str(node)):
                key = self.classifier.cache_key(kind, term)
                cached = cache.get(kind, key)
                if cached is SKIP:
                    continue
                if cached is not None:
                    resolved[key] = cached
                else:
                    unseen[key] = None
        return resolved, list(unseen)

    async def _request(self, kind: AnnotationKind, batch: list[str]) -> dict[str, str]:
        """Ask the collaborator about a batch and cache every parsed answer.

        Returns:
            Newly resolved key -> value pairs, SKIP entries excluded.
        """
        prompt, context = build_prompt(kind, batch)
        logger.info("Requesting %s annotations for %d terms", kind.value, len(batch))
        answer = await ask(self.collaborator, prompt, context)

        pairs = parse_response(answer, kind)
        written: dict[str, str] = {}
        for key, value in pairs:
            self.state.cache.store(kind, key, value)
            if isinstance(value, str):
                written[key] = value

        missing = [term for term in batch if not self.state.cache.contains(kind, term)]
        if missing:
            logger.debug("No usable answer for %d terms: %s", len(missing), missing)
        return written
