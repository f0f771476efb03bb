"""
Content extractor.

Picks the extraction root with a cascading search:
1. Primary: semantic containers (article, main role, content classes) in priority order
2. Secondary: full scan of every generic container when no semantic
   candidate reaches the score threshold
3. Fallback: the document body, only if its cleaned text is long enough

The winning root is copied before sanitizing so the live document stays
untouched. Metadata is resolved separately from the whole document.
"""

from __future__ import annotations

import copy
import logging
import re
from dataclasses import dataclass, field
from datetime import date

from bs4 import BeautifulSoup, Tag

from focusreader.config import ExtractionConfig
from focusreader.exceptions import ExtractionEmpty
from focusreader.extractors.metadata import (
    DocumentMetadata,
    MetadataExtractor,
    format_date,
    site_from_url,
)
from focusreader.extractors.scorer import ContentScorer
from focusreader.models import ExtractedDocument, reading_time_minutes
from focusreader.normalizers.headings import HeadingIndexer, count_words
from focusreader.normalizers.sanitizer import ContentSanitizer
from focusreader.tables import HeuristicTables, default_tables

logger = logging.getLogger(__name__)

HTML_PARSER = "html.parser"

ISOLATED_TITLE = "Isolated Selection"
ISOLATED_AUTHOR = "Selected Text"
ISOLATED_CLASS = "focus-isolated"

BLANK_LINE_PATTERN = re.compile(r"\n\s*\n")


@dataclass
class RootSelection:
    """The chosen extraction root and how it was found."""

    node: Tag
    score: float | None  # None for the body fallback
    source: str  # "semantic", "container_scan", "body"
    log: list[str] = field(default_factory=list)


def parse_document(document: str | bytes | Tag) -> BeautifulSoup | Tag:
    """Parse markup into a tree, passing already-parsed trees through."""
    if isinstance(document, Tag):
        return document
    return BeautifulSoup(document, HTML_PARSER)


class ContentExtractor:
    """Extracts the primary readable content of a document.

    Usage:
        extractor = ContentExtractor()
        doc = extractor.extract(html, "https://example.com/story")
        if doc is None:
            print("No readable content")
        else:
            print(doc.title, doc.word_count)
    """

    def __init__(
        self,
        *,
        config: ExtractionConfig | None = None,
        tables: HeuristicTables | None = None,
        scorer: ContentScorer | None = None,
        sanitizer: ContentSanitizer | None = None,
        indexer: HeadingIndexer | None = None,
        metadata: MetadataExtractor | None = None,
    ):
        """Initialize the extractor.

        Args:
            config: Extraction thresholds (default creates one).
            tables: Heuristic tables shared by all stages (default loads packaged tables).
            scorer: Content scorer (default creates one).
            sanitizer: Sanitizer for the winning root (default creates one).
            indexer: Heading indexer (default creates one from config).
            metadata: Metadata extractor (default creates one).
        """
        self.config = config or ExtractionConfig()
        self.tables = tables or default_tables()
        self.scorer = scorer or ContentScorer(self.tables)
        self.sanitizer = sanitizer or ContentSanitizer(self.tables, self.config)
        self.indexer = indexer or HeadingIndexer(
            anchor_prefix=self.config.heading_anchor_prefix,
            max_chars=self.config.heading_max_chars,
        )
        self.metadata = metadata or MetadataExtractor(self.tables)
        self.last_log: list[str] = []

    def extract(self, document: str | bytes | Tag, source_url: str = "") -> ExtractedDocument | None:
        """Extract readable content, or return None when there is none.

        Args:
            document: HTML markup or a parsed tree.
            source_url: Page URL, recorded on the result.

        Returns:
            ExtractedDocument, or None when no qualifying content exists.
        """
        try:
            return self.extract_or_raise(document, source_url)
        except ExtractionEmpty as e:
            self.last_log.append(f"Extraction empty: {e}")
            logger.info("No readable content in %s: %s", source_url or "document", e)
            return None

    def extract_or_raise(self, document: str | bytes | Tag, source_url: str = "") -> ExtractedDocument:
        """Extract readable content.

        Raises:
            ExtractionEmpty: If no qualifying content exists.
        """
        soup = parse_document(document)
        log: list[str] = []
        self.last_log = log

        selection = self.select_root(soup, log)
        log.extend(selection.log)

        content = self.sanitizer.sanitize(copy.copy(selection.node))
        text = " ".join(content.get_text(" ").split())
        if len(text) < self.config.min_content_chars:
            raise ExtractionEmpty(
                f"Cleaned content has {len(text)} characters, "
                f"need {self.config.min_content_chars}"
            )

        metadata = self.metadata.extract(soup, source_url)
        headings = self.indexer.index(content)
        word_count = count_words(content)
        log.append(
            f"Extraction complete: {word_count} words, {len(headings)} headings "
            f"from {selection.source} root"
        )
        logger.info(
            "Extracted %d words from %s root (score=%s)",
            word_count,
            selection.source,
            "n/a" if selection.score is None else f"{selection.score:.1f}",
        )

        return self._build(content, metadata, source_url, headings, word_count, log)

    def select_root(self, soup: BeautifulSoup | Tag, log: list[str] | None = None) -> RootSelection:
        """Choose the extraction root.

        Ties go to the first-encountered node: a later node must score
        strictly higher to win.

        Raises:
            ExtractionEmpty: If no container qualifies and the body is too short.
        """
        log = log if log is not None else []
        best: Tag | None = None
        best_score = 0.0
        source = "semantic"
        seen: set[int] = set()

        # Step 1: Semantic candidates in priority order
        for selector in self.tables.candidate_selectors:
            node = soup.select_one(selector)
            if node is None or id(node) in seen:
                continue
            seen.add(id(node))
            score = self.scorer.score(node)
            logger.debug("Candidate %s scored %.1f", selector, score)
            if score > best_score:
                best, best_score = node, score

        if best is not None:
            log.append(f"Best semantic candidate scored {best_score:.1f}")

        # Step 2: Full container scan
        if best is None or best_score < self.config.score_threshold:
            log.append(
                f"No semantic candidate reached {self.config.score_threshold:g}, "
                "scanning all containers"
            )
            for node in soup.find_all(list(self.tables.fallback_tags)):
                score = self.scorer.score(node)
                if score > best_score:
                    best, best_score, source = node, score, "container_scan"

        if best is not None:
            return RootSelection(node=best, score=best_score, source=source, log=log)

        # Step 3: Body fallback
        body = _document_body(soup)
        probe = self.sanitizer.sanitize(copy.copy(body))
        body_chars = len(probe.get_text().strip())
        if body_chars > self.config.body_fallback_min_chars:
            log.append(f"Falling back to document body ({body_chars} chars)")
            return RootSelection(node=body, score=None, source="body", log=log)

        raise ExtractionEmpty(
            f"No content container found and body text has only {body_chars} characters"
        )

    def isolate(self, selected_text: str, source_url: str = "") -> ExtractedDocument | None:
        """Build a document from selected text instead of extracting.

        Blank lines separate paragraphs; without blank lines every line
        becomes a paragraph.

        Returns:
            ExtractedDocument with synthetic metadata, or None for an empty selection.
        """
        text = (selected_text or "").strip()
        if not text:
            return None

        if BLANK_LINE_PATTERN.search(text):
            blocks = BLANK_LINE_PATTERN.split(text)
        else:
            blocks = text.splitlines()

        soup = BeautifulSoup("", HTML_PARSER)
        root = soup.new_tag("div", attrs={"class": ISOLATED_CLASS})
        soup.append(root)
        for block in blocks:
            paragraph_text = " ".join(block.split())
            if paragraph_text:
                paragraph = soup.new_tag("p")
                paragraph.string = paragraph_text
                root.append(paragraph)

        today = date.today()
        metadata = DocumentMetadata(
            title=ISOLATED_TITLE,
            site_name=site_from_url(source_url),
            author=ISOLATED_AUTHOR,
            publish_date=today,
        )
        headings = self.indexer.index(root)
        word_count = count_words(root)
        log = [f"Isolated selection: {len(root.find_all('p'))} paragraphs, {word_count} words"]
        self.last_log = log
        return self._build(root, metadata, source_url, headings, word_count, log, isolated=True)

    def _build(
        self,
        content: Tag,
        metadata: DocumentMetadata,
        source_url: str,
        headings: list,
        word_count: int,
        log: list[str],
        isolated: bool = False,
    ) -> ExtractedDocument:
        return ExtractedDocument(
            title=metadata.title,
            site_name=metadata.site_name,
            content=content,
            content_html=str(content),
            source_url=source_url,
            word_count=word_count,
            reading_time_minutes=reading_time_minutes(word_count, self.config.words_per_minute),
            headings=tuple(headings),
            author=metadata.author,
            publish_date=metadata.publish_date,
            publish_date_label=(
                format_date(metadata.publish_date) if metadata.publish_date else None
            ),
            is_isolated=isolated,
            processing_log=tuple(log),
        )


def _document_body(soup: BeautifulSoup | Tag) -> Tag:
    """The body element, or the best stand-in for markup without one."""
    if soup.name == "body":
        return soup
    body = soup.find("body")
    if body is not None:
        return body
    html = soup.find("html")
    if html is not None:
        return html
    return BeautifulSoup(f"<div>{soup.decode_contents()}</div>", HTML_PARSER).div
