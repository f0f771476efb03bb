"""
Unit tests for content extraction.

Tests the root-selection cascade, metadata fallback chains,
isolate-selection mode, and the properties of extracted documents.
"""

import math
from datetime import date

import pytest
from bs4 import BeautifulSoup

from focusreader.config import ExtractionConfig
from focusreader.exceptions import ExtractionEmpty
from focusreader.extractors import ContentExtractor, MetadataExtractor, parse_date
from focusreader.extractors.metadata import format_date, site_from_url

LONG_TEXT = "Reading is a quiet conversation with a distant mind. " * 6


@pytest.fixture
def extractor() -> ContentExtractor:
    return ContentExtractor()


# =============================================================================
# Root selection
# =============================================================================


class TestRootSelection:
    """Test the primary / container scan / body cascade."""

    def test_semantic_candidate_wins(self, extractor, article_html):
        soup = BeautifulSoup(article_html, "html.parser")
        selection = extractor.select_root(soup)

        assert selection.node.name == "article"
        assert selection.source == "semantic"

    def test_container_scan_when_no_semantic_candidate(self, extractor):
        html = f"""<body>
        <div class="wrapper"><div id="story-body">
          <p>{LONG_TEXT}</p><p>{LONG_TEXT}</p>
        </div></div>
        </body>"""
        soup = BeautifulSoup(html, "html.parser")
        selection = extractor.select_root(soup)

        assert selection.source == "container_scan"
        assert selection.node.get("id") == "story-body"

    def test_container_scan_ties_go_to_first(self, extractor):
        html = f"""<body>
        <section id="first"><p>{LONG_TEXT}</p></section>
        <section id="second"><p>{LONG_TEXT}</p></section>
        </body>"""
        soup = BeautifulSoup(html, "html.parser")
        selection = extractor.select_root(soup)

        assert selection.node.get("id") == "first"

    def test_body_fallback(self, extractor):
        html = f"<html><body><p>{LONG_TEXT}</p></body></html>"
        soup = BeautifulSoup(html, "html.parser")
        selection = extractor.select_root(soup)

        assert selection.source == "body"
        assert selection.score is None

    def test_short_body_raises(self, extractor, tiny_html):
        soup = BeautifulSoup(tiny_html, "html.parser")
        with pytest.raises(ExtractionEmpty):
            extractor.select_root(soup)

    def test_scan_logs_escalation(self, extractor):
        html = f"<body><div><p>{LONG_TEXT}</p></div></body>"
        log: list[str] = []
        extractor.select_root(BeautifulSoup(html, "html.parser"), log)
        assert any("scanning all containers" in line for line in log)


# =============================================================================
# Extraction
# =============================================================================


class TestExtract:
    """Test end-to-end extraction of a single document."""

    def test_extracts_article(self, extractor, article_html, article_url):
        doc = extractor.extract(article_html, article_url)

        assert doc is not None
        assert doc.title == "Understanding Ubiquitous Computing"
        assert doc.site_name == "Example News"
        assert doc.author == "Jane Doe"
        assert doc.publish_date == date(2024, 3, 3)
        assert doc.publish_date_label == "March 3, 2024"
        assert doc.source_url == article_url
        assert doc.is_isolated is False

    def test_content_is_sanitized(self, extractor, article_html):
        doc = extractor.extract(article_html)

        assert doc.content.find("script") is None
        assert doc.content.select_one(".share") is None
        assert "onclick" not in doc.content_html
        assert "Share this" not in doc.content.get_text()

    def test_headings_indexed(self, extractor, article_html):
        doc = extractor.extract(article_html)

        assert [(h.level, h.text) for h in doc.headings] == [
            (1, "Understanding Ubiquitous Computing"),
            (2, "Background"),
        ]
        assert doc.headings[0].anchor_id == "focus-heading-0"
        assert doc.headings[1].anchor_id == "background"
        assert doc.content.find("h1")["id"] == "focus-heading-0"

    def test_live_tree_untouched(self, extractor, article_html):
        soup = BeautifulSoup(article_html, "html.parser")
        before = str(soup)
        extractor.extract(soup)
        assert str(soup) == before

    def test_scenario_d_tiny_body_returns_none(self, extractor, tiny_html):
        """A 40-character body with no containers is ExtractionEmpty."""
        assert extractor.extract(tiny_html) is None
        assert any("Extraction empty" in line for line in extractor.last_log)

    def test_extract_or_raise(self, extractor, tiny_html):
        with pytest.raises(ExtractionEmpty):
            extractor.extract_or_raise(tiny_html)

    def test_short_cleaned_content_is_empty(self):
        extractor = ContentExtractor(config=ExtractionConfig(min_content_chars=10_000))
        html = f"<article><p>{LONG_TEXT}</p></article>"
        assert extractor.extract(html) is None

    def test_word_count_and_reading_time(self, extractor):
        html = "<article><p>" + "word " * 450 + "</p></article>"
        doc = extractor.extract(html)

        assert doc.word_count == 450
        assert doc.reading_time_minutes == 3
        assert doc.reading_time_label == "3 min read"

    def test_reading_time_at_least_one_minute(self, extractor, article_html):
        doc = extractor.extract(article_html)

        assert doc.word_count >= 0
        assert doc.reading_time_minutes == max(1, math.ceil(doc.word_count / 200))
        assert doc.reading_time_minutes == 1

    def test_processing_log(self, extractor, article_html):
        doc = extractor.extract(article_html)
        assert any("Extraction complete" in line for line in doc.processing_log)

    def test_to_dict(self, extractor, article_html, article_url):
        data = extractor.extract(article_html, article_url).to_dict()

        assert data["title"] == "Understanding Ubiquitous Computing"
        assert data["publish_date"] == "2024-03-03"
        assert data["headings"][1] == {"level": 2, "text": "Background", "anchor_id": "background"}
        assert data["content"].startswith("<article")


# =============================================================================
# Isolate selection
# =============================================================================


class TestIsolate:
    """Test building a document from selected text."""

    def test_blank_lines_separate_paragraphs(self, extractor):
        doc = extractor.isolate(
            "First paragraph line.\n\nSecond paragraph\nstill second.",
            "https://www.example.com/x",
        )

        paragraphs = [p.get_text() for p in doc.content.find_all("p")]
        assert paragraphs == ["First paragraph line.", "Second paragraph still second."]

    def test_lines_become_paragraphs_without_blank_lines(self, extractor):
        doc = extractor.isolate("one\ntwo\nthree")
        assert len(doc.content.find_all("p")) == 3

    def test_synthetic_metadata(self, extractor):
        doc = extractor.isolate("Some selected words.", "https://www.example.com/x")

        assert doc.is_isolated is True
        assert doc.title == "Isolated Selection"
        assert doc.author == "Selected Text"
        assert doc.site_name == "example.com"
        assert doc.publish_date == date.today()
        assert doc.word_count == 3
        assert doc.headings == ()

    @pytest.mark.parametrize("text", ["", "   ", "\n\n", None])
    def test_empty_selection_returns_none(self, extractor, text):
        assert extractor.isolate(text) is None


# =============================================================================
# Metadata
# =============================================================================


class TestMetadataChains:
    """Test metadata fallback chains."""

    def test_title_falls_back_to_page_title(self):
        soup = BeautifulSoup("<html><head><title> Page </title></head><body></body></html>", "html.parser")
        assert MetadataExtractor().extract(soup).title == "Page"

    def test_title_prefers_open_graph_over_page_title(self):
        html = """<html><head>
        <meta property="og:title" content="OG Title"><title>Page</title>
        </head><body></body></html>"""
        soup = BeautifulSoup(html, "html.parser")
        assert MetadataExtractor().extract(soup).title == "OG Title"

    def test_untitled_default(self):
        soup = BeautifulSoup("<body><p>text</p></body>", "html.parser")
        metadata = MetadataExtractor().extract(soup)

        assert metadata.title == "Untitled"
        assert metadata.author is None
        assert metadata.publish_date is None
        assert metadata.publish_date_label is None

    def test_site_name_falls_back_to_hostname(self):
        soup = BeautifulSoup("<body></body>", "html.parser")
        metadata = MetadataExtractor().extract(soup, "https://www.blog.example.org/post")
        assert metadata.site_name == "blog.example.org"

    def test_author_from_meta(self):
        soup = BeautifulSoup('<head><meta name="author" content="Ada"></head>', "html.parser")
        assert MetadataExtractor().extract(soup).author == "Ada"

    def test_date_from_class_attribute(self):
        soup = BeautifulSoup('<span class="post-date" datetime="2023-11-05">Nov 5</span>', "html.parser")
        assert MetadataExtractor().extract(soup).publish_date == date(2023, 11, 5)

    def test_unparseable_date_is_none(self):
        soup = BeautifulSoup('<time datetime="sometime soon">soon</time>', "html.parser")
        assert MetadataExtractor().extract(soup).publish_date is None


class TestDateParsing:
    """Test publish-date parsing."""

    @pytest.mark.parametrize(
        "value",
        [
            "2024-03-03",
            "2024-03-03T10:00:00Z",
            "2024-03-03T10:00:00+02:00",
            "March 3, 2024",
            "Mar 3, 2024",
            "3 March 2024",
            "2024/03/03",
            "03/03/2024",
            "Published on 3 March 2024",
            "Updated Mar. 3, 2024 at noon",
        ],
    )
    def test_formats(self, value):
        assert parse_date(value) == date(2024, 3, 3)

    @pytest.mark.parametrize("value", ["", "   ", "yesterday", "2024-13-45"])
    def test_invalid(self, value):
        assert parse_date(value) is None

    def test_format_date(self):
        assert format_date(date(2024, 3, 3)) == "March 3, 2024"

    def test_site_from_url(self):
        assert site_from_url("https://www.example.com/a") == "example.com"
        assert site_from_url("") == ""
