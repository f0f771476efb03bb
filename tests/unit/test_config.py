"""Tests for configuration, heuristic tables, and data models."""

import pytest

from focusreader import (
    AnnotationConfig,
    ConfigurationError,
    ExtractionConfig,
    FocusReaderError,
    ProgressConfig,
    ReaderConfig,
    load_tables,
)
from focusreader.models import AnnotationKind, AnnotationResult, ProgressRecord, reading_time_minutes
from focusreader.tables import HeuristicTables, default_tables


class TestReaderConfig:
    def test_defaults(self):
        config = ReaderConfig()

        assert config.extraction.score_threshold == 50
        assert config.extraction.body_fallback_min_chars == 100
        assert config.annotation.vocabulary_batch_limit == 15
        assert config.annotation.concept_batch_limit == 10
        assert config.progress.expiry_days == 7
        assert config.progress.throttle_seconds == 0.5
        assert config.progress.clear_shelf_below_min is True

    def test_expiry_ms(self):
        assert ProgressConfig(expiry_days=1).expiry_ms == 86_400_000

    def test_configuration_error_is_value_error(self):
        assert issubclass(ConfigurationError, ValueError)
        assert issubclass(ConfigurationError, FocusReaderError)

    @pytest.mark.parametrize(
        "factory",
        [
            lambda: ExtractionConfig(words_per_minute=0),
            lambda: ExtractionConfig(heading_max_chars=0),
            lambda: ExtractionConfig(min_content_chars=-1),
            lambda: ExtractionConfig(heading_anchor_prefix=""),
            lambda: AnnotationConfig(vocabulary_batch_limit=0),
            lambda: AnnotationConfig(concept_batch_limit=0),
            lambda: AnnotationConfig(min_vocabulary_length=0),
            lambda: AnnotationConfig(emphasis_ratio=0),
            lambda: AnnotationConfig(emphasis_ratio=1.5),
            lambda: ProgressConfig(throttle_seconds=-1),
            lambda: ProgressConfig(expiry_days=0),
            lambda: ProgressConfig(shelf_min_percent=95, shelf_max_percent=5),
            lambda: ProgressConfig(shelf_max_percent=101),
            lambda: ProgressConfig(shelf_key="focus-reading-progress-shelf"),
        ],
    )
    def test_invalid_values(self, factory):
        with pytest.raises(ConfigurationError):
            factory()


class TestHeuristicTables:
    """Test loading of the packaged and custom tables."""

    def test_packaged_tables(self):
        tables = default_tables()

        assert "sidebar" in tables.negative_keywords
        assert "article" in tables.positive_keywords
        assert tables.negative_weight == -30
        assert tables.positive_weight == 20
        assert tables.candidate_selectors[0] == "article"
        assert "onclick" not in tables.allowed_attributes
        assert "href" in tables.allowed_attributes
        assert [r.selector for r in tables.metadata_rules["title"]][-1] == "title"

    def test_common_words_are_strings(self):
        """YAML must not turn on/no into booleans."""
        words = default_tables().common_words
        assert "on" in words
        assert "no" in words
        assert all(isinstance(w, str) for w in words)

    def test_default_tables_cached(self):
        assert default_tables() is default_tables()
        assert load_tables() is default_tables()

    def test_custom_file(self, tmp_path):
        path = tmp_path / "tables.yaml"
        path.write_text(
            """
scoring:
  negative_keywords: [junk]
  positive_keywords: [story]
candidate_selectors: [article]
fallback_tags: [div]
sanitizer:
  remove_selectors: [script]
  allowed_attributes: [href]
metadata:
  title:
    - {selector: h1}
annotation:
  guard_classes: [vocab-word]
  guard_tags: [code]
  common_words: [Example]
""",
            encoding="utf-8",
        )
        tables = load_tables(path)

        assert isinstance(tables, HeuristicTables)
        assert tables.negative_keywords == ("junk",)
        assert tables.common_words == frozenset({"example"})
        assert tables.metadata_rules["author"] == ()
        assert tables.media_tags == ("img",)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_tables(tmp_path / "absent.yaml")

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "tables.yaml"
        path.write_text("scoring: {}\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_tables(path)

    def test_non_mapping_file(self, tmp_path):
        path = tmp_path / "tables.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_tables(path)


class TestModels:
    @pytest.mark.parametrize("words,minutes", [(0, 1), (1, 1), (200, 1), (201, 2), (1000, 5)])
    def test_reading_time(self, words, minutes):
        assert reading_time_minutes(words) == minutes

    def test_annotation_result_requested(self):
        result = AnnotationResult(kind=AnnotationKind.VOCABULARY)
        assert result.requested is False

        result.requested_terms = ["ubiquitous"]
        assert result.requested is True

    def test_progress_record_from_dict(self):
        record = ProgressRecord(
            key="k",
            scroll_top=640.0,
            timestamp_ms=1,
            title="T",
            favicon_url="f",
            progress_percent=50,
            reading_time_label="1 min read",
            hostname="h",
            source_url="u",
        )
        assert ProgressRecord.from_dict(record.to_dict()) == record

    @pytest.mark.parametrize(
        "data",
        [
            {},
            {"key": "k", "scroll_top": "x", "timestamp_ms": 1, "progress_percent": 1, "source_url": "u"},
            {"key": "k", "scroll_top": 1, "timestamp_ms": None, "progress_percent": 1, "source_url": "u"},
        ],
    )
    def test_progress_record_corrupt(self, data):
        with pytest.raises((KeyError, TypeError, ValueError)):
            ProgressRecord.from_dict(data)

    def test_kind_from_string(self):
        assert AnnotationKind("concept") is AnnotationKind.CONCEPT
