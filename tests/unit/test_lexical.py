"""Tests for the lexical classifier."""

import pytest

from focusreader.annotation import LexicalClassifier, count_syllables
from focusreader.config import AnnotationConfig
from focusreader.models import AnnotationKind
from focusreader.tables import default_tables


@pytest.fixture
def classifier() -> LexicalClassifier:
    return LexicalClassifier(default_tables().common_words)


class TestSyllables:
    @pytest.mark.parametrize(
        "word,expected",
        [
            ("ubiquitous", 4),
            ("cat", 1),
            ("a", 1),
            ("computing", 3),
            ("strength", 1),
            ("Melancholy", 4),
        ],
    )
    def test_count(self, word, expected):
        assert count_syllables(word) == expected

    def test_never_zero(self):
        assert count_syllables("rhythm") >= 1


class TestVocabulary:
    """Test complex-word detection."""

    def test_complex_word(self, classifier):
        assert classifier.is_complex("ubiquitous")
        assert classifier.is_complex("Ubiquitous")

    def test_short_words_never_complex(self, classifier):
        assert not classifier.is_complex("eclipse")  # 7 letters

    def test_common_words_excluded(self, classifier):
        assert not classifier.is_complex("president")
        assert not classifier.is_complex("information")

    def test_few_syllables_excluded(self, classifier):
        assert not classifier.is_complex("strength")

    def test_candidates_in_order(self, classifier):
        text = "The ubiquitous melancholy of government forms, ubiquitous again."
        assert classifier.candidates(AnnotationKind.VOCABULARY, text) == [
            "ubiquitous",
            "melancholy",
            "ubiquitous",
        ]

    def test_custom_thresholds(self):
        config = AnnotationConfig(min_vocabulary_length=5, min_syllables=2)
        classifier = LexicalClassifier(config=config)
        assert classifier.is_complex("river")


class TestConcepts:
    """Test acronym and technical-term detection."""

    def test_candidates(self, classifier):
        text = "NASA used JavaScript and Web3 tools, but not Internationalization."
        assert classifier.candidates(AnnotationKind.CONCEPT, text) == [
            "NASA",
            "JavaScript",
            "Web3",
        ]

    def test_long_tokens_excluded(self, classifier):
        assert classifier.candidates(AnnotationKind.CONCEPT, "ABCDEFGHIJKL") == []
        assert not classifier.is_concept("ABCDEFGHIJKL")

    def test_is_concept(self, classifier):
        assert classifier.is_concept("HTTP")
        assert classifier.is_concept("GraphQl")
        assert not classifier.is_concept("Hello")
        assert not classifier.is_concept("A")

    def test_case_sensitive(self, classifier):
        assert classifier.candidates(AnnotationKind.CONCEPT, "Nasa nasa") == []


class TestCacheKeys:
    def test_vocabulary_keys_lowercase(self):
        assert LexicalClassifier.cache_key(AnnotationKind.VOCABULARY, "Ubiquitous") == "ubiquitous"

    def test_concept_keys_keep_case(self):
        assert LexicalClassifier.cache_key(AnnotationKind.CONCEPT, "JavaScript") == "JavaScript"
