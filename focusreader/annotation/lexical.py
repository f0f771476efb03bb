"""
Lexical classification of annotation candidates.

Decides which words are worth sending to the inference collaborator:
- Vocabulary: long words with three or more syllables that are not in
  the common-word set
- Concepts: acronyms, camel-mixed words, and word-number tokens short
  enough not to be full proper names

Syllables are estimated by counting vowel groups after stripping silent
endings. The estimate is rough but cheap and deterministic.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from focusreader.config import AnnotationConfig
from focusreader.models import AnnotationKind

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

# NASA, JavaScript-style camel mixes, Web3-style word-number tokens
CONCEPT_PATTERN = re.compile(r"\b([A-Z]{2,}|[A-Z][a-z]+[A-Z][a-z]+|[A-Z][a-z]+[0-9]+)\b")

NON_LETTER_PATTERN = re.compile(r"[^a-z]")
SILENT_ENDING_PATTERN = re.compile(r"(?:[^laeiouy]es|ed|[^laeiouy]e)$")
LEADING_Y_PATTERN = re.compile(r"^y")
VOWEL_GROUP_PATTERN = re.compile(r"[aeiouy]{1,2}")

MAX_MONOSYLLABLE_LENGTH = 3


def count_syllables(word: str) -> int:
    """
    Estimate the syllable count of an English word.

    Args:
        word: The word to analyze (any case).

    Returns:
        Estimated syllables, at least 1.

    Example:
        >>> count_syllables("ubiquitous")
        4
        >>> count_syllables("cat")
        1
    """
    w = NON_LETTER_PATTERN.sub("", word.lower())
    if len(w) <= MAX_MONOSYLLABLE_LENGTH:
        return 1
    w = SILENT_ENDING_PATTERN.sub("", w)
    w = LEADING_Y_PATTERN.sub("", w)
    groups = VOWEL_GROUP_PATTERN.findall(w)
    return len(groups) or 1


class LexicalClassifier:
    """
    Finds vocabulary and concept candidates in text.

    Attributes:
        common_words: Lowercase words never treated as complex.
        config: Length and syllable thresholds.

    Example:
        >>> classifier = LexicalClassifier(common_words={"information"})
        >>> classifier.is_complex("ubiquitous")
        True
        >>> classifier.is_complex("information")
        False
        >>> classifier.candidates(AnnotationKind.CONCEPT, "NASA launched Web3 tools")
        ['NASA', 'Web3']
    """

    def __init__(
        self,
        common_words: Iterable[str] = (),
        config: AnnotationConfig | None = None,
    ):
        self.common_words = frozenset(w.lower() for w in common_words)
        self.config = config or AnnotationConfig()
        self._vocabulary_pattern = re.compile(
            rf"\b[a-zA-Z]{{{self.config.min_vocabulary_length},}}\b"
        )

    def is_complex(self, word: str) -> bool:
        """Whether a word is long, uncommon, and polysyllabic."""
        w = word.lower()
        if len(w) < self.config.min_vocabulary_length:
            return False
        if w in self.common_words:
            return False
        return count_syllables(w) >= self.config.min_syllables

    def is_concept(self, token: str) -> bool:
        """Whether a token looks like an acronym or technical term."""
        if len(token) > self.config.max_concept_length:
            return False
        return CONCEPT_PATTERN.fullmatch(token) is not None

    def candidates(self, kind: AnnotationKind, text: str) -> list[str]:
        """
        Find candidate terms in text, in order of appearance.

        Repeated terms are returned once per occurrence; callers
        deduplicate by cache key.
        """
        if kind is AnnotationKind.VOCABULARY:
            return [w for w in self._vocabulary_pattern.findall(text) if self.is_complex(w)]
        return [
            m.group(0)
            for m in CONCEPT_PATTERN.finditer(text)
            if len(m.group(0)) <= self.config.max_concept_length
        ]

    @staticmethod
    def cache_key(kind: AnnotationKind, term: str) -> str:
        """Vocabulary is keyed case-insensitively; concepts keep their case."""
        if kind is AnnotationKind.VOCABULARY:
            return term.lower()
        return term
