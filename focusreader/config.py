"""
Configuration for FocusReader extraction, annotation, and progress tracking.

All options have defaults matching the reading surface's tuned behavior.
"""

from dataclasses import dataclass, field

from focusreader.exceptions import ConfigurationError


@dataclass
class ExtractionConfig:
    """
    Configuration for content extraction and sanitizing.

    Example:
        >>> config = ReaderConfig(
        ...     extraction=ExtractionConfig(score_threshold=40)
        ... )
    """

    # Root selection
    score_threshold: float = 50.0  # Below this, scan every container
    body_fallback_min_chars: int = 100  # Cleaned body text needed for body fallback
    min_content_chars: int = 50  # Shorter extractions count as empty

    # Reading time
    words_per_minute: int = 200

    # Heading index
    heading_anchor_prefix: str = "focus-heading-"
    heading_max_chars: int = 60

    # Sanitizer
    code_class: str = "focus-code"
    internal_attribute_prefix: str = "data-focus-"

    def __post_init__(self):
        """Validate configuration."""
        if self.words_per_minute < 1:
            raise ConfigurationError(
                f"words_per_minute must be >= 1, got {self.words_per_minute}"
            )
        if self.heading_max_chars < 1:
            raise ConfigurationError(
                f"heading_max_chars must be >= 1, got {self.heading_max_chars}"
            )
        if self.body_fallback_min_chars < 0 or self.min_content_chars < 0:
            raise ConfigurationError("character thresholds must be non-negative")
        if not self.heading_anchor_prefix:
            raise ConfigurationError("heading_anchor_prefix must not be empty")


@dataclass
class AnnotationConfig:
    """
    Configuration for vocabulary and concept annotation.

    Batch limits bound the size of a single collaborator request.
    """

    vocabulary_batch_limit: int = 15
    concept_batch_limit: int = 10

    # Vocabulary heuristics
    min_vocabulary_length: int = 8
    min_syllables: int = 3

    # Concept heuristics
    max_concept_length: int = 10  # Longer tokens are usually names

    # Emphasis reading: share of each word rendered bold
    emphasis_ratio: float = 0.4

    def __post_init__(self):
        """Validate configuration."""
        for name in ("vocabulary_batch_limit", "concept_batch_limit"):
            value = getattr(self, name)
            if value < 1:
                raise ConfigurationError(f"{name} must be >= 1, got {value}")
        if self.min_vocabulary_length < 1:
            raise ConfigurationError(
                f"min_vocabulary_length must be >= 1, got {self.min_vocabulary_length}"
            )
        if self.emphasis_ratio <= 0.0 or self.emphasis_ratio > 1.0:
            raise ConfigurationError(
                f"emphasis_ratio must be in (0.0, 1.0], got {self.emphasis_ratio}"
            )


@dataclass
class ProgressConfig:
    """
    Configuration for reading progress and the in-progress shelf.

    Example:
        >>> config = ProgressConfig(expiry_days=14, clear_shelf_below_min=False)
    """

    throttle_seconds: float = 0.5
    expiry_days: int = 7
    resume_min_scroll_top: int = 200

    # Shelf holds documents with shelf_min_percent < progress < shelf_max_percent
    shelf_min_percent: int = 5
    shelf_max_percent: int = 95
    # Scrolling back to <= shelf_min_percent also drops the shelf entry.
    # False keeps the legacy behavior where only finishing removes it.
    clear_shelf_below_min: bool = True

    # Storage layout
    record_key_prefix: str = "focus-reading-progress-"
    shelf_key: str = "reading_shelf"
    max_title_chars: int = 100

    def __post_init__(self):
        """Validate configuration."""
        if self.throttle_seconds < 0:
            raise ConfigurationError(
                f"throttle_seconds must be >= 0, got {self.throttle_seconds}"
            )
        if self.expiry_days < 1:
            raise ConfigurationError(f"expiry_days must be >= 1, got {self.expiry_days}")
        if not 0 <= self.shelf_min_percent < self.shelf_max_percent <= 100:
            raise ConfigurationError(
                "shelf bounds must satisfy 0 <= shelf_min_percent < shelf_max_percent <= 100, "
                f"got {self.shelf_min_percent} and {self.shelf_max_percent}"
            )
        if self.shelf_key.startswith(self.record_key_prefix):
            raise ConfigurationError("shelf_key must not share the record key prefix")

    @property
    def expiry_ms(self) -> int:
        """Record lifetime in milliseconds."""
        return self.expiry_days * 24 * 60 * 60 * 1000


@dataclass
class ReaderConfig:
    """
    Configuration for a ReaderEngine.

    All options have sensible defaults. Create a config only
    if you need to customize behavior.

    Example:
        >>> config = ReaderConfig(
        ...     annotation=AnnotationConfig(vocabulary_batch_limit=20),
        ...     progress=ProgressConfig(expiry_days=14),
        ... )
        >>> engine = ReaderEngine(collaborator, store, config=config)
    """

    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    annotation: AnnotationConfig = field(default_factory=AnnotationConfig)
    progress: ProgressConfig = field(default_factory=ProgressConfig)
