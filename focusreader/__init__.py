"""
FocusReader: distraction-reduced reading surfaces for web documents.

This library extracts the primary readable content of an HTML document,
cleans it into a reading surface, enriches it on demand with cached
vocabulary and concept annotations from a text-inference collaborator,
and remembers how far a reader got across sessions.

Example:
    >>> import focusreader
    >>> engine = focusreader.ReaderEngine(collaborator, focusreader.MemoryStore())
    >>> doc = engine.extract(html, "https://example.com/post")
    >>> print(doc.title, doc.reading_time_label)
    >>> result = asyncio.run(engine.annotate("vocabulary"))
"""

from focusreader.annotation import (
    SKIP,
    AnnotationCache,
    AnnotationState,
    Annotator,
    CollaboratorResponse,
    Emphasizer,
    LexicalClassifier,
    TextInferenceCollaborator,
)
from focusreader.config import (
    AnnotationConfig,
    ExtractionConfig,
    ProgressConfig,
    ReaderConfig,
)
from focusreader.engine import ReaderEngine, ReadingSession
from focusreader.exceptions import (
    CollaboratorError,
    ConfigurationError,
    ExtractionEmpty,
    FocusReaderError,
    StoreUnavailable,
)
from focusreader.extractors import ContentExtractor, ContentScorer
from focusreader.models import (
    AnnotationKind,
    AnnotationResult,
    ExtractedDocument,
    Heading,
    ProgressRecord,
)
from focusreader.normalizers import ContentSanitizer, HeadingIndexer
from focusreader.progress import (
    JSONFileStore,
    KeyValueStore,
    MemoryStore,
    ProgressStore,
    TrailingThrottle,
)
from focusreader.tables import HeuristicTables, load_tables

__version__ = "0.1.0"
__all__ = [
    # Main API
    "ReaderEngine",
    "ReadingSession",
    # Configuration
    "ReaderConfig",
    "ExtractionConfig",
    "AnnotationConfig",
    "ProgressConfig",
    "HeuristicTables",
    "load_tables",
    # Models
    "ExtractedDocument",
    "Heading",
    "AnnotationKind",
    "AnnotationResult",
    "ProgressRecord",
    # Components
    "ContentExtractor",
    "ContentScorer",
    "ContentSanitizer",
    "HeadingIndexer",
    "Annotator",
    "Emphasizer",
    "AnnotationCache",
    "AnnotationState",
    "LexicalClassifier",
    "SKIP",
    "TextInferenceCollaborator",
    "CollaboratorResponse",
    "ProgressStore",
    "TrailingThrottle",
    # Stores
    "KeyValueStore",
    "MemoryStore",
    "JSONFileStore",
    # Exceptions
    "FocusReaderError",
    "ConfigurationError",
    "ExtractionEmpty",
    "CollaboratorError",
    "StoreUnavailable",
]
