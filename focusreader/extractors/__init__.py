"""
Content extraction module.

Implements cascading root selection:
- Primary: semantic containers (article, main, content classes)
- Secondary: full scan of generic containers below the score threshold
- Fallback: document body when its cleaned text is long enough

Metadata (title, site name, author, date) resolves through fixed
fallback chains, independently of the chosen root.
"""

from focusreader.extractors.content import (
    ContentExtractor,
    RootSelection,
    parse_document,
)
from focusreader.extractors.metadata import (
    DocumentMetadata,
    MetadataExtractor,
    parse_date,
)
from focusreader.extractors.scorer import (
    ContentScorer,
    score_node,
)

__all__ = [
    # Main extractor
    "ContentExtractor",
    "RootSelection",
    "parse_document",
    # Scoring
    "ContentScorer",
    "score_node",
    # Metadata
    "DocumentMetadata",
    "MetadataExtractor",
    "parse_date",
]
