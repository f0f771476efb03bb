"""
Normalizers for extracted content.

- ContentSanitizer: strips noise subtrees and unsafe attributes
- HeadingIndexer: assigns anchor ids and builds the outline
"""

from focusreader.normalizers.headings import (
    HeadingIndexer,
    count_words,
    truncate,
)
from focusreader.normalizers.sanitizer import (
    ContentSanitizer,
    SanitizeStats,
    sanitize,
)

__all__ = [
    "ContentSanitizer",
    "SanitizeStats",
    "sanitize",
    "HeadingIndexer",
    "count_words",
    "truncate",
]
