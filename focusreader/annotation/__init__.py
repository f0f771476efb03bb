"""
Annotation module.

Enriches sanitized content with inline annotations sourced from a
text-inference collaborator:
- Vocabulary: simpler synonyms for complex words
- Concepts: short explanations of acronyms and technical terms

Answers are cached per term for the reading session, so a term is asked
about at most once however often it appears.

Example:
    >>> from focusreader.annotation import AnnotationState, Annotator
    >>> annotator = Annotator(collaborator, AnnotationState())
    >>> result = asyncio.run(annotator.annotate("vocabulary", doc.content))
"""

from focusreader.annotation.annotator import Annotator
from focusreader.annotation.cache import (
    EMPHASIS_FLAG,
    SKIP,
    AnnotationCache,
    AnnotationState,
)
from focusreader.annotation.collaborator import (
    CollaboratorResponse,
    TextInferenceCollaborator,
    build_prompt,
    parse_response,
)
from focusreader.annotation.emphasis import Emphasizer
from focusreader.annotation.lexical import (
    LexicalClassifier,
    count_syllables,
)
from focusreader.annotation.rewrite import (
    Guards,
    RewriteOp,
    Segment,
    apply_rewrites,
    eligible_text_nodes,
    plan_annotations,
    plan_emphasis,
)

__all__ = [
    # Annotator
    "Annotator",
    "Emphasizer",
    # Cache
    "AnnotationCache",
    "AnnotationState",
    "SKIP",
    "EMPHASIS_FLAG",
    # Collaborator
    "TextInferenceCollaborator",
    "CollaboratorResponse",
    "build_prompt",
    "parse_response",
    # Lexical
    "LexicalClassifier",
    "count_syllables",
    # Rewrite
    "Guards",
    "Segment",
    "RewriteOp",
    "eligible_text_nodes",
    "plan_annotations",
    "plan_emphasis",
    "apply_rewrites",
]
