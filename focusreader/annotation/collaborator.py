"""
Text-inference collaborator contract and annotation prompt grammar.

The engine only knows the collaborator through one coroutine:

    request(prompt, context) -> {"answer": str} | {"error": str}

Annotation answers use a line-oriented grammar, one term per line:

    term:value
    term:SKIP

A SKIP value (any case) means the term was judged not worth annotating.
Lines without a colon, or with an empty term or value, are dropped.
Only the first colon separates term from value, so values may contain
colons.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

from focusreader.annotation.cache import SKIP, CacheValue
from focusreader.exceptions import CollaboratorError
from focusreader.models import AnnotationKind

logger = logging.getLogger(__name__)

SKIP_TOKEN = "SKIP"

# Characters stripped from terms: list markers and quotes models like to add
TERM_STRIP_CHARS = " \t-*•\"'`"
VALUE_STRIP_CHARS = " \t\"'`"

VOCABULARY_PROMPT = """You are a vocabulary simplifier. For each word provided:
1. If the word is already simple or common (like "president"), respond with "SKIP".
2. If it is complex, provide ONE much simpler synonym.

Format: "complex:simple" or "complex:SKIP", one per line.
Words: {terms}"""

VOCABULARY_CONTEXT = "Objective: Simplify vocabulary only when necessary to save mental energy."

CONCEPT_PROMPT = """You are a technical concept explainer. For each term/acronym provided:
1. If it's a common word that doesn't need expansion/explanation, respond with "SKIP".
2. If it's an acronym or technical concept, provide a 5-8 word explanation of what it stands for or means.

Format: "term:explanation" or "term:SKIP", one per line.
Terms: {terms}"""

CONCEPT_CONTEXT = (
    "Objective: Help readers quickly understand technical terms and acronyms "
    "without leaving the page."
)

PROMPTS: dict[AnnotationKind, tuple[str, str]] = {
    AnnotationKind.VOCABULARY: (VOCABULARY_PROMPT, VOCABULARY_CONTEXT),
    AnnotationKind.CONCEPT: (CONCEPT_PROMPT, CONCEPT_CONTEXT),
}


@dataclass(frozen=True)
class CollaboratorResponse:
    """Either an answer or an error from the collaborator."""

    answer: str | None = None
    error: str | None = None

    @classmethod
    def coerce(cls, payload: Any) -> CollaboratorResponse:
        """Accept a CollaboratorResponse, a mapping, or a bare answer string."""
        if isinstance(payload, cls):
            return payload
        if isinstance(payload, str):
            return cls(answer=payload)
        if isinstance(payload, dict):
            answer = payload.get("answer")
            error = payload.get("error")
            return cls(
                answer=str(answer) if answer is not None else None,
                error=str(error) if error is not None else None,
            )
        return cls(error=f"Unexpected collaborator payload: {type(payload).__name__}")


class TextInferenceCollaborator(Protocol):
    """Anything that can answer a prompt asynchronously."""

    async def request(self, prompt: str, context: str) -> CollaboratorResponse | dict[str, str]:
        ...


def build_prompt(kind: AnnotationKind, terms: list[str]) -> tuple[str, str]:
    """Fill the fixed instruction template for a batch of terms.

    Returns:
        (prompt, context) pair.
    """
    template, context = PROMPTS[kind]
    return template.format(terms=", ".join(terms)), context


def parse_response(answer: str, kind: AnnotationKind) -> list[tuple[str, CacheValue]]:
    """Parse a `term:value` answer into cache entries.

    Vocabulary terms are lowercased; concept terms keep their case.

    Returns:
        (cache key, value or SKIP) pairs in answer order.
    """
    pairs: list[tuple[str, CacheValue]] = []
    dropped = 0
    for line in answer.splitlines():
        term, sep, value = line.partition(":")
        term = term.strip(TERM_STRIP_CHARS)
        value = value.strip(VALUE_STRIP_CHARS)
        if not sep or not term or not value:
            if line.strip():
                dropped += 1
            continue
        if kind is AnnotationKind.VOCABULARY:
            term = term.lower()
        if value.upper() == SKIP_TOKEN:
            pairs.append((term, SKIP))
        else:
            pairs.append((term, value))

    if dropped:
        logger.debug("Dropped %d unparsable %s response lines", dropped, kind.value)
    return pairs


async def ask(collaborator: TextInferenceCollaborator, prompt: str, context: str) -> str:
    """Send one request and return the answer text.

    Raises:
        CollaboratorError: On rejection, an error payload, or an empty answer.
    """
    try:
        payload = await collaborator.request(prompt, context)
    except CollaboratorError:
        raise
    except Exception as e:
        raise CollaboratorError(f"Collaborator request failed: {e}") from e

    response = CollaboratorResponse.coerce(payload)
    if response.error:
        raise CollaboratorError(response.error)
    if not response.answer or not response.answer.strip():
        raise CollaboratorError("Collaborator returned an empty answer")
    return response.answer
