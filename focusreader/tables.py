"""
Heuristic tables for scoring, sanitizing, metadata, and annotation.

The tables ship as a YAML data file so they can be reviewed and tested
independently of the code that applies them. Hosts can load their own
file with load_tables(path) and pass the result to the engine.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from focusreader.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_TABLES_PATH = Path(__file__).parent / "data" / "tables.yaml"

METADATA_FIELDS = ("title", "site_name", "author", "date")


@dataclass(frozen=True)
class MetadataRule:
    """One step of a metadata fallback chain.

    Reads `attribute` from the first element matching `selector`,
    or the element's text when no attribute is named.
    """

    selector: str
    attribute: str | None = None


@dataclass(frozen=True)
class HeuristicTables:
    """All pattern tables used by the engine."""

    # Content scoring
    negative_keywords: tuple[str, ...]
    positive_keywords: tuple[str, ...]
    negative_weight: float
    positive_weight: float

    # Candidate discovery
    candidate_selectors: tuple[str, ...]
    fallback_tags: tuple[str, ...]

    # Sanitizer
    remove_selectors: tuple[str, ...]
    allowed_attributes: frozenset[str]
    media_tags: tuple[str, ...]
    code_tags: tuple[str, ...]

    # Metadata fallback chains keyed by field name
    metadata_rules: dict[str, tuple[MetadataRule, ...]]

    # Annotation
    guard_classes: frozenset[str]
    guard_tags: frozenset[str]
    common_words: frozenset[str]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HeuristicTables:
        """Build tables from parsed YAML.

        Raises:
            ConfigurationError: If a required section is missing or malformed.
        """
        try:
            scoring = data["scoring"]
            sanitizer = data["sanitizer"]
            annotation = data["annotation"]
            metadata = data["metadata"]

            rules = {}
            for name in METADATA_FIELDS:
                rules[name] = tuple(
                    MetadataRule(selector=str(r["selector"]), attribute=r.get("attribute"))
                    for r in metadata.get(name, [])
                )

            return cls(
                negative_keywords=_strings(scoring["negative_keywords"]),
                positive_keywords=_strings(scoring["positive_keywords"]),
                negative_weight=float(scoring.get("negative_weight", -30)),
                positive_weight=float(scoring.get("positive_weight", 20)),
                candidate_selectors=_strings(data["candidate_selectors"]),
                fallback_tags=_strings(data["fallback_tags"]),
                remove_selectors=_strings(sanitizer["remove_selectors"]),
                allowed_attributes=frozenset(_strings(sanitizer["allowed_attributes"])),
                media_tags=_strings(sanitizer.get("media_tags", ["img"])),
                code_tags=_strings(sanitizer.get("code_tags", ["pre", "code"])),
                metadata_rules=rules,
                guard_classes=frozenset(_strings(annotation["guard_classes"])),
                guard_tags=frozenset(_strings(annotation["guard_tags"])),
                common_words=frozenset(w.lower() for w in _strings(annotation["common_words"])),
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ConfigurationError(f"Malformed heuristic tables: {e!r}") from e


def _strings(values: Any) -> tuple[str, ...]:
    if not isinstance(values, (list, tuple)):
        raise TypeError(f"expected a list, got {type(values).__name__}")
    return tuple(str(v) for v in values)


def load_tables(path: str | Path | None = None) -> HeuristicTables:
    """Load heuristic tables from a YAML file.

    Args:
        path: YAML file to read. Defaults to the packaged tables.

    Returns:
        Parsed HeuristicTables.

    Raises:
        ConfigurationError: If the file is missing or malformed.
    """
    if path is None:
        return default_tables()

    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot load heuristic tables from {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Heuristic tables in {path} must be a mapping")

    logger.debug("Loaded heuristic tables from %s", path)
    return HeuristicTables.from_dict(data)


@lru_cache(maxsize=1)
def default_tables() -> HeuristicTables:
    """Packaged tables, parsed once per process."""
    with open(DEFAULT_TABLES_PATH, encoding="utf-8") as f:
        return HeuristicTables.from_dict(yaml.safe_load(f))
