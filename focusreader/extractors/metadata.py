"""
Metadata extraction via fixed fallback chains.

Each field walks its chain from the heuristic tables in order and takes
the first non-empty value. Metadata is read from the whole document,
independently of the chosen content root.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from focusreader.tables import HeuristicTables, MetadataRule, default_tables

if TYPE_CHECKING:
    from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

UNTITLED = "Untitled"

# Human date formats tried after ISO-8601
DATE_FORMATS = (
    "%B %d, %Y",  # March 3, 2024
    "%b %d, %Y",  # Mar 3, 2024
    "%d %B %Y",  # 3 March 2024
    "%d %b %Y",  # 3 Mar 2024
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%Y-%m-%d",
)

DATE_SUBSTRING_PATTERN = re.compile(
    r"\d{4}-\d{2}-\d{2}"
    r"|[A-Z][a-z]+\.? \d{1,2}, \d{4}"
    r"|\d{1,2} [A-Z][a-z]+ \d{4}"
    r"|\d{4}/\d{1,2}/\d{1,2}"
    r"|\d{1,2}/\d{1,2}/\d{4}"
)


@dataclass
class DocumentMetadata:
    """Metadata pulled from the document head and body."""

    title: str = UNTITLED
    site_name: str = ""
    author: str | None = None
    publish_date: date | None = None

    @property
    def publish_date_label(self) -> str | None:
        """Display label such as "March 3, 2024"."""
        if self.publish_date is None:
            return None
        return format_date(self.publish_date)


class MetadataExtractor:
    """Resolves title, site name, author, and publish date."""

    def __init__(self, tables: HeuristicTables | None = None):
        self.tables = tables or default_tables()

    def extract(self, soup: BeautifulSoup | Tag, source_url: str = "") -> DocumentMetadata:
        """Pull all metadata fields from a parsed document.

        Args:
            soup: Parsed document.
            source_url: Page URL, used for the site-name fallback.

        Returns:
            DocumentMetadata with every field resolved or defaulted.
        """
        rules = self.tables.metadata_rules

        title = first_value(soup, rules["title"]) or UNTITLED
        site_name = first_value(soup, rules["site_name"]) or site_from_url(source_url)
        author = first_value(soup, rules["author"])

        publish_date = None
        raw_date = first_value(soup, rules["date"])
        if raw_date:
            publish_date = parse_date(raw_date)
            if publish_date is None:
                logger.debug("Unparseable publish date: %r", raw_date)

        return DocumentMetadata(
            title=title,
            site_name=site_name,
            author=author,
            publish_date=publish_date,
        )


def first_value(soup: BeautifulSoup | Tag, rules: tuple[MetadataRule, ...]) -> str | None:
    """Return the first non-empty value along a fallback chain."""
    for rule in rules:
        element = soup.select_one(rule.selector)
        if element is None:
            continue
        value = None
        if rule.attribute:
            value = element.get(rule.attribute)
            if isinstance(value, list):
                value = " ".join(value)
        if not value:
            value = element.get_text()
        value = " ".join(str(value).split())
        if value:
            return value
    return None


def site_from_url(url: str) -> str:
    """Hostname without a leading "www."."""
    hostname = urlparse(url).hostname or ""
    if hostname.startswith("www."):
        hostname = hostname[4:]
    return hostname


def parse_date(value: str) -> date | None:
    """Parse a publish date from an attribute or free text.

    Tries ISO-8601 on the whole value, then common human formats on the
    whole value and on the first date-like substring.

    Returns:
        The parsed date, or None. Never a placeholder.
    """
    value = value.strip()
    if not value:
        return None

    parsed = _parse_exact(value)
    if parsed is not None:
        return parsed

    match = DATE_SUBSTRING_PATTERN.search(value)
    if match:
        return _parse_exact(match.group(0).replace(".", ""))
    return None


def _parse_exact(value: str) -> date | None:
    iso = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        return datetime.fromisoformat(iso).date()
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def format_date(value: date) -> str:
    """Format as "March 3, 2024"."""
    return f"{value:%B} {value.day}, {value.year}"
