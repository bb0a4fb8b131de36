"""Utility functions for Zyros.

This module contains the text and date helpers used throughout the Zyros
codebase. They are pure functions with no I/O.

Key functions:
    slugify: Convert a title to a URL slug.
    titleize: Convert a project or file name to a human-readable title.
    word_count: Count whitespace-separated words.
    estimate_reading_time: Minutes needed to read a markdown body.
    strip_markdown: Remove markdown emphasis characters.
    excerpt: Build a short plain-text summary of a markdown body.
    parse_date: Parse a YYYY-MM-DD string into a UTC datetime.
    today: Current date as YYYY-MM-DD.
"""

from __future__ import annotations

import math
import re
from datetime import datetime, timezone

from .schema import DATE_RE

WORDS_PER_MINUTE = 200

_SLUG_DROP_RE = re.compile(r"[^a-z0-9\s-]")
_MARKDOWN_CHARS_RE = re.compile(r"[#*`]")


def slugify(title: str) -> str:
    """Convert a title to a URL-friendly slug.

    Lowercases, drops characters other than letters, digits, whitespace and
    hyphens, turns whitespace runs into single hyphens, collapses repeated
    hyphens and trims hyphens from both ends.

    Args:
        title: Page title.

    Returns:
        Slug, possibly empty if the title has no usable characters.

    Examples:
        >>> slugify("Hello, World!")
        'hello-world'

        >>> slugify("  Multiple   Spaces  ")
        'multiple-spaces'
    """
    cleaned = _SLUG_DROP_RE.sub("", title.lower())
    cleaned = re.sub(r"\s+", "-", cleaned)
    cleaned = re.sub(r"-+", "-", cleaned)
    return cleaned.strip("-")


def titleize(name: str) -> str:
    """Convert a project or file name to a human-readable title.

    Args:
        name: Name such as ``my-blog`` or ``getting_started``.

    Returns:
        Title string, "Untitled" if nothing is left.

    Examples:
        >>> titleize("my-cool-site")
        'My Cool Site'
    """
    words = re.split(r"[\s\-_]+", name)
    return " ".join(word.capitalize() for word in words if word) or "Untitled"


def word_count(text: str) -> int:
    """Count whitespace-separated words in text."""
    return len(text.split())


def estimate_reading_time(content: str) -> int:
    """Estimate the reading time of a markdown body.

    Uses 200 words per minute, rounded up.

    Args:
        content: Markdown body.

    Returns:
        Minutes to read: 0 for empty content, otherwise at least 1.

    Examples:
        >>> estimate_reading_time("")
        0

        >>> estimate_reading_time("word " * 400)
        2
    """
    words = word_count(content)
    if words == 0:
        return 0
    return max(1, math.ceil(words / WORDS_PER_MINUTE))


def strip_markdown(text: str) -> str:
    """Remove markdown heading, emphasis and code characters (#, *, `)."""
    return _MARKDOWN_CHARS_RE.sub("", text)


def excerpt(content: str, limit: int = 200) -> str:
    """Build a plain-text summary of a markdown body.

    Args:
        content: Markdown body.
        limit: Maximum number of characters taken from the body.

    Returns:
        The first ``limit`` characters of the stripped body followed by
        "...", or an empty string for empty content.
    """
    stripped = strip_markdown(content)
    if not stripped.strip():
        return ""
    return stripped[:limit] + "..."


def parse_date(value: object) -> datetime | None:
    """Parse a ``YYYY-MM-DD`` string into a UTC datetime.

    Args:
        value: Raw date value from the content document.

    Returns:
        Midnight UTC of that day, or None if the value is missing or is not
        a valid date in the expected format.

    Examples:
        >>> parse_date("2024-06-01")
        datetime.datetime(2024, 6, 1, 0, 0, tzinfo=datetime.timezone.utc)

        >>> parse_date("01-01-2024") is None
        True
    """
    if not isinstance(value, str) or not DATE_RE.match(value):
        return None
    try:
        parsed = datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return None
    return parsed.replace(tzinfo=timezone.utc)


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def today() -> str:
    """Return the current UTC date formatted as ``YYYY-MM-DD``."""
    return utcnow().strftime("%Y-%m-%d")
