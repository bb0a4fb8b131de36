"""Validation of site content documents.

The validator inspects a content document and reports every problem it finds
without modifying the document or raising. Problems come in two kinds:

- errors: the document cannot be built (missing title, duplicate slug, ...).
- warnings: informational issues (unknown theme, malformed date, ...).

Messages are reported site-level first, then page by page in document order,
and within a page in a fixed check order, so repeated runs produce identical
output.

Functions:
    validate: Validate a SiteDocument or a raw parsed mapping.
    raise_for_errors: Turn a result with errors into a ValidationError.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .exceptions import ValidationError
from .schema import DATE_RE, SLUG_RE, THEMES, SiteDocument

BOLD_TOKEN = "**"
ITALIC_RE = re.compile(r"(?<!\*)\*(?!\*)")
CODE_FENCE = "```"


@dataclass
class ValidationResult:
    """Outcome of validating a content document.

    Attributes:
        errors: Problems that must block a build.
        warnings: Informational problems.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def validate(doc: SiteDocument | Mapping[str, Any]) -> ValidationResult:
    """Validate a content document.

    Args:
        doc: A loaded SiteDocument, or the raw mapping parsed from
            ``site.json`` (useful when the document fails to load).

    Returns:
        ValidationResult with all errors and warnings found.
    """
    data = doc.to_dict() if isinstance(doc, SiteDocument) else doc
    result = ValidationResult()
    if not isinstance(data, Mapping):
        result.errors.append("Site data must be a JSON object")
        return result

    _check_site(data.get("site"), result)

    pages = data.get("pages")
    if not isinstance(pages, list):
        result.errors.append("Pages must be an array")
        return result

    seen_slugs: set[str] = set()
    for index, page in enumerate(pages):
        prefix = f"Page {index + 1}"
        if not isinstance(page, Mapping):
            result.errors.append(f"{prefix}: Page must be an object")
            continue
        _check_page(page, prefix, seen_slugs, result)
    return result


def raise_for_errors(result: ValidationResult) -> None:
    """Raise ValidationError if the result contains errors.

    Args:
        result: Result returned by validate().

    Raises:
        ValidationError: Carrying all errors and warnings of the result.
    """
    if result.errors:
        raise ValidationError(result.errors, result.warnings)


def _check_site(site: Any, result: ValidationResult) -> None:
    if not isinstance(site, Mapping):
        result.errors.append('Missing "site" configuration')
        return
    if not site.get("title"):
        result.errors.append("Site title is required")
    if not site.get("description"):
        result.warnings.append("Site description is recommended for SEO")
    theme = site.get("theme")
    if theme and theme not in THEMES:
        result.warnings.append(
            f'Unknown theme "{theme}". Valid themes: {", ".join(THEMES)}'
        )


def _check_page(
    page: Mapping[str, Any],
    prefix: str,
    seen_slugs: set[str],
    result: ValidationResult,
) -> None:
    if not page.get("title"):
        result.errors.append(f"{prefix}: Title is required")

    slug = page.get("slug")
    if not slug:
        result.errors.append(f"{prefix}: Slug is required")
    elif not isinstance(slug, str):
        result.errors.append(f"{prefix}: Slug must be a string")

    content = page.get("content")
    if not content:
        result.errors.append(f"{prefix}: Content is required")

    if slug and isinstance(slug, str):
        if slug in seen_slugs:
            result.errors.append(f'{prefix}: Duplicate slug "{slug}"')
        seen_slugs.add(slug)
        if not SLUG_RE.match(slug):
            result.errors.append(
                f'{prefix}: Slug "{slug}" should only contain lowercase letters, '
                "numbers, and hyphens"
            )

    published_at = page.get("publishedAt")
    if published_at is not None and not (
        isinstance(published_at, str) and DATE_RE.match(published_at)
    ):
        result.warnings.append(f"{prefix}: publishedAt should be in YYYY-MM-DD format")

    reading_time = page.get("readingTime")
    if reading_time is not None and not _is_positive_number(reading_time):
        result.warnings.append(f"{prefix}: readingTime should be a positive number")

    tags = page.get("tags")
    if tags is not None and not isinstance(tags, list):
        result.warnings.append(f"{prefix}: tags should be an array")

    if isinstance(content, str) and content:
        result.warnings.extend(
            f"{prefix}: {message}" for message in lint_markdown(content)
        )


def _is_positive_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return value >= 1


def lint_markdown(content: str) -> list[str]:
    """Find unbalanced emphasis markers and unclosed code fences.

    Lines inside fenced code blocks are skipped. A line starting with three
    backticks toggles the fence state before the line itself is checked.

    Args:
        content: Markdown body.

    Returns:
        Warning messages in line order.
    """
    messages: list[str] = []
    in_code_block = False
    for number, line in enumerate(content.split("\n"), start=1):
        if line.startswith(CODE_FENCE):
            in_code_block = not in_code_block
        if in_code_block:
            continue
        if line.count(BOLD_TOKEN) % 2:
            messages.append(f"Unmatched bold syntax on line {number}")
        if len(ITALIC_RE.findall(line)) % 2:
            messages.append(f"Unmatched italic syntax on line {number}")
    if in_code_block:
        messages.append("Unclosed code block")
    return messages
