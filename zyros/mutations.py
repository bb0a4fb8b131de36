"""Editing operations on site content documents.

Every mutator takes a SiteDocument and returns a new one; the input document
is left untouched, so a failed operation never leaves a half-edited document
behind. Callers persist the result with ``ContentStore.save``.

Functions:
    create_page: Add a page at the top of the page list.
    update_page: Change fields of an existing page.
    delete_page: Remove a page by slug or index.
    update_site_config: Merge new title, theme or description into ``site``.
"""

from __future__ import annotations

import logging
from typing import Any

from .exceptions import DuplicateSlugError, NotFoundError, SchemaError
from .schema import SLUG_RE, Page, SiteDocument, content_fields
from .utils import estimate_reading_time, slugify, today

logger = logging.getLogger(__name__)

_PAGE_FIELDS = {f.name for f in content_fields(Page)} - {"title", "slug", "content"}


def create_page(
    doc: SiteDocument,
    title: str | None = None,
    content: str | None = None,
    slug: str | None = None,
    **page_fields: Any,
) -> SiteDocument:
    """Create a page and prepend it to the document.

    New pages go first so the page list stays most-recent-first.

    Args:
        doc: Current document.
        title: Page title, required.
        content: Markdown body, required.
        slug: Page slug; derived from the title when omitted.
        **page_fields: Optional Page fields (description, category, tags,
            published_at, reading_time, featured, draft, author, image).

    Returns:
        New document containing the page.

    Raises:
        SchemaError: If title or content is missing, the slug is invalid,
            or an unknown field is given.
        DuplicateSlugError: If a page with the same slug exists.
    """
    if not title or not title.strip():
        raise SchemaError("Page title is required")
    if not content or not content.strip():
        raise SchemaError("Page content is required")
    unknown = sorted(set(page_fields) - _PAGE_FIELDS)
    if unknown:
        raise SchemaError(f"Unknown page fields: {', '.join(unknown)}")

    title = title.strip()
    slug = slug.strip() if slug else slugify(title)
    _check_slug(slug)
    if doc.find(slug) is not None:
        raise DuplicateSlugError(slug)

    page_fields = {k: v for k, v in page_fields.items() if v is not None}
    page_fields.setdefault("published_at", today())
    page_fields.setdefault("reading_time", max(1, estimate_reading_time(content)))
    page = Page(title=title, slug=slug, content=content.strip(), **page_fields)

    updated = doc.copy()
    updated.pages.insert(0, page)
    logger.debug("Created page %s", slug)
    return updated


def update_page(doc: SiteDocument, slug: str, /, **changes: Any) -> SiteDocument:
    """Change fields of an existing page.

    Args:
        doc: Current document.
        slug: Slug of the page to change (positional, so that ``slug=``
            can be passed as a change).
        **changes: Page fields to set. None values are ignored. A new
            ``slug`` is checked for format and uniqueness.

    Returns:
        New document with the page changed.

    Raises:
        NotFoundError: If no page has the slug.
        SchemaError: If a field is unknown or the new slug is invalid.
        DuplicateSlugError: If the new slug belongs to another page.
    """
    allowed = _PAGE_FIELDS | {"title", "slug", "content"}
    unknown = sorted(set(changes) - allowed)
    if unknown:
        raise SchemaError(f"Unknown page fields: {', '.join(unknown)}")

    updated = doc.copy()
    page = updated.find(slug)
    if page is None:
        raise NotFoundError(f'No page with slug "{slug}"')

    new_slug = changes.get("slug")
    if new_slug and new_slug != slug:
        _check_slug(new_slug)
        if updated.find(new_slug) is not None:
            raise DuplicateSlugError(new_slug)

    for name, value in changes.items():
        if value is None:
            continue
        setattr(page, name, value)
    if changes.get("content") and "reading_time" not in changes:
        page.reading_time = max(1, estimate_reading_time(page.content))
    return updated


def delete_page(doc: SiteDocument, slug_or_index: str | int) -> SiteDocument:
    """Remove a page from the document.

    Args:
        doc: Current document.
        slug_or_index: Slug of the page, or its zero-based position.

    Returns:
        New document without the page.

    Raises:
        NotFoundError: If no page matches.
    """
    updated = doc.copy()
    if isinstance(slug_or_index, int) and not isinstance(slug_or_index, bool):
        if not 0 <= slug_or_index < len(updated.pages):
            raise NotFoundError(f"No page at index {slug_or_index}")
        removed = updated.pages.pop(slug_or_index)
    else:
        position = next(
            (i for i, page in enumerate(updated.pages) if page.slug == slug_or_index),
            None,
        )
        if position is None:
            raise NotFoundError(f'No page with slug "{slug_or_index}"')
        removed = updated.pages.pop(position)
    logger.debug("Deleted page %s", removed.slug)
    return updated


def update_site_config(
    doc: SiteDocument,
    title: str | None = None,
    theme: str | None = None,
    description: str | None = None,
) -> SiteDocument:
    """Merge new values into the ``site`` block.

    Empty or missing values leave the current setting untouched.

    Args:
        doc: Current document.
        title: New site title.
        theme: New theme name.
        description: New site description.

    Returns:
        New document with the merged site block.
    """
    updated = doc.copy()
    if title:
        updated.site.title = title
    if theme:
        updated.site.theme = theme
    if description:
        updated.site.description = description
    return updated


def _check_slug(slug: str) -> None:
    if not slug:
        raise SchemaError("Page slug is required; the title has no usable characters")
    if not SLUG_RE.match(slug):
        raise SchemaError(
            f'Slug "{slug}" should only contain lowercase letters, numbers, and hyphens'
        )
