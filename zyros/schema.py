"""Content model for Zyros.

This module defines the shape of a site's content document (``site.json``):
the site information block, the ordered list of pages, and the opaque UI
configuration blocks that are carried through untouched.

Key classes:
- SiteInfo: Dataclass for the ``site`` block (title, theme, ...).
- Page: Dataclass representing one content item (post or static page).
- SiteDocument: Root record holding site info, pages and passthrough blocks.

On disk the document uses camelCase keys (``publishedAt``, ``readingTime``).
Conversion to and from plain dicts keeps unknown keys in ``extra`` so that a
load followed by a save does not lose data. Values are not coerced; checking
their types is the job of the validation module.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Mapping
from dataclasses import MISSING, dataclass, field, fields
from typing import Any

THEMES = (
    "light",
    "dark",
    "minimal",
    "ocean",
    "sunset",
    "forest",
    "midnight",
    "neon",
)

# \Z, not $: a trailing newline must not match
SLUG_RE = re.compile(r"^[a-z0-9-]+\Z")
DATE_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}\Z")

# Top-level blocks the core never interprets
PASSTHROUGH_KEYS = (
    "header",
    "footer",
    "contentBlocks",
    "ui",
    "floatingElements",
    "animations",
    "layout",
)


_BOOKKEEPING = ("extra", "keys_present")


def _json_key(f) -> str:
    return f.metadata.get("json", f.name)


def content_fields(cls) -> list:
    """Dataclass fields that map to a JSON key of the document."""
    return [f for f in fields(cls) if f.name not in _BOOKKEEPING]


def _from_mapping(cls, data: Mapping[str, Any]):
    known = {_json_key(f): f.name for f in content_fields(cls)}
    kwargs: dict[str, Any] = {}
    extra: dict[str, Any] = {}
    for key, value in data.items():
        if key in known:
            kwargs[known[key]] = copy.deepcopy(value)
        else:
            extra[key] = copy.deepcopy(value)
    present = frozenset(key for key in data if key in known)
    return cls(**kwargs, extra=extra, keys_present=present)


def _to_mapping(obj) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for f in content_fields(obj):
        key = _json_key(f)
        value = getattr(obj, f.name)
        # Optional keys are written when set or when the source had them,
        # so an explicit null survives a round trip
        optional = f.default is not MISSING
        if optional and value is None and key not in obj.keys_present:
            continue
        result[key] = copy.deepcopy(value)
    for key, value in obj.extra.items():
        result.setdefault(key, copy.deepcopy(value))
    return result


@dataclass
class SiteInfo:
    """The ``site`` block of a content document.

    Attributes:
        title: Site title, required.
        description: Short description used for SEO and the feed channel.
        theme: One of THEMES (other values only produce a warning).
        author: Default author name.
        url: Public base URL of the deployed site.
        extra: Any other keys (social, seo, features, ...) kept verbatim.
        keys_present: Known keys the source mapping contained.
    """

    title: Any = None
    description: Any = None
    theme: Any = None
    author: Any = None
    url: Any = None
    extra: dict[str, Any] = field(default_factory=dict)
    keys_present: frozenset[str] = field(default=frozenset(), repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SiteInfo:
        return _from_mapping(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return _to_mapping(self)


@dataclass
class Page:
    """Represents one content item of the site.

    Attributes:
        title: Human-readable title.
        slug: URL-safe identifier, unique within the document.
        content: Markdown body.
        description: Short summary for listings and the feed.
        category: Single category name.
        tags: List of tag names.
        published_at: Publication date as ``YYYY-MM-DD`` (``publishedAt``).
        reading_time: Estimated minutes to read (``readingTime``).
        featured: Whether the page is highlighted on listings.
        draft: Whether the page is unpublished.
        author: Author name.
        image: Cover image path or URL.
        extra: Any other keys (updatedAt, seo, customFields, ...).
        keys_present: Known keys the source mapping contained.
    """

    title: Any
    slug: Any
    content: Any
    description: Any = None
    category: Any = None
    tags: Any = None
    published_at: Any = field(default=None, metadata={"json": "publishedAt"})
    reading_time: Any = field(default=None, metadata={"json": "readingTime"})
    featured: Any = None
    draft: Any = None
    author: Any = None
    image: Any = None
    extra: dict[str, Any] = field(default_factory=dict)
    keys_present: frozenset[str] = field(default=frozenset(), repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Page:
        missing = [key for key in ("title", "slug", "content") if key not in data]
        if missing:
            # Keep construction total; the store and validator report these
            data = {**{key: "" for key in missing}, **data}
        return _from_mapping(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return _to_mapping(self)

    @property
    def tag_list(self) -> list[str]:
        """Tags as a list, ignoring a malformed ``tags`` value."""
        if isinstance(self.tags, list):
            return [str(tag) for tag in self.tags]
        return []


@dataclass
class SiteDocument:
    """Root content record of a site.

    Attributes:
        site: The site information block.
        pages: Pages in display order (not sorted).
        passthrough: Every other top-level block (header, footer, ui, ...),
            stored as-is and never interpreted.
    """

    site: SiteInfo
    pages: list[Page] = field(default_factory=list)
    passthrough: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SiteDocument:
        site = SiteInfo.from_dict(data.get("site") or {})
        pages = [Page.from_dict(item) for item in data.get("pages") or []]
        passthrough = {
            key: copy.deepcopy(value)
            for key, value in data.items()
            if key not in ("site", "pages")
        }
        return cls(site=site, pages=pages, passthrough=passthrough)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "site": self.site.to_dict(),
            "pages": [page.to_dict() for page in self.pages],
        }
        for key, value in self.passthrough.items():
            result[key] = copy.deepcopy(value)
        return result

    def copy(self) -> SiteDocument:
        """Return a deep copy, used by mutators to leave the input untouched."""
        return copy.deepcopy(self)

    @property
    def slugs(self) -> list[str]:
        return [page.slug for page in self.pages]

    def find(self, slug: str) -> Page | None:
        for page in self.pages:
            if page.slug == slug:
                return page
        return None


def default_document(title: str = "My Zyros Site", **site_fields: Any) -> SiteDocument:
    """Create the document a freshly initialized project starts with.

    Args:
        title: Site title.
        **site_fields: Overrides for description, theme, author or url.

    Returns:
        SiteDocument with default site information and no pages.
    """
    info = {
        "title": title,
        "description": "A beautiful static site built with zyros",
        "theme": "light",
        "author": "Your Name",
        "url": "https://yoursite.com",
    }
    info.update({k: v for k, v in site_fields.items() if v is not None})
    return SiteDocument(site=SiteInfo.from_dict(info), pages=[])
