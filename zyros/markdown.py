"""Markdown file interchange for Zyros.

Besides the single ``site.json`` document, a site's pages can be kept as
individual markdown files with YAML frontmatter under ``content/``:

    content/
    ├── site.json          # {"site": {...}}
    ├── pages/             # static pages
    │   └── about.md
    └── posts/             # blog posts (category "blog" or "post")
        └── welcome.md

This module converts between the two layouts.

Functions:
    extract_frontmatter: Split a markdown file into frontmatter and body.
    render_frontmatter: Serialize a page as a markdown file.
    export_markdown: Write all pages of a document as markdown files.
    load_markdown_pages: Read pages back from a content directory.
    merge_pages: Put imported pages into a document.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ParseError, WriteError
from .schema import Page, SiteDocument
from .utils import estimate_reading_time, slugify, titleize

FRONTMATTER_RE = re.compile(r"^---\s*\n(.*?)\n---\s*\n?", re.DOTALL)

POST_CATEGORIES = ("blog", "post")

# Page attribute -> frontmatter key, in the order they are written
_FRONTMATTER_FIELDS = (
    ("title", "title"),
    ("slug", "slug"),
    ("description", "description"),
    ("published_at", "date"),
    ("category", "category"),
    ("tags", "tags"),
    ("author", "author"),
    ("image", "image"),
    ("featured", "featured"),
    ("draft", "draft"),
)


def extract_frontmatter(text: str, path: Path | None = None) -> tuple[dict[str, Any], str]:
    """Extract YAML frontmatter from markdown content.

    Args:
        text: Raw file content.
        path: Source file, used in error messages.

    Returns:
        Tuple of (frontmatter dict, remaining content).

    Raises:
        ParseError: If the frontmatter is not valid YAML or not a mapping.
    """
    match = FRONTMATTER_RE.match(text)
    if not match:
        return {}, text
    try:
        data = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError as exc:
        raise ParseError(f"Invalid frontmatter: {exc}", path) from exc
    if not isinstance(data, dict):
        raise ParseError("Frontmatter must be a mapping", path)
    return data, text[match.end() :]


def render_frontmatter(page: Page) -> str:
    """Serialize a page as a markdown document with YAML frontmatter."""
    meta: dict[str, Any] = {}
    for attr, key in _FRONTMATTER_FIELDS:
        value = getattr(page, attr)
        if value is None or value == "" or value == []:
            continue
        meta[key] = value
    header = yaml.safe_dump(meta, sort_keys=False, allow_unicode=True)
    body = page.content if isinstance(page.content, str) else ""
    return f"---\n{header}---\n\n{body.rstrip()}\n"


def _target_folder(page: Page) -> str:
    return "posts" if page.category in POST_CATEGORIES else "pages"


def export_markdown(doc: SiteDocument, content_dir: Path) -> list[Path]:
    """Write every page of a document as a markdown file.

    Also writes ``content_dir/site.json`` with the site block so the
    markdown layout is self-contained. Existing files are overwritten.

    Args:
        doc: Document to export.
        content_dir: Target content directory.

    Returns:
        Paths of the written files, site.json first.

    Raises:
        WriteError: If a file cannot be written.
    """
    written: list[Path] = []
    try:
        content_dir.mkdir(parents=True, exist_ok=True)
        site_path = content_dir / "site.json"
        site_path.write_text(
            json.dumps({"site": doc.site.to_dict()}, indent=2, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )
        written.append(site_path)
        for page in doc.pages:
            target = content_dir / _target_folder(page) / f"{page.slug}.md"
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(render_frontmatter(page), encoding="utf-8")
            written.append(target)
    except OSError as exc:
        raise WriteError(f"Cannot export markdown: {exc}", content_dir) from exc
    return written


def load_markdown_pages(content_dir: Path) -> list[Page]:
    """Read pages from the markdown files of a content directory.

    Files under ``pages/`` and ``posts/`` are read in path order. The
    frontmatter ``date`` becomes ``publishedAt``; a missing slug is derived
    from the title, or from the file name when the title has no usable
    characters. A missing title falls back to the file name.

    Args:
        content_dir: Directory containing ``pages/`` and ``posts/``.

    Returns:
        List of Page objects.

    Raises:
        ParseError: If a file has invalid frontmatter.
    """
    pages: list[Page] = []
    for folder in ("pages", "posts"):
        base = content_dir / folder
        if not base.is_dir():
            continue
        for path in sorted(base.rglob("*.md")):
            meta, body = extract_frontmatter(path.read_text(encoding="utf-8"), path)
            title = str(meta.pop("title", "") or titleize(path.stem))
            slug = str(meta.pop("slug", "") or slugify(title) or slugify(path.stem))
            date = meta.pop("date", None)
            if date is not None:
                meta.setdefault("publishedAt", str(date))
            content = body.strip()
            meta.setdefault("readingTime", max(1, estimate_reading_time(content)))
            pages.append(
                Page.from_dict({"title": title, "slug": slug, "content": content, **meta})
            )
    return pages


def merge_pages(
    doc: SiteDocument, pages: list[Page]
) -> tuple[SiteDocument, list[str], list[str]]:
    """Put pages read from markdown files into a document.

    A page whose slug already exists replaces that page in place, keeping
    its position; other pages are appended in the given order. The input
    document is left untouched.

    Args:
        doc: Current document.
        pages: Pages returned by load_markdown_pages().

    Returns:
        Tuple of (new document, replaced slugs, added slugs).
    """
    updated = doc.copy()
    positions = {page.slug: index for index, page in enumerate(updated.pages)}
    replaced: list[str] = []
    added: list[str] = []
    for page in pages:
        if page.slug in positions:
            updated.pages[positions[page.slug]] = page
            replaced.append(page.slug)
        else:
            positions[page.slug] = len(updated.pages)
            updated.pages.append(page)
            added.append(page.slug)
    return updated, replaced, added
