"""Persistence of the site content document.

The content of a Zyros site lives in a single JSON file, ``public/site.json``,
inside the project directory. This module reads and writes that file and
offers lookup helpers on top of it. Nothing is cached between calls: every
operation reads the file again, so each command sees the latest saved state.

Key classes:
- ContentStore: Loads, saves and queries the document of one project.

Functions:
    load: Load the document of a project.
    save: Save a document into a project.
"""

from __future__ import annotations

import json
import logging
import os
import stat
import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .exceptions import NotFoundError, ParseError, SchemaError, WriteError
from .schema import Page, SiteDocument, default_document

logger = logging.getLogger(__name__)

SITE_JSON_PATH = Path("public") / "site.json"


class ContentStore:
    """Reads and writes the content document of a project.

    Attributes:
        project_root: Root directory of the project.
        path: Location of the content document.
    """

    def __init__(self, project_root: Path):
        """Initialize the store.

        Args:
            project_root: Root directory of the project.
        """
        self.project_root = Path(project_root)
        self.path = self.project_root / SITE_JSON_PATH

    def exists(self) -> bool:
        return self.path.is_file()

    def read_raw(self) -> dict[str, Any]:
        """Read and parse the document without any schema checks.

        Returns:
            The parsed JSON object.

        Raises:
            NotFoundError: If the file does not exist.
            ParseError: If the file is not a well-formed JSON object.
        """
        if not self.path.is_file():
            raise NotFoundError("Content file not found", self.path)
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise NotFoundError(f"Cannot read content file: {exc}", self.path) from exc
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ParseError(
                f"Invalid JSON on line {exc.lineno}, column {exc.colno}: {exc.msg}",
                self.path,
            ) from exc
        if not isinstance(data, dict):
            raise ParseError("Top-level value must be a JSON object", self.path)
        return data

    def load(self) -> SiteDocument:
        """Load the content document.

        Checks that ``site`` and ``pages`` exist and that every page has a
        title, slug and content. Everything else is left to validation.

        Returns:
            The loaded SiteDocument.

        Raises:
            NotFoundError: If the file does not exist.
            ParseError: If the file is not well-formed.
            SchemaError: If required top-level or page fields are missing.
        """
        data = self.read_raw()
        _check_required(data, self.path)
        doc = SiteDocument.from_dict(data)
        logger.debug("Loaded %d pages from %s", len(doc.pages), self.path)
        return doc

    def save(self, doc: SiteDocument) -> None:
        """Write the document to disk atomically.

        The JSON is written to a temporary file next to the target and then
        moved over it, so a failed write never leaves a partial file behind.
        The file keeps the permission bits it had before the save.

        Args:
            doc: Document to persist.

        Raises:
            WriteError: If the file could not be written.
        """
        payload = json.dumps(doc.to_dict(), indent=2, ensure_ascii=False) + "\n"
        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.chmod(tmp_name, _target_mode(self.path))
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise WriteError(f"Cannot write content file: {exc}", self.path) from exc
        logger.debug("Saved %d pages to %s", len(doc.pages), self.path)

    def get_page_by_slug(self, slug: str) -> Page | None:
        """Return the first page with exactly this slug, or None."""
        return self.load().find(slug)

    def get_all_slugs(self) -> list[str]:
        """Return the slugs of all pages in document order."""
        return self.load().slugs

    def init_document(
        self,
        title: str = "My Zyros Site",
        overwrite: bool = False,
        **site_fields: Any,
    ) -> SiteDocument:
        """Create and save the initial document of a new project.

        Args:
            title: Site title.
            overwrite: Replace an existing document instead of refusing.
            **site_fields: Overrides for description, theme, author or url.

        Returns:
            The newly saved document.

        Raises:
            WriteError: If a document exists and overwrite is False, or
                writing fails.
        """
        if self.exists() and not overwrite:
            raise WriteError("Content file already exists", self.path)
        doc = default_document(title, **site_fields)
        self.save(doc)
        return doc


def _check_required(data: Mapping[str, Any], path: Path) -> None:
    if "site" not in data or "pages" not in data:
        raise SchemaError("Invalid site.json format: missing site or pages", path)
    if not isinstance(data["site"], dict):
        raise SchemaError('"site" must be an object', path)
    pages = data["pages"]
    if not isinstance(pages, list):
        raise SchemaError('"pages" must be an array', path)
    for index, page in enumerate(pages):
        if not isinstance(page, dict) or not all(
            page.get(key) for key in ("title", "slug", "content")
        ):
            raise SchemaError(
                f"Invalid page at index {index}: missing title, slug, or content",
                path,
            )


def _target_mode(path: Path) -> int:
    """Permission bits the saved file should get.

    An existing file keeps its mode; a new one gets the usual mode for the
    current umask instead of the private mode of temporary files.
    """
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def load(project_root: Path) -> SiteDocument:
    """Load the content document of a project."""
    return ContentStore(project_root).load()


def save(project_root: Path, doc: SiteDocument) -> None:
    """Save a content document into a project."""
    ContentStore(project_root).save(doc)
