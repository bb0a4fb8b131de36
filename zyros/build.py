"""Build artifacts for a Zyros site.

This module contains the part of the site build that Zyros owns: it loads
project configuration, loads and validates the content document and writes
the derived artifacts (RSS feed, sitemap) into the output directory. Running
the web framework itself is left to the framework's own tooling.

Key functions:
- build_site: Validate content and write rss.xml and sitemap.xml.
- load_config: Loads project configuration from zyros.yaml.
- resolve_base_url: Pick the public base URL for derived links.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ParseError
from .feeds import DEFAULT_BASE_URL, create_default_feed_registry, normalize_base_url
from .schema import SiteDocument
from .store import ContentStore
from .validation import ValidationResult, raise_for_errors, validate

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "zyros.yaml"
SITE_URL_ENV = "SITE_URL"

DEFAULT_CONFIG = {
    "output_dir": "dist",
    "base_url": "",
    "strict": True,
}


@dataclass
class BuildResult:
    """Result of a build.

    Attributes:
        doc: The validated content document.
        output_dir: Directory the artifacts were written to.
        base_url: Base URL used for links.
        validation: Validation result (warnings are kept for reporting).
        generated: Names of the files written.
    """

    doc: SiteDocument
    output_dir: Path
    base_url: str
    validation: ValidationResult
    generated: list[str] = field(default_factory=list)


def load_config(project_root: Path) -> dict[str, Any]:
    """Load project configuration from zyros.yaml.

    Args:
        project_root: Root directory of the project.

    Returns:
        Dictionary containing configuration values, with defaults applied.

    Raises:
        ParseError: If zyros.yaml is not valid YAML.
    """
    config_path = project_root / CONFIG_FILENAME
    config = DEFAULT_CONFIG.copy()
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            try:
                loaded = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ParseError(f"Invalid YAML: {exc}", config_path) from exc
        if isinstance(loaded, dict):
            config.update(loaded)
    return config


def resolve_base_url(
    config: dict[str, Any],
    doc: SiteDocument | None = None,
    override: str | None = None,
) -> str:
    """Pick the base URL for feed and sitemap links.

    Order: explicit override, SITE_URL environment variable, ``base_url``
    from zyros.yaml, ``site.url`` of the document, DEFAULT_BASE_URL.
    """
    candidates = [
        override,
        os.environ.get(SITE_URL_ENV),
        config.get("base_url"),
        doc.site.url if doc is not None else None,
    ]
    for candidate in candidates:
        if candidate and str(candidate).strip():
            return normalize_base_url(str(candidate))
    return DEFAULT_BASE_URL


def build_site(
    project_root: Path,
    base_url: str | None = None,
    output_dir_override: Path | None = None,
    strict: bool | None = None,
    now: datetime | None = None,
) -> BuildResult:
    """Validate the content document and write the feed and sitemap.

    Args:
        project_root: Root directory of the project.
        base_url: Optional base URL overriding environment and config.
        output_dir_override: Optional path to write artifacts to instead of
            the configured output_dir.
        strict: Whether validation errors abort the build. Defaults to the
            ``strict`` config value.
        now: Current time, for reproducible output.

    Returns:
        BuildResult describing what was written.

    Raises:
        NotFoundError, ParseError, SchemaError: If the document cannot be
            loaded.
        ValidationError: If strict and the document has errors. Nothing is
            written in that case.
    """
    config = load_config(project_root)
    if strict is None:
        strict = bool(config.get("strict", True))
    output_dir = output_dir_override or (project_root / config.get("output_dir", "dist"))

    doc = ContentStore(project_root).load()
    result = validate(doc)
    for warning in result.warnings:
        logger.warning(warning)
    if strict:
        raise_for_errors(result)
    elif result.errors:
        logger.warning("Building despite %d validation errors", len(result.errors))

    resolved_url = resolve_base_url(config, doc, base_url)
    registry = create_default_feed_registry()
    generated = registry.generate_all(output_dir, doc, resolved_url, now)
    logger.info("Built %s for %d pages into %s", ", ".join(generated), len(doc.pages), output_dir)
    return BuildResult(
        doc=doc,
        output_dir=output_dir,
        base_url=resolved_url,
        validation=result,
        generated=generated,
    )
