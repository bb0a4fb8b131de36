"""Zyros static site content tool.

This package manages the content document of a Zyros site (``public/site.json``):
loading and saving it, validating its structure, editing its pages, and deriving
the RSS feed and sitemap that the site build publishes.

The main entry point is the CLI module, which provides commands for creating
projects, validating content, managing pages and writing build artifacts.

Public surface:
- load / save: Read and atomically write the site document.
- validate: Report errors and warnings for a document.
- create_page / delete_page / update_site_config: Edit a document.
- build_feed_items / build_sitemap_entries: Derive feed and sitemap records.
- estimate_reading_time / slugify: Text helpers used by the above.
"""

from .feeds import build_feed_items, build_sitemap_entries
from .mutations import create_page, delete_page, update_site_config
from .store import load, save
from .utils import estimate_reading_time, slugify
from .validation import validate

__all__ = [
    "__version__",
    "build_feed_items",
    "build_sitemap_entries",
    "create_page",
    "delete_page",
    "estimate_reading_time",
    "load",
    "save",
    "slugify",
    "update_site_config",
    "validate",
]
__version__ = "0.1.0"
