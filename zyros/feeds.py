"""Feed generation for Zyros.

This module derives the syndication artifacts of a site from its content
document: RSS feed items and sitemap entries, and the XML documents built
from them. Deriving records is pure and deterministic given ``now``;
only ``FeedGenerator.write`` touches the filesystem.

Functions:
    build_feed_items: Feed records sorted newest first.
    build_sitemap_entries: Sitemap records, site root first.
    normalize_base_url: Apply the default and strip trailing slashes.
    create_default_feed_registry: Create a registry with default generators.

Classes:
    FeedItem: One RSS item.
    SitemapEntry: One sitemap URL record.
    FeedGenerator: Base class for feed generators.
    SitemapGenerator: Generates sitemap.xml files.
    RSSGenerator: Generates RSS feed files.
    FeedRegistry: Registry for managing feed generators.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import format_datetime
from pathlib import Path

from markupsafe import escape

from .schema import Page, SiteDocument
from .utils import excerpt, parse_date, utcnow

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://your-site.com"
DEFAULT_FEED_DESCRIPTION = "A static site built with zyros"
# Sort key for pages without a usable publishedAt
DEFAULT_FEED_DATE = datetime(2024, 1, 1, tzinfo=timezone.utc)


@dataclass
class FeedItem:
    """One entry of the RSS feed.

    Attributes:
        title: Page title.
        description: Page description or a plain-text excerpt.
        link: Absolute URL of the page.
        guid: Permanent identifier (same as link).
        pub_date: Publication time in UTC.
        categories: Page category followed by its tags.
    """

    title: str
    description: str
    link: str
    guid: str
    pub_date: datetime
    categories: list[str] = field(default_factory=list)


@dataclass
class SitemapEntry:
    """One URL record of the sitemap.

    Attributes:
        loc: Absolute URL.
        lastmod: Last modification time in UTC.
        changefreq: Expected change frequency ("weekly", "monthly").
        priority: Crawl priority as a string ("1.0", "0.8").
    """

    loc: str
    lastmod: datetime
    changefreq: str
    priority: str


def normalize_base_url(base_url: str | None) -> str:
    """Return the base URL without trailing slashes, or the default."""
    cleaned = (base_url or "").strip().rstrip("/")
    return cleaned or DEFAULT_BASE_URL


def build_feed_items(
    pages: Iterable[Page],
    base_url: str | None = None,
    now: datetime | None = None,
) -> list[FeedItem]:
    """Build RSS items for pages, newest first.

    Pages are ordered by ``publishedAt`` descending; pages without a valid
    date sort as DEFAULT_FEED_DATE. Equal dates keep document order.

    Args:
        pages: Pages of the site.
        base_url: Public site URL; DEFAULT_BASE_URL when empty.
        now: Current time, used as pubDate of undated pages.

    Returns:
        List of FeedItem.
    """
    base = normalize_base_url(base_url)
    current = now or utcnow()

    def sort_key(page: Page) -> datetime:
        return parse_date(page.published_at) or DEFAULT_FEED_DATE

    items = []
    for page in sorted(pages, key=sort_key, reverse=True):
        link = f"{base}/{page.slug}"
        if page.description:
            description = str(page.description)
        elif isinstance(page.content, str):
            description = excerpt(page.content)
        else:
            description = ""
        categories = [str(page.category)] if page.category else []
        categories.extend(page.tag_list)
        items.append(
            FeedItem(
                title=str(page.title),
                description=description,
                link=link,
                guid=link,
                pub_date=parse_date(page.published_at) or current,
                categories=categories,
            )
        )
    return items


def build_sitemap_entries(
    pages: Iterable[Page],
    base_url: str | None = None,
    now: datetime | None = None,
) -> list[SitemapEntry]:
    """Build sitemap entries: the site root, then every page in order.

    Args:
        pages: Pages of the site.
        base_url: Public site URL; DEFAULT_BASE_URL when empty.
        now: Current time, used as lastmod of the root and undated pages.

    Returns:
        List of SitemapEntry.
    """
    base = normalize_base_url(base_url)
    current = now or utcnow()
    entries = [
        SitemapEntry(loc=base, lastmod=current, changefreq="weekly", priority="1.0")
    ]
    for page in pages:
        entries.append(
            SitemapEntry(
                loc=f"{base}/{page.slug}",
                lastmod=parse_date(page.published_at) or current,
                changefreq="monthly",
                priority="0.8",
            )
        )
    return entries


def rfc822(value: datetime) -> str:
    """Format a datetime for RSS, independent of the process locale."""
    return format_datetime(value.astimezone(timezone.utc), usegmt=True)


class FeedGenerator(ABC):
    """Abstract base class for feed generators.

    Subclasses implement specific feed formats (sitemap, RSS, ...).
    """

    @property
    @abstractmethod
    def filename(self) -> str:
        """Return the output filename for this feed.

        Returns:
            Filename such as 'sitemap.xml' or 'rss.xml'.
        """
        ...

    @abstractmethod
    def generate(
        self,
        doc: SiteDocument,
        base_url: str | None = None,
        now: datetime | None = None,
    ) -> str:
        """Generate feed content from a document.

        Args:
            doc: Validated content document.
            base_url: Public site URL.
            now: Current time for undated records.

        Returns:
            Feed content as a string.
        """
        ...

    def write(
        self,
        output_dir: Path,
        doc: SiteDocument,
        base_url: str | None = None,
        now: datetime | None = None,
    ) -> Path:
        """Generate and write the feed to the output directory.

        Args:
            output_dir: Directory to write the feed file to.
            doc: Validated content document.
            base_url: Public site URL.
            now: Current time for undated records.

        Returns:
            Path of the written file.
        """
        content = self.generate(doc, base_url, now)
        output_dir.mkdir(parents=True, exist_ok=True)
        output_path = output_dir / self.filename
        output_path.write_text(content, encoding="utf-8")
        logger.info("Wrote %s", output_path)
        return output_path


class SitemapGenerator(FeedGenerator):
    """Generates sitemap.xml following the sitemaps.org protocol."""

    @property
    def filename(self) -> str:
        return "sitemap.xml"

    def generate(
        self,
        doc: SiteDocument,
        base_url: str | None = None,
        now: datetime | None = None,
    ) -> str:
        lines = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
        ]
        for entry in build_sitemap_entries(doc.pages, base_url, now):
            lines.extend(
                [
                    "  <url>",
                    f"    <loc>{escape(entry.loc)}</loc>",
                    f"    <lastmod>{entry.lastmod.isoformat()}</lastmod>",
                    f"    <changefreq>{entry.changefreq}</changefreq>",
                    f"    <priority>{entry.priority}</priority>",
                    "  </url>",
                ]
            )
        lines.append("</urlset>")
        return "\n".join(lines) + "\n"


class RSSGenerator(FeedGenerator):
    """Generates an RSS 2.0 feed with all pages, newest first.

    The channel title and description come from the ``site`` block.
    """

    @property
    def filename(self) -> str:
        return "rss.xml"

    def generate(
        self,
        doc: SiteDocument,
        base_url: str | None = None,
        now: datetime | None = None,
    ) -> str:
        base = normalize_base_url(base_url)
        current = now or utcnow()
        title = doc.site.title or "Zyros Feed"
        description = doc.site.description or DEFAULT_FEED_DESCRIPTION

        rss = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<rss version="2.0" xmlns:atom="http://www.w3.org/2005/Atom">',
            "  <channel>",
            f"    <title>{escape(title)}</title>",
            f"    <description>{escape(description)}</description>",
            f"    <link>{escape(base)}</link>",
            f'    <atom:link href="{escape(base)}/rss.xml" rel="self" '
            'type="application/rss+xml"/>',
            "    <language>en-us</language>",
            f"    <lastBuildDate>{rfc822(current)}</lastBuildDate>",
            "    <generator>zyros</generator>",
        ]
        for item in build_feed_items(doc.pages, base, current):
            rss.append("    <item>")
            rss.append(f"      <title>{escape(item.title)}</title>")
            rss.append(f"      <description>{escape(item.description)}</description>")
            rss.append(f"      <link>{escape(item.link)}</link>")
            rss.append(f'      <guid isPermaLink="true">{escape(item.guid)}</guid>')
            rss.append(f"      <pubDate>{rfc822(item.pub_date)}</pubDate>")
            for category in item.categories:
                rss.append(f"      <category>{escape(category)}</category>")
            rss.append("    </item>")
        rss.append("  </channel>")
        rss.append("</rss>")
        return "\n".join(rss) + "\n"


class FeedRegistry:
    """Registry for managing feed generators.

    Attributes:
        _generators: List of registered feed generators.
    """

    def __init__(self) -> None:
        self._generators: list[FeedGenerator] = []

    def register(self, generator: FeedGenerator) -> None:
        self._generators.append(generator)

    def generate_all(
        self,
        output_dir: Path,
        doc: SiteDocument,
        base_url: str | None = None,
        now: datetime | None = None,
    ) -> list[str]:
        """Generate all registered feeds.

        Args:
            output_dir: Directory to write feed files to.
            doc: Validated content document.
            base_url: Public site URL.
            now: Current time shared by all generators.

        Returns:
            List of filenames that were generated.
        """
        current = now or utcnow()
        generated = []
        for generator in self._generators:
            generator.write(output_dir, doc, base_url, current)
            generated.append(generator.filename)
        return generated


def create_default_feed_registry() -> FeedRegistry:
    """Create a registry with default feed generators.

    Returns:
        FeedRegistry configured with sitemap and RSS generators.
    """
    registry = FeedRegistry()
    registry.register(SitemapGenerator())
    registry.register(RSSGenerator())
    return registry
