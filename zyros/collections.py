from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field

from .feeds import DEFAULT_FEED_DATE
from .schema import Page, SiteDocument
from .utils import WORDS_PER_MINUTE, parse_date, word_count


class PageCollection(Sequence[Page]):
    """Lightweight helper for querying lists of Pages."""

    def __init__(self, pages: Iterable[Page]):
        self._pages = list(pages)

    def __iter__(self) -> Iterator[Page]:
        return iter(self._pages)

    def __len__(self) -> int:
        return len(self._pages)

    def __getitem__(self, item):
        return self._pages[item]

    def with_tag(self, tag: str) -> PageCollection:
        return PageCollection(p for p in self._pages if tag in p.tag_list)

    def in_category(self, name: str) -> PageCollection:
        return PageCollection(p for p in self._pages if p.category == name)

    def drafts(self) -> PageCollection:
        return PageCollection(p for p in self._pages if p.draft)

    def published(self) -> PageCollection:
        return PageCollection(p for p in self._pages if not p.draft)

    def featured(self) -> PageCollection:
        return PageCollection(p for p in self._pages if p.featured)

    def sorted(self, reverse: bool = True) -> PageCollection:
        """Sort pages by publication date, newest first by default.

        Undated pages use the same fallback date as the feed. Ties keep
        document order.
        """

        def sort_key(p: Page):
            return parse_date(p.published_at) or DEFAULT_FEED_DATE

        return PageCollection(sorted(self._pages, key=sort_key, reverse=reverse))

    def latest(self, count: int = 5) -> PageCollection:
        return PageCollection(self.sorted()[:count])

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"PageCollection({len(self._pages)} pages)"


@dataclass
class SiteStats:
    """Summary numbers shown by ``zyros stats``.

    Attributes:
        total_pages: Number of pages.
        total_words: Words across all page bodies.
        avg_reading_time: Average minutes per page, rounded.
        categories: Category name to page count, in first-seen order.
        tags: Tag name to page count, most used first.
    """

    total_pages: int
    total_words: int
    avg_reading_time: int
    categories: dict[str, int] = field(default_factory=dict)
    tags: list[tuple[str, int]] = field(default_factory=list)


def site_stats(doc: SiteDocument) -> SiteStats:
    """Compute page, word, category and tag statistics for a document."""
    pages = doc.pages
    total_words = sum(
        word_count(p.content) for p in pages if isinstance(p.content, str)
    )
    avg = round(total_words / len(pages) / WORDS_PER_MINUTE) if pages else 0
    categories = Counter(str(p.category) for p in pages if p.category)
    # Counter.most_common keeps first-seen order for equal counts
    tags = Counter(tag for p in pages for tag in p.tag_list)
    return SiteStats(
        total_pages=len(pages),
        total_words=total_words,
        avg_reading_time=avg,
        categories=dict(categories),
        tags=tags.most_common(),
    )
