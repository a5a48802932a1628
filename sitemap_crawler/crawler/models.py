# sitemap_crawler/crawler/models.py
"""
Data models for the sitemap crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union


@dataclass(frozen=True, slots=True)
class SitemapEntry:
    """One ``<loc>`` of a sitemap or sitemap index, with optional ``<lastmod>``."""

    loc: str
    lastmod: Optional[str] = None


@dataclass(frozen=True, slots=True)
class UrlSet:
    """A ``<urlset>`` document: page URLs in document order."""

    entries: Tuple[SitemapEntry, ...] = ()


@dataclass(frozen=True, slots=True)
class SitemapIndex:
    """A ``<sitemapindex>`` document: child sitemap URLs in document order."""

    entries: Tuple[SitemapEntry, ...] = ()


SitemapDocument = Union[UrlSet, SitemapIndex]


@dataclass(frozen=True, slots=True)
class CrawlTarget:
    """A discovered page URL and its position in the flattened sitemap order."""

    rank: int
    url: str


@dataclass(slots=True)
class PageOutcome:
    """Result of fetching one CrawlTarget.

    ``error`` is set only for transport-level failures; an HTTP error status
    is a normal outcome. ``body`` is kept only when pages are saved to disk.
    """

    rank: int
    url: str
    status_code: Optional[int] = None
    content_length: int = 0
    mime_type: Optional[str] = None
    error: Optional[str] = None
    body: Optional[bytes] = field(default=None, repr=False, compare=False)

    @property
    def ok(self) -> bool:
        return self.status_code is not None and self.error is None

    @classmethod
    def failed(cls, target: CrawlTarget, error: str, status_code: Optional[int] = None,
               mime_type: Optional[str] = None) -> PageOutcome:
        return cls(
            rank=target.rank,
            url=target.url,
            status_code=status_code,
            content_length=0,
            mime_type=mime_type,
            error=error,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Report representation: exactly the five persisted fields."""
        return {
            "url": self.url,
            "status_code": self.status_code,
            "content_length": self.content_length,
            "mime_type": self.mime_type,
            "error": self.error,
        }


@dataclass(frozen=True, slots=True)
class CrawlSummary:
    """Counters printed at the end of a run."""

    total: int
    successful: int
    failed: int
    skipped_sitemaps: int = 0
