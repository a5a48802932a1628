# File: sitemap_crawler/errors.py
"""sitemap_crawler.errors: Exception hierarchy for resolution and output failures.

Page-level fetch failures are not exceptions: they are recorded in the
``error`` field of :class:`~sitemap_crawler.crawler.models.PageOutcome`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

__all__ = (
    "CrawlerError",
    "SitemapError",
    "SitemapFetchError",
    "SitemapParseError",
    "SitemapCycleError",
    "RootResolutionError",
    "NestedResolutionError",
    "OutputError",
)


class CrawlerError(Exception):
    """Base class for every error raised by sitemap-crawler."""


class SitemapError(CrawlerError):
    """A single sitemap document could not be used."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class SitemapFetchError(SitemapError):
    """Transport failure, timeout or non-success HTTP status for a sitemap."""


class SitemapParseError(SitemapError):
    """Malformed XML or a root element that is neither urlset nor sitemapindex."""


class SitemapCycleError(SitemapError):
    """Sitemap already on the current resolution path, or nested too deeply."""


class RootResolutionError(CrawlerError):
    """The root sitemap failed; the run cannot continue."""

    def __init__(self, cause: SitemapError) -> None:
        super().__init__(f"Root sitemap failed: {cause}")
        self.cause = cause
        self.url = cause.url


class NestedResolutionError(CrawlerError):
    """A nested sitemap branch was skipped. Recorded, never raised out of the resolver."""

    def __init__(self, url: str, cause: SitemapError) -> None:
        super().__init__(f"Skipped sitemap {url}: {cause.reason}")
        self.url = url
        self.cause = cause


class OutputError(CrawlerError):
    """The output directory, report or a page file could not be written."""

    def __init__(self, path: Union[str, Path], reason: str) -> None:
        super().__init__(f"Cannot write {path}: {reason}")
        self.path = Path(path)
        self.reason = reason
