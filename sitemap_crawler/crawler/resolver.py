# sitemap_crawler/crawler/resolver.py
"""
Sitemap resolver: fetches a sitemap tree and flattens it into ranked CrawlTargets.
"""
from __future__ import annotations

import asyncio
from typing import FrozenSet, List

from aiohttp import ClientError, ClientSession

from sitemap_crawler.crawler.models import CrawlTarget, SitemapDocument, SitemapIndex, UrlSet
from sitemap_crawler.errors import (
    NestedResolutionError,
    RootResolutionError,
    SitemapCycleError,
    SitemapError,
    SitemapFetchError,
    SitemapParseError,
)
from sitemap_crawler.logger import logger
from sitemap_crawler.parser.sitemap_parser import SitemapSyntaxError, parse_sitemap
from sitemap_crawler.utils import normalize_url

__all__ = ("SitemapResolver",)


class SitemapResolver:
    """Depth-first resolution of a sitemap / sitemap index tree.

    A failure of the root document is fatal (:class:`RootResolutionError`).
    Failures of nested documents, cycles and over-deep nesting only skip that
    branch; each skip is kept in :attr:`skipped`.
    """

    def __init__(self, session: ClientSession, max_depth: int = 10) -> None:
        self.session = session
        self.max_depth = max_depth
        self.skipped: List[NestedResolutionError] = []

    async def resolve(self, root_url: str) -> List[CrawlTarget]:
        """Return every page URL reachable from *root_url*, ranked in document order."""
        self.skipped = []
        try:
            urls = await self._resolve(root_url, frozenset(), depth=0)
        except SitemapError as exc:
            logger.error("Root sitemap %s failed: %s", root_url, exc.reason)
            raise RootResolutionError(exc) from exc
        logger.info("Found %d total URLs to process", len(urls))
        return [CrawlTarget(rank=i, url=url) for i, url in enumerate(urls)]

    async def fetch_document(self, url: str) -> bytes:
        """GET *url* and return the body; any transport problem or non-2xx is SitemapFetchError."""
        try:
            async with self.session.get(url, raise_for_status=False) as resp:
                if not 200 <= resp.status < 300:
                    raise SitemapFetchError(url, f"HTTP {resp.status}")
                return await resp.read()
        except asyncio.TimeoutError as exc:
            raise SitemapFetchError(url, "request timed out") from exc
        except (ClientError, ValueError) as exc:
            raise SitemapFetchError(url, f"request failed: {exc}") from exc

    async def load(self, url: str) -> SitemapDocument:
        """Fetch and parse one document."""
        body = await self.fetch_document(url)
        try:
            return parse_sitemap(body)
        except SitemapSyntaxError as exc:
            raise SitemapParseError(url, str(exc)) from exc

    async def _resolve(self, url: str, path: FrozenSet[str], depth: int) -> List[str]:
        document = await self.load(url)
        match document:
            case UrlSet(entries=entries):
                logger.info("Extracted %d URLs from %s", len(entries), url)
                return [entry.loc for entry in entries]
            case SitemapIndex(entries=entries):
                logger.info("Found sitemap index %s with %d sitemaps", url, len(entries))
                visited = path | {normalize_url(url)}
                return await self._resolve_children(url, entries, visited, depth + 1)

    async def _resolve_children(self, parent: str, entries, path: FrozenSet[str],
                                depth: int) -> List[str]:
        urls: List[str] = []
        for entry in entries:
            child = entry.loc
            try:
                if normalize_url(child) in path:
                    raise SitemapCycleError(child, f"cycle via {parent}")
                if depth > self.max_depth:
                    raise SitemapCycleError(child, f"nesting deeper than {self.max_depth}")
                urls.extend(await self._resolve(child, path, depth))
            except SitemapError as exc:
                skipped = NestedResolutionError(child, exc)
                self.skipped.append(skipped)
                logger.warning("Skipping sitemap %s: %s", child, exc.reason)
        return urls
