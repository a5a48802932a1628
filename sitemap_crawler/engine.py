# File: sitemap_crawler/engine.py
"""sitemap_crawler.engine: Orchestration of resolve → fetch → aggregate → write."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from aiohttp import ClientSession, ClientTimeout

from sitemap_crawler.aggregator import summarize
from sitemap_crawler.config import CrawlConfig
from sitemap_crawler.crawler.fetcher import PageFetcher
from sitemap_crawler.crawler.models import CrawlSummary, PageOutcome
from sitemap_crawler.crawler.resolver import SitemapResolver
from sitemap_crawler.crawler.scheduler import FetchScheduler, ProgressCallback, SupportsFetch
from sitemap_crawler.errors import NestedResolutionError
from sitemap_crawler.logger import logger
from sitemap_crawler.report.file_writer import OutputWriter, SpoolingFetcher

__all__ = ["CrawlResult", "Engine", "run_crawl"]


@dataclass(slots=True)
class CrawlResult:
    """Everything a finished run produced."""

    outcomes: List[PageOutcome]
    skipped: List[NestedResolutionError] = field(default_factory=list)
    report_path: Optional[Path] = None
    files: List[Path] = field(default_factory=list)

    @property
    def summary(self) -> CrawlSummary:
        return summarize(self.outcomes, skipped_sitemaps=len(self.skipped))


def _session(config: CrawlConfig) -> ClientSession:
    return ClientSession(
        timeout=ClientTimeout(total=config.timeout),
        headers={"User-Agent": config.user_agent},
        raise_for_status=False,
    )


async def run_crawl(config: CrawlConfig, progress: Optional[ProgressCallback] = None) -> CrawlResult:
    """Run one complete crawl.

    RootResolutionError propagates before anything is fetched or written;
    OutputError propagates from spooling page bodies or from the write stage.
    """
    root = str(config.sitemap_url)
    logger.info("Analyzing sitemap: %s", root)

    async with _session(config) as session:
        resolver = SitemapResolver(session, max_depth=config.max_sitemap_depth)
        targets = await resolver.resolve(root)

        writer = OutputWriter(config)
        fetcher: SupportsFetch = PageFetcher(
            session, timeout=config.timeout, keep_body=config.save_files
        )
        if config.save_files:
            writer.prepare()
            fetcher = SpoolingFetcher(fetcher, writer)
        outcomes = await FetchScheduler(fetcher, config.threads, progress).run(targets)

    written = await writer.write(outcomes)
    result = CrawlResult(
        outcomes=outcomes,
        skipped=list(resolver.skipped),
        report_path=written.report_path,
        files=written.files,
    )
    summary = result.summary
    logger.info(
        "Processed %d URLs. Successful: %d, Failed: %d",
        summary.total, summary.successful, summary.failed,
    )
    return result


class Engine:
    """Synchronous facade for the CLI and tests."""

    def __init__(self, config: CrawlConfig) -> None:
        self.config = config

    def run(self, progress: Optional[ProgressCallback] = None) -> CrawlResult:
        try:
            return asyncio.run(run_crawl(self.config, progress))
        except Exception as exc:
            logger.error("Crawl failed: %s", exc)
            raise
