# sitemap_crawler/crawler/scheduler.py
"""
Bounded-concurrency fetch scheduler: W worker tasks drain one FIFO queue of CrawlTargets.
"""
from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable, List, Optional, Protocol, Sequence

from sitemap_crawler.aggregator import ResultAggregator
from sitemap_crawler.crawler.models import CrawlTarget, PageOutcome
from sitemap_crawler.errors import CrawlerError
from sitemap_crawler.logger import logger

__all__ = ("FetchScheduler", "ProgressCallback", "SupportsFetch")

ProgressCallback = Callable[[int, int], None]


class SupportsFetch(Protocol):
    def fetch(self, target: CrawlTarget) -> Awaitable[PageOutcome]: ...


class FetchScheduler:
    """Runs exactly one fetch per target with at most ``workers`` in flight.

    Page-level failures become outcomes; a :class:`CrawlerError` raised by the
    fetcher (e.g. OutputError while spooling a body) aborts the whole run.
    """

    def __init__(
        self,
        fetcher: SupportsFetch,
        workers: int,
        progress: Optional[ProgressCallback] = None,
    ) -> None:
        if workers < 1:
            raise ValueError("workers must be >= 1")
        self.fetcher = fetcher
        self.workers = workers
        self.progress = progress

    async def run(self, targets: Sequence[CrawlTarget]) -> List[PageOutcome]:
        """Fetch every target and return the outcomes in rank order."""
        if sorted(t.rank for t in targets) != list(range(len(targets))):
            raise ValueError("target ranks must be exactly 0..N-1")
        aggregator = ResultAggregator(len(targets))
        if not targets:
            return aggregator.results()

        logger.info("Fetching %d pages with %d workers", len(targets), self.workers)
        start = time.monotonic()
        queue: asyncio.Queue[CrawlTarget] = asyncio.Queue()
        for target in targets:
            queue.put_nowait(target)

        pool = [
            asyncio.create_task(self._worker(queue, aggregator))
            for _ in range(min(self.workers, len(targets)))
        ]
        joined = asyncio.create_task(queue.join())
        await asyncio.wait([joined, *pool], return_when=asyncio.FIRST_COMPLETED)
        joined.cancel()
        for w in pool:
            w.cancel()
        finished = await asyncio.gather(joined, *pool, return_exceptions=True)
        # workers only stop on their own when a run-fatal error escaped
        failures = [r for r in finished if isinstance(r, Exception)]
        if failures:
            raise failures[0]

        duration = time.monotonic() - start
        logger.info(
            "Fetched %d pages in %.2f s (%.2f pages/s)",
            aggregator.completed, duration, aggregator.completed / duration if duration else 0,
        )
        return aggregator.results()

    async def _worker(self, queue: asyncio.Queue[CrawlTarget], aggregator: ResultAggregator) -> None:
        while True:
            target = await queue.get()
            try:
                outcome = await self._fetch_one(target)
                done = aggregator.commit(outcome)
                self._report(done, aggregator.total)
            finally:
                queue.task_done()

    async def _fetch_one(self, target: CrawlTarget) -> PageOutcome:
        try:
            outcome = await self.fetcher.fetch(target)
        except CrawlerError:
            raise
        except Exception as exc:
            logger.exception("Unexpected error fetching %s", target.url)
            outcome = PageOutcome.failed(target, f"Unexpected error: {exc}")
        if outcome.error:
            logger.warning("Failed %s: %s", target.url, outcome.error)
        else:
            logger.debug("%s -> %s (%d bytes)", target.url, outcome.status_code, outcome.content_length)
        return outcome

    def _report(self, done: int, total: int) -> None:
        if self.progress is None:
            return
        try:
            self.progress(done, total)
        except Exception as exc:
            logger.warning("Progress callback failed: %s", exc)
