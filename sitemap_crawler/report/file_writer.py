# File: sitemap_crawler/report/file_writer.py
"""sitemap_crawler.report.file_writer: Report mode and file mode output.

In file mode bodies are spooled to ``.<rank>.part`` files as soon as each
page is fetched, so no body stays in memory. Final names are assigned after
aggregation, in rank order, and the spool files are renamed onto them.
"""

from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Set, Tuple

from sitemap_crawler.config import CrawlConfig
from sitemap_crawler.crawler.models import CrawlTarget, PageOutcome
from sitemap_crawler.crawler.scheduler import SupportsFetch
from sitemap_crawler.errors import OutputError
from sitemap_crawler.logger import logger
from sitemap_crawler.report.json_report import REPORT_FILENAME, render_json
from sitemap_crawler.utils import FilenameRegistry, url_to_filename

__all__ = ("OutputWriter", "SpoolingFetcher", "WriteResult")


@dataclass(slots=True)
class WriteResult:
    """What the writer put on disk."""

    report_path: Optional[Path] = None
    files: List[Path] = field(default_factory=list)


class OutputWriter:
    """Persists aggregated outcomes according to ``config.save_files``.

    Report mode writes ``results.json``. File mode writes one file per
    successful outcome, named by :func:`url_to_filename` and disambiguated by
    a :class:`FilenameRegistry`; ``results.json`` is written as well unless
    ``config.write_report`` is off.
    """

    def __init__(self, config: CrawlConfig, registry: Optional[FilenameRegistry] = None) -> None:
        self.config = config
        self.registry = registry or FilenameRegistry()
        self._spooled: Set[int] = set()
        self._io = asyncio.Semaphore(config.threads)

    @property
    def out_dir(self) -> Path:
        return Path(self.config.output)

    def prepare(self) -> None:
        """Create the output directory (parents included)."""
        try:
            self.out_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OutputError(self.out_dir, exc.strerror or str(exc)) from exc

    def spool_path(self, rank: int) -> Path:
        return self.out_dir / f".{rank}.part"

    async def spool(self, outcome: PageOutcome) -> None:
        """Move the body of *outcome* to its spool file and drop it from memory."""
        if outcome.body is None:
            return
        path = self.spool_path(outcome.rank)
        await self._write_bytes(path, outcome.body)
        outcome.body = None
        self._spooled.add(outcome.rank)

    async def write(self, outcomes: Sequence[PageOutcome]) -> WriteResult:
        self.prepare()
        result = WriteResult()

        if self.config.save_files:
            result.files = await self._write_files(outcomes)
            logger.info("Saved %d files to %s", len(result.files), self.out_dir)

        if not self.config.save_files or self.config.write_report:
            report = self.out_dir / REPORT_FILENAME
            try:
                result.report_path = render_json(outcomes, report)
            except OSError as exc:
                raise OutputError(report, exc.strerror or str(exc)) from exc
            logger.info("Results saved to: %s", result.report_path)
        return result

    def plan(self, outcomes: Sequence[PageOutcome]) -> List[Tuple[PageOutcome, str]]:
        """Assign an output name to every successful outcome, in rank order."""
        return [
            (outcome, self.registry.assign(url_to_filename(outcome.url)))
            for outcome in sorted(outcomes, key=lambda o: o.rank)
            if outcome.ok
        ]

    async def _write_files(self, outcomes: Sequence[PageOutcome]) -> List[Path]:
        async def write_one(outcome: PageOutcome, name: str) -> Path:
            path = self.out_dir / name
            if outcome.rank in self._spooled:
                await self._move(self.spool_path(outcome.rank), path)
                self._spooled.discard(outcome.rank)
            else:
                await self._write_bytes(path, outcome.body or b"")
                outcome.body = None
            logger.debug("Saved %s -> %s", outcome.url, path)
            return path

        tasks = [write_one(outcome, name) for outcome, name in self.plan(outcomes)]
        return list(await asyncio.gather(*tasks))

    async def _write_bytes(self, path: Path, data: bytes) -> None:
        async with self._io:
            try:
                await asyncio.to_thread(path.write_bytes, data)
            except OSError as exc:
                raise OutputError(path, exc.strerror or str(exc)) from exc

    async def _move(self, src: Path, dst: Path) -> None:
        async with self._io:
            try:
                await asyncio.to_thread(os.replace, src, dst)
            except OSError as exc:
                raise OutputError(dst, exc.strerror or str(exc)) from exc


class SpoolingFetcher:
    """Wraps a fetcher so each fetched body goes to disk inside the worker."""

    def __init__(self, fetcher: SupportsFetch, writer: OutputWriter) -> None:
        self.fetcher = fetcher
        self.writer = writer

    async def fetch(self, target: CrawlTarget) -> PageOutcome:
        outcome = await self.fetcher.fetch(target)
        await self.writer.spool(outcome)
        return outcome
