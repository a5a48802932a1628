# sitemap_crawler/crawler/fetcher.py
"""
Fetcher module: performs one bounded GET per CrawlTarget and records a PageOutcome.
"""
from __future__ import annotations

import asyncio

from aiohttp import ClientError, ClientSession

from sitemap_crawler.crawler.models import CrawlTarget, PageOutcome


class PageFetcher:
    """Retrieves pages through a shared session whose ClientTimeout bounds each request."""

    def __init__(self, session: ClientSession, timeout: float, keep_body: bool = False) -> None:
        self.session = session
        self.timeout = timeout
        self.keep_body = keep_body

    async def fetch(self, target: CrawlTarget) -> PageOutcome:
        """
        Fetch the target URL.

        Never raises for network trouble: connection errors, DNS failures,
        timeouts and malformed URLs become an outcome with ``error`` set and
        no status code. Any HTTP status, 4xx/5xx included, is a normal outcome.
        """
        try:
            async with self.session.get(target.url, raise_for_status=False) as resp:
                status = resp.status
                mime = resp.headers.get("Content-Type")
                try:
                    body = await resp.read()
                except (ClientError, asyncio.TimeoutError) as exc:
                    reason = str(exc) or f"timed out after {self.timeout:g}s"
                    return PageOutcome.failed(
                        target,
                        f"Failed to read response body: {reason}",
                        status_code=status,
                        mime_type=mime,
                    )
        except asyncio.TimeoutError:
            return PageOutcome.failed(target, f"Request timed out after {self.timeout:g}s")
        except (ClientError, ValueError) as exc:
            return PageOutcome.failed(target, f"Request failed: {str(exc) or type(exc).__name__}")

        return PageOutcome(
            rank=target.rank,
            url=target.url,
            status_code=status,
            content_length=len(body),
            mime_type=mime,
            body=body if self.keep_body else None,
        )
