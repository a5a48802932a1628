# File: tests/conftest.py
from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from pathlib import Path
from typing import Dict

import pytest
import pytest_asyncio
from aiohttp import web

from sitemap_crawler.config import CrawlConfig

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]

NS = "http://www.sitemaps.org/schemas/sitemap/0.9"


def urlset_xml(*urls: str) -> str:
    """Build a <urlset> document listing *urls*."""
    items = "".join(f"<url><loc>{u}</loc></url>" for u in urls)
    return f'<?xml version="1.0" encoding="UTF-8"?><urlset xmlns="{NS}">{items}</urlset>'


def sitemapindex_xml(*urls: str) -> str:
    """Build a <sitemapindex> document referencing *urls*."""
    items = "".join(f"<sitemap><loc>{u}</loc></sitemap>" for u in urls)
    return f'<?xml version="1.0" encoding="UTF-8"?><sitemapindex xmlns="{NS}">{items}</sitemapindex>'


def xml(text: str, status: int = 200) -> Handler:
    """Serve *text* as XML; ``{base}`` is replaced with the server origin."""

    async def handler(request: web.Request) -> web.Response:
        body = text.replace("{base}", str(request.url.origin()))
        return web.Response(text=body, status=status, content_type="application/xml")

    return handler


def html(text: str = "<h1>ok</h1>", status: int = 200) -> Handler:
    async def handler(_: web.Request) -> web.Response:
        return web.Response(text=text, status=status, content_type="text/html")

    return handler


@pytest_asyncio.fixture
async def serve(unused_tcp_port_factory) -> AsyncIterator[Callable[[Dict[str, Handler]], Awaitable[str]]]:
    """
    Start local aiohttp apps on demand.

    ``base = await serve({"/sitemap.xml": xml(...)})`` returns the base URL;
    every started app is cleaned up after the test.
    """
    runners: list[web.AppRunner] = []

    async def _serve(routes: Dict[str, Handler]) -> str:
        app = web.Application()
        for path, handler in routes.items():
            app.router.add_get(path, handler)
        runner = web.AppRunner(app)
        await runner.setup()
        port = unused_tcp_port_factory()
        site = web.TCPSite(runner, "127.0.0.1", port)
        await site.start()
        runners.append(runner)
        return f"http://127.0.0.1:{port}"

    yield _serve

    for runner in runners:
        await runner.cleanup()


@pytest.fixture()
def dead_url(unused_tcp_port_factory) -> str:
    """A URL on a port nothing listens on."""
    return f"http://127.0.0.1:{unused_tcp_port_factory()}/sitemap.xml"


@pytest.fixture()
def make_config(tmp_path: Path) -> Callable[..., CrawlConfig]:
    """Return a factory for CrawlConfig writing into ``tmp_path / "output"``."""

    def _make(sitemap_url: str = "http://example.com/sitemap.xml", **kwargs) -> CrawlConfig:
        kwargs.setdefault("output", tmp_path / "output")
        kwargs.setdefault("timeout", 5.0)
        kwargs.setdefault("threads", 4)
        return CrawlConfig(sitemap_url=sitemap_url, **kwargs)

    return _make
