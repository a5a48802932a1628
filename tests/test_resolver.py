# File: tests/test_resolver.py
from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from aiohttp import ClientSession, ClientTimeout

from conftest import sitemapindex_xml, urlset_xml, xml
from sitemap_crawler.crawler.models import CrawlTarget
from sitemap_crawler.crawler.resolver import SitemapResolver
from sitemap_crawler.errors import (
    RootResolutionError,
    SitemapCycleError,
    SitemapFetchError,
    SitemapParseError,
)


@pytest_asyncio.fixture
async def session() -> AsyncIterator[ClientSession]:
    async with ClientSession(timeout=ClientTimeout(total=5)) as s:
        yield s


@pytest.mark.asyncio()
async def test_urlset_root(serve, session):
    base = await serve({"/sitemap.xml": xml(urlset_xml("https://a.test/1", "https://a.test/2"))})
    resolver = SitemapResolver(session)

    targets = await resolver.resolve(f"{base}/sitemap.xml")

    assert targets == [CrawlTarget(0, "https://a.test/1"), CrawlTarget(1, "https://a.test/2")]
    assert resolver.skipped == []


@pytest.mark.asyncio()
async def test_nested_index_flattens_depth_first(serve, session):
    base = await serve(
        {
            "/index.xml": xml(sitemapindex_xml("{base}/a.xml", "{base}/b.xml", "{base}/e.xml")),
            "/a.xml": xml(urlset_xml("https://a.test/1", "https://a.test/2")),
            "/b.xml": xml(sitemapindex_xml("{base}/c.xml", "{base}/d.xml")),
            "/c.xml": xml(urlset_xml("https://a.test/3")),
            "/d.xml": xml(urlset_xml("https://a.test/4")),
            "/e.xml": xml(urlset_xml("https://a.test/5")),
        }
    )
    targets = await SitemapResolver(session).resolve(f"{base}/index.xml")

    assert [t.url for t in targets] == [f"https://a.test/{i}" for i in range(1, 6)]
    assert [t.rank for t in targets] == list(range(5))


@pytest.mark.asyncio()
async def test_failed_child_is_skipped(serve, session, dead_url):
    base = await serve(
        {
            "/index.xml": xml(sitemapindex_xml(dead_url, "{base}/good.xml")),
            "/good.xml": xml(urlset_xml("https://a.test/ok1", "https://a.test/ok2")),
        }
    )
    resolver = SitemapResolver(session)

    targets = await resolver.resolve(f"{base}/index.xml")

    assert [t.url for t in targets] == ["https://a.test/ok1", "https://a.test/ok2"]
    assert [t.rank for t in targets] == [0, 1]
    assert len(resolver.skipped) == 1
    assert resolver.skipped[0].url == dead_url
    assert isinstance(resolver.skipped[0].cause, SitemapFetchError)


@pytest.mark.asyncio()
async def test_child_errors_are_recorded_per_branch(serve, session):
    base = await serve(
        {
            "/index.xml": xml(
                sitemapindex_xml("{base}/missing.xml", "{base}/broken.xml", "{base}/good.xml")
            ),
            "/missing.xml": xml("gone", status=404),
            "/broken.xml": xml("<urlset><url><loc>x</loc>"),
            "/good.xml": xml(urlset_xml("https://a.test/ok")),
        }
    )
    resolver = SitemapResolver(session)

    targets = await resolver.resolve(f"{base}/index.xml")

    assert [t.url for t in targets] == ["https://a.test/ok"]
    causes = [type(s.cause) for s in resolver.skipped]
    assert causes == [SitemapFetchError, SitemapParseError]
    assert "404" in resolver.skipped[0].cause.reason


@pytest.mark.asyncio()
async def test_cycles_are_skipped(serve, session):
    base = await serve(
        {
            "/index.xml": xml(sitemapindex_xml("{base}/index.xml", "{base}/inner.xml")),
            "/inner.xml": xml(sitemapindex_xml("{base}/index.xml", "{base}/pages.xml")),
            "/pages.xml": xml(urlset_xml("https://a.test/p")),
        }
    )
    resolver = SitemapResolver(session)

    targets = await resolver.resolve(f"{base}/index.xml")

    assert [t.url for t in targets] == ["https://a.test/p"]
    assert len(resolver.skipped) == 2
    assert all(isinstance(s.cause, SitemapCycleError) for s in resolver.skipped)
    assert all(s.url == f"{base}/index.xml" for s in resolver.skipped)


@pytest.mark.asyncio()
async def test_cycle_detected_across_url_spellings(serve, session):
    base = await serve(
        {
            "/index.xml": xml(sitemapindex_xml("{base}/index.xml#self", "{base}/pages.xml")),
            "/pages.xml": xml(urlset_xml("https://a.test/p1", "https://a.test/p2")),
        }
    )
    root = base.replace("http://", "HTTP://") + "/index.xml"
    resolver = SitemapResolver(session)

    targets = await resolver.resolve(root)

    assert [t.url for t in targets] == ["https://a.test/p1", "https://a.test/p2"]
    assert len(resolver.skipped) == 1
    assert isinstance(resolver.skipped[0].cause, SitemapCycleError)


@pytest.mark.asyncio()
async def test_same_child_in_sibling_branches_is_not_a_cycle(serve, session):
    base = await serve(
        {
            "/index.xml": xml(sitemapindex_xml("{base}/pages.xml", "{base}/pages.xml")),
            "/pages.xml": xml(urlset_xml("https://a.test/p")),
        }
    )
    resolver = SitemapResolver(session)

    targets = await resolver.resolve(f"{base}/index.xml")

    assert [t.url for t in targets] == ["https://a.test/p", "https://a.test/p"]
    assert resolver.skipped == []


@pytest.mark.asyncio()
async def test_nesting_depth_limit(serve, session):
    base = await serve(
        {
            "/index.xml": xml(sitemapindex_xml("{base}/level1.xml", "{base}/flat.xml")),
            "/level1.xml": xml(sitemapindex_xml("{base}/deep.xml")),
            "/deep.xml": xml(urlset_xml("https://a.test/deep")),
            "/flat.xml": xml(urlset_xml("https://a.test/flat")),
        }
    )
    resolver = SitemapResolver(session, max_depth=1)

    targets = await resolver.resolve(f"{base}/index.xml")

    assert [t.url for t in targets] == ["https://a.test/flat"]
    assert [s.url for s in resolver.skipped] == [f"{base}/deep.xml"]
    assert isinstance(resolver.skipped[0].cause, SitemapCycleError)


@pytest.mark.asyncio()
async def test_root_404_is_fatal(serve, session):
    base = await serve({"/sitemap.xml": xml("not found", status=404)})

    with pytest.raises(RootResolutionError) as exc_info:
        await SitemapResolver(session).resolve(f"{base}/sitemap.xml")

    assert isinstance(exc_info.value.cause, SitemapFetchError)
    assert exc_info.value.url == f"{base}/sitemap.xml"


@pytest.mark.asyncio()
async def test_root_malformed_is_fatal(serve, session):
    base = await serve({"/sitemap.xml": xml("<urlset>")})

    with pytest.raises(RootResolutionError) as exc_info:
        await SitemapResolver(session).resolve(f"{base}/sitemap.xml")

    assert isinstance(exc_info.value.cause, SitemapParseError)


@pytest.mark.asyncio()
async def test_root_unreachable_is_fatal(session, dead_url):
    with pytest.raises(RootResolutionError) as exc_info:
        await SitemapResolver(session).resolve(dead_url)

    assert isinstance(exc_info.value.cause, SitemapFetchError)
