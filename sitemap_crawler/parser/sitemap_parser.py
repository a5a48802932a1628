# File: sitemap_crawler/parser/sitemap_parser.py
"""sitemap_crawler.parser.sitemap_parser: Parse sitemap XML into a SitemapDocument."""

from __future__ import annotations

import gzip
from typing import List, Union

from lxml import etree

from sitemap_crawler.crawler.models import SitemapDocument, SitemapEntry, SitemapIndex, UrlSet

__all__ = ("SitemapSyntaxError", "parse_sitemap", "maybe_decompress")

_GZIP_MAGIC = b"\x1f\x8b"


class SitemapSyntaxError(ValueError):
    """The document is not a usable sitemap."""


def maybe_decompress(content: bytes) -> bytes:
    """Return *content* gunzipped when it carries the gzip magic bytes (``*.xml.gz``)."""
    if content[:2] != _GZIP_MAGIC:
        return content
    try:
        return gzip.decompress(content)
    except (OSError, EOFError) as exc:
        raise SitemapSyntaxError(f"corrupt gzip data: {exc}") from exc


def _local_name(tag: object) -> str:
    if not isinstance(tag, str):
        return ""
    return etree.QName(tag).localname


def _entries(root: etree._Element, child: str) -> List[SitemapEntry]:
    entries: List[SitemapEntry] = []
    for node in root:
        if _local_name(node.tag) != child:
            continue
        loc = node.find("{*}loc")
        if loc is None or not (loc.text or "").strip():
            continue
        lastmod = node.findtext("{*}lastmod")
        entries.append(SitemapEntry(loc=loc.text.strip(), lastmod=(lastmod or "").strip() or None))
    return entries


def parse_sitemap(content: Union[bytes, str]) -> SitemapDocument:
    """Parse sitemap XML and return a :class:`UrlSet` or :class:`SitemapIndex`.

    Args:
        content: raw document body; bytes are preferred so that the XML
            encoding declaration is honoured.

    Returns:
        ``UrlSet`` for a ``<urlset>`` root, ``SitemapIndex`` for a
        ``<sitemapindex>`` root. Entries keep document order; ``<url>`` or
        ``<sitemap>`` elements without a ``<loc>`` are ignored.

    Raises:
        SitemapSyntaxError: malformed XML or any other root element.

    Example:
    ```python
    from sitemap_crawler.parser.sitemap_parser import parse_sitemap

    with open('sitemap.xml', 'rb') as f:
        doc = parse_sitemap(f.read())
    ```
    """
    raw = content.encode("utf-8") if isinstance(content, str) else maybe_decompress(content)
    parser = etree.XMLParser(ns_clean=True, recover=False, resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(raw, parser=parser)
    except etree.XMLSyntaxError as exc:
        raise SitemapSyntaxError(f"malformed XML: {exc}") from exc
    if root is None:
        raise SitemapSyntaxError("empty document")

    kind = _local_name(root.tag)
    if kind == "urlset":
        return UrlSet(tuple(_entries(root, "url")))
    if kind == "sitemapindex":
        return SitemapIndex(tuple(_entries(root, "sitemap")))
    raise SitemapSyntaxError(f"unexpected root element <{kind}>")
