# File: sitemap_crawler/utils.py
"""sitemap_crawler.utils: URL helpers and the collision-safe output filename registry."""

from __future__ import annotations

import threading
from typing import Dict, Sequence, Set
from urllib.parse import urlsplit, urlunsplit

from sitemap_crawler.logger import logger

__all__: Sequence[str] = (
    "MAX_FILENAME_BYTES",
    "normalize_url",
    "url_to_filename",
    "FilenameRegistry",
)

# UTF-8 bytes; leaves room for a "_N" suffix under the usual 255-byte name limit
MAX_FILENAME_BYTES = 200

_DEFAULT_PORTS = {"http": 80, "https": 443}


def _filename_char(ch: str) -> str:
    return ch if ch.isalnum() or ch in "_-." else "_"


def normalize_url(url: str) -> str:
    """Comparable form of *url*: lowercase scheme and host, default port and fragment dropped.

    ``HTTP://Example.com:80`` and ``http://example.com/`` normalize alike.
    """
    parts = urlsplit(url.strip())
    scheme = parts.scheme.lower()
    try:
        port = parts.port
    except ValueError:
        return url.strip()
    host = parts.hostname or ""
    if ":" in host:
        host = f"[{host}]"
    netloc = host if port is None or _DEFAULT_PORTS.get(scheme) == port else f"{host}:{port}"
    return urlunsplit((scheme, netloc, parts.path or "/", parts.query, ""))


def url_to_filename(url: str) -> str:
    """Derive the base filename for *url*: host + path, ``/`` and unsafe characters to ``_``.

    Scheme, port, query and fragment are dropped, so
    ``https://example.com/page?x=1`` gives ``example.com_page``.
    """
    parts = urlsplit(url)
    name = f"{parts.hostname or 'unknown'}{parts.path}".replace("/", "_")
    name = "".join(_filename_char(ch) for ch in name)
    name = name.encode("utf-8")[:MAX_FILENAME_BYTES].decode("utf-8", errors="ignore")
    if not name.strip("."):
        name = "_" * max(len(name), 1)
    logger.debug("Filename for %s: %s", url, name)
    return name


class FilenameRegistry:
    """Base name -> number of assignments so far; first use is unsuffixed, then ``_2``, ``_3``…

    :meth:`assign` does the increment-and-read under one lock, so concurrent
    callers never receive the same name.
    """

    def __init__(self) -> None:
        self._counts: Dict[str, int] = {}
        self._taken: Set[str] = set()
        self._lock = threading.Lock()

    def assign(self, base: str) -> str:
        with self._lock:
            count = self._counts.get(base, 0)
            while True:
                count += 1
                name = base if count == 1 else f"{base}_{count}"
                if name not in self._taken:
                    break
            self._counts[base] = count
            self._taken.add(name)
            return name

    def count(self, base: str) -> int:
        with self._lock:
            return self._counts.get(base, 0)

    def __len__(self) -> int:
        return len(self._taken)
