"""sitemap_crawler.report: Persisting crawl outcomes (JSON report and saved page files)."""

from __future__ import annotations

from .file_writer import OutputWriter, SpoolingFetcher, WriteResult
from .json_report import REPORT_FILENAME, render_json

__all__ = ["OutputWriter", "SpoolingFetcher", "WriteResult", "render_json", "REPORT_FILENAME"]
