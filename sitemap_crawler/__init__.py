"""
sitemap-crawler package initializer.
Defines package version and exposes the CLI entry point.
"""
__version__ = "0.1.0"

from sitemap_crawler.cli import cli as main_cli  # noqa: E402
