# === FILE: sitemap_crawler/cli.py ===
#!/usr/bin/env python3
"""
Command-line entry point for sitemap-crawler.

Resolves every page URL listed (directly or through sitemap indexes) by
SITEMAP_URL, fetches them concurrently and writes ``results.json`` or, with
``--save-files``, the page bodies into the output directory.

Options:
  --threads N         Concurrent requests (default: 10)
  --output DIR        Output directory (default: output)
  --save-files        Save pages as files instead of only the JSON report
  --timeout SEC       Per-request timeout in seconds (default: 30)
  --config PATH       YAML/JSON file with defaults for the options above
  --user-agent UA     User-Agent header
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file (stdout only when omitted)
  --version, -v       Show version

Example:
  sitemap-crawler https://example.com/sitemap.xml --threads 20 --save-files
"""
import sys
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError

from sitemap_crawler import __version__
from sitemap_crawler.config import load_config
from sitemap_crawler.engine import Engine
from sitemap_crawler.errors import CrawlerError
from sitemap_crawler.logger import init_logging

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


class ProgressReporter:
    """Feeds scheduler progress callbacks into a click progress bar on stderr."""

    def __init__(self, label: str = "Fetching pages") -> None:
        self.label = label
        self._bar = None
        self._shown = 0

    def __call__(self, done: int, total: int) -> None:
        if self._bar is None:
            self._bar = click.progressbar(length=total, label=self.label, file=sys.stderr)
            self._bar.__enter__()
        self._bar.update(done - self._shown)
        self._shown = done

    def close(self) -> None:
        if self._bar is not None:
            self._bar.__exit__(None, None, None)
            self._bar = None


@click.command(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='sitemap-crawler, version %(version)s')
@click.argument('sitemap_url', required=False)
@click.option('--threads', type=click.IntRange(min=1), default=None,
              help='Number of threads for parallel requests  [default: 10]')
@click.option('--output', type=click.Path(file_okay=False, path_type=Path), default=None,
              help='Output folder  [default: output]')
@click.option('--save-files', 'save_files', is_flag=True,
              help='Save files instead of creating only JSON')
@click.option('--timeout', type=click.FloatRange(min=0, min_open=True), default=None,
              help='Timeout in seconds for individual page requests  [default: 30]')
@click.option('--config', '-c', 'config_path', default=None,
              type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='YAML/JSON file with default values.')
@click.option('--user-agent', 'user_agent', default=None, help='User-Agent header.')
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Logging level'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Log file path (stdout if omitted)'
)
def cli(sitemap_url: Optional[str], threads, output, save_files, timeout, config_path,
        user_agent, log_level, log_file):
    """Analyze SITEMAP_URL and download the pages it lists in parallel."""
    init_logging(level=log_level, log_file=str(log_file) if log_file else None)
    try:
        cfg = load_config(
            config_path,
            sitemap_url=sitemap_url,
            threads=threads,
            output=output,
            save_files=save_files or None,
            timeout=timeout,
            user_agent=user_agent,
        )
    except (OSError, ValueError, TypeError, ValidationError) as e:
        print_error(f'Configuration error: {e}')

    reporter = ProgressReporter()
    try:
        result = Engine(cfg).run(progress=reporter)
    except CrawlerError as e:
        print_error(f'Error: {e}')
    finally:
        reporter.close()

    if result.report_path:
        click.echo(f'Results saved to: {result.report_path}', err=True)
    if cfg.save_files:
        click.echo(f'Saved {len(result.files)} files to: {cfg.output}', err=True)
    for skipped in result.skipped:
        click.secho(f'Skipped sitemap {skipped.url}: {skipped.cause.reason}', fg='yellow', err=True)
    summary = result.summary
    click.echo(f'Processed {summary.total} URLs', err=True)
    click.echo(f'Successful: {summary.successful}, Failed: {summary.failed}', err=True)


if __name__ == "__main__":
    cli()
