# === FILE: sitemap_crawler/config.py ===
"""
Loading and validation of crawl run parameters.
Pydantic describes the schema; YAML or JSON files may supply defaults
which command-line values override.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, HttpUrl

from sitemap_crawler import __version__

__all__ = ("CrawlConfig", "load_config")


class CrawlConfig(BaseModel):
    """Immutable parameters of one crawl run."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    sitemap_url: HttpUrl = Field(..., description="Root sitemap or sitemap index URL.")
    threads: int = Field(10, ge=1, description="Number of concurrent fetch workers.")
    output: Path = Field(Path("output"), description="Output directory.")
    save_files: bool = Field(False, description="Save fetched pages as files.")
    timeout: float = Field(30.0, gt=0, description="Per-request timeout (seconds).")
    user_agent: str = Field(
        f"SitemapCrawler/{__version__}", min_length=1, description="User-Agent header."
    )
    max_sitemap_depth: int = Field(10, ge=1, description="Maximum sitemap index nesting.")
    write_report: bool = Field(
        True, description="In file mode, also write results.json next to the files."
    )


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def _read_file(path_obj: Path) -> dict[str, Any]:
    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _read_yaml(path_obj)
    if suffix == ".json":
        return _read_json(path_obj)
    raise ValueError(f"Unsupported config format: {suffix}")


def load_config(path: Union[str, Path, None] = None, **overrides: Any) -> CrawlConfig:
    """
    Build a validated CrawlConfig.

    Values come from the YAML/JSON file at *path* (or ``configs/default.yaml``
    when it exists and no path is given); keyword *overrides* that are not
    ``None`` take precedence. A missing explicit path raises FileNotFoundError,
    schema violations raise pydantic's ValidationError.
    """
    data: dict[str, Any] = {}
    if path is None:
        if _DEFAULT_CFG.is_file():
            data = _read_file(_DEFAULT_CFG)
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))
        data = _read_file(path_obj)

    data.update({k: v for k, v in overrides.items() if v is not None})

    return CrawlConfig(**data)
