# File: sitemap_crawler/aggregator.py
"""sitemap_crawler.aggregator: Rank-ordered collection of PageOutcomes from concurrent workers."""

from __future__ import annotations

import threading
from typing import List, Optional, Sequence

from sitemap_crawler.crawler.models import CrawlSummary, PageOutcome

__all__ = ("ResultAggregator", "summarize")


class ResultAggregator:
    """Pre-sized, rank-indexed slots; one commit per rank.

    Iteration order of :meth:`results` is ascending rank no matter in which
    order the outcomes were committed.
    """

    def __init__(self, total: int) -> None:
        if total < 0:
            raise ValueError("total must be >= 0")
        self._slots: List[Optional[PageOutcome]] = [None] * total
        self._completed = 0
        self._lock = threading.Lock()

    @property
    def total(self) -> int:
        return len(self._slots)

    @property
    def completed(self) -> int:
        return self._completed

    @property
    def is_complete(self) -> bool:
        return self._completed == len(self._slots)

    def commit(self, outcome: PageOutcome) -> int:
        """Place *outcome* in its rank slot and return the new completion count."""
        rank = outcome.rank
        if not 0 <= rank < len(self._slots):
            raise IndexError(f"rank {rank} outside 0..{len(self._slots) - 1}")
        with self._lock:
            if self._slots[rank] is not None:
                raise ValueError(f"outcome for rank {rank} already committed")
            self._slots[rank] = outcome
            self._completed += 1
            return self._completed

    def results(self) -> List[PageOutcome]:
        """All outcomes in rank order. Raises RuntimeError while slots are still empty."""
        with self._lock:
            if self._completed != len(self._slots):
                missing = [i for i, slot in enumerate(self._slots) if slot is None]
                raise RuntimeError(f"{len(missing)} outcomes missing, first rank {missing[0]}")
            return list(self._slots)  # type: ignore[arg-type]


def summarize(outcomes: Sequence[PageOutcome], skipped_sitemaps: int = 0) -> CrawlSummary:
    """Count successful (transport OK) and failed outcomes."""
    successful = sum(1 for o in outcomes if o.error is None)
    return CrawlSummary(
        total=len(outcomes),
        successful=successful,
        failed=len(outcomes) - successful,
        skipped_sitemaps=skipped_sitemaps,
    )
