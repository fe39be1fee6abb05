"""
Dataset caching layer.

Holds the most recently fetched worksheet as one immutable snapshot
(rows + fetch time) and serves it until the TTL runs out.  Staleness is
checked lazily on each request; there is no background refresh.

A refresh swaps the whole snapshot in a single assignment, so readers
see either the old rows or the new rows, never a mix.  Refreshes are not
coalesced: concurrent misses may each hit the source and the last one
to finish wins.
"""
from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Callable

from src.core.config import get_settings
from src.core.errors import DataFetchError
from src.core.logging import get_logger
from src.sheets.parser import MetricRow, parse_rows
from src.sheets.sources import SheetSource, build_source

logger = get_logger(__name__)

Dataset = tuple[MetricRow, ...]

CACHE_ACTIVE = "active"
CACHE_EMPTY = "empty"


@dataclass(frozen=True)
class Snapshot:
    """Rows of one fetch and the time they were fetched."""
    rows: Dataset
    fetched_at: float


class DatasetCache:
    """TTL cache in front of a ``SheetSource``.

    Parameters
    ----------
    source : SheetSource | None
        Where rows come from. Built from settings on first use when omitted.
    ttl : float | None
        Seconds a snapshot stays fresh. Defaults to ``settings.cache_ttl_seconds``.
    clock : callable
        Returns the current time in seconds (injectable for tests).
    """

    def __init__(
        self,
        source: SheetSource | None = None,
        ttl: float | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self._source = source
        self._ttl = get_settings().cache_ttl_seconds if ttl is None else ttl
        self._clock = clock
        self._snapshot: Snapshot | None = None
        self._hits = 0
        self._misses = 0
        self._fetches = 0

    @property
    def source(self) -> SheetSource:
        if self._source is None:
            try:
                self._source = build_source()
            except ValueError as exc:
                raise DataFetchError(str(exc)) from exc
        return self._source

    # ── Public API ──────────────────────────────────────

    def is_fresh(self) -> bool:
        snapshot = self._snapshot
        return (
            snapshot is not None
            and bool(snapshot.rows)
            and (self._clock() - snapshot.fetched_at) < self._ttl
        )

    async def get_dataset(self) -> Dataset:
        """Return the cached rows, refetching from the source when stale.

        Raises
        ------
        DataFetchError
            If the source cannot be read. The previous snapshot is kept.
        """
        snapshot = self._snapshot
        if snapshot is not None and self.is_fresh():
            self._hits += 1
            logger.debug("Using cached data (%d rows)", len(snapshot.rows))
            return snapshot.rows

        self._misses += 1
        try:
            source = self.source
            raw_rows = await asyncio.to_thread(source.fetch_rows)
        except DataFetchError as exc:
            logger.error("Error fetching sheet data: %s", exc.message)
            raise
        self._fetches += 1

        rows = parse_rows(raw_rows)
        self._snapshot = Snapshot(rows=rows, fetched_at=self._clock())
        logger.info("Loaded %d rows from %s source", len(rows), source.name)
        return rows

    def state(self) -> str:
        """``"active"`` once a fetch has succeeded, ``"empty"`` before that."""
        return CACHE_ACTIVE if self._snapshot is not None else CACHE_EMPTY

    def invalidate(self) -> int:
        """Drop the snapshot so the next request refetches. Returns rows dropped."""
        snapshot, self._snapshot = self._snapshot, None
        count = len(snapshot.rows) if snapshot is not None else 0
        logger.info("Dataset cache invalidated (%d rows dropped)", count)
        return count

    def stats(self) -> dict[str, Any]:
        """Return cache statistics."""
        snapshot = self._snapshot
        total = self._hits + self._misses
        return {
            "state": self.state(),
            "rows": len(snapshot.rows) if snapshot is not None else 0,
            "age_seconds": round(self._clock() - snapshot.fetched_at, 1) if snapshot is not None else None,
            "ttl_seconds": self._ttl,
            "hits": self._hits,
            "misses": self._misses,
            "fetches": self._fetches,
            "hit_rate": round(self._hits / total, 3) if total else 0.0,
        }


# ── Module-level singleton ──────────────────────────────

_cache: DatasetCache | None = None


def get_dataset_cache() -> DatasetCache:
    """Return the global dataset cache (created on first use)."""
    global _cache
    if _cache is None:
        _cache = DatasetCache()
    return _cache
