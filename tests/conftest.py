"""
Shared fixtures -- synthetic worksheet rows and an in-memory data source.
"""
from __future__ import annotations

from datetime import date, timedelta
from typing import Callable

import pytest

from src.sheets.cache import DatasetCache
from src.sheets.parser import MetricRow, parse_rows

TODAY = date(2026, 2, 11)


def sheet_date(day: date) -> str:
    """Date label the way the sheet writes it (no zero padding)."""
    return f"{day.month}/{day.day}/{day.year}"


def sheet_cells(day: date, **extra: str) -> dict[str, str]:
    """One raw worksheet row with plausible values."""
    cells = {
        "Date": sheet_date(day),
        "Delivered orders": "1,200",
        "Sessions": "50,000",
        "AOV": "1,234.9",
        "CR": "2.40%",
        "ATC": "9.8%",
        "Customers": "1,100",
        "New Customers": "400",
        "Repeat Customers": "700",
        "GMV": "1,481,880",
        "TPC": "1.09",
    }
    cells.update(extra)
    return cells


class FakeSource:
    """Data source returning canned rows (or raising), counting calls."""

    name = "fake"

    def __init__(self, rows: list[dict[str, str]] | None = None, error: Exception | None = None):
        self.rows = rows or []
        self.error = error
        self.calls = 0

    def fetch_rows(self) -> list[dict[str, str]]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return [dict(r) for r in self.rows]


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def recent_cells(today: date, days: int = 10) -> list[dict[str, str]]:
    """Raw rows for *today* and the days before it, newest first."""
    return [sheet_cells(today - timedelta(days=offset)) for offset in range(days)]


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def dataset() -> tuple[MetricRow, ...]:
    """Ten days ending at TODAY, newest first."""
    return parse_rows(recent_cells(TODAY))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_cache(clock) -> Callable[..., tuple[DatasetCache, FakeSource]]:
    """Factory: ``make_cache(rows, error=None, ttl=3600) -> (cache, source)``."""

    def _make(rows=None, error=None, ttl: float = 3600) -> tuple[DatasetCache, FakeSource]:
        source = FakeSource(rows=rows, error=error)
        return DatasetCache(source=source, ttl=ttl, clock=clock), source

    return _make
