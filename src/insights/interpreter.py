"""
Interpreter -- converts a free-text question into a Query.

Plain keyword matching over a closed vocabulary:
  dates   → explicit m/d/yy tokens, then today / yesterday / week / month
            windows, then the sheet's first row as a fallback
  metrics → every keyword found contributes (overlaps are not resolved,
            "new customer" fires both "new" and "new customer")
  intent  → first matching rule wins
"""
from __future__ import annotations

import re
from datetime import date, timedelta
from typing import Sequence

from src.insights.query import GROWTH, Intent, Query
from src.sheets.parser import MetricRow
from src.core.logging import get_logger

logger = get_logger(__name__)

# ── Keyword tables ───────────────────────────────────────

_METRIC_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("order",               "Delivered orders"),
    ("session",             "Sessions"),
    ("aov",                 "AOV"),
    ("average order value", "AOV"),
    ("cr",                  "CR"),
    ("conversion",          "CR"),
    ("conversion rate",     "CR"),
    ("atc",                 "ATC"),
    ("add to cart",         "ATC"),
    ("customer",            "Customers"),
    ("customers",           "Customers"),
    ("new customer",        "New Customers"),
    ("new",                 "New Customers"),
    ("repeat customer",     "Repeat Customers"),
    ("repeat",              "Repeat Customers"),
    ("gmv",                 "GMV"),
    ("merchandise value",   "GMV"),
    ("tpc",                 "TPC"),
    ("transaction",         "TPC"),
    ("asp",                 "ASP"),
    ("c2o",                 "C2O"),
)

_GROWTH_WORDS = ("growth", "change", "trend")

DEFAULT_METRICS: tuple[str, ...] = ("Delivered orders", "Sessions", "CR", "AOV", "Customers")

_INTENT_RULES: tuple[tuple[Intent, tuple[str, ...]], ...] = (
    ("comparison", ("compare", "vs", "difference")),
    ("growth",     ("growth", "trend", "change")),
    ("list",       ("list", "all")),
)

# (phrases, number of days back from today, today inclusive)
_WINDOWS: tuple[tuple[tuple[str, ...], int], ...] = (
    (("last 7 days", "last week", "week"), 7),
    (("last 30 days", "month"),            30),
)

_EXPLICIT_DATE_RE = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{2,4})")


# ── Dates ────────────────────────────────────────────────

def _label_for_day(dataset: Sequence[MetricRow], day: date) -> str | None:
    """Date label of the first row falling on *day*."""
    for row in dataset:
        if row.day == day:
            return row.date
    return None


def _explicit_dates(text: str, dataset: Sequence[MetricRow]) -> list[str]:
    found: list[str] = []
    for m in _EXPLICIT_DATE_RE.finditer(text):
        month, day = int(m.group(1)), int(m.group(2))
        year_text = m.group(3)
        year = 2000 + int(year_text) if len(year_text) == 2 else int(year_text)
        for row in dataset:
            if row.day is not None and (row.day.month, row.day.day, row.day.year) == (month, day, year):
                found.append(row.date)
                break
    return found


def extract_dates(text: str, dataset: Sequence[MetricRow], today: date | None = None) -> set[str]:
    """Resolve the rows a question refers to, as a set of date labels."""
    today = today or date.today()
    q = text.lower()
    dates: set[str] = set(_explicit_dates(text, dataset))

    if "today" in q:
        label = _label_for_day(dataset, today)
        if label:
            dates.add(label)

    if "yesterday" in q:
        label = _label_for_day(dataset, today - timedelta(days=1))
        if label:
            dates.add(label)

    for phrases, days in _WINDOWS:
        if any(p in q for p in phrases):
            for offset in range(days):
                label = _label_for_day(dataset, today - timedelta(days=offset))
                if label:
                    dates.add(label)

    if not dates and dataset:
        dates.add(dataset[0].date)

    return dates


# ── Metrics & intent ─────────────────────────────────────

def extract_metrics(text: str) -> list[str]:
    """Metric keys named in *text*, in keyword-table order."""
    q = text.lower()
    if any(w in q for w in _GROWTH_WORDS):
        return [GROWTH]

    metrics: list[str] = []
    for keyword, metric in _METRIC_KEYWORDS:
        if keyword in q and metric not in metrics:
            metrics.append(metric)

    return metrics or list(DEFAULT_METRICS)


def detect_intent(text: str) -> Intent:
    q = text.lower()
    for intent, words in _INTENT_RULES:
        if any(w in q for w in words):
            return intent
    return "summary"


# ── Public API ───────────────────────────────────────────

def interpret(text: str, dataset: Sequence[MetricRow], today: date | None = None) -> Query:
    """Parse *text* against *dataset* into a Query.

    ``today`` defaults to the local clock; pass it explicitly to pin
    relative phrases ("yesterday", "last week") in tests and replays.
    """
    query = Query(
        dates=extract_dates(text.strip(), dataset, today=today),
        metrics=extract_metrics(text),
        intent=detect_intent(text),
        original_text=text,
    )
    logger.info("Interpreter -> dates=%s metrics=%s intent=%s",
                sorted(query.dates), query.metrics, query.intent)
    return query
