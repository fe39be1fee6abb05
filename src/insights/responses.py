"""
Response builders -- turn the rows a query selected into display items.

Three shapes:
  growth      latest row vs the one before it, for a fixed set of key metrics
  comparison  first two rows side by side, for the requested metrics
  summary     one item per (row, metric) with a value

Builders are stateless; every value goes through the formatter.
"""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable, Literal, Sequence

from pydantic import BaseModel, Field, model_serializer

from src.insights.formatter import NOT_AVAILABLE, format_value, metric_label, round_half_up
from src.insights.query import Query
from src.sheets.parser import MetricRow

RESULT_METRICS = "metrics"
RESULT_COMPARISON = "comparison"
RESULT_ERROR = "error"

GROWTH_METRICS: tuple[str, ...] = ("Delivered orders", "Sessions", "CR", "AOV", "Customers", "GMV")
FALLBACK_METRICS: tuple[str, ...] = ("Delivered orders", "Sessions", "AOV")

_UP = "↑"
_DOWN = "↓"


class DisplayItem(BaseModel):
    """One rendered line of a query result."""

    label: str
    metric: str
    value: str | None = None
    date: str | None = None
    date1: str | None = None
    value1: str | None = None
    date2: str | None = None
    value2: str | None = None
    change: str | None = None
    positive: bool | None = None

    @model_serializer(mode="wrap")
    def _drop_unused_fields(self, handler):
        """Omit fields this item's shape does not use.

        Items that carry a ``change`` always carry ``positive``, null when
        the change is ``N/A``.
        """
        data = handler(self)
        keep = {"positive"} if self.change is not None else set()
        return {k: v for k, v in data.items() if v is not None or k in keep}


class QueryResult(BaseModel):
    type: Literal["metrics", "comparison", "error"]
    data: list[DisplayItem] = Field(default_factory=list)
    message: str | None = None

    @model_serializer(mode="wrap")
    def _drop_empty_message(self, handler):
        data = handler(self)
        if data.get("message") is None:
            data.pop("message", None)
        return data

    @classmethod
    def error(cls, message: str) -> "QueryResult":
        return cls(type=RESULT_ERROR, message=message)


# ── Helpers ──────────────────────────────────────────────

def sort_newest_first(rows: Iterable[MetricRow]) -> list[MetricRow]:
    """Sort rows by calendar date, newest first; undated rows go last."""
    return sorted(rows, key=lambda r: r.day or date.min, reverse=True)


def _percent_change(current: float, previous: float) -> Decimal:
    """Percent change rounded to one decimal; ``-0.0`` is normalised to ``0.0``."""
    change = round_half_up((current - previous) / previous * 100, 1)
    return abs(change) if change == 0 else change


def _plain(number: Decimal) -> str:
    """Shortest plain rendering (``5.0 -> 5``, ``12.3 -> 12.3``)."""
    text = f"{number:f}"
    return text.rstrip("0").rstrip(".") if "." in text else text


# ── Builders ─────────────────────────────────────────────

def build_growth(rows: Sequence[MetricRow]) -> QueryResult:
    """Latest row against the previous one for the key metrics.

    A previous value of zero (or a missing previous row) yields ``N/A``
    rather than a percentage.
    """
    result = QueryResult(type=RESULT_METRICS)
    if not rows:
        return result

    current = rows[0]
    previous = rows[1] if len(rows) > 1 else None

    for metric in GROWTH_METRICS:
        value = current.get(metric)
        if value is None:
            continue

        change = NOT_AVAILABLE
        positive: bool | None = None
        prev_value = previous.get(metric) if previous is not None else None
        if prev_value:
            pct = _percent_change(value, prev_value)
            positive = (value - prev_value) / prev_value >= 0
            change = f"{_UP if positive else _DOWN} {_plain(abs(pct))}%"

        result.data.append(DisplayItem(
            label=metric_label(metric),
            value=format_value(metric, value),
            change=change,
            positive=positive,
            metric=metric,
            date=current.date,
        ))

    return result


def build_comparison(rows: Sequence[MetricRow], metrics: Sequence[str]) -> QueryResult:
    """First row against the second for each requested metric present in both."""
    result = QueryResult(type=RESULT_COMPARISON)
    current, previous = rows[0], rows[1]

    for metric in metrics or FALLBACK_METRICS:
        cur_value = current.get(metric)
        prev_value = previous.get(metric)
        if cur_value is None or prev_value is None:
            continue

        if prev_value == 0:
            change, positive = NOT_AVAILABLE, None
        else:
            pct = _percent_change(cur_value, prev_value)
            positive = pct >= 0
            change = f"{'+' if positive else ''}{pct:f}%"

        result.data.append(DisplayItem(
            label=metric_label(metric),
            date1=current.date,
            value1=format_value(metric, cur_value),
            date2=previous.date,
            value2=format_value(metric, prev_value),
            change=change,
            positive=positive,
            metric=metric,
        ))

    return result


def build_summary(rows: Sequence[MetricRow], metrics: Sequence[str]) -> QueryResult:
    """One item per row and metric that has a value."""
    result = QueryResult(type=RESULT_METRICS)
    for row in rows:
        for metric in metrics or FALLBACK_METRICS:
            value = row.get(metric)
            if value is None:
                continue
            result.data.append(DisplayItem(
                label=f"{metric_label(metric)} ({row.date})",
                value=format_value(metric, value),
                metric=metric,
                date=row.date,
            ))
    return result


def build_response(rows: Sequence[MetricRow], query: Query) -> QueryResult:
    """Pick the response shape for *query* and build it from *rows* (newest first)."""
    if query.is_growth:
        return build_growth(rows)
    if query.intent == "comparison" and len(rows) > 1:
        return build_comparison(rows, query.metrics)
    return build_summary(rows, query.metrics)
