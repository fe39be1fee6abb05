"""
Display formatting for metric labels and values.

Rounding is half away from zero on the exact binary value, which matches
how spreadsheet and browser number formatting behave.  Currency and
counts use the Indian digit grouping convention (12,34,567).
"""
from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Any

from src.insights.catalog import (
    FORMAT_CURRENCY,
    FORMAT_DECIMAL,
    FORMAT_INTEGER,
    FORMAT_PERCENT,
    load_metric_catalog,
)
from src.sheets.parser import leading_number

NOT_AVAILABLE = "N/A"
CURRENCY_SYMBOL = "₹"

_WIDE = Context(prec=400)


def round_half_up(value: float, digits: int) -> Decimal:
    return Decimal(value).quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_UP, context=_WIDE)


def to_fixed(value: float, digits: int) -> str:
    """Fixed-point string with exactly *digits* decimals."""
    return f"{round_half_up(value, digits):f}"


def group_indian(number: int) -> str:
    """Group digits Indian style: last three, then pairs (``1234567 -> 12,34,567``)."""
    sign = "-" if number < 0 else ""
    digits = str(abs(number))
    if len(digits) <= 3:
        return sign + digits

    head, groups = digits[:-3], [digits[-3:]]
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return sign + ",".join(groups)


def _whole(value: float) -> str:
    return group_indian(int(round_half_up(value, 0)))


def metric_label(metric: str) -> str:
    """Display label of *metric*; unknown keys are shown as-is."""
    m = load_metric_catalog().metric(metric)
    return m.label if m is not None else metric


def _coerce(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return leading_number(str(value))


def format_value(metric: str, value: Any) -> str:
    """Render *value* the way *metric* is displayed on the dashboard."""
    if value is None:
        return NOT_AVAILABLE

    number = _coerce(value)
    if number is None or not math.isfinite(number):
        return str(value)

    m = load_metric_catalog().metric(metric)
    kind = m.format if m is not None else FORMAT_INTEGER

    if kind == FORMAT_PERCENT:
        return f"{to_fixed(number, 1)}%"
    if kind == FORMAT_CURRENCY:
        return f"{CURRENCY_SYMBOL}{_whole(number)}"
    if kind == FORMAT_DECIMAL:
        return to_fixed(number, 2)
    return _whole(number)
