"""
Worksheet row parsing.

Turns the raw text cells returned by a data source into ``MetricRow``
records.  Malformed cells never fail a row: they degrade to ``None``.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Mapping

import pandas as pd

from src.insights.catalog import MetricCatalog, load_metric_catalog

_ERROR_TOKENS = frozenset({"#N/A", "#DIV/0!"})

# Leading decimal number, the way spreadsheet exports are usually read:
# "3.2%" -> 3.2, "12345.6 units" -> 12345.6
_NUMBER_PREFIX_RE = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")



# ── Cell parsing ─────────────────────────────────────────

def leading_number(text: str) -> float | None:
    """Return the decimal number at the start of *text*, or ``None``."""
    m = _NUMBER_PREFIX_RE.match(text)
    if m is None:
        return None
    return float(m.group())


def parse_value(raw: Any) -> float | None:
    """Normalise one metric cell to a float, or ``None`` when it holds no number.

    Empty cells and the ``#N/A`` / ``#DIV/0!`` error tokens map to ``None``;
    thousands separators are stripped before reading the number.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return None if math.isnan(raw) else float(raw)

    text = str(raw).strip()
    if not text or text in _ERROR_TOKENS:
        return None
    return leading_number(text.replace(",", ""))


def parse_date(raw: Any) -> date | None:
    """Interpret a sheet date cell as a calendar date (``None`` if unrecognised).

    Slash dates are read month first (``2/10/26`` is 10 February 2026).
    """
    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None
    parsed = pd.to_datetime(text, errors="coerce", dayfirst=False)
    if pd.isna(parsed):
        return None
    return parsed.date()


# ── Rows ─────────────────────────────────────────────────

@dataclass(frozen=True)
class MetricRow:
    """One worksheet row: its date label, parsed metric values and raw cells."""

    date: str
    day: date | None
    values: Mapping[str, float | None] = field(default_factory=dict)
    raw: Mapping[str, str] = field(default_factory=dict)

    def get(self, metric: str) -> float | None:
        return self.values.get(metric)

    def to_dict(self) -> dict[str, Any]:
        """Flat JSON shape: ``date``, one key per metric, then ``Raw Data``."""
        out: dict[str, Any] = {"date": self.date}
        out.update(self.values)
        out["Raw Data"] = list(self.raw.values())
        return out


def parse_row(
    cells: Mapping[str, Any],
    catalog: MetricCatalog | None = None,
) -> MetricRow | None:
    """Build a ``MetricRow`` from one header->cell mapping.

    Returns ``None`` when the row has no date, so callers can drop it.
    """
    catalog = catalog or load_metric_catalog()
    date_text = cells.get(catalog.date_column)
    if date_text is None or not str(date_text).strip():
        return None

    date_text = str(date_text)
    return MetricRow(
        date=date_text,
        day=parse_date(date_text),
        values={key: parse_value(cells.get(key)) for key in catalog.keys()},
        raw={str(k): "" if v is None else str(v) for k, v in cells.items()},
    )


def parse_rows(
    raw_rows: Iterable[Mapping[str, Any]],
    catalog: MetricCatalog | None = None,
) -> tuple[MetricRow, ...]:
    """Parse every raw row, keeping sheet order and dropping undated rows."""
    catalog = catalog or load_metric_catalog()
    rows = (parse_row(cells, catalog) for cells in raw_rows)
    return tuple(row for row in rows if row is not None)
