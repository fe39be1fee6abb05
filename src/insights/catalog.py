"""
Loads and caches the worksheet's metric catalog from YAML.

The catalog is the single source of truth for:
  - which columns of the sheet are metrics, in sheet order
  - the display label of each metric
  - how each metric's value is rendered (percent, currency, decimal, integer)
  - the name of the date column
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

_CATALOG_PATH = Path(__file__).resolve().parents[2] / "semantic_layer" / "metrics.yml"

FORMAT_PERCENT = "percent"
FORMAT_CURRENCY = "currency"
FORMAT_DECIMAL = "decimal"
FORMAT_INTEGER = "integer"

_FORMATS = {FORMAT_PERCENT, FORMAT_CURRENCY, FORMAT_DECIMAL, FORMAT_INTEGER}


# ── Typed domain objects ─────────────────────────────────

@dataclass(frozen=True)
class MetricDef:
    key: str
    label: str
    format: str = FORMAT_INTEGER


@dataclass(frozen=True)
class MetricCatalog:
    """Fully parsed metric catalog."""

    version: int
    date_column: str
    metrics: tuple[MetricDef, ...]

    def metric(self, key: str) -> MetricDef | None:
        for m in self.metrics:
            if m.key == key:
                return m
        return None

    def keys(self) -> list[str]:
        return [m.key for m in self.metrics]

    def to_list(self) -> list[dict[str, Any]]:
        """Return metrics as a list of dicts (for API responses)."""
        return [{"key": m.key, "label": m.label, "format": m.format} for m in self.metrics]


# ── Parsing ──────────────────────────────────────────────

def _parse_metric(raw: dict[str, Any]) -> MetricDef:
    key = str(raw["key"])
    fmt = raw.get("format", FORMAT_INTEGER)
    if fmt not in _FORMATS:
        raise ValueError(f"Metric '{key}' has unknown format '{fmt}'")
    return MetricDef(key=key, label=raw.get("label") or key, format=fmt)


def _parse_catalog(raw_yaml: dict[str, Any]) -> MetricCatalog:
    worksheet = raw_yaml.get("worksheet") or {}
    return MetricCatalog(
        version=raw_yaml.get("version", 1),
        date_column=worksheet.get("date_column", "Date"),
        metrics=tuple(_parse_metric(m) for m in raw_yaml.get("metrics", [])),
    )


# ── Public API ───────────────────────────────────────────

@lru_cache
def load_metric_catalog() -> MetricCatalog:
    """Load and cache the metric catalog from YAML."""
    with open(_CATALOG_PATH, encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    return _parse_catalog(raw)


def get_metric_keys() -> list[str]:
    return load_metric_catalog().keys()
