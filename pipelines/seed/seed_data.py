"""
Seed data generator -- writes a realistic "DoD Growth Trends" worksheet export.

Generates one row per day for the last ``NUM_DAYS`` days (newest first, the
way the live sheet is kept) with the same headers and cell formatting as
the Google Sheet: thousands separators, percentage cells, and the odd
``#N/A`` / ``#DIV/0!`` error cell.

The CSV feeds the ``csv`` data source (DATA_SOURCE=csv) for offline work.
Run:  python -m pipelines.seed.seed_data
"""
from __future__ import annotations

import random
import sys
from datetime import date, timedelta
from pathlib import Path

import pandas as pd
from dotenv import load_dotenv

# ── Load .env from project root ─────────────────────────
_PROJECT_ROOT = Path(__file__).resolve().parents[2]
load_dotenv(_PROJECT_ROOT / ".env")

random.seed(42)

# ── Tunables ─────────────────────────────────────────────
NUM_DAYS = 90
OUTPUT_PATH = _PROJECT_ROOT / "data" / "sample_sheet.csv"
ERROR_CELL_RATE = 0.02  # share of metric cells replaced by a sheet error

BASE_SESSIONS = 420_000
BASE_CR = 2.4          # percent
BASE_AOV = 1_850.0     # rupees
NEW_CUSTOMER_SHARE = 0.38


def _sheet_date(day: date) -> str:
    return f"{day.month}/{day.day}/{day.year}"


def _grouped(value: float) -> str:
    return f"{value:,.0f}"


def _maybe_error(cell: str) -> str:
    if random.random() < ERROR_CELL_RATE:
        return random.choice(["#N/A", "#DIV/0!"])
    return cell


def _day_row(day: date) -> dict[str, str]:
    weekend = day.weekday() >= 5
    sessions = BASE_SESSIONS * random.uniform(0.85, 1.15) * (1.2 if weekend else 1.0)
    cr = BASE_CR * random.uniform(0.85, 1.15)
    orders = sessions * cr / 100
    aov = BASE_AOV * random.uniform(0.9, 1.1)
    customers = orders / random.uniform(1.02, 1.12)
    new_customers = customers * NEW_CUSTOMER_SHARE * random.uniform(0.9, 1.1)
    atc = random.uniform(8.0, 12.0)
    cart_page = random.uniform(30.0, 40.0)
    c2o = cr / atc * 100
    ito = random.uniform(1.6, 2.4)

    cells = {
        "Delivered orders": _grouped(orders),
        "Sessions": _grouped(sessions),
        "AOV": _grouped(aov),
        "CR": f"{cr:.2f}%",
        "ATC": f"{atc:.2f}%",
        "ATC2P": f"{cart_page / atc:.2f}",
        "Cart Page %": f"{cart_page:.1f}%",
        "C2O": f"{c2o:.1f}%",
        "ASP": _grouped(aov / ito),
        "ITO": f"{ito:.2f}",
        "Customers": _grouped(customers),
        "New Customers": _grouped(new_customers),
        "Repeat Customers": _grouped(customers - new_customers),
        "GMV": _grouped(orders * aov),
        "TPC": f"{orders / customers:.2f}",
        "AOV - Excl Electronics, Beauty, Toys": _grouped(aov * random.uniform(0.7, 0.85)),
        "New Users": _grouped(sessions * random.uniform(0.05, 0.08)),
    }
    row = {"Date": _sheet_date(day)}
    row.update({k: _maybe_error(v) for k, v in cells.items()})
    return row


def build_sheet(end: date, num_days: int = NUM_DAYS) -> pd.DataFrame:
    """Rows for *num_days* days ending at *end*, newest first."""
    rows = [_day_row(end - timedelta(days=offset)) for offset in range(num_days)]
    return pd.DataFrame(rows)


def main() -> None:
    frame = build_sheet(date.today())
    OUTPUT_PATH.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(OUTPUT_PATH, index=False)
    print(f"Wrote {len(frame)} rows to {OUTPUT_PATH}")


if __name__ == "__main__":
    sys.exit(main())
