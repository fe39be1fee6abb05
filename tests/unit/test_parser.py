"""
Unit tests -- worksheet cell and row parsing.
"""
from datetime import date

import pytest

from conftest import sheet_cells
from src.sheets.parser import MetricRow, parse_date, parse_row, parse_rows, parse_value


@pytest.mark.parametrize("raw", ["", "   ", None, "#N/A", "#DIV/0!"])
def test_empty_and_error_cells_are_null(raw):
    assert parse_value(raw) is None


@pytest.mark.parametrize("raw,expected", [
    ("12,345.6", 12345.6),
    ("1,00,000", 100000.0),
    ("42", 42.0),
    ("-3.5", -3.5),
    (".5", 0.5),
])
def test_thousands_separators_stripped(raw, expected):
    assert parse_value(raw) == expected


def test_percent_cell_reads_leading_number():
    assert parse_value("3.2%") == 3.2


def test_non_numeric_text_is_null():
    assert parse_value("pending") is None
    assert parse_value("N/A") is None


def test_numbers_pass_through_as_float():
    assert parse_value(7) == 7.0
    assert parse_value(float("nan")) is None


@pytest.mark.parametrize("raw,expected", [
    ("2/10/2026", date(2026, 2, 10)),
    ("2/10/26", date(2026, 2, 10)),
    ("02/09/2026", date(2026, 2, 9)),
    ("2026-02-10", date(2026, 2, 10)),
    ("10-Feb-2026", date(2026, 2, 10)),
    ("Feb 10, 2026", date(2026, 2, 10)),
])
def test_parse_date_formats(raw, expected):
    assert parse_date(raw) == expected


@pytest.mark.parametrize("raw", [
    "Tue Feb 10 2026",
    "2026-02-10 00:00:00",
    "10 February, 2026",
    "February 10 2026",
])
def test_parse_date_free_form_labels(raw):
    assert parse_date(raw) == date(2026, 2, 10)


def test_parse_date_slash_dates_are_month_first():
    assert parse_date("3/4/2026") == date(2026, 3, 4)


@pytest.mark.parametrize("raw", ["", None, "Total", "13/45/2026"])
def test_parse_date_unrecognised(raw):
    assert parse_date(raw) is None


def test_parse_row_builds_metric_row():
    row = parse_row(sheet_cells(date(2026, 2, 10), CR="#DIV/0!"))
    assert isinstance(row, MetricRow)
    assert row.date == "2/10/2026"
    assert row.day == date(2026, 2, 10)
    assert row.get("Delivered orders") == 1200.0
    assert row.get("AOV") == 1234.9
    assert row.get("CR") is None


def test_parse_row_missing_columns_are_null():
    row = parse_row({"Date": "2/10/2026", "Sessions": "10"})
    assert row.get("Sessions") == 10.0
    assert row.get("GMV") is None
    assert "New Users" in row.values


def test_parse_row_keeps_raw_cells():
    cells = sheet_cells(date(2026, 2, 10), GMV="#N/A")
    row = parse_row(cells)
    assert row.raw["GMV"] == "#N/A"
    assert row.raw["Date"] == "2/10/2026"


def test_row_without_date_is_dropped():
    assert parse_row({"Date": "", "Sessions": "10"}) is None
    assert parse_row({"Sessions": "10"}) is None


def test_unparseable_date_label_is_kept():
    row = parse_row({"Date": "Total", "Sessions": "10"})
    assert row is not None
    assert row.date == "Total"
    assert row.day is None


def test_parse_rows_keeps_sheet_order_and_drops_undated():
    rows = parse_rows([
        sheet_cells(date(2026, 2, 8)),
        {"Date": "", "Sessions": "1"},
        sheet_cells(date(2026, 2, 10)),
    ])
    assert [r.date for r in rows] == ["2/8/2026", "2/10/2026"]
    assert isinstance(rows, tuple)


def test_to_dict_is_flat():
    row = parse_row(sheet_cells(date(2026, 2, 10)))
    out = row.to_dict()
    assert out["date"] == "2/10/2026"
    assert out["Sessions"] == 50000.0
    assert "2/10/2026" in out["Raw Data"]
