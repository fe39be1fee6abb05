"""
Unit tests -- worksheet data sources (CSV export, Google Sheets, factory).
"""
from unittest.mock import MagicMock

import gspread
import pytest

from src.core.config import Settings
from src.core.errors import DataFetchError
from src.sheets.sources import CsvSheetSource, GoogleSheetSource, build_source, rows_from_values


def test_rows_from_values_pads_short_rows():
    values = [["Date", "Sessions", "GMV"], ["2/10/2026", "10"], ["2/9/2026", "9", "1,000"]]
    assert rows_from_values(values) == [
        {"Date": "2/10/2026", "Sessions": "10", "GMV": ""},
        {"Date": "2/9/2026", "Sessions": "9", "GMV": "1,000"},
    ]


def test_rows_from_values_skips_blank_headers():
    rows = rows_from_values([[" Date ", "", "CR"], ["2/10/2026", "x", "2.1%"]])
    assert rows == [{"Date": "2/10/2026", "CR": "2.1%"}]


def test_rows_from_values_empty_sheet():
    assert rows_from_values([]) == []
    assert rows_from_values([["Date", "CR"]]) == []


# ── CSV ──────────────────────────────────────────────────

def test_csv_keeps_cells_as_text(tmp_path):
    path = tmp_path / "sheet.csv"
    path.write_text('Date,Delivered orders,CR,GMV\n2/10/2026,"1,200",2.4%,#N/A\n2/9/2026,,#DIV/0!,0\n')
    rows = CsvSheetSource(path).fetch_rows()
    assert rows[0] == {"Date": "2/10/2026", "Delivered orders": "1,200", "CR": "2.4%", "GMV": "#N/A"}
    assert rows[1]["Delivered orders"] == ""
    assert rows[1]["CR"] == "#DIV/0!"


def test_csv_missing_file(tmp_path):
    with pytest.raises(DataFetchError, match="not found"):
        CsvSheetSource(tmp_path / "nope.csv").fetch_rows()


def test_csv_empty_file(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_text("")
    with pytest.raises(DataFetchError):
        CsvSheetSource(path).fetch_rows()


def test_csv_not_utf8(tmp_path):
    path = tmp_path / "latin.csv"
    path.write_bytes(b"Date,Sessions\n2/10/2026,\xff10\n")
    with pytest.raises(DataFetchError, match="Could not read worksheet export"):
        CsvSheetSource(path).fetch_rows()


# ── Google Sheets ────────────────────────────────────────

def _google(**overrides):
    kwargs = dict(sheet_id="sheet-123", sheet_title="DoD Growth Trends",
                  client_email="svc@example.iam.gserviceaccount.com", private_key="line1\\nline2")
    kwargs.update(overrides)
    return GoogleSheetSource(**kwargs)


def test_private_key_newlines_unescaped():
    assert _google().private_key == "line1\nline2"


def test_missing_credentials():
    with pytest.raises(DataFetchError, match="GOOGLE_CLIENT_EMAIL"):
        _google(client_email="").fetch_rows()


def test_fetch_reads_named_worksheet(monkeypatch):
    client = MagicMock()
    worksheet = client.open_by_key.return_value.worksheet.return_value
    worksheet.get_all_values.return_value = [["Date", "Sessions"], ["2/10/2026", "50,000"]]
    source = _google()
    monkeypatch.setattr(source, "_authorize", lambda: client)

    assert source.fetch_rows() == [{"Date": "2/10/2026", "Sessions": "50,000"}]
    client.open_by_key.assert_called_once_with("sheet-123")
    client.open_by_key.return_value.worksheet.assert_called_once_with("DoD Growth Trends")


def test_missing_worksheet(monkeypatch):
    client = MagicMock()
    client.open_by_key.return_value.worksheet.side_effect = gspread.exceptions.WorksheetNotFound("DoD")
    source = _google()
    monkeypatch.setattr(source, "_authorize", lambda: client)

    with pytest.raises(DataFetchError, match='Sheet "DoD Growth Trends" not found'):
        source.fetch_rows()


def test_transport_error_wrapped(monkeypatch):
    client = MagicMock()
    client.open_by_key.side_effect = OSError("connection reset")
    source = _google()
    monkeypatch.setattr(source, "_authorize", lambda: client)

    with pytest.raises(DataFetchError, match="connection reset"):
        source.fetch_rows()


# ── Factory ──────────────────────────────────────────────

def test_build_csv_source(tmp_path):
    source = build_source(Settings(data_source="csv", csv_path=str(tmp_path / "s.csv")))
    assert isinstance(source, CsvSheetSource)
    assert source.path == tmp_path / "s.csv"


def test_build_google_source():
    source = build_source(Settings(data_source="gsheets", sheet_title="Daily"))
    assert isinstance(source, GoogleSheetSource)
    assert source.sheet_title == "Daily"
    assert source.name == "gsheets"


def test_build_unknown_source():
    with pytest.raises(ValueError, match="Unknown data_source"):
        build_source(Settings(data_source="excel"))
