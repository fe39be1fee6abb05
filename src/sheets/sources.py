"""
Data sources -- where the worksheet's raw rows come from.

Supported sources:
  gsheets -- the live Google Sheet, via a service account (gspread)
  csv     -- a CSV export of the same worksheet (offline dev / tests)

Every source returns the rows as ``header -> cell text`` mappings in sheet
order and raises ``DataFetchError`` when the rows cannot be loaded.
"""
from __future__ import annotations

from pathlib import Path
from typing import Protocol

import gspread
import pandas as pd
from google.auth.exceptions import GoogleAuthError
from google.oauth2.service_account import Credentials

from src.core.config import Settings, get_settings
from src.core.errors import DataFetchError
from src.core.logging import get_logger

logger = get_logger(__name__)

_SCOPES = ["https://www.googleapis.com/auth/spreadsheets.readonly"]
_TOKEN_URI = "https://oauth2.googleapis.com/token"


class SheetSource(Protocol):
    name: str

    def fetch_rows(self) -> list[dict[str, str]]:
        ...


def rows_from_values(values: list[list[str]]) -> list[dict[str, str]]:
    """Convert a header row + data rows grid into header->cell mappings."""
    if not values:
        return []
    header = [h.strip() for h in values[0]]
    rows: list[dict[str, str]] = []
    for raw in values[1:]:
        cells = list(raw) + [""] * (len(header) - len(raw))
        rows.append({h: cells[i] for i, h in enumerate(header) if h})
    return rows


# ── Google Sheets ───────────────────────────────────────


class GoogleSheetSource:
    """Reads one worksheet of a Google Sheet with service-account credentials."""

    name = "gsheets"

    def __init__(self, sheet_id: str, sheet_title: str, client_email: str, private_key: str):
        self.sheet_id = sheet_id
        self.sheet_title = sheet_title
        self.client_email = client_email
        # Keys pasted into .env usually carry literal "\n" sequences
        self.private_key = private_key.replace("\\n", "\n")

    def _authorize(self) -> gspread.Client:
        if not self.client_email or not self.private_key:
            raise DataFetchError(
                "Google service account is not configured. "
                "Set GOOGLE_CLIENT_EMAIL and GOOGLE_PRIVATE_KEY in your .env file."
            )
        info = {
            "type": "service_account",
            "client_email": self.client_email,
            "private_key": self.private_key,
            "token_uri": _TOKEN_URI,
        }
        creds = Credentials.from_service_account_info(info, scopes=_SCOPES)
        return gspread.authorize(creds)

    def fetch_rows(self) -> list[dict[str, str]]:
        logger.info("Fetching fresh data from Google Sheets  sheet=%s  tab=%s",
                    self.sheet_id, self.sheet_title)
        try:
            client = self._authorize()
            worksheet = client.open_by_key(self.sheet_id).worksheet(self.sheet_title)
            values = worksheet.get_all_values()
        except gspread.exceptions.WorksheetNotFound as exc:
            raise DataFetchError(f'Sheet "{self.sheet_title}" not found') from exc
        except gspread.exceptions.SpreadsheetNotFound as exc:
            raise DataFetchError(
                f"Spreadsheet {self.sheet_id} not found or not shared with {self.client_email}"
            ) from exc
        except (gspread.exceptions.GSpreadException, GoogleAuthError, OSError, ValueError) as exc:
            raise DataFetchError(f"Google Sheets request failed: {exc}") from exc
        return rows_from_values(values)


# ── CSV export ──────────────────────────────────────────


class CsvSheetSource:
    """Reads a CSV export of the worksheet; every cell is kept as text."""

    name = "csv"

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def fetch_rows(self) -> list[dict[str, str]]:
        logger.info("Reading worksheet export  path=%s", self.path)
        try:
            # keep_default_na=False keeps "#N/A" cells as text for the parser
            frame = pd.read_csv(self.path, dtype=str, keep_default_na=False)
        except FileNotFoundError as exc:
            raise DataFetchError(f"Worksheet export not found: {self.path}") from exc
        except (OSError, UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError, ValueError) as exc:
            raise DataFetchError(f"Could not read worksheet export {self.path}: {exc}") from exc
        frame.columns = [str(c).strip() for c in frame.columns]
        return frame.to_dict(orient="records")


# ── Factory ─────────────────────────────────────────────


def build_source(settings: Settings | None = None) -> SheetSource:
    """Return the data source selected by ``settings.data_source``."""
    settings = settings or get_settings()
    if settings.data_source == "csv":
        return CsvSheetSource(settings.csv_file)
    if settings.data_source == "gsheets":
        return GoogleSheetSource(
            sheet_id=settings.sheet_id,
            sheet_title=settings.sheet_title,
            client_email=settings.google_client_email,
            private_key=settings.google_private_key,
        )
    raise ValueError(f"Unknown data_source '{settings.data_source}' (expected gsheets | csv)")
