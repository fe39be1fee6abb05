"""
Centralised application settings loaded from environment / .env file.
"""
from __future__ import annotations

from pathlib import Path
from functools import lru_cache

from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load .env from project root (two levels up from this file)
_ENV_PATH = Path(__file__).resolve().parents[2] / ".env"
load_dotenv(_ENV_PATH)

_DEFAULT_USERS = {
    "demo@noon.com": "demo123",
    "ceo@noon.com": "ceo123",
    "admin@noon.com": "admin123",
}


class Settings(BaseSettings):
    # ── Spreadsheet ──────────────────────────────────────
    data_source: str = "gsheets"  # gsheets | csv
    sheet_id: str = "1WFHuhA2M9rmHRfxVeUWuGWRvgcDC2W4jSyIgXRvLpVw"
    sheet_title: str = "DoD Growth Trends"
    csv_path: str = "data/sample_sheet.csv"
    google_client_email: str = ""
    google_private_key: str = ""
    cache_ttl_seconds: float = 3600.0

    # ── Auth ─────────────────────────────────────────────
    jwt_secret: str = "your-secret-key"
    jwt_expires_hours: int = 24
    dashboard_users: dict[str, str] = dict(_DEFAULT_USERS)

    # ── App ──────────────────────────────────────────────
    allowed_origin: str = "http://localhost:3000"
    api_port: int = 3000
    streamlit_port: int = 8501
    log_level: str = "INFO"
    environment: str = "development"

    @property
    def csv_file(self) -> Path:
        path = Path(self.csv_path)
        if not path.is_absolute():
            path = _ENV_PATH.parent / path
        return path

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    return Settings()
