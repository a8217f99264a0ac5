# Shared pytest fixtures
from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import gspread
import pytest

from config.settings import Settings
from etl.extract import GoogleSheetsFetcher

STORE_ROWS = [
    ["Company", "City", "Country"],
    ["Acme", "Aarhus", "DK"],
    ["Beta", "Oslo", "NO"],
]


@pytest.fixture()
def store_rows() -> list[list[str]]:
    return [list(row) for row in STORE_ROWS]


@pytest.fixture()
def make_client():
    """Build a fake gspread client whose values_get returns ``response``."""
    def factory(response=None, error: Exception | None = None) -> MagicMock:
        client = MagicMock(spec=gspread.Client)
        values_get = client.open_by_key.return_value.values_get
        if error is not None:
            values_get.side_effect = error
        else:
            values_get.return_value = response if response is not None else {}
        return client
    return factory


@pytest.fixture()
def make_fetcher(make_client):
    def factory(rows=None, error: Exception | None = None) -> GoogleSheetsFetcher:
        response = {"range": "'Sheet1'!A1:Z1000", "majorDimension": "ROWS"}
        if rows is not None:
            response["values"] = rows
        return GoogleSheetsFetcher(client=make_client(response, error))
    return factory


@pytest.fixture()
def api_error():
    """Build a gspread APIError carrying an HTTP status and body."""
    def factory(status: int, message: str = "The caller does not have permission") -> gspread.exceptions.APIError:
        response = MagicMock()
        response.status_code = status
        response.text = f'{{"error": {{"code": {status}, "message": "{message}"}}}}'
        response.json.return_value = {
            "error": {"code": status, "message": message, "status": "PERMISSION_DENIED"}
        }
        return gspread.exceptions.APIError(response)
    return factory


@pytest.fixture()
def make_settings(tmp_path: Path):
    def factory(**overrides) -> Settings:
        values = dict(
            GOOGLE_SHEET_ID="sheet-123",
            GOOGLE_SHEET_NAME="Stores",
            GOOGLE_API_KEY="test-api-key",
            OUTPUT_DIR=str(tmp_path / "out"),
        )
        values.update(overrides)
        return Settings(**values)
    return factory
