"""
Google Sheets Data Extraction

Fetches a bounded cell range from a Google Sheets tab and returns the raw
two-dimensional array of cell values.
Handles authentication via API key or service account.
"""

import logging
from typing import Any, Dict, List, Optional

import gspread
import requests
from google.oauth2.service_account import Credentials
from gspread.utils import a1_range_to_grid_range

from etl.errors import EmptyDataError, RemoteServiceError

logger = logging.getLogger(__name__)

BODY_SNIPPET_LENGTH = 500


def build_range(sheet_name: str, cell_range: str = "") -> str:
    """
    Build an A1 range scoped to a tab, e.g. ``'Stores'!A1:Z1000``.

    An empty ``cell_range`` addresses the whole tab.
    """
    quoted = "'{}'".format(sheet_name.replace("'", "''"))
    return f"{quoted}!{cell_range}" if cell_range else quoted


class GoogleSheetsFetcher:
    """
    Reads cell values from Google Sheets.

    Supports both API key and service account authentication.
    """

    SCOPES = [
        "https://www.googleapis.com/auth/spreadsheets.readonly",
        "https://www.googleapis.com/auth/drive.readonly",
    ]

    def __init__(
        self,
        api_key: Optional[str] = None,
        credentials_path: Optional[str] = None,
        timeout: Optional[float] = 30.0,
        client: Optional[gspread.Client] = None,
    ):
        """
        Initialize Google Sheets fetcher.

        Args:
            api_key: Google API key (for sheets shared by link)
            credentials_path: Path to service account JSON file (takes precedence)
            timeout: Request timeout in seconds
            client: Pre-built gspread client, skips authentication

        Raises:
            FileNotFoundError: If credentials file not found
            ValueError: If neither an API key nor credentials are provided
        """
        self.api_key = api_key
        self.credentials_path = credentials_path
        self.timeout = timeout
        self.client: Optional[gspread.Client] = client
        if self.client is None:
            self._authenticate()

    def _authenticate(self) -> None:
        """
        Authenticate with the Google Sheets API.

        Raises:
            FileNotFoundError: If credentials file not found
            ValueError: If no credentials are configured
        """
        if self.credentials_path:
            try:
                credentials = Credentials.from_service_account_file(
                    self.credentials_path, scopes=self.SCOPES
                )
            except FileNotFoundError:
                logger.error(f"Credentials file not found: {self.credentials_path}")
                raise
            self.client = gspread.authorize(credentials)
            logger.info("Authenticated with Google Sheets API using service account")
        elif self.api_key:
            self.client = gspread.api_key(self.api_key)
            logger.info("Authenticated with Google Sheets API using API key")
        else:
            raise ValueError("Either an API key or a service account file is required")

        if self.timeout:
            self.client.set_timeout(self.timeout)

    def fetch(self, sheet_id: str, sheet_name: str = "Sheet1", cell_range: str = "A1:Z1000") -> List[List[str]]:
        """
        Fetch raw cell values from a sheet tab.

        Args:
            sheet_id: Google Sheet ID
            sheet_name: Name of the sheet tab (default: "Sheet1")
            cell_range: A1 range inside the tab; empty reads the whole tab

        Returns:
            Rows of cell strings, header row first

        Raises:
            RemoteServiceError: If the API responds with an error or is unreachable
            EmptyDataError: If the tab contains no rows at all
        """
        a1_range = build_range(sheet_name, cell_range)
        logger.info(f"Fetching range {a1_range} from spreadsheet {sheet_id}")

        response = self._values_get(sheet_id, a1_range)
        rows = response.get("values")

        if not rows:
            logger.error(f"No data found in range {a1_range}")
            raise EmptyDataError(f"No data found in Google Sheets range {a1_range}")

        logger.info(f"Fetched {len(rows)} rows (including header) from {sheet_name}")
        self._warn_if_truncated(rows, cell_range)
        return rows

    def check_connection(self, sheet_id: str, sheet_name: str = "Sheet1") -> bool:
        """
        Verify that the sheet tab is reachable by reading a single cell.

        Returns:
            True if the read succeeded, False otherwise
        """
        a1_range = build_range(sheet_name, "A1:A1")
        try:
            self._values_get(sheet_id, a1_range)
        except RemoteServiceError as e:
            logger.error(f"Google Sheets connection failed: {e.status_code}")
            if e.body:
                logger.error(f"  {e.body[:200]}")
            return False

        logger.info(f"Google Sheets connection OK (sheet: \"{sheet_name}\")")
        return True

    def _values_get(self, sheet_id: str, a1_range: str) -> Dict[str, Any]:
        try:
            spreadsheet = self.client.open_by_key(sheet_id)
            return spreadsheet.values_get(a1_range)
        except gspread.exceptions.APIError as e:
            status_code = getattr(e.response, "status_code", None)
            body = (getattr(e.response, "text", "") or "")[:BODY_SNIPPET_LENGTH]
            logger.error(f"Google Sheets API returned {status_code} for {a1_range}")
            raise RemoteServiceError(status_code, body) from e
        except gspread.exceptions.SpreadsheetNotFound as e:
            logger.error(f"Spreadsheet not found: {sheet_id}")
            raise RemoteServiceError(404, f"Spreadsheet not found: {sheet_id}") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Request to Google Sheets failed: {e}")
            raise RemoteServiceError(None, str(e)) from e

    def _warn_if_truncated(self, rows: List[List[Any]], cell_range: str) -> None:
        """Log a warning when the result fills the requested range to its edge."""
        if not cell_range:
            return
        try:
            grid = a1_range_to_grid_range(cell_range)
        except gspread.exceptions.GSpreadException:
            logger.debug(f"Range {cell_range} has no grid bounds; skipping truncation check")
            return

        if "endRowIndex" in grid:
            max_rows = grid["endRowIndex"] - grid.get("startRowIndex", 0)
            if len(rows) >= max_rows:
                logger.warning(
                    f"Fetched {len(rows)} rows, the limit of range {cell_range}; "
                    f"rows beyond it are not synced. Widen SHEET_RANGE if the sheet is larger."
                )
        if "endColumnIndex" in grid:
            max_cols = grid["endColumnIndex"] - grid.get("startColumnIndex", 0)
            if any(len(row) >= max_cols for row in rows):
                logger.warning(
                    f"Data reaches the last column of range {cell_range}; "
                    f"columns beyond it are not synced. Widen SHEET_RANGE if the sheet is wider."
                )


def fetch_google_sheet(settings, client: Optional[gspread.Client] = None) -> List[List[str]]:
    """
    Convenience function to fetch raw rows using settings.

    Args:
        settings: Settings object with Google Sheets configuration
        client: Optional pre-built gspread client

    Returns:
        Raw rows, header first
    """
    fetcher = GoogleSheetsFetcher(
        api_key=settings.GOOGLE_API_KEY,
        credentials_path=settings.GOOGLE_CREDENTIALS_PATH,
        timeout=settings.REQUEST_TIMEOUT,
        client=client,
    )
    return fetcher.fetch(
        sheet_id=settings.GOOGLE_SHEET_ID,
        sheet_name=settings.GOOGLE_SHEET_NAME,
        cell_range=settings.SHEET_RANGE,
    )
