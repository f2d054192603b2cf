"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is offered as an alternative backend because:
1. The user can view their raw data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Every read fetches the whole worksheet (fine for personal use)
- No transactions (each key is written independently, same as local storage)
- Cell size limits apply to very large collections

The worksheet has three columns: key, value, updated_at.
One row per key.
"""

from datetime import datetime, timezone
from typing import Optional

import gspread
from google.oauth2.service_account import Credentials

from finance_tracker.config import get_settings
from finance_tracker.services.storage.interface import (
    ConnectionError,
    KeyValueStorageInterface,
    StorageError,
)


KEY_VALUE_COLUMNS = [
    "key",
    "value",
    "updated_at",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and worksheet lookup.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_data_sheet(self) -> gspread.Worksheet:
        """Get or create the key/value worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.worksheet_name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=self._settings.worksheet_name,
                rows=100,
                cols=len(KEY_VALUE_COLUMNS),
            )
            sheet.append_row(KEY_VALUE_COLUMNS)
        return sheet


class GoogleSheetsKeyValueStorage(KeyValueStorageInterface):
    """
    Google Sheets implementation of key-value storage.

    Accepts anything with a get_data_sheet() method, so tests can pass
    a fake client backed by a fake worksheet.
    """

    def __init__(self, client=None):
        self._client = client or GoogleSheetsClient()

    def _rows(self, sheet) -> list[list[str]]:
        # Skip header
        return sheet.get_all_values()[1:]

    def _find_row(self, sheet, key: str) -> Optional[int]:
        """1-based sheet row index for a key (row 1 is the header)."""
        for idx, row in enumerate(self._rows(sheet), start=2):
            if row and row[0] == key:
                return idx
        return None

    def get(self, key: str) -> Optional[str]:
        try:
            sheet = self._client.get_data_sheet()
            for row in self._rows(sheet):
                if row and row[0] == key:
                    return row[1] if len(row) > 1 else ""
            return None
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read {key}: {e}")

    def set(self, key: str, value: str) -> None:
        try:
            sheet = self._client.get_data_sheet()
            timestamp = datetime.now(timezone.utc).isoformat()
            row_idx = self._find_row(sheet, key)
            if row_idx is None:
                sheet.append_row([key, value, timestamp], value_input_option="RAW")
            else:
                sheet.update_cell(row_idx, 2, value)
                sheet.update_cell(row_idx, 3, timestamp)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to write {key}: {e}")

    def delete(self, key: str) -> bool:
        try:
            sheet = self._client.get_data_sheet()
            row_idx = self._find_row(sheet, key)
            if row_idx is None:
                return False
            sheet.delete_rows(row_idx)
            return True
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete {key}: {e}")

    def clear(self) -> None:
        try:
            sheet = self._client.get_data_sheet()
            sheet.clear()
            sheet.append_row(KEY_VALUE_COLUMNS)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to clear worksheet: {e}")

    def keys(self) -> list[str]:
        try:
            sheet = self._client.get_data_sheet()
            return [row[0] for row in self._rows(sheet) if row and row[0]]
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to list keys: {e}")
