"""Google Sheets backend (gspread + service account credentials)."""

from __future__ import annotations

import logging
import random
import time
from typing import Any, Callable, TypeVar

import gspread
from google.oauth2.service_account import Credentials
from gspread.exceptions import APIError, WorksheetNotFound
from gspread.utils import rowcol_to_a1

from roster.storage.base import Row, StoreError

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
]

_RETRYABLE_STATUSES = (429, 503)
_MAX_ATTEMPTS = 4
_BASE_DELAY_SECONDS = 0.5

T = TypeVar("T")


def _status_of(err: APIError) -> int | None:
    response = getattr(err, "response", None)
    return getattr(response, "status_code", None)


def _retry(fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Call a gspread method, backing off on quota (429) and 503 responses."""
    last: APIError | None = None
    for attempt in range(_MAX_ATTEMPTS):
        try:
            return fn(*args, **kwargs)
        except APIError as e:
            status = _status_of(e)
            if status not in _RETRYABLE_STATUSES:
                raise StoreError(f"Google Sheets API error ({status}): {e}") from e
            last = e
            if attempt < _MAX_ATTEMPTS - 1:
                wait = _BASE_DELAY_SECONDS * (2**attempt) + random.uniform(0, 0.3)  # noqa: S311
                logger.warning("Google Sheets returned %s, retrying in %.1fs", status, wait)
                time.sleep(wait)
    raise StoreError(f"Google Sheets API still failing after {_MAX_ATTEMPTS} attempts: {last}") from last


class GoogleWorksheet:
    def __init__(self, worksheet: gspread.Worksheet) -> None:
        self._ws = worksheet
        self.title = worksheet.title

    def get_all_values(self) -> list[Row]:
        return _retry(self._ws.get_all_values)

    def replace_all_values(self, rows: list[Row]) -> None:
        _retry(self._ws.clear)
        if not rows:
            return
        width = max(len(row) for row in rows) or 1
        _retry(self._ws.resize, rows=max(len(rows), 1), cols=width)
        _retry(self._ws.update, range_name="A1", values=rows, value_input_option="RAW")

    def append_row(self, row: Row) -> None:
        _retry(self._ws.append_row, row, value_input_option="RAW")

    def update_row(self, row_number: int, row: Row) -> None:
        _retry(
            self._ws.update,
            range_name=rowcol_to_a1(row_number, 1),
            values=[row],
            value_input_option="RAW",
        )

    def delete_row(self, row_number: int) -> None:
        _retry(self._ws.delete_rows, row_number)


class GoogleWorkbook:
    def __init__(self, spreadsheet: gspread.Spreadsheet) -> None:
        self._book = spreadsheet

    @classmethod
    def from_service_account(cls, sheet_id: str, credentials_file: str) -> GoogleWorkbook:
        creds = Credentials.from_service_account_file(credentials_file, scopes=SCOPES)
        client = gspread.authorize(creds)
        spreadsheet = _retry(client.open_by_key, sheet_id)
        logger.info("Opened Google spreadsheet %s", sheet_id)
        return cls(spreadsheet)

    @property
    def url(self) -> str | None:
        return self._book.url

    def worksheet(self, title: str) -> GoogleWorksheet:
        try:
            ws = _retry(self._book.worksheet, title)
        except WorksheetNotFound:
            logger.info("Creating worksheet '%s'", title)
            ws = _retry(self._book.add_worksheet, title=title, rows=100, cols=20)
        return GoogleWorksheet(ws)

    def has_worksheet(self, title: str) -> bool:
        try:
            _retry(self._book.worksheet, title)
        except WorksheetNotFound:
            return False
        return True

    def close(self) -> None:
        return None
