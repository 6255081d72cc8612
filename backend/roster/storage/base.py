"""Interfaces for the spreadsheet that backs the roster.

Row numbers are 1-based and include the header row, the way a spreadsheet
user counts them.
"""

from __future__ import annotations

from typing import Any, Protocol

Row = list[Any]


class StoreError(Exception):
    """Raised when the backing spreadsheet cannot be read or written."""


class Worksheet(Protocol):
    title: str

    def get_all_values(self) -> list[Row]:
        raise NotImplementedError

    def replace_all_values(self, rows: list[Row]) -> None:
        raise NotImplementedError

    def append_row(self, row: Row) -> None:
        raise NotImplementedError

    def update_row(self, row_number: int, row: Row) -> None:
        raise NotImplementedError

    def delete_row(self, row_number: int) -> None:
        raise NotImplementedError


class Workbook(Protocol):
    @property
    def url(self) -> str | None:
        raise NotImplementedError

    def worksheet(self, title: str) -> Worksheet:
        """Return the worksheet called *title*, creating it when missing."""
        raise NotImplementedError

    def has_worksheet(self, title: str) -> bool:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError
