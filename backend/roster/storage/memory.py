from __future__ import annotations

from roster.storage.base import Row, StoreError


class MemoryWorksheet:
    def __init__(self, title: str, rows: list[Row] | None = None) -> None:
        self.title = title
        self._rows: list[Row] = [list(row) for row in rows or []]

    def get_all_values(self) -> list[Row]:
        return [list(row) for row in self._rows]

    def replace_all_values(self, rows: list[Row]) -> None:
        self._rows = [list(row) for row in rows]

    def append_row(self, row: Row) -> None:
        self._rows.append(list(row))

    def update_row(self, row_number: int, row: Row) -> None:
        self._check(row_number)
        self._rows[row_number - 1] = list(row)

    def delete_row(self, row_number: int) -> None:
        self._check(row_number)
        del self._rows[row_number - 1]

    def _check(self, row_number: int) -> None:
        if row_number < 1 or row_number > len(self._rows):
            raise StoreError(f"Row {row_number} is out of range in worksheet '{self.title}'")


class MemoryWorkbook:
    """Process-local workbook, used for tests and throwaway runs."""

    def __init__(self, sheets: dict[str, list[Row]] | None = None) -> None:
        self._sheets: dict[str, MemoryWorksheet] = {
            title: MemoryWorksheet(title, rows) for title, rows in (sheets or {}).items()
        }

    @property
    def url(self) -> str | None:
        return None

    def worksheet(self, title: str) -> MemoryWorksheet:
        if title not in self._sheets:
            self._sheets[title] = MemoryWorksheet(title)
        return self._sheets[title]

    def has_worksheet(self, title: str) -> bool:
        return title in self._sheets

    def close(self) -> None:
        return None
