"""Local .xlsx workbook backend (openpyxl). Every mutation is saved to disk."""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.worksheet.worksheet import Worksheet as OpenpyxlWorksheet

from roster.storage.base import Row, StoreError

logger = logging.getLogger(__name__)


class ExcelWorksheet:
    def __init__(self, book: ExcelWorkbook, title: str) -> None:
        self._book = book
        self.title = title

    @property
    def _ws(self) -> OpenpyxlWorksheet:
        return self._book.raw[self.title]

    def get_all_values(self) -> list[Row]:
        rows = [list(row) for row in self._ws.iter_rows(values_only=True)]
        while rows and all(cell is None for cell in rows[-1]):
            rows.pop()
        return rows

    def replace_all_values(self, rows: list[Row]) -> None:
        wb = self._book.raw
        index = wb.sheetnames.index(self.title)
        wb.remove(wb[self.title])
        ws = wb.create_sheet(self.title, index)
        for row_number, row in enumerate(rows, start=1):
            self._write(ws, row_number, row)
        self._book.save()

    def append_row(self, row: Row) -> None:
        self._write(self._ws, len(self.get_all_values()) + 1, row)
        self._book.save()

    def update_row(self, row_number: int, row: Row) -> None:
        self._check(row_number)
        self._write(self._ws, row_number, row)
        self._book.save()

    def delete_row(self, row_number: int) -> None:
        self._check(row_number)
        self._ws.delete_rows(row_number)
        self._book.save()

    def _check(self, row_number: int) -> None:
        if row_number < 1 or row_number > len(self.get_all_values()):
            raise StoreError(f"Row {row_number} is out of range in worksheet '{self.title}'")

    @staticmethod
    def _write(ws: OpenpyxlWorksheet, row_number: int, row: Row) -> None:
        width = max(len(row), ws.max_column)
        for col in range(1, width + 1):
            value = row[col - 1] if col <= len(row) else None
            ws.cell(row=row_number, column=col, value=None if value == "" else value)


class ExcelWorkbook:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        if self.path.exists():
            try:
                self.raw = openpyxl.load_workbook(self.path)
            except (InvalidFileException, zipfile.BadZipFile, OSError) as e:
                raise StoreError(f"Cannot open workbook {self.path}: {e}") from e
            logger.info("Loaded workbook %s (%s)", self.path, ", ".join(self.raw.sheetnames))
        else:
            self.raw = openpyxl.Workbook()
            self.raw.remove(self.raw.active)
            logger.info("Creating new workbook at %s", self.path)

    @property
    def url(self) -> str | None:
        return self.path.resolve().as_uri()

    def worksheet(self, title: str) -> ExcelWorksheet:
        if title not in self.raw.sheetnames:
            self.raw.create_sheet(title)
            self.save()
        return ExcelWorksheet(self, title)

    def has_worksheet(self, title: str) -> bool:
        return title in self.raw.sheetnames

    def save(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.raw.save(self.path)
        except OSError as e:
            raise StoreError(f"Cannot save workbook {self.path}: {e}") from e

    def close(self) -> None:
        self.raw.close()
