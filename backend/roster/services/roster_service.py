"""Employee roster CRUD over a spreadsheet workbook."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import ValidationError

from roster.core import cells
from roster.core.config import Settings
from roster.core.sheet_schema import (
    EMPLOYEE_COLUMNS,
    POSITION_COLUMNS,
    PREFERENCE_COLUMNS,
    ensure_header,
    header_for,
)
from roster.models.employee import Employee
from roster.models.roster import DEFAULT_POSITIONS, BackupInfo, Position, RecordError, ReplaceResult
from roster.storage.base import Row, Workbook, Worksheet

logger = logging.getLogger(__name__)

CURRENT_USER_KEY = "currentUser"
LAST_BACKUP_KEY = "lastBackupAt"

_DATE_KEYS = (("createdDate", "created_date"), ("lastModified", "last_modified"))


class RosterError(Exception):
    """Base class for errors reported back to the caller as a failed action."""


class RosterValidationError(RosterError):
    pass


class DuplicateEmployeeError(RosterValidationError):
    pass


class EmployeeNotFoundError(RosterValidationError):
    pass


class BulkReplaceError(RosterValidationError):
    def __init__(self, message: str, errors: list[RecordError]) -> None:
        super().__init__(message)
        self.errors = errors


def _describe(err: ValidationError) -> str:
    first = err.errors()[0]
    message = str(first.get("msg", "Invalid value")).removeprefix("Value error, ")
    loc = ".".join(str(part) for part in first.get("loc", ()))
    if not loc or "Employee ID" in message:
        return message
    return f"{loc}: {message}"


def _to_cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return cells.format_datetime(value)
    if isinstance(value, Enum):
        return value.value
    return value


def _row_to_record(row: Row) -> dict[str, Any]:
    return {
        column.field: row[index] if index < len(row) else column.default
        for index, column in enumerate(EMPLOYEE_COLUMNS)
    }


def _employee_to_row(employee: Employee) -> Row:
    return [_to_cell(getattr(employee, column.field)) for column in EMPLOYEE_COLUMNS]


def _row_key(row: Row) -> str:
    return cells.clean_text(row[0]) if row else ""


class RosterService:
    def __init__(
        self,
        workbook: Workbook,
        *,
        employees_sheet: str = "Employees",
        positions_sheet: str = "Positions",
        preferences_sheet: str = "Preferences",
        backup_sheet: str = "Backup",
    ) -> None:
        self.workbook = workbook
        self.employees_sheet = employees_sheet
        self.positions_sheet = positions_sheet
        self.preferences_sheet = preferences_sheet
        self.backup_sheet = backup_sheet

    @classmethod
    def from_settings(cls, workbook: Workbook, settings: Settings) -> RosterService:
        return cls(
            workbook,
            employees_sheet=settings.EMPLOYEES_SHEET,
            positions_sheet=settings.POSITIONS_SHEET,
            preferences_sheet=settings.PREFERENCES_SHEET,
            backup_sheet=settings.BACKUP_SHEET,
        )

    def close(self) -> None:
        self.workbook.close()

    def check_connection(self) -> bool:
        try:
            self.workbook.worksheet(self.employees_sheet).get_all_values()
            return True
        except Exception:
            logger.exception("Roster store connection check failed")
            return False

    # Employees

    def _employee_rows(self) -> tuple[Worksheet, list[Row]]:
        ws = self.workbook.worksheet(self.employees_sheet)
        return ws, ensure_header(ws, EMPLOYEE_COLUMNS)

    @staticmethod
    def _find_row(rows: list[Row], emp_id: str) -> int | None:
        for index, row in enumerate(rows):
            if _row_key(row) == emp_id:
                return index + 2
        return None

    @staticmethod
    def _validate_record(raw: Any, *, now: datetime) -> Employee:
        if not isinstance(raw, Mapping):
            raise RosterValidationError("Employee record must be an object")

        data = dict(raw)
        for keys in _DATE_KEYS:
            for key in keys:
                value = data.get(key)
                if not cells.is_blank(value) and cells.parse_datetime(value) is None:
                    logger.warning("Unparsable %s %r, using current time", key, value)
                    data[key] = now

        try:
            return Employee.model_validate(data)
        except ValidationError as e:
            raise RosterValidationError(_describe(e)) from e

    def list_employees(self) -> list[Employee]:
        _, rows = self._employee_rows()
        marker = self.get_current_user_marker()

        employees: list[Employee] = []
        for row in rows:
            if not _row_key(row):
                continue
            employee = Employee.model_validate(_row_to_record(row))
            if marker and employee.emp_id == marker and not employee.is_me:
                employee = employee.model_copy(update={"is_me": True})
            employees.append(employee)
        return employees

    def get_employee(self, emp_id: str) -> Employee | None:
        key = cells.clean_text(emp_id)
        for employee in self.list_employees():
            if employee.emp_id == key:
                return employee
        return None

    def add_employee(self, raw: Any) -> Employee:
        now = cells.now()
        employee = self._validate_record(raw, now=now)
        ws, rows = self._employee_rows()

        if self._find_row(rows, employee.emp_id) is not None:
            raise DuplicateEmployeeError(f"Employee ID '{employee.emp_id}' already exists")

        employee = employee.model_copy(update={"created_date": now, "last_modified": now})
        ws.append_row(_employee_to_row(employee))
        logger.info("Added employee %s (%s)", employee.emp_id, employee.full_name)
        return employee

    def update_employee(self, raw: Any, original_id: str | None = None) -> Employee:
        now = cells.now()
        employee = self._validate_record(raw, now=now)
        original = cells.clean_text(original_id) or employee.emp_id
        ws, rows = self._employee_rows()

        row_number = self._find_row(rows, original)
        if row_number is None:
            raise EmployeeNotFoundError(f"Employee ID '{original}' not found")

        if employee.emp_id != original and self._find_row(rows, employee.emp_id) is not None:
            raise DuplicateEmployeeError(f"Employee ID '{employee.emp_id}' already exists")

        existing = Employee.model_validate(_row_to_record(rows[row_number - 2]))
        # isMe in the request is derived from the marker; keep the stored flag.
        employee = employee.model_copy(
            update={
                "created_date": existing.created_date or now,
                "last_modified": now,
                "is_me": existing.is_me,
            }
        )
        ws.update_row(row_number, _employee_to_row(employee))
        if employee.emp_id != original:
            logger.info("Updated employee %s (renamed from %s)", employee.emp_id, original)
        else:
            logger.info("Updated employee %s", employee.emp_id)
        return employee

    def set_photo_url(self, emp_id: str, photo_url: str) -> Employee:
        key = cells.clean_text(emp_id)
        ws, rows = self._employee_rows()

        row_number = self._find_row(rows, key)
        if row_number is None:
            raise EmployeeNotFoundError(f"Employee ID '{key}' not found")

        existing = Employee.model_validate(_row_to_record(rows[row_number - 2]))
        employee = existing.model_copy(update={"photo_url": photo_url, "last_modified": cells.now()})
        ws.update_row(row_number, _employee_to_row(employee))
        return employee

    def delete_employee(self, emp_id: str) -> None:
        key = cells.clean_text(emp_id)
        if not key:
            raise RosterValidationError("Employee ID is required")

        ws, rows = self._employee_rows()
        row_number = self._find_row(rows, key)
        if row_number is None:
            raise EmployeeNotFoundError(f"Employee ID '{key}' not found")

        ws.delete_row(row_number)
        if self.get_current_user_marker() == key:
            self.clear_current_user_marker()
        logger.info("Deleted employee %s", key)

    def replace_all_employees(self, records: Any) -> ReplaceResult:
        """Overwrite the employee table with *records*.

        Invalid records are skipped and reported. Duplicate IDs in the input,
        or no valid record at all, reject the whole call without writing.
        """
        if not isinstance(records, list):
            raise RosterValidationError("Expected a list of employee records")

        now = cells.now()
        valid: list[Employee] = []
        errors: list[RecordError] = []
        for index, raw in enumerate(records):
            try:
                valid.append(self._validate_record(raw, now=now))
            except RosterValidationError as e:
                errors.append(RecordError(index=index, message=str(e)))

        counts = Counter(employee.emp_id for employee in valid)
        duplicates = sorted(emp_id for emp_id, count in counts.items() if count > 1)
        if duplicates:
            raise BulkReplaceError(f"Duplicate Employee ID(s) in input: {', '.join(duplicates)}", errors)

        if not valid:
            raise BulkReplaceError("No valid employee records to write", errors)

        rows: list[Row] = [header_for(EMPLOYEE_COLUMNS)]
        for employee in valid:
            employee = employee.model_copy(
                update={
                    "created_date": employee.created_date or now,
                    "last_modified": employee.last_modified or now,
                }
            )
            rows.append(_employee_to_row(employee))

        self.workbook.worksheet(self.employees_sheet).replace_all_values(rows)
        logger.info("Replaced employee table: %d written, %d rejected", len(valid), len(errors))
        return ReplaceResult(written=len(valid), errors=errors)

    # Positions

    def list_positions(self) -> list[Position]:
        ws = self.workbook.worksheet(self.positions_sheet)
        positions = [
            Position(name=row[0], icon=row[1] if len(row) > 1 else None)
            for row in ensure_header(ws, POSITION_COLUMNS)
            if row and cells.clean_text(row[0])
        ]
        return positions or [position.model_copy() for position in DEFAULT_POSITIONS]

    def save_positions(self, items: Any) -> list[Position]:
        if not isinstance(items, list):
            raise RosterValidationError("Expected a list of positions")

        positions: list[Position] = []
        for index, item in enumerate(items):
            if isinstance(item, str):
                position = Position(name=item)
            elif isinstance(item, Mapping):
                position = Position(name=item.get("name"), icon=item.get("icon"))
            else:
                raise RosterValidationError(f"Position #{index + 1} must be an object or a string")
            if position.name:
                positions.append(position)

        rows: list[Row] = [header_for(POSITION_COLUMNS)]
        rows.extend([position.name, position.icon] for position in positions)
        self.workbook.worksheet(self.positions_sheet).replace_all_values(rows)
        logger.info("Saved %d positions", len(positions))
        return positions or [position.model_copy() for position in DEFAULT_POSITIONS]

    # Preferences

    def _preference_rows(self) -> tuple[Worksheet, list[Row]]:
        ws = self.workbook.worksheet(self.preferences_sheet)
        return ws, ensure_header(ws, PREFERENCE_COLUMNS)

    def _get_preference(self, key: str) -> str | None:
        _, rows = self._preference_rows()
        for row in rows:
            if row and cells.clean_text(row[0]) == key:
                return cells.clean_text(row[1] if len(row) > 1 else "") or None
        return None

    def _set_preference(self, key: str, value: str) -> None:
        ws, rows = self._preference_rows()
        for index, row in enumerate(rows):
            if row and cells.clean_text(row[0]) == key:
                ws.update_row(index + 2, [key, value])
                return
        ws.append_row([key, value])

    def _delete_preference(self, key: str) -> None:
        ws, rows = self._preference_rows()
        for index in range(len(rows) - 1, -1, -1):
            if rows[index] and cells.clean_text(rows[index][0]) == key:
                ws.delete_row(index + 2)

    def get_current_user_marker(self) -> str | None:
        return self._get_preference(CURRENT_USER_KEY)

    def set_current_user_marker(self, emp_id: Any) -> str:
        key = cells.clean_text(emp_id)
        if not key:
            raise RosterValidationError("Employee ID is required")
        self._set_preference(CURRENT_USER_KEY, key)
        return key

    def clear_current_user_marker(self) -> None:
        self._delete_preference(CURRENT_USER_KEY)

    # Sheet URL / backup

    def get_sheet_url(self) -> str | None:
        return self.workbook.url

    def backup_employees(self) -> BackupInfo:
        _, rows = self._employee_rows()
        data = [row for row in rows if _row_key(row)]

        timestamp = cells.now()
        self.workbook.worksheet(self.backup_sheet).replace_all_values([header_for(EMPLOYEE_COLUMNS), *data])
        self._set_preference(LAST_BACKUP_KEY, cells.format_datetime(timestamp))
        logger.info("Backed up %d employees to '%s'", len(data), self.backup_sheet)
        return BackupInfo(timestamp=timestamp, count=len(data))

    def _backup_rows(self) -> list[Row] | None:
        if not self.workbook.has_worksheet(self.backup_sheet):
            return None
        ws = self.workbook.worksheet(self.backup_sheet)
        return [row for row in ensure_header(ws, EMPLOYEE_COLUMNS) if _row_key(row)]

    def get_backup_info(self) -> BackupInfo | None:
        rows = self._backup_rows()
        if rows is None:
            return None
        timestamp = cells.parse_datetime(self._get_preference(LAST_BACKUP_KEY))
        return BackupInfo(timestamp=timestamp, count=len(rows))

    def restore_employees(self) -> ReplaceResult:
        rows = self._backup_rows()
        if rows is None:
            raise RosterValidationError("No backup found")
        if not rows:
            raise RosterValidationError("Backup is empty")

        result = self.replace_all_employees([_row_to_record(row) for row in rows])
        logger.info("Restored %d employees from '%s'", result.written, self.backup_sheet)
        return result

    def referenced_photo_urls(self) -> set[str]:
        """Photo URLs used by current employees or by the backup."""
        urls = {employee.photo_url for employee in self.list_employees() if employee.photo_url}
        for row in self._backup_rows() or []:
            url = Employee.model_validate(_row_to_record(row)).photo_url
            if url:
                urls.add(url)
        return urls
