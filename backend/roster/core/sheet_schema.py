"""Worksheet column layouts and header migration."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from roster.core.cells import clean_text
from roster.storage.base import Row, Worksheet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Column:
    field: str
    header: str
    default: Any = ""
    aliases: tuple[str, ...] = ()


EMPLOYEE_COLUMNS: tuple[Column, ...] = (
    Column("emp_id", "Employee ID", aliases=("ID", "Emp ID", "EmpId", "Employee Id")),
    Column("first_name", "First Name", aliases=("First", "FirstName")),
    Column("last_name", "Last Name", aliases=("Last", "LastName")),
    Column("phone", "Phone", aliases=("Phone Number", "Mobile")),
    Column("email", "Email", aliases=("E-mail", "Email Address")),
    Column("position", "Position", aliases=("Positions", "Role")),
    Column("status", "Status", default="Active"),
    Column("note", "Note", aliases=("Notes",)),
    Column("photo_url", "Photo URL", aliases=("Photo", "Photo Url", "PhotoURL")),
    Column("created_date", "Created Date", aliases=("Created", "Date Created")),
    Column("last_modified", "Last Modified", aliases=("Modified", "Updated", "Last Updated")),
    Column("is_manager", "Is Manager", default=False, aliases=("Manager",)),
    Column(
        "is_assistant_manager",
        "Is Assistant Manager",
        default=False,
        aliases=("Assistant Manager", "Asst Manager"),
    ),
    Column("is_me", "Is Me", default=False, aliases=("Me",)),
)

POSITION_COLUMNS: tuple[Column, ...] = (
    Column("name", "Position", aliases=("Name", "Position Name")),
    Column("icon", "Icon", default="•", aliases=("Emoji",)),
)

PREFERENCE_COLUMNS: tuple[Column, ...] = (
    Column("key", "Key"),
    Column("value", "Value"),
)


def header_for(columns: tuple[Column, ...]) -> list[str]:
    return [column.header for column in columns]


def _normalize(name: str) -> str:
    return " ".join(name.lower().replace("_", " ").split())


def _trim_header(row: Row) -> list[str]:
    header = [clean_text(cell) for cell in row]
    while header and not header[-1]:
        header.pop()
    return header


def migrate_rows(header: list[str], rows: list[Row], columns: tuple[Column, ...]) -> list[Row]:
    """Re-map *rows* laid out under *header* onto the column order of *columns*.

    Columns are matched by header name or one of its aliases, ignoring case
    and spacing. Unmatched old columns are dropped; new columns get defaults.
    """
    positions = {}
    for index, name in enumerate(header):
        key = _normalize(name)
        if key and key not in positions:
            positions[key] = index

    sources: list[int | None] = []
    used: set[int] = set()
    for column in columns:
        source = None
        for candidate in (column.header, column.field, *column.aliases):
            index = positions.get(_normalize(candidate))
            if index is not None and index not in used:
                source = index
                break
        if source is not None:
            used.add(source)
        sources.append(source)

    dropped = [name for index, name in enumerate(header) if name and index not in used]
    if dropped:
        logger.warning("Dropping unknown columns during migration: %s", ", ".join(dropped))

    migrated: list[Row] = []
    for row in rows:
        migrated.append(
            [
                row[source] if source is not None and source < len(row) else column.default
                for column, source in zip(columns, sources)
            ]
        )
    return migrated


def _is_header(row: list[str], columns: tuple[Column, ...]) -> bool:
    known = {_normalize(name) for column in columns for name in (column.header, column.field, *column.aliases)}
    names = [_normalize(cell) for cell in row if cell]
    return bool(names) and 2 * sum(name in known for name in names) >= len(names)


def ensure_header(worksheet: Worksheet, columns: tuple[Column, ...]) -> list[Row]:
    """Make *worksheet* start with the expected header and return its data rows.

    Leading blank rows are skipped and the first non-blank row is taken as
    the header. A sheet with no values at all gets the header written. Any
    other layout is migrated in place, so existing rows are never dropped.
    """
    values = worksheet.get_all_values()
    expected = header_for(columns)

    start = next((index for index, row in enumerate(values) if _trim_header(row)), None)
    if start is None:
        worksheet.replace_all_values([expected])
        return []

    header = _trim_header(values[start])
    rows = values[start + 1 :]
    has_header = _is_header(header, columns)
    if not has_header:
        logger.warning("Worksheet '%s' has no header row; keeping rows in column order", worksheet.title)
        header, rows = expected, values[start:]
    if start == 0 and has_header and header == expected:
        return rows

    if start:
        logger.warning("Worksheet '%s' has %d blank row(s) at the top", worksheet.title, start)
    if header != expected:
        logger.warning(
            "Worksheet '%s' header mismatch, migrating %d rows (found %s)",
            worksheet.title,
            len(rows),
            header,
        )
    migrated = migrate_rows(header, rows, columns)
    worksheet.replace_all_values([expected, *migrated])
    return migrated
