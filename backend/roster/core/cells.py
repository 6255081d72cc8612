"""Coercion helpers for raw spreadsheet cell values.

Google Sheets hands back formatted strings, openpyxl hands back native
Python values. Everything read from a worksheet goes through these helpers
before it reaches a model.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

_DATETIME_FORMATS = (
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y",
    "%d.%m.%Y",
)

_TRUE_VALUES = frozenset({"true", "yes", "y", "1", "x", "on", "✓", "✔"})


def now() -> datetime:
    """Current local time, truncated to whole seconds.

    Wrapped so tests can patch it.
    """
    return datetime.now().replace(microsecond=0)  # noqa: DTZ005


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def clean_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        return format_datetime(value)
    return str(value).strip()


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    return clean_text(value).lower() in _TRUE_VALUES


def parse_datetime(value: Any) -> datetime | None:
    """Best-effort timestamp parsing; returns None when nothing matches."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)  # noqa: DTZ001

    text = clean_text(value)
    if not text:
        return None

    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass

    for fmt in _DATETIME_FORMATS:
        try:
            return datetime.strptime(text, fmt)  # noqa: DTZ007
        except ValueError:
            continue
    return None


def format_datetime(value: datetime | None) -> str:
    if value is None:
        return ""
    return value.isoformat(timespec="seconds")
