from __future__ import annotations

from datetime import date, datetime

import pytest

from roster.core.cells import clean_text, format_datetime, is_blank, parse_bool, parse_datetime


@pytest.mark.parametrize(
    ("value", "expected"),
    [(None, ""), ("  Sam ", "Sam"), (5551234, "5551234"), (12.0, "12"), (1.5, "1.5")],
)
def test_clean_text(value, expected):
    assert clean_text(value) == expected


@pytest.mark.parametrize("value", [True, "TRUE", "true", "Yes", "1", "x", "✓", 1])
def test_parse_bool_truthy(value):
    assert parse_bool(value) is True


@pytest.mark.parametrize("value", [False, "FALSE", "", None, "no", "0", 0])
def test_parse_bool_falsy(value):
    assert parse_bool(value) is False


def test_parse_datetime_formats():
    assert parse_datetime("2024-03-01T08:15:00") == datetime(2024, 3, 1, 8, 15)
    assert parse_datetime("2024-03-01") == datetime(2024, 3, 1)
    assert parse_datetime("03/01/2024 08:15:00") == datetime(2024, 3, 1, 8, 15)
    assert parse_datetime("01.03.2024") == datetime(2024, 3, 1)
    assert parse_datetime(date(2024, 3, 1)) == datetime(2024, 3, 1)


def test_parse_datetime_unparsable_returns_none():
    assert parse_datetime("not-a-date") is None
    assert parse_datetime("") is None
    assert parse_datetime(None) is None


def test_format_datetime():
    assert format_datetime(datetime(2024, 3, 1, 8, 15, 0, 999)) == "2024-03-01T08:15:00"
    assert format_datetime(None) == ""


def test_is_blank():
    assert is_blank(None)
    assert is_blank("   ")
    assert not is_blank(0)
    assert not is_blank("x")
