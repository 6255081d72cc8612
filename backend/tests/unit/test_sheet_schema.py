from __future__ import annotations

from roster.core.sheet_schema import (
    EMPLOYEE_COLUMNS,
    POSITION_COLUMNS,
    ensure_header,
    header_for,
    migrate_rows,
)
from roster.services.roster_service import RosterService
from roster.storage.memory import MemoryWorkbook, MemoryWorksheet


def test_ensure_header_initializes_empty_sheet():
    ws = MemoryWorksheet("Positions")

    assert ensure_header(ws, POSITION_COLUMNS) == []
    assert ws.get_all_values() == [["Position", "Icon"]]


def test_ensure_header_keeps_matching_sheet():
    ws = MemoryWorksheet("Positions", [["Position", "Icon", ""], ["Host", "🙋"]])

    assert ensure_header(ws, POSITION_COLUMNS) == [["Host", "🙋"]]
    assert ws.get_all_values()[0] == ["Position", "Icon", ""]


def test_ensure_header_skips_blank_rows_above_header():
    ws = MemoryWorksheet("Positions", [["", ""], ["Position", "Icon"], ["Host", "🙋"]])

    assert ensure_header(ws, POSITION_COLUMNS) == [["Host", "🙋"]]
    assert ws.get_all_values() == [["Position", "Icon"], ["Host", "🙋"]]


def test_ensure_header_keeps_rows_of_headerless_sheet():
    ws = MemoryWorksheet("Positions", [["", ""], ["Host", "🙋"], ["Cook", ""]])

    assert ensure_header(ws, POSITION_COLUMNS) == [["Host", "🙋"], ["Cook", ""]]
    assert ws.get_all_values() == [["Position", "Icon"], ["Host", "🙋"], ["Cook", ""]]


def test_ensure_header_initializes_blank_sheet():
    ws = MemoryWorksheet("Positions", [["", ""], [None, "  "]])

    assert ensure_header(ws, POSITION_COLUMNS) == []
    assert ws.get_all_values() == [["Position", "Icon"]]


def test_list_employees_survives_blank_first_row():
    workbook = MemoryWorkbook(
        {
            "Employees": [
                ["", "", ""],
                ["Employee ID", "First Name"],
                ["B1", "Sam"],
                ["B2", "Alex"],
            ]
        }
    )
    roster = RosterService(workbook)

    assert [(e.emp_id, e.first_name) for e in roster.list_employees()] == [("B1", "Sam"), ("B2", "Alex")]
    rows = workbook.worksheet("Employees").get_all_values()
    assert rows[0] == header_for(EMPLOYEE_COLUMNS)
    assert len(rows) == 3

    roster.update_employee({"empId": "B2", "firstName": "Alexis"}, "B2")
    assert [e.first_name for e in roster.list_employees()] == ["Sam", "Alexis"]


def test_migrate_rows_maps_by_header_and_alias():
    header = ["ID", "first name", "Last Name", "Manager", "Shoe Size"]
    rows = [["B1", "Sam", "Lee", "TRUE", "42"], ["B2", "Alex"]]

    migrated = migrate_rows(header, rows, EMPLOYEE_COLUMNS)

    expected_header = header_for(EMPLOYEE_COLUMNS)
    first = dict(zip(expected_header, migrated[0]))
    assert first["Employee ID"] == "B1"
    assert first["First Name"] == "Sam"
    assert first["Last Name"] == "Lee"
    assert first["Is Manager"] == "TRUE"
    assert first["Status"] == "Active"
    assert first["Is Me"] is False
    assert "42" not in migrated[0]

    second = dict(zip(expected_header, migrated[1]))
    assert second["Employee ID"] == "B2"
    assert second["Last Name"] == ""


def test_ensure_header_migrates_legacy_employee_sheet():
    legacy = [
        ["Emp ID", "First Name", "Last Name", "Phone", "Email", "Position", "Status", "Notes", "Photo"],
        ["B1", "Sam", "Lee", "555", "sam@example.com", "Bartender", "Active", "Closer", "/photos/sam.png"],
    ]
    workbook = MemoryWorkbook({"Employees": legacy})

    (employee,) = RosterService(workbook).list_employees()

    assert employee.emp_id == "B1"
    assert employee.note == "Closer"
    assert employee.photo_url == "/photos/sam.png"
    assert employee.is_assistant_manager is False
    values = workbook.worksheet("Employees").get_all_values()
    assert values[0] == header_for(EMPLOYEE_COLUMNS)
    assert len(values) == 2


def test_migration_is_stable_on_second_read():
    workbook = MemoryWorkbook({"Employees": [["ID", "First Name"], ["B1", "Sam"]]})
    service = RosterService(workbook)

    first = service.list_employees()
    snapshot = workbook.worksheet("Employees").get_all_values()
    second = service.list_employees()

    assert first == second
    assert workbook.worksheet("Employees").get_all_values() == snapshot
