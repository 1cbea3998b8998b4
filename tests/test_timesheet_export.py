from datetime import date, datetime
from io import BytesIO

import pandas as pd
import pytest

from conftest import make_row
from timesheet_export import (
    database_filename,
    placeholder_row,
    read_database_sheet,
    rows_from_frame,
    rows_to_frame,
    template_filename,
    workbook_bytes,
)


def test_workbook_has_database_and_lookup_sheets():
    rows = [make_row(person="Alice", row_id="2025-32-Alice-1", hours=(8, 8, 0, 0, 0))]
    data = workbook_bytes(rows, ["Alice", "Bruno"], ["Brand Film"], ["Branding", "Content"])

    sheets = pd.read_excel(BytesIO(data), sheet_name=None)

    assert list(sheets) == ["Database", "People", "Projects", "BusinessUnits"]
    db = sheets["Database"]
    assert list(db.columns[:4]) == ["ID", "Year", "ISO_Week", "Week_Start"]
    assert db.loc[0, "Total"] == 16
    assert db.loc[0, "Sat"] == 0
    assert sheets["People"]["Person"].tolist() == ["Alice", "Bruno"]
    assert sheets["BusinessUnits"]["Business_Unit"].tolist() == ["Branding", "Content"]


def test_empty_database_gets_placeholder_row():
    placeholder = placeholder_row(2025, 32, date(2025, 8, 4))
    data = workbook_bytes([], [], [], [], placeholder=placeholder)
    db = pd.read_excel(BytesIO(data), sheet_name="Database")
    assert len(db) == 1
    assert db.loc[0, "Year"] == 2025
    assert db.loc[0, "Total"] == 0
    # and reading it back ignores the placeholder
    assert read_database_sheet(BytesIO(data)) == []


def test_read_database_sheet_restores_rows():
    rows = [
        make_row(person="Alice", row_id="2025-32-Alice-1", hours=(8, 0, 0, 0, 2), notes="kickoff"),
        make_row(person="Bruno", row_id="2025-32-Bruno-1", hours=(4, 4, 0, 0, 0)),
    ]
    restored = read_database_sheet(BytesIO(workbook_bytes(rows, [], [], [])))
    assert [r.id for r in restored] == ["2025-32-Alice-1", "2025-32-Bruno-1"]
    assert restored[0].total == 10
    assert restored[0].notes == "kickoff"
    assert restored[1].notes == ""
    assert restored[0].week_start == date(2025, 8, 4)


def test_rows_from_frame_requires_columns():
    with pytest.raises(ValueError, match="Missing column"):
        rows_from_frame(pd.DataFrame({"ID": ["x"], "Person": ["Alice"]}))


def test_rows_to_frame_for_empty_list_keeps_columns():
    df = rows_to_frame([])
    assert df.empty
    assert "Business_Unit" in df.columns


def test_filenames():
    assert database_filename(datetime(2025, 8, 8, 9, 5)) == "Timesheet_Database_20250808_0905.xlsx"
    assert template_filename(2025, 7) == "Timesheet_Template_2025-W07.xlsx"
