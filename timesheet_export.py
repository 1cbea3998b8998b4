# timesheet_export.py
from io import BytesIO
from datetime import datetime

import pandas as pd

from timesheet_models import TimesheetRow

SHEET_COLUMNS = {
    "ID": "id",
    "Year": "year",
    "ISO_Week": "iso_week",
    "Week_Start": "week_start",
    "Person": "person",
    "Project": "project",
    "Business_Unit": "business_unit",
    "Mon": "mon",
    "Tue": "tue",
    "Wed": "wed",
    "Thu": "thu",
    "Fri": "fri",
    "Sat": "sat",
    "Sun": "sun",
    "Total": "total",
    "Notes": "notes",
    "Created_At": "created_at",
}
REQUIRED_COLUMNS = ["ID", "Year", "ISO_Week", "Person", "Project", "Business_Unit", "Mon", "Tue", "Wed", "Thu", "Fri"]
XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def rows_to_frame(rows) -> pd.DataFrame:
    records = [{sheet: r.to_record()[key] for sheet, key in SHEET_COLUMNS.items()} for r in rows]
    return pd.DataFrame(records, columns=list(SHEET_COLUMNS))


def rows_from_frame(df: pd.DataFrame) -> list:
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Missing column: {', '.join(missing)}")
    df = df.astype(object).where(pd.notna(df), None)
    rows = []
    for _, r in df.iterrows():
        record = {key: r.get(sheet) for sheet, key in SHEET_COLUMNS.items()}
        row = TimesheetRow.from_record(record)
        # the placeholder row of an empty export has no ID
        if row.id:
            rows.append(row)
    return rows


def placeholder_row(year, iso_week, week_start, person="") -> TimesheetRow:
    return TimesheetRow(id="", person=person, year=year, iso_week=iso_week, week_start=week_start)


def lookup_frames(people, projects, business_units) -> dict:
    return {
        "People": pd.DataFrame({"Person": list(people)}),
        "Projects": pd.DataFrame({"Project": list(projects)}),
        "BusinessUnits": pd.DataFrame({"Business_Unit": list(business_units)}),
    }


def df_to_excel_bytes(dfs: dict) -> bytes:
    output = BytesIO()
    with pd.ExcelWriter(output, engine="xlsxwriter") as writer:
        for name, df in dfs.items():
            df.to_excel(writer, sheet_name=name[:31], index=False)
    return output.getvalue()


def workbook_bytes(rows, people, projects, business_units, placeholder=None) -> bytes:
    """Database sheet plus the three lookup lists, one sheet each."""
    rows = list(rows)
    if not rows and placeholder is not None:
        rows = [placeholder]
    sheets = {"Database": rows_to_frame(rows)}
    sheets.update(lookup_frames(people, projects, business_units))
    return df_to_excel_bytes(sheets)


def database_filename(now=None) -> str:
    now = now or datetime.now()
    return f"Timesheet_Database_{now:%Y%m%d_%H%M}.xlsx"


def template_filename(year, iso_week) -> str:
    return f"Timesheet_Template_{year}-W{int(iso_week):02d}.xlsx"


def read_database_sheet(source) -> list:
    df = pd.read_excel(source, sheet_name="Database")
    df.columns = [str(c).strip() for c in df.columns]
    return rows_from_frame(df)
