from datetime import date

import pytest

from timesheet_models import TimesheetRow, iso_week_bounds
from timesheet_store import TimesheetStore


def make_row(person="Alice", project="Brand Film", business_unit="Branding", year=2025, iso_week=32,
             hours=(8, 0, 0, 0, 0), row_id=None, week_start="auto", notes="", created_at="2025-08-08T10:00:00+00:00"):
    if week_start == "auto":
        week_start = iso_week_bounds(year, iso_week)[0]
    mon, tue, wed, thu, fri = hours
    return TimesheetRow(
        id=row_id or f"{year}-{iso_week:02d}-{person}-{project}",
        person=person,
        project=project,
        business_unit=business_unit,
        year=year,
        iso_week=iso_week,
        week_start=week_start,
        mon=mon, tue=tue, wed=wed, thu=thu, fri=fri,
        notes=notes,
        created_at=created_at,
    )


@pytest.fixture
def row_factory():
    return make_row


@pytest.fixture
def store(tmp_path):
    s = TimesheetStore.from_url(f"sqlite:///{tmp_path / 'timesheet.db'}")
    s.init_schema()
    return s


@pytest.fixture
def august_monday():
    return date(2025, 8, 4)
