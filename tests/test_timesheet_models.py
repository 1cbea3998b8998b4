from datetime import date, datetime

import pytest

from timesheet_models import (
    TimesheetRow,
    current_iso_week,
    iso_week_bounds,
    make_row_id,
    parse_date,
    to_int_hours,
    week_label,
)


def test_total_is_sum_of_weekdays():
    row = TimesheetRow(id="x", mon=8, tue=7, wed=6, thu=5, fri=4, sat=3, sun=2)
    assert row.total == 30
    assert row.with_changes(fri=0).total == 26


def test_make_row_id_pads_week():
    assert make_row_id(2025, 7, "Alice Silva", 2) == "2025-07-Alice Silva-2"
    assert make_row_id(2025, 42, "Bruno", 1) == "2025-42-Bruno-1"


@pytest.mark.parametrize(
    "year,week,monday",
    [
        (2025, 1, date(2024, 12, 30)),
        (2025, 32, date(2025, 8, 4)),
        (2020, 53, date(2020, 12, 28)),
    ],
)
def test_iso_week_bounds(year, week, monday):
    start, end = iso_week_bounds(year, week)
    assert start == monday
    assert (end - start).days == 6
    assert start.weekday() == 0


def test_week_53_rolls_into_next_year_when_missing():
    # 2025 has 52 ISO weeks
    start, _ = iso_week_bounds(2025, 53)
    assert start == date(2025, 12, 29)


def test_current_iso_week_uses_iso_year():
    assert current_iso_week(date(2024, 12, 31)) == (2025, 1)


def test_week_label():
    assert week_label((2025, 3)) == "2025-W03"


def test_month_key_fallback():
    assert TimesheetRow(id="x", year=2024, week_start=date(2024, 3, 4)).month_key == "2024-03"
    assert TimesheetRow(id="x", year=2024, week_start=None).month_key == "2024-01"


@pytest.mark.parametrize("value,expected", [(None, 0), ("", 0), ("7", 7), (7.0, 7), ("abc", 0), (float("nan"), 0)])
def test_to_int_hours(value, expected):
    assert to_int_hours(value) == expected


def test_parse_date_variants():
    assert parse_date("2025-08-04") == date(2025, 8, 4)
    assert parse_date("2025-08-04T00:00:00") == date(2025, 8, 4)
    assert parse_date(datetime(2025, 8, 4, 12)) == date(2025, 8, 4)
    assert parse_date("not a date") is None
    assert parse_date(None) is None


def test_record_round_trip_recomputes_total():
    record = {
        "id": "2025-32-Alice-1", "year": 2025, "iso_week": 32, "week_start": "2025-08-04",
        "person": "Alice", "project": "Brand Film", "business_unit": "Branding",
        "mon": 8, "tue": 8, "wed": None, "thu": 0, "fri": 4, "sat": 5, "sun": 5,
        "total": 999, "notes": None, "created_at": "2025-08-08T10:00:00+00:00",
    }
    row = TimesheetRow.from_record(record)
    assert row.total == 20
    assert row.sat == 0 and row.sun == 0
    assert row.notes == ""
    assert row.week_start == date(2025, 8, 4)
    out = row.to_record()
    assert out["total"] == 20
    assert out["week_start"] == "2025-08-04"


def test_from_record_holds_days_to_the_day_ceiling():
    row = TimesheetRow.from_record({"id": "x", "mon": -5, "tue": 30, "wed": "24", "thu": 12.7, "fri": None})
    assert [row.mon, row.tue, row.wed, row.thu, row.fri] == [0, 24, 24, 12, 0]
