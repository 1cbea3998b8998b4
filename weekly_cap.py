# weekly_cap.py
"""
Weekly cap enforcement for the staging area.

A person's staged rows for one ISO week may hold at most 40 hours in total
(Mon-Fri) and at most 24 hours in any single day cell. The cap is enforced
prospectively, one cell edit at a time.
"""
import uuid
from dataclasses import dataclass, field, replace

from timesheet_models import DAY_CAP, WEEKDAYS, TimesheetRow, iso_week_bounds, make_row_id, utc_now_iso

WEEKLY_CAP = 40


def clamp(other_rows_total, this_row_other_days_total, candidate) -> int:
    """Largest value <= candidate that keeps the week within both caps.

    Negative candidates floor to 0 and anything above 24 is cut to 24 before
    the weekly rule is applied.
    """
    used = other_rows_total + this_row_other_days_total
    allowance = max(0, WEEKLY_CAP - used)
    return min(allowance, max(0, min(DAY_CAP, candidate)))


def _short_id():
    return uuid.uuid4().hex[:8]


@dataclass
class StagingEntry:
    business_unit: str = ""
    project: str = ""
    mon: int | None = None
    tue: int | None = None
    wed: int | None = None
    thu: int | None = None
    fri: int | None = None
    notes: str = ""
    id: str = field(default_factory=_short_id)

    def hours(self, day) -> int:
        return getattr(self, day) or 0

    @property
    def total(self) -> int:
        return sum(self.hours(d) for d in WEEKDAYS)


@dataclass
class CellUpdate:
    value: int | None
    capped: bool = False


class StagingArea:
    """Editable, uncommitted rows for one person and week."""

    EDITABLE_FIELDS = ("business_unit", "project", "notes")

    def __init__(self, default_business_unit="", default_project=""):
        self.default_business_unit = default_business_unit
        self.default_project = default_project
        self.entries = [self._blank()]

    def _blank(self):
        return StagingEntry(business_unit=self.default_business_unit, project=self.default_project)

    def _find(self, entry_id):
        for entry in self.entries:
            if entry.id == entry_id:
                return entry
        raise KeyError(entry_id)

    # -----------------------
    # ROWS
    # -----------------------
    def add_entry(self) -> StagingEntry:
        entry = self._blank()
        self.entries.append(entry)
        return entry

    def duplicate_entry(self, entry_id) -> StagingEntry:
        copy = replace(self._find(entry_id), id=_short_id())
        self.entries.append(copy)
        return copy

    def remove_entry(self, entry_id) -> bool:
        if len(self.entries) == 1:
            return False
        entry = self._find(entry_id)
        self.entries.remove(entry)
        return True

    def clear(self):
        self.entries = [self._blank()]

    # -----------------------
    # CELLS
    # -----------------------
    def other_entries_total(self, entry_id) -> int:
        return sum(e.total for e in self.entries if e.id != entry_id)

    def set_day(self, entry_id, day, raw) -> CellUpdate:
        if day not in WEEKDAYS:
            raise ValueError(f"Unknown weekday: {day}")
        entry = self._find(entry_id)
        if raw is None or str(raw).strip() == "":
            setattr(entry, day, None)
            return CellUpdate(None)

        try:
            requested = int(float(str(raw).strip()))
        except (ValueError, OverflowError):
            requested = 0
        requested = max(0, min(DAY_CAP, requested))

        this_other_days = sum(entry.hours(d) for d in WEEKDAYS if d != day)
        value = clamp(self.other_entries_total(entry_id), this_other_days, requested)
        setattr(entry, day, value)
        return CellUpdate(value, capped=value < requested)

    def set_field(self, entry_id, name, value):
        if name not in self.EDITABLE_FIELDS:
            raise ValueError(f"Field is not editable: {name}")
        setattr(self._find(entry_id), name, value)

    def week_total(self) -> int:
        return sum(e.total for e in self.entries)

    def day_totals(self) -> dict:
        return {d: sum(e.hours(d) for e in self.entries) for d in WEEKDAYS}

    # -----------------------
    # COMMIT
    # -----------------------
    def _row(self, index, entry, person, year, iso_week, created_at):
        monday, _ = iso_week_bounds(year, iso_week)
        return TimesheetRow(
            id=make_row_id(year, iso_week, person, index),
            person=person,
            project=entry.project,
            business_unit=entry.business_unit,
            year=year,
            iso_week=iso_week,
            week_start=monday,
            notes=entry.notes or "",
            created_at=created_at,
            **{d: entry.hours(d) for d in WEEKDAYS},
        )

    def commit(self, person, year, iso_week, created_at=None) -> list:
        """Rows with hours, ready for the durable collection."""
        if not person:
            raise ValueError("Select a person before committing.")
        if self.week_total() > WEEKLY_CAP:
            raise ValueError(f"Reduce the week to {WEEKLY_CAP}h before committing.")
        created_at = created_at or utc_now_iso()
        return [
            self._row(idx, entry, person, year, iso_week, created_at)
            for idx, entry in enumerate(self.entries, start=1)
            if entry.total > 0
        ]

    def template_rows(self, person, year, iso_week) -> list:
        created_at = utc_now_iso()
        return [
            self._row(idx, entry, person or "", year, iso_week, created_at)
            for idx, entry in enumerate(self.entries, start=1)
        ]
