# timesheet_collection.py
import math

from timesheet_models import WEEKDAYS, TimesheetRow, day_hours, parse_date

PAGE_SIZES = (10, 20, 50)
SORT_FIELDS = (
    "id", "year", "iso_week", "week_start", "person", "project", "business_unit",
    "mon", "tue", "wed", "thu", "fri", "total", "notes", "created_at",
)
EDITABLE_FIELDS = ("person", "project", "business_unit", "notes") + WEEKDAYS


def _sort_value(row, name):
    value = getattr(row, name)
    if value is None or value == "":
        return None
    return value


class TimesheetCollection:
    """Committed rows held in memory; the source for the dashboard, export and sync."""

    def __init__(self, rows=None):
        self._rows = list(rows or [])

    def __len__(self):
        return len(self._rows)

    def __iter__(self):
        return iter(self._rows)

    @property
    def rows(self) -> list:
        return list(self._rows)

    def get(self, row_id):
        for row in self._rows:
            if row.id == row_id:
                return row
        return None

    def extend(self, rows):
        # same ID replaces in place, like the store upsert
        index = {r.id: i for i, r in enumerate(self._rows)}
        for row in rows:
            if row.id in index:
                self._rows[index[row.id]] = row
            else:
                index[row.id] = len(self._rows)
                self._rows.append(row)

    def replace(self, rows):
        self._rows = list(rows)

    def clear(self):
        self._rows = []

    def delete(self, row_id) -> bool:
        before = len(self._rows)
        self._rows = [r for r in self._rows if r.id != row_id]
        return len(self._rows) != before

    def edited(self, row_id, **changes) -> TimesheetRow:
        """The row as it would look after `changes`, without storing it."""
        unknown = set(changes) - set(EDITABLE_FIELDS) - {"week_start"}
        if unknown:
            raise ValueError(f"Fields are not editable: {sorted(unknown)}")
        clean = {}
        for name, value in changes.items():
            if name in WEEKDAYS:
                clean[name] = day_hours(value)
            elif name == "week_start":
                clean[name] = parse_date(value)
            else:
                clean[name] = "" if value is None else str(value)
        row = self.get(row_id)
        if row is None:
            raise KeyError(row_id)
        return row.with_changes(**clean)

    def update(self, row_id, **changes) -> TimesheetRow:
        # Direct edits of committed rows do not re-run the weekly cap;
        # only the staging flow enforces it.
        new_row = self.edited(row_id, **changes)
        self._rows = [new_row if r.id == row_id else r for r in self._rows]
        return new_row

    # -----------------------
    # PREVIEW HELPERS
    # -----------------------
    def search(self, text) -> list:
        if not text:
            return self.rows
        needle = text.lower()
        return [
            r for r in self._rows
            if needle in r.person.lower()
            or needle in r.project.lower()
            or needle in r.business_unit.lower()
            or needle in r.id.lower()
        ]

    def persons(self) -> list:
        return sorted({r.person for r in self._rows if r.person})

    def projects(self) -> list:
        return sorted({r.project for r in self._rows if r.project})


def sorted_rows(rows, field="created_at", descending=True) -> list:
    if field not in SORT_FIELDS:
        raise ValueError(f"Cannot sort by {field}")
    missing = [r for r in rows if _sort_value(r, field) is None]
    present = [r for r in rows if _sort_value(r, field) is not None]
    if all(isinstance(_sort_value(r, field), (int, float)) for r in present):
        present.sort(key=lambda r: _sort_value(r, field))
    else:
        present.sort(key=lambda r: str(_sort_value(r, field)))
    ordered = missing + present
    if descending:
        ordered.reverse()
    return ordered


def page(rows, page_number=1, page_size=10):
    """Slice for one preview page; the page number is clamped into range."""
    total_pages = max(1, math.ceil(len(rows) / page_size))
    current = min(max(1, page_number), total_pages)
    start = (current - 1) * page_size
    return rows[start:start + page_size], current, total_pages
