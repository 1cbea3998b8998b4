# timesheet_models.py
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta, timezone
from enum import Enum

WEEKDAYS = ("mon", "tue", "wed", "thu", "fri")
DAY_LABELS = {"mon": "Mon", "tue": "Tue", "wed": "Wed", "thu": "Thu", "fri": "Fri"}
EMPTY_NAME = "—"
DAY_CAP = 24

RECORD_FIELDS = [
    "id", "year", "iso_week", "week_start", "person", "project", "business_unit",
    "mon", "tue", "wed", "thu", "fri", "sat", "sun", "total", "notes", "created_at",
]


class LookupKind(Enum):
    PEOPLE = "people"
    PROJECTS = "projects"
    BUSINESS_UNITS = "business_units"

    @property
    def label(self):
        return {"people": "People", "projects": "Projects", "business_units": "Business Units"}[self.value]


@dataclass
class LookupItem:
    id: str
    name: str


# -----------------------
# COERCION
# -----------------------
def to_int_hours(value) -> int:
    """Integer hours from whatever a form, a sheet or a database hands us; blanks are 0."""
    if value is None or value == "":
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if number != number or number in (float("inf"), float("-inf")):
        return 0
    return int(number)


def day_hours(value) -> int:
    return max(0, min(DAY_CAP, to_int_hours(value)))


def parse_date(value):
    if value is None or value == "" or value != value:  # NaN / NaT
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    # pandas.Timestamp and friends
    if hasattr(value, "to_pydatetime"):
        try:
            return value.to_pydatetime().date()
        except (ValueError, TypeError):
            return None
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


# -----------------------
# ISO WEEKS
# -----------------------
def iso_week_bounds(year: int, iso_week: int):
    # week numbers past the year's last ISO week roll into the next year
    monday = date.fromisocalendar(year, 1, 1) + timedelta(weeks=iso_week - 1)
    return monday, monday + timedelta(days=6)


def current_iso_week(today=None):
    today = today or date.today()
    iso = today.isocalendar()
    return iso[0], iso[1]


def make_row_id(year, iso_week, person, index) -> str:
    return f"{year}-{int(iso_week):02d}-{person}-{index}"


def week_label(key) -> str:
    year, iso_week = key
    return f"{int(year):04d}-W{int(iso_week):02d}"


# -----------------------
# ROW
# -----------------------
@dataclass
class TimesheetRow:
    id: str
    person: str = ""
    project: str = ""
    business_unit: str = ""
    year: int = 0
    iso_week: int = 0
    week_start: date | None = None
    mon: int = 0
    tue: int = 0
    wed: int = 0
    thu: int = 0
    fri: int = 0
    sat: int = 0
    sun: int = 0
    notes: str = ""
    created_at: str = field(default_factory=utc_now_iso)

    @property
    def total(self) -> int:
        return self.mon + self.tue + self.wed + self.thu + self.fri

    @property
    def week_key(self):
        return (self.year, self.iso_week)

    @property
    def month_key(self) -> str:
        if self.week_start is not None:
            return f"{self.week_start.year:04d}-{self.week_start.month:02d}"
        return f"{self.year}-01"

    def days(self) -> dict:
        return {d: getattr(self, d) for d in WEEKDAYS}

    def with_changes(self, **changes) -> "TimesheetRow":
        return replace(self, **changes)

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "year": self.year,
            "iso_week": self.iso_week,
            "week_start": self.week_start.isoformat() if self.week_start else None,
            "person": self.person,
            "project": self.project,
            "business_unit": self.business_unit,
            "mon": self.mon,
            "tue": self.tue,
            "wed": self.wed,
            "thu": self.thu,
            "fri": self.fri,
            "sat": self.sat,
            "sun": self.sun,
            "total": self.total,
            "notes": self.notes,
            "created_at": self.created_at,
        }

    @classmethod
    def from_record(cls, record: dict) -> "TimesheetRow":
        # a stored "total" is ignored; it is always derived from the weekdays,
        # and each weekday is held to [0, DAY_CAP]
        def text(key):
            value = record.get(key)
            if value is None or value != value:
                return ""
            return str(value).strip()

        created = record.get("created_at")
        if isinstance(created, datetime) and created == created:
            created = created.isoformat(timespec="seconds")
        else:
            created = text("created_at")
        return cls(
            id=text("id"),
            person=text("person"),
            project=text("project"),
            business_unit=text("business_unit"),
            year=to_int_hours(record.get("year")),
            iso_week=to_int_hours(record.get("iso_week")),
            week_start=parse_date(record.get("week_start")),
            mon=day_hours(record.get("mon")),
            tue=day_hours(record.get("tue")),
            wed=day_hours(record.get("wed")),
            thu=day_hours(record.get("thu")),
            fri=day_hours(record.get("fri")),
            sat=0,
            sun=0,
            notes=text("notes"),
            created_at=created or utc_now_iso(),
        )
