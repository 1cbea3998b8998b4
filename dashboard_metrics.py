# dashboard_metrics.py
"""
Aggregations behind the dashboard.

Every function takes a snapshot of TimesheetRow objects plus explicit
filters and returns fresh values; nothing here raises on odd input or keeps
state between calls. Hours are integers; percentages use half-up rounding.
"""
import math
from dataclasses import dataclass, field

from timesheet_models import EMPTY_NAME, week_label

DIMENSIONS = ("person", "project", "business_unit")


@dataclass
class GroupTotal:
    name: str
    total: int = 0
    people_count: int = 0
    projects_count: int = 0


@dataclass
class WeekPoint:
    key: tuple
    label: str
    total: int


@dataclass
class PersonSeries:
    person: str
    series: list
    total: int
    labels: list


@dataclass
class ProjectShare:
    name: str
    hours: int
    pct: int


@dataclass
class MonthBreakdown:
    month: str
    total: int
    projects: list = field(default_factory=list)


def round_half_up(value) -> int:
    return int(math.floor(value + 0.5))


def _name(value) -> str:
    return value if value else EMPTY_NAME


def _week_sort_key(row) -> str:
    # Chronological by Monday; rows without a usable date fall back to the label
    if row.week_start is not None:
        return row.week_start.isoformat()
    return week_label(row.week_key)


def _keep_order(order, key, row):
    # a dated row fixes the week position; undated rows only fill a gap
    if key not in order or row.week_start is not None:
        order[key] = _week_sort_key(row)


def filter_rows(rows, person=None, project=None) -> list:
    out = list(rows or [])
    if person:
        out = [r for r in out if r.person == person]
    if project:
        out = [r for r in out if r.project == project]
    return out


def group_totals(rows, dimension) -> list:
    """Totals per person, project or business unit, in first-seen order."""
    if dimension not in DIMENSIONS:
        return []
    groups = {}
    people = {}
    projects = {}
    for r in rows or []:
        name = _name(getattr(r, dimension, ""))
        agg = groups.setdefault(name, GroupTotal(name=name))
        agg.total += r.total
        people.setdefault(name, set())
        projects.setdefault(name, set())
        if r.person:
            people[name].add(r.person)
        if r.project:
            projects[name].add(r.project)
    for name, agg in groups.items():
        agg.people_count = len(people[name])
        agg.projects_count = len(projects[name])
    return list(groups.values())


def by_total_desc(groups) -> list:
    return sorted(groups, key=lambda g: g.total, reverse=True)


def weekly_series_for_person(rows, person) -> list:
    totals = {}
    order = {}
    for r in rows or []:
        if r.person != person:
            continue
        key = r.week_key
        totals[key] = totals.get(key, 0) + r.total
        _keep_order(order, key, r)
    keys = sorted(totals, key=lambda k: order[k])
    return [WeekPoint(key=k, label=week_label(k), total=totals[k]) for k in keys]


def weekly_series_by_person_for_project(rows, project) -> list:
    """One zero-filled weekly series per person who logged hours on `project`."""
    per_person = {}
    order = {}
    for r in rows or []:
        if r.project != project:
            continue
        key = r.week_key
        _keep_order(order, key, r)
        weeks = per_person.setdefault(_name(r.person), {})
        weeks[key] = weeks.get(key, 0) + r.total

    week_keys = sorted(order, key=lambda k: order[k])
    labels = [week_label(k) for k in week_keys]
    out = []
    for person, weeks in per_person.items():
        series = [weeks.get(k, 0) for k in week_keys]
        out.append(PersonSeries(person=person, series=series, total=sum(series), labels=list(labels)))
    return sorted(out, key=lambda s: s.total, reverse=True)


def monthly_project_proportion(rows) -> list:
    month_totals = {}
    month_projects = {}
    for r in rows or []:
        month = r.month_key
        month_totals[month] = month_totals.get(month, 0) + r.total
        hours = month_projects.setdefault(month, {})
        name = _name(r.project)
        hours[name] = hours.get(name, 0) + r.total

    out = []
    for month in sorted(month_totals):
        total = month_totals[month]
        shares = [
            ProjectShare(name=name, hours=h, pct=round_half_up(h / total * 100) if total else 0)
            for name, h in month_projects[month].items()
        ]
        shares.sort(key=lambda s: s.hours, reverse=True)
        out.append(MonthBreakdown(month=month, total=total, projects=shares))
    return out


def bar_widths(values) -> list:
    """Bar lengths in percent of the largest value (never divides by zero)."""
    values = list(values)
    top = max([1] + values)
    return [round_half_up(v / top * 100) for v in values]
