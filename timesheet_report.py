#!/usr/bin/env python3
"""
Timesheet Report from Excel
---------------------------
Reads the 'Database' sheet of an exported timesheet workbook and writes the
dashboard aggregations to a new workbook.

Sheets written:
- ByPerson, ByProject, ByBusinessUnit: hours, distinct people and projects
- MonthlyProjects: share of each month's hours per project
- PersonWeekly (with --person): weekly totals for one person
- ProjectWeekly (with --project): weekly totals per person for one project

Usage:
    python timesheet_report.py --input Timesheet_Database_20250808_1200.xlsx --output timesheet_report.xlsx
    python timesheet_report.py --input export.xlsx --person "Alice Silva" --project "Brand Film"
"""
import sys
import argparse
from pathlib import Path

import pandas as pd

from dashboard_metrics import (
    by_total_desc,
    filter_rows,
    group_totals,
    monthly_project_proportion,
    weekly_series_by_person_for_project,
    weekly_series_for_person,
)
from timesheet_export import df_to_excel_bytes, read_database_sheet


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Aggregate an exported timesheet workbook into a report.")
    p.add_argument("--input", required=True, help="Exported workbook (.xlsx) with a 'Database' sheet")
    p.add_argument("--output", default="timesheet_report.xlsx", help="Output Excel file")
    p.add_argument("--person", default=None, help="Limit totals to one person and add a weekly series")
    p.add_argument("--project", default=None, help="Limit totals to one project and add per-person series")
    return p.parse_args(argv)


def groups_frame(groups) -> pd.DataFrame:
    return pd.DataFrame(
        [{"Name": g.name, "Hours": g.total, "People": g.people_count, "Projects": g.projects_count} for g in groups],
        columns=["Name", "Hours", "People", "Projects"],
    )


def monthly_frame(months) -> pd.DataFrame:
    records = [
        {"Month": m.month, "Project": p.name, "Hours": p.hours, "Share%": p.pct, "MonthTotal": m.total}
        for m in months
        for p in m.projects
    ]
    return pd.DataFrame(records, columns=["Month", "Project", "Hours", "Share%", "MonthTotal"])


def build_report(rows, person=None, project=None) -> dict:
    filtered = filter_rows(rows, person=person, project=project)
    sheets = {
        "ByPerson": groups_frame(by_total_desc(group_totals(filtered, "person"))),
        "ByProject": groups_frame(by_total_desc(group_totals(filtered, "project"))),
        "ByBusinessUnit": groups_frame(by_total_desc(group_totals(filtered, "business_unit"))),
        # monthly shares always cover the whole workbook, like the dashboard
        "MonthlyProjects": monthly_frame(monthly_project_proportion(rows)),
    }
    if person:
        points = weekly_series_for_person(rows, person)
        sheets["PersonWeekly"] = pd.DataFrame(
            [{"Week": p.label, "Hours": p.total} for p in points], columns=["Week", "Hours"]
        )
    if project:
        series = weekly_series_by_person_for_project(rows, project)
        labels = series[0].labels if series else []
        wide = pd.DataFrame([[s.person] + s.series + [s.total] for s in series], columns=["Person"] + labels + ["Total"])
        sheets["ProjectWeekly"] = wide
    return sheets


def main(argv=None):
    args = parse_args(argv)
    in_file = Path(args.input)
    if not in_file.exists():
        print(f"ERROR: Input file not found: {in_file}", file=sys.stderr)
        return 1

    try:
        rows = read_database_sheet(in_file)
    except ValueError as e:
        print(f"ERROR reading workbook: {e}", file=sys.stderr)
        return 2

    sheets = build_report(rows, person=args.person, project=args.project)
    Path(args.output).write_bytes(df_to_excel_bytes(sheets))

    print(f"Success! Wrote: {args.output}")
    print("Sheets: " + ", ".join(sheets))
    return 0


if __name__ == "__main__":
    sys.exit(main())
