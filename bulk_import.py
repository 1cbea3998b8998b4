# bulk_import.py
import sys
import logging
import argparse

from timesheet_config import load_settings, setup_logging
from timesheet_export import read_database_sheet
from timesheet_store import StoreError, build_store


def import_excel(path: str, store) -> int:
    rows = read_database_sheet(path)
    # only rows with hours are persisted; a blank template imports nothing
    kept = [r for r in rows if r.total > 0]
    if len(kept) != len(rows):
        logging.info(f"Skipped {len(rows) - len(kept)} row(s) without hours from {path}")
    return store.upsert_rows(kept)


def main(argv=None):
    ap = argparse.ArgumentParser(description="Bulk import timesheet rows from an exported Excel workbook")
    ap.add_argument("excel_path", help="Path to a workbook with a 'Database' sheet")
    args = ap.parse_args(argv)

    settings = load_settings()
    setup_logging(settings)
    store = build_store(settings)
    if store is None:
        print("ERROR: set TS_DATABASE_URL to the target database", file=sys.stderr)
        return 1

    try:
        store.init_schema()
        count = import_excel(args.excel_path, store)
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    except (OSError, StoreError) as e:
        logging.error(f"Import failed: {e}")
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    print(f"Imported {count} rows into {settings.database_url}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
