# timesheet_db_init.py
import sys

from timesheet_config import load_settings, setup_logging
from timesheet_store import StoreError, build_store


def main():
    settings = load_settings()
    setup_logging(settings)
    store = build_store(settings)
    if store is None:
        print("ERROR: set TS_DATABASE_URL before initializing the schema", file=sys.stderr)
        return 1
    try:
        store.init_schema()
    except StoreError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    print(f"Initialized DB at {settings.database_url}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
