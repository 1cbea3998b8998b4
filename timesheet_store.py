# timesheet_store.py
import uuid
import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import create_engine, text
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from timesheet_models import LookupItem, LookupKind, TimesheetRow, utc_now_iso

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS timesheet_entries (
    id TEXT PRIMARY KEY,
    person TEXT NOT NULL,
    project TEXT NOT NULL,
    business_unit TEXT NOT NULL,
    year INTEGER NOT NULL,
    iso_week INTEGER NOT NULL,
    week_start TEXT,              -- YYYY-MM-DD, Monday of the ISO week
    mon INTEGER DEFAULT 0,
    tue INTEGER DEFAULT 0,
    wed INTEGER DEFAULT 0,
    thu INTEGER DEFAULT 0,
    fri INTEGER DEFAULT 0,
    sat INTEGER DEFAULT 0,
    sun INTEGER DEFAULT 0,
    total INTEGER DEFAULT 0,
    notes TEXT DEFAULT '',
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_timesheet_entries_year_week ON timesheet_entries(year, iso_week);
CREATE INDEX IF NOT EXISTS idx_timesheet_entries_created_at ON timesheet_entries(created_at);
CREATE TABLE IF NOT EXISTS people (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,
    created_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS projects (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,
    created_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS business_units (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,
    created_at TEXT NOT NULL
);
"""

ENTRY_COLUMNS = [
    "id", "person", "project", "business_unit", "year", "iso_week", "week_start",
    "mon", "tue", "wed", "thu", "fri", "sat", "sun", "total", "notes", "created_at",
]

UPSERT_SQL = (
    f"INSERT INTO timesheet_entries ({', '.join(ENTRY_COLUMNS)}) "
    f"VALUES ({', '.join(':' + c for c in ENTRY_COLUMNS)}) "
    "ON CONFLICT (id) DO UPDATE SET "
    + ", ".join(f"{c} = excluded.{c}" for c in ENTRY_COLUMNS if c != "id")
)

UPDATE_SQL = (
    "UPDATE timesheet_entries SET "
    + ", ".join(f"{c} = :{c}" for c in ENTRY_COLUMNS if c != "id")
    + " WHERE id = :id"
)


class StoreError(RuntimeError):
    """A call to the table store failed."""


class DuplicateNameError(StoreError):
    pass


def _row_params(row: TimesheetRow) -> dict:
    params = row.to_record()
    params["total"] = row.total
    return params


class TimesheetStore:
    def __init__(self, engine, attempts=1):
        self.engine = engine
        self.attempts = max(1, int(attempts))

    @classmethod
    def from_url(cls, url, attempts=1):
        if url.startswith("postgres://"):
            url = "postgresql://" + url[len("postgres://"):]
        engine = create_engine(url, pool_pre_ping=True, future=True)
        return cls(engine, attempts=attempts)

    def _run(self, action, fn, unique_name=False):
        retrying = Retrying(
            retry=retry_if_exception_type(OperationalError),
            wait=wait_exponential(multiplier=1, min=1, max=5),
            stop=stop_after_attempt(self.attempts),
            reraise=True,
        )
        try:
            return retrying(fn)
        except IntegrityError as e:
            if not unique_name:
                logger.exception(f"{action} failed")
                raise StoreError(f"{action} failed: {e.orig}") from e
            logger.warning(f"{action} rejected by the store: {e.orig}")
            raise DuplicateNameError(f"{action} failed: name already exists") from e
        except SQLAlchemyError as e:
            logger.exception(f"{action} failed")
            raise StoreError(f"{action} failed: {e}") from e

    # -----------------------
    # SCHEMA
    # -----------------------
    def init_schema(self):
        def _init():
            with self.engine.begin() as conn:
                for stmt in SCHEMA.strip().split(";"):
                    if stmt.strip():
                        conn.execute(text(stmt))
        self._run("Schema init", _init)
        logger.info("Timesheet schema ready")

    # -----------------------
    # TIMESHEET ROWS
    # -----------------------
    def upsert_rows(self, rows) -> int:
        rows = list(rows)
        if not rows:
            return 0

        def _upsert():
            with self.engine.begin() as conn:
                conn.execute(text(UPSERT_SQL), [_row_params(r) for r in rows])
        self._run("Save rows", _upsert)
        logger.info(f"Upserted {len(rows)} timesheet row(s)")
        return len(rows)

    def _select(self, action, where, params, limit=None):
        q = f"SELECT {', '.join(ENTRY_COLUMNS)} FROM timesheet_entries WHERE {where} ORDER BY created_at DESC"
        if limit:
            q += " LIMIT :limit"
            params = dict(params, limit=int(limit))

        def _fetch():
            with self.engine.connect() as conn:
                return [dict(m) for m in conn.execute(text(q), params).mappings()]
        return [TimesheetRow.from_record(r) for r in self._run(action, _fetch)]

    def fetch_week(self, year, iso_week) -> list:
        return self._select(
            "Load week",
            "year = :year AND iso_week = :iso_week",
            {"year": int(year), "iso_week": int(iso_week)},
        )

    def fetch_recent(self, days=365, limit=2000, now=None) -> list:
        now = now or datetime.now(timezone.utc)
        since = (now - timedelta(days=days)).isoformat(timespec="seconds")
        return self._select("Load recent rows", "created_at >= :since", {"since": since}, limit=limit)

    def update_row(self, row: TimesheetRow) -> bool:
        def _update():
            with self.engine.begin() as conn:
                return conn.execute(text(UPDATE_SQL), _row_params(row)).rowcount
        return bool(self._run("Update row", _update))

    def delete_row(self, row_id) -> bool:
        def _delete():
            with self.engine.begin() as conn:
                return conn.execute(text("DELETE FROM timesheet_entries WHERE id = :id"), {"id": row_id}).rowcount
        return bool(self._run("Delete row", _delete))

    # -----------------------
    # LOOKUP LISTS
    # -----------------------
    def list_lookup(self, kind: LookupKind) -> list:
        def _list():
            with self.engine.connect() as conn:
                result = conn.execute(text(f"SELECT id, name FROM {kind.value} ORDER BY name"))
                return [LookupItem(id=str(r.id), name=r.name) for r in result]
        return self._run(f"Load {kind.value}", _list)

    def lookup_names(self, kind: LookupKind) -> list:
        return [item.name for item in self.list_lookup(kind) if item.name]

    def add_lookup(self, kind: LookupKind, name) -> LookupItem:
        name = (name or "").strip()
        if not name:
            raise ValueError("Name must not be blank")
        item = LookupItem(id=str(uuid.uuid4()), name=name)

        def _add():
            with self.engine.begin() as conn:
                conn.execute(
                    text(f"INSERT INTO {kind.value} (id, name, created_at) VALUES (:id, :name, :created_at)"),
                    {"id": item.id, "name": item.name, "created_at": utc_now_iso()},
                )
        self._run(f"Add to {kind.value}", _add, unique_name=True)
        return item

    def rename_lookup(self, kind: LookupKind, item_id, name) -> LookupItem:
        name = (name or "").strip()
        if not name:
            raise ValueError("Name must not be blank")

        def _rename():
            with self.engine.begin() as conn:
                return conn.execute(
                    text(f"UPDATE {kind.value} SET name = :name WHERE id = :id"),
                    {"id": item_id, "name": name},
                ).rowcount
        if not self._run(f"Rename in {kind.value}", _rename, unique_name=True):
            raise StoreError(f"No {kind.value} entry with id {item_id}")
        return LookupItem(id=item_id, name=name)

    def delete_lookup(self, kind: LookupKind, item_id) -> bool:
        # rows keep their text values; there is no cascade
        def _delete():
            with self.engine.begin() as conn:
                return conn.execute(text(f"DELETE FROM {kind.value} WHERE id = :id"), {"id": item_id}).rowcount
        return bool(self._run(f"Delete from {kind.value}", _delete))


def build_store(settings):
    if not settings.store_configured:
        logger.warning("TS_DATABASE_URL is not set; rows stay in memory only")
        return None
    return TimesheetStore.from_url(settings.database_url, attempts=settings.db_attempts)
