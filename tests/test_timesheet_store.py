from datetime import datetime, timezone

import pytest

from conftest import make_row
from timesheet_config import Settings
from timesheet_models import LookupKind
from timesheet_store import DuplicateNameError, StoreError, TimesheetStore, build_store


def test_init_schema_is_idempotent(store):
    store.init_schema()
    assert store.fetch_week(2025, 32) == []


def test_upsert_and_fetch_week_newest_first(store):
    rows = [
        make_row(person="Alice", row_id="2025-32-Alice-1", created_at="2025-08-08T10:00:00+00:00"),
        make_row(person="Bruno", row_id="2025-32-Bruno-1", created_at="2025-08-09T10:00:00+00:00"),
        make_row(person="Carla", row_id="2025-33-Carla-1", iso_week=33),
    ]
    assert store.upsert_rows(rows) == 3

    week = store.fetch_week(2025, 32)
    assert [r.id for r in week] == ["2025-32-Bruno-1", "2025-32-Alice-1"]
    assert week[0].week_start == rows[1].week_start
    assert week[0].total == 8


def test_upsert_overwrites_same_id(store):
    store.upsert_rows([make_row(row_id="dup", hours=(8, 0, 0, 0, 0))])
    store.upsert_rows([make_row(row_id="dup", hours=(1, 1, 0, 0, 0), notes="second")])
    (row,) = store.fetch_week(2025, 32)
    assert row.total == 2
    assert row.notes == "second"


def test_upsert_nothing(store):
    assert store.upsert_rows([]) == 0


def test_fetch_recent_window_and_limit(store):
    store.upsert_rows([
        make_row(row_id="old", created_at="2024-01-01T00:00:00+00:00"),
        make_row(row_id="new-1", created_at="2025-08-01T00:00:00+00:00"),
        make_row(row_id="new-2", created_at="2025-08-02T00:00:00+00:00"),
    ])
    now = datetime(2025, 8, 10, tzinfo=timezone.utc)
    assert [r.id for r in store.fetch_recent(days=365, now=now)] == ["new-2", "new-1"]
    assert [r.id for r in store.fetch_recent(days=365, limit=1, now=now)] == ["new-2"]


def test_update_and_delete_row(store):
    row = make_row(row_id="r1")
    store.upsert_rows([row])
    assert store.update_row(row.with_changes(fri=6, notes="edited")) is True
    (stored,) = store.fetch_week(2025, 32)
    assert stored.total == 14
    assert stored.notes == "edited"
    assert store.delete_row("r1") is True
    assert store.delete_row("r1") is False
    assert store.fetch_week(2025, 32) == []


class TestLookups:
    def test_add_list_rename_delete(self, store):
        bruno = store.add_lookup(LookupKind.PEOPLE, "  Bruno ")
        store.add_lookup(LookupKind.PEOPLE, "Alice")
        assert store.lookup_names(LookupKind.PEOPLE) == ["Alice", "Bruno"]

        store.rename_lookup(LookupKind.PEOPLE, bruno.id, "Bruna")
        assert store.lookup_names(LookupKind.PEOPLE) == ["Alice", "Bruna"]

        assert store.delete_lookup(LookupKind.PEOPLE, bruno.id) is True
        assert store.lookup_names(LookupKind.PEOPLE) == ["Alice"]

    def test_names_are_unique_per_list(self, store):
        store.add_lookup(LookupKind.PROJECTS, "Brand Film")
        with pytest.raises(DuplicateNameError):
            store.add_lookup(LookupKind.PROJECTS, "Brand Film")
        # the same name may live in another list
        store.add_lookup(LookupKind.BUSINESS_UNITS, "Brand Film")

    def test_rename_to_existing_name(self, store):
        store.add_lookup(LookupKind.PROJECTS, "A")
        b = store.add_lookup(LookupKind.PROJECTS, "B")
        with pytest.raises(DuplicateNameError):
            store.rename_lookup(LookupKind.PROJECTS, b.id, "A")

    def test_rename_missing_item(self, store):
        with pytest.raises(StoreError):
            store.rename_lookup(LookupKind.PROJECTS, "missing", "X")

    def test_blank_names_rejected(self, store):
        with pytest.raises(ValueError):
            store.add_lookup(LookupKind.PEOPLE, "   ")

    def test_deleting_a_person_keeps_their_rows(self, store):
        alice = store.add_lookup(LookupKind.PEOPLE, "Alice")
        store.upsert_rows([make_row(person="Alice", row_id="r1")])
        store.delete_lookup(LookupKind.PEOPLE, alice.id)
        assert [r.person for r in store.fetch_week(2025, 32)] == ["Alice"]


def test_failures_surface_as_store_error(tmp_path):
    unready = TimesheetStore.from_url(f"sqlite:///{tmp_path / 'empty.db'}")
    with pytest.raises(StoreError):
        unready.fetch_week(2025, 32)


def test_build_store_without_url_is_none():
    assert build_store(Settings(database_url=None)) is None
    assert isinstance(build_store(Settings(database_url="sqlite://")), TimesheetStore)


def test_saving_an_edit_of_a_row_the_store_never_received(store):
    from timesheet_collection import TimesheetCollection

    # the commit reached the session table but not the database
    collection = TimesheetCollection([make_row(row_id="2025-32-Alice-1")])
    edited = collection.edited("2025-32-Alice-1", tue=4)
    assert store.update_row(edited) is False
    assert store.upsert_rows([edited]) == 1
    (row,) = store.fetch_week(2025, 32)
    assert row.total == 12
