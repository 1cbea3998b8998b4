import streamlit as st

st.set_page_config(page_title="Timesheet Directory", page_icon="👥", layout="wide")

from app_state import get_store, init_state, notify, refresh_lists, report_failure
from timesheet_models import LookupKind
from timesheet_store import DuplicateNameError, StoreError

init_state()
store = get_store()

st.title("👥 Directory")
st.caption("People, projects and business units offered in the entry view. "
           "Renaming or deleting here does not change rows already saved.")

if store is None:
    st.warning("Database not configured (set TS_DATABASE_URL). The directory is read-only and the default lists are in use.")


def _changed(message):
    refresh_lists()
    notify(message)


def add_item(kind):
    key = f"new-{kind.value}"
    try:
        item = store.add_lookup(kind, st.session_state[key])
    except ValueError:
        return
    except DuplicateNameError:
        notify(f"That name already exists in {kind.label.lower()}.", icon="⚠️")
        return
    except StoreError as e:
        report_failure(f"Adding to {kind.label.lower()}", e)
        return
    st.session_state[key] = ""
    _changed(f"Added {item.name}.")


def rename_item(kind, item):
    new_name = st.session_state[f"rename-{item.id}"].strip()
    if not new_name or new_name == item.name:
        return
    try:
        store.rename_lookup(kind, item.id, new_name)
    except DuplicateNameError:
        notify(f"That name already exists in {kind.label.lower()}.", icon="⚠️")
        return
    except StoreError as e:
        report_failure(f"Renaming in {kind.label.lower()}", e)
        return
    _changed(f"Renamed {item.name} to {new_name}.")


def delete_item(kind, item):
    try:
        store.delete_lookup(kind, item.id)
    except StoreError as e:
        report_failure(f"Deleting from {kind.label.lower()}", e)
        return
    _changed(f"Deleted {item.name}.")


def section(kind):
    st.subheader(kind.label)
    disabled = store is None
    if disabled:
        items = []
    else:
        try:
            items = store.list_lookup(kind)
        except StoreError as e:
            st.error(f"Could not load {kind.label.lower()}.")
            report_failure(f"Loading {kind.label.lower()}", e)
            items = []

    needle = st.text_input("Filter", key=f"filter-{kind.value}").strip().lower()
    if needle:
        items = [it for it in items if needle in it.name.lower()]

    a1, a2 = st.columns([4, 1])
    a1.text_input("New name", key=f"new-{kind.value}", disabled=disabled, label_visibility="collapsed",
                  placeholder=f"Add to {kind.label.lower()}")
    a2.button("Add", key=f"add-{kind.value}", on_click=add_item, args=(kind,), disabled=disabled,
              use_container_width=True)

    if not items:
        st.caption("No items.")
    for item in items:
        r1, r2, r3 = st.columns([4, 1, 1])
        r1.text_input("Name", value=item.name, key=f"rename-{item.id}", label_visibility="collapsed", disabled=disabled)
        r2.button("💾", key=f"save-{item.id}", help="Rename", on_click=rename_item, args=(kind, item), disabled=disabled)
        r3.button("🗑️", key=f"del-{item.id}", help="Delete", on_click=delete_item, args=(kind, item), disabled=disabled)


for kind in LookupKind:
    with st.container(border=True):
        section(kind)
