# app_state.py
"""
Session state shared by the entry view, the dashboard and the directory.
"""
import logging

import streamlit as st

from timesheet_collection import TimesheetCollection
from timesheet_config import load_settings, setup_logging
from timesheet_models import LookupKind, current_iso_week
from timesheet_store import StoreError, build_store
from weekly_cap import StagingArea


@st.cache_resource(show_spinner=False)
def get_settings():
    settings = load_settings()
    setup_logging(settings)
    return settings


@st.cache_resource(show_spinner=False)
def get_store():
    store = build_store(get_settings())
    if store is not None:
        store.init_schema()
    return store


def notify(message, icon=None):
    """Transient, non-blocking notice."""
    st.toast(message, icon=icon)


def report_failure(action, exc):
    # the cause goes to the log; the user only gets a short notice
    logging.error(f"{action} failed: {exc}")
    notify(f"{action} failed (see log).", icon="⚠️")


def load_lists():
    """Lookup names from the store; defaults stay when the store is empty or unreachable."""
    settings = get_settings()
    lists = {
        LookupKind.PEOPLE: list(settings.people),
        LookupKind.PROJECTS: list(settings.projects),
        LookupKind.BUSINESS_UNITS: list(settings.business_units),
    }
    try:
        store = get_store()
    except StoreError as e:
        report_failure("Connecting to the database", e)
        return lists
    if store is None:
        return lists
    for kind in lists:
        try:
            names = store.lookup_names(kind)
        except StoreError as e:
            logging.warning(f"Could not load {kind.value} from the store: {e}")
            continue
        if names:
            lists[kind] = names
    return lists


def refresh_lists():
    st.session_state["lists"] = load_lists()


def lookup_names(kind):
    return st.session_state["lists"][kind]


def init_state():
    if "lists" not in st.session_state:
        refresh_lists()
    year, week = current_iso_week()
    defaults = {
        "year": year,
        "iso_week": week,
        "collection": TimesheetCollection(),
        "db_filter": "",
        "sort_field": "created_at",
        "sort_desc": True,
        "preview_page": 1,
        "page_size": 10,
        "editing_id": None,
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value
    people = lookup_names(LookupKind.PEOPLE)
    if st.session_state.get("person") not in people:
        st.session_state["person"] = people[0] if people else ""
    if "staging" not in st.session_state:
        projects = lookup_names(LookupKind.PROJECTS)
        units = lookup_names(LookupKind.BUSINESS_UNITS)
        st.session_state["staging"] = StagingArea(
            default_business_unit=units[0] if units else "",
            default_project=projects[0] if projects else "",
        )
