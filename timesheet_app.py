import streamlit as st

st.set_page_config(page_title="Timesheet", page_icon="🗓️", layout="wide")

from app_state import get_settings, get_store, init_state, lookup_names, notify, report_failure
from timesheet_collection import PAGE_SIZES, SORT_FIELDS, page, sorted_rows
from timesheet_export import (
    XLSX_MIME,
    database_filename,
    placeholder_row,
    rows_to_frame,
    template_filename,
    workbook_bytes,
)
from timesheet_models import DAY_LABELS, WEEKDAYS, LookupKind, current_iso_week, iso_week_bounds
from timesheet_store import StoreError
from weekly_cap import DAY_CAP, WEEKLY_CAP

init_state()
settings = get_settings()
store = get_store()
staging = st.session_state["staging"]
collection = st.session_state["collection"]

people = lookup_names(LookupKind.PEOPLE)
projects = lookup_names(LookupKind.PROJECTS)
units = lookup_names(LookupKind.BUSINESS_UNITS)


# -----------------------
# CALLBACKS
# -----------------------
def _cell_key(entry_id, day):
    return f"cell-{entry_id}-{day}"


def on_day_change(entry_id, day):
    key = _cell_key(entry_id, day)
    result = staging.set_day(entry_id, day, st.session_state[key])
    st.session_state[key] = result.value
    if result.capped:
        notify(f"Weekly limit of {WEEKLY_CAP}h reached.", icon="⏱️")


def on_field_change(entry_id, name):
    staging.set_field(entry_id, name, st.session_state[f"{name}-{entry_id}"])


def on_remove(entry_id):
    if not staging.remove_entry(entry_id):
        notify("The last row cannot be removed.")


def commit_week():
    person = st.session_state["person"]
    year, week = st.session_state["year"], st.session_state["iso_week"]
    try:
        rows = staging.commit(person, year, week)
    except ValueError as e:
        notify(str(e))
        return
    collection.extend(rows)
    if store is not None and rows:
        try:
            store.upsert_rows(rows)
            notify(f"{len(rows)} row(s) saved to the database.")
        except StoreError as e:
            report_failure("Saving to the database", e)
    else:
        notify(f"{len(rows)} row(s) added to the local table.")


def load_week():
    try:
        rows = store.fetch_week(st.session_state["year"], st.session_state["iso_week"])
    except StoreError as e:
        report_failure("Loading the week", e)
        return
    collection.replace(rows)
    st.session_state["preview_page"] = 1
    notify(f"Loaded {len(rows)} row(s) from the database.")


def load_recent():
    try:
        rows = store.fetch_recent(days=settings.recent_days, limit=settings.recent_limit)
    except StoreError as e:
        report_failure("Loading the last year", e)
        return
    collection.replace(rows)
    st.session_state["preview_page"] = 1
    notify(f"Loaded {len(rows)} row(s) from the last {settings.recent_days} days.")


def delete_row(row_id):
    try:
        if store is not None:
            store.delete_row(row_id)
    except StoreError as e:
        report_failure("Removing the row", e)
        return
    collection.delete(row_id)
    st.session_state["editing_id"] = None
    notify("Row removed.")


def save_edit(row_id, changes):
    # edits of committed rows are not checked against the weekly cap
    try:
        if store is not None:
            # upsert: the row may never have reached the store if its commit failed
            store.upsert_rows([collection.edited(row_id, **changes)])
    except StoreError as e:
        report_failure("Updating the row", e)
        return
    collection.update(row_id, **changes)
    st.session_state["editing_id"] = None
    notify("Row updated.")


# -----------------------
# SIDEBAR
# -----------------------
with st.sidebar:
    st.header("⚙️ Controls")
    st.selectbox("Person", people, key="person")
    this_year = current_iso_week()[0]
    st.selectbox("Year", list(range(this_year - 2, this_year + 4)), key="year")
    st.selectbox("ISO week", list(range(1, 54)), key="iso_week", format_func=lambda w: f"Week {w:02d}")

    st.divider()
    if store is None:
        st.warning("Database not configured (set TS_DATABASE_URL). Rows stay in this session.")
    else:
        st.caption("Database connected")
        c1, c2 = st.columns(2)
        c1.button("🔄 Load week", on_click=load_week, use_container_width=True)
        c2.button("📅 Load year", on_click=load_recent, use_container_width=True)

    st.divider()
    st.subheader("Export")
    year, week = st.session_state["year"], st.session_state["iso_week"]
    monday, sunday = iso_week_bounds(year, week)
    st.download_button(
        "⬇️ Database (Excel)",
        data=workbook_bytes(collection, people, projects, units, placeholder=placeholder_row(year, week, monday)),
        file_name=database_filename(),
        mime=XLSX_MIME,
        use_container_width=True,
    )
    template = staging.template_rows(st.session_state["person"], year, week)
    st.download_button(
        "⬇️ Pre-filled template",
        data=workbook_bytes(template, people, projects, units,
                            placeholder=placeholder_row(year, week, monday, st.session_state["person"])),
        file_name=template_filename(year, week),
        mime=XLSX_MIME,
        use_container_width=True,
    )

# -----------------------
# HEADER
# -----------------------
st.title("🗓️ Timesheet — Weekly Hours")
week_total = staging.week_total()
m1, m2, m3 = st.columns(3)
m1.metric("Person", st.session_state["person"] or "—")
m2.metric("Week", f"{monday:%d/%m} – {sunday:%d/%m/%Y}")
m3.metric("Total", f"{week_total}h / {WEEKLY_CAP}h")
if week_total > WEEKLY_CAP:
    st.error(f"Reduce the week to {WEEKLY_CAP}h before saving.")

# -----------------------
# STAGING GRID
# -----------------------
st.subheader("📝 Entries")
widths = [3, 4] + [1] * len(WEEKDAYS) + [1, 3, 1, 1]
header = st.columns(widths)
for col, title in zip(header, ["Business unit", "Project"] + [DAY_LABELS[d] for d in WEEKDAYS] + ["Total", "Notes", "", ""]):
    col.markdown(f"**{title}**")

for entry in list(staging.entries):
    cols = st.columns(widths)
    for col, name, options in ((cols[0], "business_unit", units), (cols[1], "project", projects)):
        key = f"{name}-{entry.id}"
        if getattr(entry, name) not in options and options:
            staging.set_field(entry.id, name, options[0])
        if key not in st.session_state or st.session_state[key] not in options:
            st.session_state[key] = getattr(entry, name)
        col.selectbox(name, options, key=key, on_change=on_field_change, args=(entry.id, name),
                      label_visibility="collapsed")
    for offset, day in enumerate(WEEKDAYS):
        key = _cell_key(entry.id, day)
        if key not in st.session_state:
            st.session_state[key] = getattr(entry, day)
        cols[2 + offset].number_input(
            day, min_value=0, max_value=DAY_CAP, step=1, key=key, placeholder="0",
            on_change=on_day_change, args=(entry.id, day), label_visibility="collapsed",
        )
    cols[7].markdown(f"**{entry.total}h**")
    notes_key = f"notes-{entry.id}"
    if notes_key not in st.session_state:
        st.session_state[notes_key] = entry.notes
    cols[8].text_input("notes", key=notes_key, on_change=on_field_change, args=(entry.id, "notes"),
                       placeholder="Optional notes", label_visibility="collapsed")
    cols[9].button("📄", key=f"dup-{entry.id}", help="Duplicate row", on_click=staging.duplicate_entry, args=(entry.id,))
    cols[10].button("🗑️", key=f"rm-{entry.id}", help="Remove row", on_click=on_remove, args=(entry.id,))

day_totals = staging.day_totals()
totals = st.columns(widths)
totals[1].markdown("**Daily totals**")
for offset, day in enumerate(WEEKDAYS):
    totals[2 + offset].markdown(f"{day_totals[day]}h")
totals[7].markdown(f"**{week_total}h**")

b1, b2, b3 = st.columns(3)
b1.button("＋ Add row", on_click=staging.add_entry, use_container_width=True)
b2.button("🧹 Clear", on_click=staging.clear, use_container_width=True)
b3.button("⤴️ Add to table", on_click=commit_week, type="primary", use_container_width=True,
          disabled=not st.session_state["person"] or week_total > WEEKLY_CAP)

# -----------------------
# TABLE PREVIEW
# -----------------------
st.subheader("📋 Table preview")
f1, f2, f3, f4, f5 = st.columns([4, 2, 2, 1, 1])
f1.text_input("Filter", key="db_filter", placeholder="Person, project, business unit or ID")
f2.selectbox("Sort by", SORT_FIELDS, key="sort_field")
f3.selectbox("Rows per page", PAGE_SIZES, key="page_size")
f4.checkbox("Descending", key="sort_desc")
f5.button("🧹 Clear", on_click=collection.clear, help="Clears the local table only")

matches = sorted_rows(collection.search(st.session_state["db_filter"]),
                      st.session_state["sort_field"], st.session_state["sort_desc"])
st.caption(f"{len(collection)} row(s)" + (f" ({len(matches)} filtered)" if len(matches) != len(collection) else ""))

_, _, total_pages = page(matches, 1, st.session_state["page_size"])
st.session_state["preview_page"] = min(st.session_state["preview_page"], total_pages)
st.number_input("Page", min_value=1, max_value=total_pages, step=1, key="preview_page")
paged, current, total_pages = page(matches, st.session_state["preview_page"], st.session_state["page_size"])
if not paged:
    st.info("No rows yet. Add the week above or load it from the database.")
else:
    st.dataframe(rows_to_frame(paged), use_container_width=True, hide_index=True)
    st.caption(f"Page {current} of {total_pages}")

    row_ids = [r.id for r in paged]
    if st.session_state.get("selected_row") not in row_ids:
        st.session_state.pop("selected_row", None)
    e1, e2, e3 = st.columns([4, 1, 1])
    selected = e1.selectbox("Row", row_ids, key="selected_row")
    if e2.button("✏️ Edit", use_container_width=True):
        st.session_state["editing_id"] = selected
    e3.button("🗑️ Delete", on_click=delete_row, args=(selected,), use_container_width=True)

    editing = collection.get(st.session_state["editing_id"]) if st.session_state["editing_id"] else None
    if editing is not None:
        with st.form("edit_row_form"):
            st.write(f"Editing `{editing.id}`")
            c1, c2, c3 = st.columns(3)
            person = c1.text_input("Person", value=editing.person)
            project = c2.text_input("Project", value=editing.project)
            unit = c3.text_input("Business unit", value=editing.business_unit)
            day_cols = st.columns(len(WEEKDAYS))
            days = {
                d: day_cols[i].number_input(DAY_LABELS[d], min_value=0, max_value=DAY_CAP, step=1, value=getattr(editing, d))
                for i, d in enumerate(WEEKDAYS)
            }
            notes = st.text_input("Notes", value=editing.notes)
            s1, s2 = st.columns(2)
            if s1.form_submit_button("💾 Save"):
                save_edit(editing.id, dict(person=person, project=project, business_unit=unit, notes=notes, **days))
                st.rerun()
            if s2.form_submit_button("↩️ Cancel"):
                st.session_state["editing_id"] = None
                st.rerun()
