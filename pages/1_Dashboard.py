import pandas as pd
import streamlit as st

st.set_page_config(page_title="Timesheet Dashboard", page_icon="📊", layout="wide")

from app_state import init_state
from dashboard_metrics import (
    bar_widths,
    by_total_desc,
    filter_rows,
    group_totals,
    monthly_project_proportion,
    weekly_series_by_person_for_project,
    weekly_series_for_person,
)

init_state()
collection = st.session_state["collection"]
rows = collection.rows

st.title("📊 Dashboard")


def bars(title, caption, groups):
    st.markdown(f"**{title}**")
    st.caption(caption)
    if not groups:
        st.info("No data.")
        return
    df = pd.DataFrame({
        "Name": [g.name for g in groups],
        "Hours": [g.total for g in groups],
        "Bar": bar_widths([g.total for g in groups]),
    })
    st.dataframe(
        df,
        use_container_width=True,
        hide_index=True,
        column_config={"Bar": st.column_config.ProgressColumn("Share of max", min_value=0, max_value=100, format="%d%%")},
    )


# -----------------------
# FILTERS
# -----------------------
person_options = [""] + collection.persons()
project_options = [""] + collection.projects()
for key, options in (("dash_person", person_options), ("dash_project", project_options)):
    if st.session_state.get(key) not in options:
        st.session_state[key] = ""

f1, f2, f3 = st.columns([2, 2, 1])
person = f1.selectbox("Person", person_options, key="dash_person", format_func=lambda p: p or "All")
project = f2.selectbox("Project", project_options, key="dash_project", format_func=lambda p: p or "All")


def clear_filters():
    st.session_state["dash_person"] = ""
    st.session_state["dash_project"] = ""


f3.button("Clear filters", on_click=clear_filters, use_container_width=True)

if not rows:
    st.warning("The local table is empty. Add a week or load rows from the database to fill the dashboard.")

filtered = filter_rows(rows, person=person or None, project=project or None)

c1, c2 = st.columns(2)
with c1:
    bars("Hours by person", "Sum of totals per person (filters applied)", by_total_desc(group_totals(filtered, "person")))
with c2:
    bars("Hours by project", "Sum of totals per project (filters applied)", by_total_desc(group_totals(filtered, "project")))

st.subheader("By business unit")
st.caption("Total hours, number of people and number of projects per business unit")
units = by_total_desc(group_totals(filtered, "business_unit"))
if not units:
    st.info("No data.")
else:
    st.dataframe(
        pd.DataFrame([
            {"Business unit": g.name, "Hours": g.total, "People": g.people_count, "Projects": g.projects_count}
            for g in units
        ]),
        use_container_width=True,
        hide_index=True,
    )

# -----------------------
# WEEKLY SERIES
# -----------------------
if person:
    st.subheader(f"Weekly hours – {person}")
    points = weekly_series_for_person(rows, person)
    if not points:
        st.info("No data.")
    else:
        series = pd.DataFrame({"Week": [p.label for p in points], "Hours": [p.total for p in points]}).set_index("Week")
        st.bar_chart(series)

if project:
    st.subheader(f"Hours per person on {project}")
    per_person = weekly_series_by_person_for_project(rows, project)
    if not per_person:
        st.info("No data.")
    for s in per_person:
        st.markdown(f"{s.person} ({s.total}h)")
        st.bar_chart(pd.DataFrame({"Week": s.labels, "Hours": s.series}).set_index("Week"), height=160)

# -----------------------
# MONTHLY PROPORTION
# -----------------------
st.subheader("Monthly share of hours by project")
months = monthly_project_proportion(rows)
if not months:
    st.info("No data.")
else:
    records = [
        {"Month": m.month, "Project": p.name, "Hours": p.hours, "Share": p.pct, "Month total": m.total}
        for m in months
        for p in m.projects[:5]
    ]
    st.dataframe(
        pd.DataFrame(records),
        use_container_width=True,
        hide_index=True,
        column_config={"Share": st.column_config.ProgressColumn("Share", min_value=0, max_value=100, format="%d%%")},
    )
