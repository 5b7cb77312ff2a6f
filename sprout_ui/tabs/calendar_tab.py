import calendar
from datetime import date

import pandas as pd
import streamlit as st

from sprout_ui.constants import STATUS_LABELS
from sprout_ui.data import repositories
from sprout_ui.data.loaders import guarded_load


def month_grid(year, month, counts):
    """Weeks of ``(day, count)`` cells, ``None`` outside the month."""
    weeks = []
    for week in calendar.Calendar(firstweekday=6).monthdatescalendar(year, month):
        weeks.append([(day, counts.get(day, 0)) if day.month == month else None for day in week])
    return weeks


def render_calendar_tab(ctx):
    st.markdown("<div class='section-title'>Calendar</div>", unsafe_allow_html=True)
    today = ctx.get("today") or date.today()
    selected = st.date_input("Day", value=today, key="calendar.day")

    tasks = guarded_load(ctx, "tasks", repositories.list_tasks, default=[]) or []
    created = pd.to_datetime(
        pd.Series([task.get("created_at") for task in tasks], dtype="object"),
        errors="coerce",
        utc=True,
        format="ISO8601",
    ).dropna()
    if ctx.get("timezone"):
        created = created.dt.tz_convert(ctx.get("timezone"))
    counts = created.dt.date.value_counts().to_dict()

    st.markdown(f"<div class='small-label'>{selected.strftime('%B %Y')}</div>", unsafe_allow_html=True)
    header = st.columns(7)
    for idx, label in enumerate(["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]):
        header[idx].caption(label)
    for week in month_grid(selected.year, selected.month, counts):
        cols = st.columns(7)
        for idx, cell in enumerate(week):
            if cell is None:
                continue
            day, count = cell
            marker = f" · {count}" if count else ""
            text = f"**{day.day}**{marker}" if day == selected else f"{day.day}{marker}"
            cols[idx].markdown(text)

    st.markdown(
        f"<div class='small-label' style='margin-top:8px;'>Tasks created on {selected.isoformat()}</div>",
        unsafe_allow_html=True,
    )
    day_tasks = guarded_load(
        ctx, f"calendar.{selected.isoformat()}", lambda: repositories.calendar_tasks(selected), default=[]
    ) or []
    if not day_tasks:
        st.caption("No tasks created on this day.")
        return
    for task in day_tasks:
        mark = "✅" if task.get("completed") else "⬜"
        status = STATUS_LABELS.get(task.get("status"), task.get("status") or "")
        st.markdown(f"{mark} {task.get('title')} · {status}")
