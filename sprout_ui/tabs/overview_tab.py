import random

import streamlit as st

from sprout_ui.constants import (
    DUE_STATUS_LABELS,
    MOTIVATIONAL_QUOTES,
    RECENT_GOALS_LIMIT,
    RECENT_TASKS_LIMIT,
)
from sprout_ui.data import repositories
from sprout_ui.data.loaders import guarded_load
from sprout_ui.state import session_slices

SLICE = "overview"


def _quote():
    quote = session_slices.get_value(SLICE, "quote")
    if not quote:
        quote = random.choice(MOTIVATIONAL_QUOTES)
        session_slices.set_value(SLICE, "quote", quote)
    return quote


def render_overview_tab(ctx):
    st.markdown("<div class='section-title'>Overview</div>", unsafe_allow_html=True)

    stats = guarded_load(ctx, "stats", repositories.get_stats, default={}) or {}
    cols = st.columns(4)
    cols[0].metric("Tasks", int(stats.get("total_tasks", 0)))
    cols[1].metric("Completed", int(stats.get("completed_tasks", 0)), f"{int(stats.get('task_completion_rate', 0))}%")
    cols[2].metric(
        "Daily done",
        f"{int(stats.get('completed_daily_tasks', 0))}/{int(stats.get('daily_tasks', 0))}",
    )
    cols[3].metric("Goals completed", f"{int(stats.get('completed_goals', 0))}/{int(stats.get('total_goals', 0))}")

    left, right = st.columns(2)
    with left:
        st.markdown("<div class='small-label'>Recent tasks</div>", unsafe_allow_html=True)
        tasks = guarded_load(
            ctx, "recent_tasks", lambda: repositories.recent_tasks(RECENT_TASKS_LIMIT), default=[]
        ) or []
        if not tasks:
            st.caption("No tasks yet. Add your first one in the Tasks tab.")
        for task in tasks:
            mark = "✅" if task.get("completed") else "⬜"
            due = DUE_STATUS_LABELS.get(task.get("due_status"), "")
            suffix = f" · {due}" if due else ""
            st.markdown(f"{mark} {task.get('title')}{suffix}")

    with right:
        st.markdown("<div class='small-label'>Recent goals</div>", unsafe_allow_html=True)
        goals = guarded_load(
            ctx, "recent_goals", lambda: repositories.recent_goals(RECENT_GOALS_LIMIT), default=[]
        ) or []
        if not goals:
            st.caption("No goals yet.")
        for goal in goals:
            progress = int(goal.get("progress") or 0)
            st.markdown(f"**{goal.get('title')}**")
            st.progress(progress / 100, text=f"{progress}%")

    st.markdown(f"<div class='card'>💡 <em>{_quote()}</em></div>", unsafe_allow_html=True)
