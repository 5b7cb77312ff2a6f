from datetime import date

import streamlit as st

from sprout_ui.constants import ACHIEVEMENT_LABELS, AVATAR_EMOJI
from sprout_ui.data import repositories
from sprout_ui.data.loaders import guarded_load
from sprout_ui.visualizations import (
    activity_bar_chart,
    completion_donut,
    goal_progress_chart,
    tasks_per_day_frame,
)


def render_progress_tab(ctx):
    st.markdown("<div class='section-title'>Progress</div>", unsafe_allow_html=True)

    progress = guarded_load(ctx, "progress", repositories.sync_progress, default={}) or {}
    stats = guarded_load(ctx, "stats", repositories.get_stats, default={}) or {}
    level_info = progress.get("level_progress") or {}
    stage = progress.get("avatar_stage") or {}
    tier = int(progress.get("avatar_level") or 1)

    cols = st.columns([1, 3])
    cols[0].markdown(f"<div style='font-size:4rem;text-align:center'>{AVATAR_EMOJI[tier - 1]}</div>", unsafe_allow_html=True)
    with cols[1]:
        st.markdown(f"**{stage.get('name', 'Seed')}**: {stage.get('description', '')}")
        st.progress(
            int(level_info.get("percentage", 0)) / 100,
            text=f"Level {int(progress.get('level') or 1)} · {int(level_info.get('to_next_level', 100))} XP to next level",
        )
        st.caption(f"{int(progress.get('experience') or 0)} XP · 🔥 {int(progress.get('daily_streak') or 0)} day streak")

    st.markdown("<div class='small-label'>Achievements</div>", unsafe_allow_html=True)
    unlocked = set(progress.get("achievements") or [])
    badge_cols = st.columns(len(ACHIEVEMENT_LABELS))
    for idx, (key, (icon, label, description)) in enumerate(ACHIEVEMENT_LABELS.items()):
        shown = icon if key in unlocked else "🔒"
        badge_cols[idx].markdown(f"<div style='text-align:center;font-size:1.8rem'>{shown}</div>", unsafe_allow_html=True)
        badge_cols[idx].caption(f"{label}: {description}")

    charts = st.columns(2)
    charts[0].plotly_chart(
        completion_donut(stats.get("completed_tasks", 0), stats.get("total_tasks", 0), "Tasks completed"),
        use_container_width=True,
    )
    charts[1].plotly_chart(
        completion_donut(stats.get("completed_daily_tasks", 0), stats.get("daily_tasks", 0), "Daily tasks today"),
        use_container_width=True,
    )

    tasks = guarded_load(ctx, "tasks", repositories.list_tasks, default=[]) or []
    st.plotly_chart(
        activity_bar_chart(tasks_per_day_frame(tasks, ctx.get("today") or date.today()), "Last 14 days"),
        use_container_width=True,
    )
    goals = guarded_load(ctx, "goals", repositories.list_goals, default=[]) or []
    if goals:
        st.plotly_chart(goal_progress_chart(goals, "Goal progress"), use_container_width=True)
