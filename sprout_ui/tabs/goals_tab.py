import html

import streamlit as st

from sprout_ui.constants import GOAL_FILTER_LABELS
from sprout_ui.data import repositories
from sprout_ui.data.loaders import guarded_load, run_action


def _after_write(ctx, error):
    if error:
        st.error(error)
        return
    ctx.fetch_guard.invalidate()
    st.rerun(scope="fragment")


def _render_goal(ctx, goal):
    goal_id = goal["id"]
    done = bool(goal.get("completed")) or goal.get("status") == "completed"
    progress = int(goal.get("progress") or 0)
    with st.container(border=True):
        cols = st.columns([0.6, 6, 1, 1, 1])
        if cols[0].checkbox("Done", value=done, key=f"goals.done.{goal_id}", label_visibility="collapsed") != done:
            _, error = run_action(repositories.toggle_goal, goal_id)
            _after_write(ctx, error)
        css = "task-done" if done else ""
        cols[1].markdown(f"<span class='{css}'><strong>{html.escape(goal.get('title') or '')}</strong></span>", unsafe_allow_html=True)
        cols[1].caption(
            f"{int(goal.get('completed_tasks_count', 0))}/{int(goal.get('tasks_count', 0))} linked tasks"
            + (f" · target {goal['target_date']}" if goal.get("target_date") else "")
        )
        if cols[2].button("↻", key=f"goals.recalc.{goal_id}", help="Recalculate progress"):
            _, error = run_action(repositories.recalculate_goal, goal_id)
            _after_write(ctx, error)
        with cols[3].popover("✏️"):
            new_title = st.text_input("Title", value=goal.get("title") or "", key=f"goals.title.{goal_id}")
            new_description = st.text_area(
                "Description", value=goal.get("description") or "", key=f"goals.description.{goal_id}"
            )
            if st.button("Save", key=f"goals.save.{goal_id}"):
                _, error = run_action(
                    repositories.update_goal, goal_id, {"title": new_title, "description": new_description}
                )
                _after_write(ctx, error)
        if cols[4].button("🗑️", key=f"goals.delete.{goal_id}"):
            _, error = run_action(repositories.delete_goal, goal_id)
            _after_write(ctx, error)
        st.progress(progress / 100, text=f"{progress}%")
        if goal.get("description"):
            st.caption(goal["description"])


def render_goals_tab(ctx):
    st.markdown("<div class='section-title'>Goals</div>", unsafe_allow_html=True)

    with st.expander("New goal", expanded=False):
        with st.form("goals.create", clear_on_submit=True):
            title = st.text_input("Title")
            description = st.text_area("Description", height=68)
            target_date = st.date_input("Target date", value=None)
            submitted = st.form_submit_button("Add goal")
        if submitted:
            if not title.strip():
                st.warning("Give the goal a title.")
            else:
                _, error = run_action(
                    repositories.create_goal, title.strip(), description=description, target_date=target_date
                )
                _after_write(ctx, error)

    status = st.segmented_control(
        "Show", list(GOAL_FILTER_LABELS), format_func=GOAL_FILTER_LABELS.get, default="all", key="goals.filter"
    ) or "all"
    goals = guarded_load(
        ctx, f"goal_summary.{status}", lambda: repositories.goal_summaries(status), default=[]
    ) or []
    if not goals:
        st.info("No goals to show.")
        return
    for goal in goals:
        _render_goal(ctx, goal)
