import html
from datetime import date

import streamlit as st

from sprout_ui.constants import (
    COMPLETION_LABELS,
    DUE_STATUS_COLORS,
    DUE_STATUS_LABELS,
    VIEW_MODE_LABELS,
)
from sprout_ui.data import repositories
from sprout_ui.data.loaders import guarded_load, run_action


def _after_write(ctx, error):
    if error:
        st.error(error)
        return
    ctx.fetch_guard.invalidate()
    st.rerun(scope="fragment")


def _due_badge(task):
    status = task.get("due_status")
    label = DUE_STATUS_LABELS.get(status)
    if not label:
        return ""
    color = DUE_STATUS_COLORS.get(status, "#B8B8B8")
    return f"<span class='due-badge' style='background:{color}'>{label} · {task.get('due_date')}</span>"


def _parse_due(value):
    try:
        return date.fromisoformat(value) if value else None
    except ValueError:
        return None


def _render_task(ctx, task, key_prefix):
    task_id = task["id"]
    cols = st.columns([0.6, 6, 1, 1])
    done = bool(task.get("completed"))
    if cols[0].checkbox("Done", value=done, key=f"{key_prefix}.done.{task_id}", label_visibility="collapsed") != done:
        _, error = run_action(repositories.toggle_task, task_id)
        _after_write(ctx, error)

    title = html.escape(task.get("title") or "")
    css = "task-done" if done else ""
    daily = " 🔁" if task.get("is_daily") else ""
    cols[1].markdown(f"<span class='{css}'>{title}</span>{daily} {_due_badge(task)}", unsafe_allow_html=True)
    if task.get("description"):
        cols[1].caption(task["description"])

    with cols[2].popover("✏️"):
        new_title = st.text_input("Title", value=task.get("title") or "", key=f"{key_prefix}.title.{task_id}")
        current_due = _parse_due(task.get("due_date"))
        no_due = st.checkbox(
            "No due date", value=current_due is None, key=f"{key_prefix}.nodue.{task_id}"
        )
        new_due = None
        if not no_due:
            new_due = st.date_input(
                "Due date",
                value=current_due or ctx.get("today") or date.today(),
                key=f"{key_prefix}.due.{task_id}",
            )
        if st.button("Save", key=f"{key_prefix}.save.{task_id}"):
            _, error = run_action(
                repositories.update_task, task_id, {"title": new_title, "due_date": new_due}
            )
            _after_write(ctx, error)
    if cols[3].button("🗑️", key=f"{key_prefix}.delete.{task_id}"):
        _, error = run_action(repositories.delete_task, task_id)
        _after_write(ctx, error)


def _render_group(ctx, title, tasks, key_prefix, caption=None):
    if not tasks:
        return
    st.markdown(f"<div class='small-label'>{html.escape(title)}</div>", unsafe_allow_html=True)
    if caption:
        st.caption(caption)
    for task in tasks:
        _render_task(ctx, task, key_prefix)


def _render_create_form(ctx, goals, mode, goal_id):
    with st.expander("New task", expanded=False):
        with st.form("tasks.create", clear_on_submit=True):
            title = st.text_input("Title")
            description = st.text_area("Description", height=68)
            goal_options = [""] + [goal["id"] for goal in goals]
            goal_titles = {goal["id"]: goal.get("title") for goal in goals}
            default_goal = goal_options.index(goal_id) if goal_id in goal_options else 0
            selected_goal = st.selectbox(
                "Goal",
                goal_options,
                index=default_goal,
                format_func=lambda value: goal_titles.get(value, "No goal"),
            )
            is_daily = st.checkbox("Repeat every day", value=mode == "daily")
            due_date = st.date_input("Due date", value=None)
            submitted = st.form_submit_button("Add task")
        if submitted:
            if not title.strip():
                st.warning("Give the task a title.")
                return
            _, error = run_action(
                repositories.create_task,
                title.strip(),
                description=description,
                is_daily=is_daily,
                goal_id=selected_goal or None,
                due_date=due_date,
            )
            _after_write(ctx, error)


def render_tasks_tab(ctx):
    st.markdown("<div class='section-title'>Tasks</div>", unsafe_allow_html=True)

    goals = guarded_load(ctx, "goals", repositories.list_goals, default=[]) or []
    goal_titles = {goal["id"]: goal.get("title") or "Untitled" for goal in goals}

    cols = st.columns(3)
    mode = cols[0].selectbox(
        "View", list(VIEW_MODE_LABELS), format_func=VIEW_MODE_LABELS.get, key="tasks.mode"
    )
    completion = cols[1].selectbox(
        "Show", list(COMPLETION_LABELS), format_func=COMPLETION_LABELS.get, key="tasks.completion"
    )
    goal_id = None
    if mode != "daily" and goals:
        options = [""] + list(goal_titles) if mode == "all" else list(goal_titles)
        goal_id = cols[2].selectbox(
            "Goal",
            options,
            format_func=lambda value: goal_titles.get(value, "Any goal"),
            key=f"tasks.goal.{mode}",
        ) or None

    _render_create_form(ctx, goals, mode, goal_id)

    if mode == "goal" and not goal_id:
        st.info("Create a goal first to use the goal view.")
        return

    view = guarded_load(
        ctx,
        f"task_view.{mode}.{completion}.{goal_id or ''}",
        lambda: repositories.task_view(mode=mode, goal_id=goal_id, completion=completion),
        default={},
    ) or {}
    items = view.get("items") or []
    counts = view.get("counts") or {}
    st.caption(f"{int(counts.get('completed', 0))} of {int(counts.get('total', 0))} completed")
    if not items:
        st.info("No tasks here yet.")
        return

    if not view.get("grouped"):
        _render_group(ctx, VIEW_MODE_LABELS.get(mode, mode), items, f"tasks.{mode}")
        return

    _render_group(ctx, "Daily tasks", view.get("daily") or [], "tasks.daily")
    for group in view.get("goal_groups") or []:
        _render_group(
            ctx,
            group.get("goal_title") or "Untitled",
            group.get("tasks") or [],
            f"tasks.goal.{group.get('goal_id')}",
            caption=f"{group.get('completed', 0)}/{group.get('total', 0)} · {group.get('percentage', 0)}%",
        )
    _render_group(ctx, "Other tasks", view.get("other") or [], "tasks.other")
