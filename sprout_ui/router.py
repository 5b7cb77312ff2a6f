import streamlit as st

from sprout_ui.constants import (
    TAB_CALENDAR,
    TAB_GOALS,
    TAB_NOTES,
    TAB_OPTIONS,
    TAB_PROGRESS,
    TAB_TASKS,
)
from sprout_ui.tabs.calendar_tab import render_calendar_tab
from sprout_ui.tabs.goals_tab import render_goals_tab
from sprout_ui.tabs.notes_tab import render_notes_tab
from sprout_ui.tabs.overview_tab import render_overview_tab
from sprout_ui.tabs.progress_tab import render_progress_tab
from sprout_ui.tabs.tasks_tab import render_tasks_tab


def render_router(ctx):
    active = st.session_state.get("ui.active_tab", TAB_OPTIONS[0])
    active = st.segmented_control(
        "Workspace",
        TAB_OPTIONS,
        key="ui.active_tab",
        default=active,
    )

    if active == TAB_TASKS:
        return _render_tasks(ctx)

    if active == TAB_GOALS:
        return _render_goals(ctx)

    if active == TAB_NOTES:
        return _render_notes(ctx)

    if active == TAB_CALENDAR:
        return _render_calendar(ctx)

    if active == TAB_PROGRESS:
        return _render_progress(ctx)

    return _render_overview(ctx)


@st.fragment
def _render_overview(ctx):
    render_overview_tab(ctx)


@st.fragment
def _render_tasks(ctx):
    render_tasks_tab(ctx)


@st.fragment
def _render_goals(ctx):
    render_goals_tab(ctx)


def _render_notes(ctx):
    render_notes_tab(ctx)


@st.fragment
def _render_calendar(ctx):
    render_calendar_tab(ctx)


@st.fragment
def _render_progress(ctx):
    render_progress_tab(ctx)
