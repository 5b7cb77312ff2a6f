from __future__ import annotations

from datetime import timedelta

import pandas as pd
import plotly.graph_objects as go

from sprout_ui.theme import get_active_theme


def _active_theme():
    return get_active_theme()[1]


def apply_common_plot_style(fig, title, show_xgrid=False, show_ygrid=True):
    theme = _active_theme()
    fig.update_layout(
        title=title,
        title_font=dict(color=theme["text_main"], size=16),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        font=dict(color=theme["text_main"]),
        margin=dict(l=40, r=20, t=40, b=30),
        xaxis=dict(showgrid=show_xgrid, gridcolor=theme["plot_grid"], zeroline=False),
        yaxis=dict(showgrid=show_ygrid, gridcolor=theme["plot_grid"], zeroline=False),
    )
    return fig


def completion_donut(completed, total, title, color=None, height=260):
    theme = _active_theme()
    remaining = max(0, int(total) - int(completed))
    fig = go.Figure(
        data=go.Pie(
            labels=["Completed", "Remaining"],
            values=[int(completed), remaining] if total else [0, 1],
            hole=0.65,
            marker=dict(colors=[color or theme["accent"], theme["plot_grid"]]),
            textinfo="none",
            sort=False,
        )
    )
    apply_common_plot_style(fig, title)
    fig.update_layout(height=height, showlegend=False)
    rate = round(100 * int(completed) / int(total)) if total else 0
    fig.add_annotation(text=f"{rate}%", showarrow=False, font=dict(size=22, color=theme["text_main"]))
    return fig


def tasks_per_day_frame(tasks, end_day, days=14):
    start_day = end_day - timedelta(days=days - 1)
    index = pd.date_range(start_day, end_day, freq="D").date
    frame = pd.DataFrame({"day": index, "created": 0, "completed": 0}).set_index("day")
    for task in tasks or []:
        created = pd.to_datetime(task.get("created_at"), errors="coerce", utc=True)
        if pd.notna(created) and created.date() in frame.index:
            frame.loc[created.date(), "created"] += 1
        finished = pd.to_datetime(task.get("last_completed_at"), errors="coerce", utc=True)
        if pd.notna(finished) and finished.date() in frame.index:
            frame.loc[finished.date(), "completed"] += 1
    return frame.reset_index()


def activity_bar_chart(frame, title, height=280):
    theme = _active_theme()
    labels = [day.strftime("%b %d") for day in frame["day"]]
    fig = go.Figure()
    fig.add_trace(go.Bar(x=labels, y=frame["created"], name="Created", marker_color=theme["plot_grid"]))
    fig.add_trace(go.Bar(x=labels, y=frame["completed"], name="Completed", marker_color=theme["accent"]))
    apply_common_plot_style(fig, title)
    fig.update_layout(height=height, barmode="group", legend=dict(orientation="h", y=-0.2))
    return fig


def goal_progress_chart(goals, title, height=280):
    theme = _active_theme()
    frame = pd.DataFrame(
        [{"title": goal.get("title") or "Untitled", "progress": int(goal.get("progress") or 0)} for goal in goals or []]
    )
    fig = go.Figure()
    if not frame.empty:
        frame = frame.sort_values("progress")
        fig.add_trace(
            go.Bar(x=frame["progress"], y=frame["title"], orientation="h", marker_color=theme["accent"])
        )
    apply_common_plot_style(fig, title, show_xgrid=True, show_ygrid=False)
    fig.update_layout(height=height, xaxis=dict(range=[0, 100], ticksuffix="%"))
    return fig
