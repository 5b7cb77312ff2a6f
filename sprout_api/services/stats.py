from __future__ import annotations

from datetime import date, tzinfo
from typing import Iterable

from sprout_api.services.daily_reset import effective_completed
from sprout_api.services.goal_progress import goal_is_completed, progress_percent


def count_completed_tasks(tasks: Iterable[dict], today: date, tz: tzinfo) -> int:
    return sum(1 for task in tasks if effective_completed(task, today, tz))


def compute_stats(tasks: Iterable[dict], goals: Iterable[dict], today: date, tz: tzinfo) -> dict:
    total_tasks = 0
    completed_tasks = 0
    daily_tasks = 0
    completed_daily_tasks = 0
    for task in tasks:
        total_tasks += 1
        done = effective_completed(task, today, tz)
        if task.get("is_daily"):
            daily_tasks += 1
            completed_daily_tasks += int(done)
        completed_tasks += int(done)

    goals = list(goals)
    total_goals = len(goals)
    completed_goals = sum(1 for goal in goals if goal_is_completed(goal))

    return {
        "total_tasks": total_tasks,
        "completed_tasks": completed_tasks,
        "pending_tasks": total_tasks - completed_tasks,
        "daily_tasks": daily_tasks,
        "completed_daily_tasks": completed_daily_tasks,
        "total_goals": total_goals,
        "completed_goals": completed_goals,
        "task_completion_rate": progress_percent(completed_tasks, total_tasks),
        "daily_completion_rate": progress_percent(completed_daily_tasks, daily_tasks),
        "goal_completion_rate": min(100, progress_percent(completed_goals, total_goals)),
    }
