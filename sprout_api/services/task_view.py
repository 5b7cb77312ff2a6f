"""Read-side projections of a user's tasks and goals.

Nothing in here writes to the store: the pipeline recomputes effective
completion, filters, sorts and groups a task list for display.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, tzinfo
from typing import Iterable, List

from sprout_api.constants import (
    COMPLETION_FILTERS,
    FILTER_ALL,
    FILTER_COMPLETED,
    GOAL_FILTER_ACTIVE,
    GOAL_FILTER_ALL,
    GOAL_FILTER_COMPLETED,
    GOAL_FILTERS,
    OTHER_GROUP_KEY,
    SOON_DAYS,
    UNTITLED_GOAL,
    VIEW_ALL,
    VIEW_DAILY,
    VIEW_GOAL,
    VIEW_MODES,
)
from sprout_api.services.clock import local_date, parse_day, parse_timestamp
from sprout_api.services.daily_reset import effective_completed
from sprout_api.services.goal_progress import goal_is_completed, progress_percent


@dataclass
class GoalGroup:
    goal_id: str
    goal_title: str
    tasks: List[dict] = field(default_factory=list)
    # Counts over every task linked to the goal, not just the shown ones.
    completed: int = 0
    total: int = 0

    def as_dict(self) -> dict:
        return {
            "goal_id": self.goal_id,
            "goal_title": self.goal_title,
            "tasks": self.tasks,
            "completed": self.completed,
            "total": self.total,
            "percentage": progress_percent(self.completed, self.total),
        }


@dataclass
class TaskView:
    mode: str
    items: List[dict]
    grouped: bool = False
    daily: List[dict] = field(default_factory=list)
    goal_groups: List[GoalGroup] = field(default_factory=list)
    other: List[dict] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "mode": self.mode,
            "items": self.items,
            "grouped": self.grouped,
            "daily": self.daily,
            "goal_groups": [group.as_dict() for group in self.goal_groups],
            OTHER_GROUP_KEY: self.other,
            "counts": {
                "total": len(self.items),
                "completed": sum(1 for task in self.items if task.get("completed")),
            },
        }


def due_date_status(task: dict, today: date) -> str:
    due = parse_day(task.get("due_date"))
    if due is None:
        return "none"
    if task.get("completed"):
        return "completed"
    diff_days = (due - today).days
    if diff_days < 0:
        return "overdue"
    if diff_days == 0:
        return "today"
    if diff_days <= SOON_DAYS:
        return "soon"
    return "future"


def project_tasks(tasks: Iterable[dict], today: date, tz: tzinfo) -> list[dict]:
    projected = []
    for task in tasks:
        item = dict(task)
        item["completed"] = effective_completed(task, today, tz)
        item["due_status"] = due_date_status(item, today)
        projected.append(item)
    return projected


def filter_tasks(
    tasks: Iterable[dict],
    mode: str = VIEW_ALL,
    goal_id: str | None = None,
    completion: str = FILTER_ALL,
) -> list[dict]:
    if mode not in VIEW_MODES:
        raise ValueError(f"Unknown view mode: {mode}")
    if completion not in COMPLETION_FILTERS:
        raise ValueError(f"Unknown completion filter: {completion}")
    if mode == VIEW_GOAL and not goal_id:
        raise ValueError("Goal view requires a goal id")

    filtered = list(tasks)
    if mode == VIEW_DAILY:
        filtered = [task for task in filtered if task.get("is_daily")]
    elif mode == VIEW_GOAL:
        filtered = [task for task in filtered if task.get("goal_id") == goal_id]

    if mode == VIEW_ALL and goal_id:
        filtered = [task for task in filtered if task.get("goal_id") == goal_id]

    if completion != FILTER_ALL:
        wanted = completion == FILTER_COMPLETED
        filtered = [task for task in filtered if bool(task.get("completed")) == wanted]
    return filtered


def sort_key(task: dict, today: date):
    done = 1 if task.get("completed") else 0
    due = parse_day(task.get("due_date"))
    if due is None:
        created = parse_timestamp(task.get("created_at"))
        created_ts = created.timestamp() if created else 0.0
        return (done, 1, 0, 0, -created_ts)
    return (done, 0, 0 if due < today else 1, due.toordinal(), 0.0)


def sort_tasks(tasks: Iterable[dict], today: date) -> list[dict]:
    return sorted(tasks, key=lambda task: sort_key(task, today))


def goal_counts(tasks: Iterable[dict]) -> dict[str, tuple[int, int]]:
    """Map goal id to ``(completed, total)`` over already projected tasks."""
    counts: dict[str, tuple[int, int]] = {}
    for task in tasks:
        goal_id = task.get("goal_id")
        if not goal_id:
            continue
        completed, total = counts.get(goal_id, (0, 0))
        counts[goal_id] = (completed + int(bool(task.get("completed"))), total + 1)
    return counts


def group_tasks(
    tasks: Iterable[dict], counts: dict[str, tuple[int, int]] | None = None
) -> tuple[list[dict], list[GoalGroup], list[dict]]:
    tasks = list(tasks)
    if counts is None:
        counts = goal_counts(tasks)
    daily = []
    groups: dict[str, GoalGroup] = {}
    other = []
    for task in tasks:
        if task.get("is_daily"):
            daily.append(task)
            continue
        goal_id = task.get("goal_id")
        if not goal_id:
            other.append(task)
            continue
        if goal_id not in groups:
            completed, total = counts.get(goal_id, (0, 0))
            groups[goal_id] = GoalGroup(
                goal_id, task.get("goal_title") or UNTITLED_GOAL, completed=completed, total=total
            )
        groups[goal_id].tasks.append(task)
    return daily, list(groups.values()), other


def build_view(
    tasks: Iterable[dict],
    today: date,
    tz: tzinfo,
    mode: str = VIEW_ALL,
    goal_id: str | None = None,
    completion: str = FILTER_ALL,
    limit: int | None = None,
) -> TaskView:
    projected = project_tasks(tasks, today, tz)
    filtered = filter_tasks(projected, mode=mode, goal_id=goal_id, completion=completion)
    ordered = sort_tasks(filtered, today)
    if limit and limit > 0:
        ordered = ordered[:limit]
    if mode != VIEW_ALL:
        return TaskView(mode=mode, items=ordered)
    daily, goal_groups, other = group_tasks(ordered, goal_counts(projected))
    return TaskView(mode=mode, items=ordered, grouped=True, daily=daily, goal_groups=goal_groups, other=other)


def tasks_created_on(tasks: Iterable[dict], day: date, tz: tzinfo) -> list[dict]:
    return [task for task in tasks if local_date(task.get("created_at"), tz) == day]


def goal_summaries(
    goals: Iterable[dict],
    tasks: Iterable[dict],
    today: date,
    tz: tzinfo,
    status_filter: str = GOAL_FILTER_ALL,
) -> list[dict]:
    if status_filter not in GOAL_FILTERS:
        raise ValueError(f"Unknown goal filter: {status_filter}")
    counts: dict[str, list[int]] = {}
    for task in tasks:
        goal_id = task.get("goal_id")
        if not goal_id:
            continue
        bucket = counts.setdefault(goal_id, [0, 0])
        bucket[0] += 1
        bucket[1] += int(effective_completed(task, today, tz))

    summaries = []
    for goal in goals:
        done = goal_is_completed(goal)
        if status_filter == GOAL_FILTER_ACTIVE and done:
            continue
        if status_filter == GOAL_FILTER_COMPLETED and not done:
            continue
        total, completed = counts.get(goal["id"], [0, 0])
        summaries.append(
            {
                **goal,
                "tasks_count": total,
                "completed_tasks_count": completed,
                "linked_progress": progress_percent(completed, total),
            }
        )
    return summaries
