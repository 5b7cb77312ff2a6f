from __future__ import annotations

import logging
from datetime import date, tzinfo
from typing import Iterable

from sprout_api import store
from sprout_api.constants import GOAL_COMPLETED, GOAL_IN_PROGRESS
from sprout_api.services.daily_reset import effective_completed

logger = logging.getLogger(__name__)


def progress_percent(completed: int, total: int) -> int:
    """Integer percentage rounded half up, 0 for an empty goal."""
    if total <= 0:
        return 0
    return (200 * completed + total) // (2 * total)


def goal_patch(progress: int) -> dict:
    done = progress == 100
    return {
        "progress": progress,
        "completed": done,
        "status": GOAL_COMPLETED if done else GOAL_IN_PROGRESS,
    }


def goal_is_completed(goal: dict) -> bool:
    return bool(goal.get("completed")) or goal.get("status") == GOAL_COMPLETED or goal.get("progress") == 100


def count_linked(
    tasks: Iterable[dict],
    today: date,
    tz: tzinfo,
    toggled_id: str | None = None,
    toggled_state: bool | None = None,
) -> tuple[int, int]:
    total = 0
    completed = 0
    for task in tasks:
        total += 1
        if toggled_id is not None and task.get("id") == toggled_id and toggled_state is not None:
            done = toggled_state
        else:
            done = effective_completed(task, today, tz)
        completed += int(done)
    return completed, total


async def recalculate_goal(
    goal_id: str,
    today: date,
    tz: tzinfo,
    toggled_id: str | None = None,
    toggled_state: bool | None = None,
) -> dict | None:
    # Linkage is by id only; siblings are counted regardless of owner.
    linked = await store.query(store.TASKS, where={"goal_id": goal_id})
    completed, total = count_linked(linked, today, tz, toggled_id, toggled_state)
    progress = progress_percent(completed, total)
    record = await store.update(store.GOALS, goal_id, goal_patch(progress))
    if record is None:
        logger.info("Goal %s no longer exists; linked progress not stored", goal_id)
    return record
