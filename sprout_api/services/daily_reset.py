"""Daily reset of recurring tasks.

A recurring task is complete only when ``last_completed_at`` falls on the
viewer's current calendar day. The stored ``completed`` flag is a cache of
that fact; :func:`evaluate` finds the tasks whose cache disagrees and
:func:`write_back` brings the store in line. ``last_completed_at`` is never
touched here.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, tzinfo
from typing import Iterable

from sprout_api import store
from sprout_api.constants import STATUS_COMPLETED, STATUS_PLANNED
from sprout_api.services.clock import local_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Correction:
    task_id: str
    completed: bool
    status: str

    def as_patch(self) -> dict:
        return {"completed": self.completed, "status": self.status}


def completed_today(last_completed_at, today: date, tz: tzinfo) -> bool:
    completed_day = local_date(last_completed_at, tz)
    return completed_day is not None and completed_day == today


def effective_completed(task: dict, today: date, tz: tzinfo) -> bool:
    if task.get("is_daily"):
        return completed_today(task.get("last_completed_at"), today, tz)
    return bool(task.get("completed"))


def evaluate(tasks: Iterable[dict], today: date, tz: tzinfo) -> list[Correction]:
    corrections = []
    for task in tasks:
        if not task.get("is_daily"):
            continue
        stored = bool(task.get("completed"))
        actual = completed_today(task.get("last_completed_at"), today, tz)
        if stored and not actual:
            corrections.append(Correction(task["id"], False, STATUS_PLANNED))
        elif actual and not stored:
            corrections.append(Correction(task["id"], True, STATUS_COMPLETED))
    return corrections


def apply_corrections(tasks: Iterable[dict], corrections: Iterable[Correction]) -> list[dict]:
    by_id = {item.task_id: item for item in corrections}
    corrected = []
    for task in tasks:
        fix = by_id.get(task.get("id"))
        if fix is None:
            corrected.append(task)
            continue
        corrected.append({**task, **fix.as_patch()})
    return corrected


async def write_back(corrections: list[Correction], user_id: str | None = None) -> int:
    if not corrections:
        return 0
    results = await asyncio.gather(
        *(store.update(store.TASKS, item.task_id, item.as_patch(), user_id=user_id) for item in corrections),
        return_exceptions=True,
    )
    written = 0
    for item, result in zip(corrections, results):
        if isinstance(result, Exception):
            logger.error("Failed to reset daily task %s: %s", item.task_id, result)
            continue
        written += 1
    return written


async def reset_daily_tasks(tasks: list[dict], today: date, tz: tzinfo, user_id: str | None = None) -> list[dict]:
    corrections = evaluate(tasks, today, tz)
    if not corrections:
        return tasks
    logger.info("Resetting %s daily task(s) for %s", len(corrections), today.isoformat())
    await write_back(corrections, user_id=user_id)
    return apply_corrections(tasks, corrections)
