"""Experience, level, avatar tier, streak and achievements.

The pure helpers compute what a progress record should look like; the async
helpers read and write the single ``progress`` document of a user and only
write when something actually changed.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta

from sprout_api import store
from sprout_api.constants import (
    AVATAR_STAGES,
    AVATAR_TYPE_TREE,
    LEVEL_ACHIEVEMENTS,
    LEVEL_THRESHOLD,
    STREAK_ACHIEVEMENTS,
    TASK_ACHIEVEMENTS,
    XP_PER_TASK,
)
from sprout_api.services.clock import parse_day

logger = logging.getLogger(__name__)


def experience_for(completed_tasks: int) -> int:
    return max(0, int(completed_tasks)) * XP_PER_TASK


def level_for(experience: int) -> int:
    return max(0, int(experience)) // LEVEL_THRESHOLD + 1


def avatar_tier(level: int) -> int:
    return max(1, min(int(level) // 2 + 1, len(AVATAR_STAGES)))


def avatar_stage(tier: int) -> dict:
    index = max(1, min(int(tier or 1), len(AVATAR_STAGES))) - 1
    return AVATAR_STAGES[index]


def level_progress(experience: int) -> dict:
    experience = max(0, int(experience))
    into_level = experience % LEVEL_THRESHOLD
    return {
        "level": level_for(experience),
        "experience": experience,
        "percentage": min(100, round(into_level / LEVEL_THRESHOLD * 100)),
        "to_next_level": LEVEL_THRESHOLD - into_level,
    }


def unlocked_achievements(existing, completed_tasks: int, level: int, streak: int) -> list[str]:
    unlocked = []
    for label in existing or []:
        if label not in unlocked:
            unlocked.append(label)
    candidates = []
    candidates += [label for needed, label in TASK_ACHIEVEMENTS if completed_tasks >= needed]
    candidates += [label for needed, label in LEVEL_ACHIEVEMENTS if level >= needed]
    candidates += [label for needed, label in STREAK_ACHIEVEMENTS if streak >= needed]
    for label in candidates:
        if label not in unlocked:
            unlocked.append(label)
    return unlocked


def initial_progress(user_id: str) -> dict:
    return {
        "user_id": user_id,
        "level": 1,
        "experience": 0,
        "daily_streak": 0,
        "last_login_date": None,
        "avatar_type": AVATAR_TYPE_TREE,
        "avatar_level": 1,
        "achievements": [],
    }


def sync_progress(progress: dict, completed_tasks: int) -> dict:
    experience = experience_for(completed_tasks)
    level = level_for(experience)
    target = {
        "experience": experience,
        "level": level,
        "avatar_level": avatar_tier(level),
        "achievements": unlocked_achievements(
            progress.get("achievements"),
            completed_tasks,
            level,
            int(progress.get("daily_streak") or 0),
        ),
    }
    return {key: value for key, value in target.items() if progress.get(key) != value}


def register_visit(progress: dict, today: date) -> dict:
    last_login = parse_day(progress.get("last_login_date"))
    streak = int(progress.get("daily_streak") or 0)
    if last_login == today:
        return {}
    if last_login is not None and last_login == today - timedelta(days=1):
        streak += 1
    else:
        streak = 1
    changes = {"last_login_date": today.isoformat(), "daily_streak": streak}
    achievements = unlocked_achievements(
        progress.get("achievements"),
        0,
        int(progress.get("level") or 1),
        streak,
    )
    if achievements != list(progress.get("achievements") or []):
        changes["achievements"] = achievements
    return changes


async def ensure_progress(user_id: str) -> dict:
    record = await store.get(store.PROGRESS, user_id)
    if record is not None:
        return record
    logger.info("Creating progress record for %s", user_id)
    try:
        return await store.add(store.PROGRESS, initial_progress(user_id), doc_id=user_id)
    except store.DuplicateDocumentError:
        # A concurrent first request created it in between.
        logger.info("Progress record for %s already created", user_id)
        return await store.get(store.PROGRESS, user_id)


async def record_visit(user_id: str, today: date) -> dict:
    record = await ensure_progress(user_id)
    changes = register_visit(record, today)
    if not changes:
        return record
    return await store.update(store.PROGRESS, user_id, changes) or {**record, **changes}


async def sync_user_progress(user_id: str, completed_tasks: int) -> dict:
    record = await ensure_progress(user_id)
    changes = sync_progress(record, completed_tasks)
    if not changes:
        return record
    logger.info("Updating progress for %s: %s", user_id, sorted(changes))
    return await store.update(store.PROGRESS, user_id, changes) or {**record, **changes}
