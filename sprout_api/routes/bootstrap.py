from __future__ import annotations

import logging
from datetime import date, tzinfo

from fastapi import APIRouter, Depends, HTTPException
from fastapi.encoders import jsonable_encoder

from sprout_api import store
from sprout_api.auth import require_user_id, viewer_timezone, viewer_today
from sprout_api.services.daily_reset import reset_daily_tasks
from sprout_api.services.gamification import avatar_stage, level_progress, record_visit, sync_user_progress
from sprout_api.services.stats import compute_stats

logger = logging.getLogger(__name__)

router = APIRouter()


def progress_payload(record: dict) -> dict:
    return {
        **record,
        "level_progress": level_progress(record.get("experience") or 0),
        "avatar_stage": avatar_stage(record.get("avatar_level") or 1),
    }


@router.get("/v1/bootstrap")
async def bootstrap(
    user_id: str = Depends(require_user_id),
    tz: tzinfo = Depends(viewer_timezone),
    today: date = Depends(viewer_today),
):
    try:
        await record_visit(user_id, today)
        tasks = await store.query(store.TASKS, user_id=user_id)
        tasks = await reset_daily_tasks(tasks, today, tz, user_id=user_id)
        goals = await store.query(store.GOALS, user_id=user_id)
        stats = compute_stats(tasks, goals, today, tz)
        progress = await sync_user_progress(user_id, stats["completed_tasks"])
    except Exception as exc:
        logger.exception("Failed to build bootstrap payload: %s", exc)
        raise HTTPException(status_code=500, detail="Internal error")
    return jsonable_encoder(
        {
            "user_id": user_id,
            "today": today.isoformat(),
            "progress": progress_payload(progress),
            "stats": stats,
        }
    )
