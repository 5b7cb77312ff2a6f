from __future__ import annotations

import logging
from datetime import date, tzinfo

from fastapi import APIRouter, Depends, HTTPException
from fastapi.encoders import jsonable_encoder

from sprout_api import store
from sprout_api.auth import require_user_id, viewer_timezone, viewer_today
from sprout_api.routes.bootstrap import progress_payload
from sprout_api.services.gamification import ensure_progress, sync_user_progress
from sprout_api.services.stats import compute_stats, count_completed_tasks

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/v1/progress")
async def get_progress(user_id: str = Depends(require_user_id)):
    try:
        record = await ensure_progress(user_id)
    except Exception as exc:
        logger.exception("Failed to load progress: %s", exc)
        raise HTTPException(status_code=500, detail="Internal error")
    return jsonable_encoder(progress_payload(record))


@router.post("/v1/progress/sync")
async def sync_progress(
    user_id: str = Depends(require_user_id),
    tz: tzinfo = Depends(viewer_timezone),
    today: date = Depends(viewer_today),
):
    try:
        tasks = await store.query(store.TASKS, user_id=user_id)
        record = await sync_user_progress(user_id, count_completed_tasks(tasks, today, tz))
    except Exception as exc:
        logger.exception("Failed to sync progress: %s", exc)
        raise HTTPException(status_code=500, detail="Internal error")
    return jsonable_encoder(progress_payload(record))


@router.get("/v1/stats")
async def get_stats(
    user_id: str = Depends(require_user_id),
    tz: tzinfo = Depends(viewer_timezone),
    today: date = Depends(viewer_today),
):
    try:
        tasks = await store.query(store.TASKS, user_id=user_id)
        goals = await store.query(store.GOALS, user_id=user_id)
    except Exception as exc:
        logger.exception("Failed to compute stats: %s", exc)
        raise HTTPException(status_code=500, detail="Internal error")
    return compute_stats(tasks, goals, today, tz)
