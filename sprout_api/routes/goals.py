from __future__ import annotations

import logging
from datetime import date, tzinfo

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.encoders import jsonable_encoder

from sprout_api import store
from sprout_api.auth import require_user_id, viewer_timezone, viewer_today
from sprout_api.constants import GOAL_COMPLETED, GOAL_FILTER_ALL, GOAL_IN_PROGRESS
from sprout_api.schemas import GoalCreate, GoalPatch
from sprout_api.services.goal_progress import recalculate_goal
from sprout_api.services.task_view import goal_summaries

logger = logging.getLogger(__name__)

router = APIRouter()

RECENT_GOALS_LIMIT = 3


def _normalize_goal_patch(patch: dict) -> dict:
    clean = dict(patch or {})
    if "title" in clean:
        title = (clean.get("title") or "").strip()
        if not title:
            raise HTTPException(status_code=400, detail="Title is required")
        clean["title"] = title
    value = clean.get("target_date")
    if value is not None and hasattr(value, "isoformat"):
        clean["target_date"] = value.isoformat()
    return clean


@router.get("/v1/goals")
async def list_goals(user_id: str = Depends(require_user_id)):
    try:
        items = await store.query(store.GOALS, user_id=user_id)
    except Exception as exc:
        logger.exception("Failed to list goals: %s", exc)
        raise HTTPException(status_code=500, detail="Internal error")
    return {"items": jsonable_encoder(items)}


@router.get("/v1/goals/summary")
async def goals_summary(
    status: str = Query(GOAL_FILTER_ALL),
    user_id: str = Depends(require_user_id),
    tz: tzinfo = Depends(viewer_timezone),
    today: date = Depends(viewer_today),
):
    try:
        goals = await store.query(store.GOALS, user_id=user_id)
        tasks = await store.query(store.TASKS, user_id=user_id)
    except Exception as exc:
        logger.exception("Failed to load goal summary: %s", exc)
        raise HTTPException(status_code=500, detail="Internal error")
    try:
        items = goal_summaries(goals, tasks, today, tz, status_filter=status)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {"items": jsonable_encoder(items)}


@router.get("/v1/goals/recent")
async def recent_goals(
    limit: int = Query(RECENT_GOALS_LIMIT, ge=1, le=50),
    user_id: str = Depends(require_user_id),
):
    try:
        items = await store.query(store.GOALS, user_id=user_id, limit=limit)
    except Exception as exc:
        logger.exception("Failed to list recent goals: %s", exc)
        raise HTTPException(status_code=500, detail="Internal error")
    return {"items": jsonable_encoder(items)}


@router.post("/v1/goals")
async def create_goal(payload: GoalCreate, user_id: str = Depends(require_user_id)):
    clean = _normalize_goal_patch(payload.model_dump())
    try:
        record = await store.add(
            store.GOALS,
            {
                "user_id": user_id,
                "title": clean["title"],
                "description": clean.get("description") or "",
                "target_date": clean.get("target_date"),
                "progress": 0,
                "completed": False,
                "status": GOAL_IN_PROGRESS,
            },
        )
    except Exception as exc:
        logger.exception("Failed to create goal: %s", exc)
        raise HTTPException(status_code=500, detail="Internal error")
    return jsonable_encoder(record)


@router.patch("/v1/goals/{goal_id}")
async def patch_goal(goal_id: str, payload: GoalPatch, user_id: str = Depends(require_user_id)):
    patch = _normalize_goal_patch(payload.model_dump(exclude_unset=True))
    try:
        record = await store.update(store.GOALS, goal_id, patch, user_id=user_id)
    except Exception as exc:
        logger.exception("Failed to update goal: %s", exc)
        raise HTTPException(status_code=500, detail="Internal error")
    if record is None:
        raise HTTPException(status_code=404, detail="Goal not found")
    return jsonable_encoder(record)


@router.post("/v1/goals/{goal_id}/toggle")
async def toggle_goal(goal_id: str, user_id: str = Depends(require_user_id)):
    try:
        goal = await store.get(store.GOALS, goal_id, user_id=user_id)
        if goal is None:
            raise HTTPException(status_code=404, detail="Goal not found")
        done = not goal.get("completed")
        record = await store.update(
            store.GOALS,
            goal_id,
            {"completed": done, "status": GOAL_COMPLETED if done else GOAL_IN_PROGRESS},
            user_id=user_id,
        )
    except HTTPException:
        raise
    except Exception as exc:
        logger.exception("Failed to toggle goal: %s", exc)
        raise HTTPException(status_code=500, detail="Internal error")
    return jsonable_encoder(record)


@router.post("/v1/goals/{goal_id}/recalculate")
async def recalculate(
    goal_id: str,
    user_id: str = Depends(require_user_id),
    tz: tzinfo = Depends(viewer_timezone),
    today: date = Depends(viewer_today),
):
    try:
        goal = await store.get(store.GOALS, goal_id, user_id=user_id)
        if goal is None:
            raise HTTPException(status_code=404, detail="Goal not found")
        record = await recalculate_goal(goal_id, today, tz)
    except HTTPException:
        raise
    except Exception as exc:
        logger.exception("Failed to recalculate goal: %s", exc)
        raise HTTPException(status_code=500, detail="Internal error")
    return jsonable_encoder(record)


@router.delete("/v1/goals/{goal_id}")
async def delete_goal(goal_id: str, user_id: str = Depends(require_user_id)):
    # Linked tasks keep their goal_id and cached goal_title.
    try:
        deleted = await store.delete(store.GOALS, goal_id, user_id=user_id)
    except Exception as exc:
        logger.exception("Failed to delete goal: %s", exc)
        raise HTTPException(status_code=500, detail="Internal error")
    if not deleted:
        raise HTTPException(status_code=404, detail="Goal not found")
    return {"ok": True}
