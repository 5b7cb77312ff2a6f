from __future__ import annotations

import logging
from datetime import date, tzinfo

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.encoders import jsonable_encoder

from sprout_api import store
from sprout_api.auth import require_user_id, viewer_timezone, viewer_today
from sprout_api.constants import FILTER_ALL, STATUS_COMPLETED, STATUS_PLANNED, VIEW_ALL
from sprout_api.schemas import TaskCreate, TaskPatch
from sprout_api.services.daily_reset import effective_completed, reset_daily_tasks
from sprout_api.services.goal_progress import recalculate_goal
from sprout_api.services.task_view import build_view, project_tasks, sort_tasks, tasks_created_on

logger = logging.getLogger(__name__)

router = APIRouter()

RECENT_TASKS_LIMIT = 5


def _normalize_task_patch(patch: dict) -> dict:
    clean = dict(patch or {})
    if "title" in clean:
        title = (clean.get("title") or "").strip()
        if not title:
            raise HTTPException(status_code=400, detail="Title is required")
        clean["title"] = title
    value = clean.get("due_date")
    if value is not None and hasattr(value, "isoformat"):
        clean["due_date"] = value.isoformat()
    return clean


async def _goal_title(user_id: str, goal_id: str | None) -> str | None:
    if not goal_id:
        return None
    goal = await store.get(store.GOALS, goal_id, user_id=user_id)
    return goal.get("title") if goal else None


async def _fresh_tasks(user_id: str, today: date, tz: tzinfo) -> list[dict]:
    tasks = await store.query(store.TASKS, user_id=user_id)
    return await reset_daily_tasks(tasks, today, tz, user_id=user_id)


@router.get("/v1/tasks")
async def list_tasks(
    user_id: str = Depends(require_user_id),
    tz: tzinfo = Depends(viewer_timezone),
    today: date = Depends(viewer_today),
):
    try:
        tasks = await _fresh_tasks(user_id, today, tz)
        items = sort_tasks(project_tasks(tasks, today, tz), today)
    except Exception as exc:
        logger.exception("Failed to list tasks: %s", exc)
        raise HTTPException(status_code=500, detail="Internal error")
    return {"items": jsonable_encoder(items)}


@router.get("/v1/tasks/view")
async def task_view(
    mode: str = Query(VIEW_ALL),
    goal_id: str | None = Query(None),
    completion: str = Query(FILTER_ALL),
    limit: int | None = Query(None, ge=1),
    user_id: str = Depends(require_user_id),
    tz: tzinfo = Depends(viewer_timezone),
    today: date = Depends(viewer_today),
):
    try:
        tasks = await _fresh_tasks(user_id, today, tz)
    except Exception as exc:
        logger.exception("Failed to load tasks for view: %s", exc)
        raise HTTPException(status_code=500, detail="Internal error")
    try:
        view = build_view(tasks, today, tz, mode=mode, goal_id=goal_id, completion=completion, limit=limit)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return jsonable_encoder(view.as_dict())


@router.get("/v1/tasks/recent")
async def recent_tasks(
    limit: int = Query(RECENT_TASKS_LIMIT, ge=1, le=50),
    user_id: str = Depends(require_user_id),
    tz: tzinfo = Depends(viewer_timezone),
    today: date = Depends(viewer_today),
):
    try:
        tasks = await store.query(store.TASKS, user_id=user_id, limit=limit)
        items = project_tasks(tasks, today, tz)
    except Exception as exc:
        logger.exception("Failed to list recent tasks: %s", exc)
        raise HTTPException(status_code=500, detail="Internal error")
    return {"items": jsonable_encoder(items)}


@router.get("/v1/tasks/calendar")
async def calendar_tasks(
    day: date | None = Query(None),
    user_id: str = Depends(require_user_id),
    tz: tzinfo = Depends(viewer_timezone),
    today: date = Depends(viewer_today),
):
    selected = day or today
    try:
        tasks = await store.query(store.TASKS, user_id=user_id)
        items = project_tasks(tasks_created_on(tasks, selected, tz), today, tz)
    except Exception as exc:
        logger.exception("Failed to list calendar tasks: %s", exc)
        raise HTTPException(status_code=500, detail="Internal error")
    return {"day": selected.isoformat(), "items": jsonable_encoder(items)}


@router.post("/v1/tasks")
async def create_task(payload: TaskCreate, user_id: str = Depends(require_user_id)):
    clean = _normalize_task_patch(payload.model_dump())
    try:
        record = await store.add(
            store.TASKS,
            {
                "user_id": user_id,
                "title": clean["title"],
                "description": clean.get("description") or "",
                "status": STATUS_PLANNED,
                "completed": False,
                "is_daily": bool(clean.get("is_daily")),
                "goal_id": clean.get("goal_id") or None,
                "goal_title": await _goal_title(user_id, clean.get("goal_id")),
                "due_date": clean.get("due_date"),
                "last_completed_at": None,
            },
        )
    except Exception as exc:
        logger.exception("Failed to create task: %s", exc)
        raise HTTPException(status_code=500, detail="Internal error")
    return jsonable_encoder(record)


@router.patch("/v1/tasks/{task_id}")
async def patch_task(task_id: str, payload: TaskPatch, user_id: str = Depends(require_user_id)):
    patch = _normalize_task_patch(payload.model_dump(exclude_unset=True))
    try:
        if "goal_id" in patch:
            patch["goal_id"] = patch["goal_id"] or None
            patch["goal_title"] = await _goal_title(user_id, patch["goal_id"])
        record = await store.update(store.TASKS, task_id, patch, user_id=user_id)
    except Exception as exc:
        logger.exception("Failed to update task: %s", exc)
        raise HTTPException(status_code=500, detail="Internal error")
    if record is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return jsonable_encoder(record)


@router.post("/v1/tasks/{task_id}/toggle")
async def toggle_task(
    task_id: str,
    user_id: str = Depends(require_user_id),
    tz: tzinfo = Depends(viewer_timezone),
    today: date = Depends(viewer_today),
):
    try:
        task = await store.get(store.TASKS, task_id, user_id=user_id)
    except Exception as exc:
        logger.exception("Failed to load task: %s", exc)
        raise HTTPException(status_code=500, detail="Internal error")
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")

    new_state = not effective_completed(task, today, tz)
    try:
        record = await store.update(
            store.TASKS,
            task_id,
            {
                "completed": new_state,
                "status": STATUS_COMPLETED if new_state else STATUS_PLANNED,
                "last_completed_at": store.now_iso() if new_state else None,
            },
            user_id=user_id,
        )
    except Exception as exc:
        logger.exception("Failed to toggle task: %s", exc)
        raise HTTPException(status_code=500, detail="Internal error")
    if record is None:
        raise HTTPException(status_code=404, detail="Task not found")

    goal = None
    if task.get("goal_id"):
        try:
            goal = await recalculate_goal(
                task["goal_id"], today, tz, toggled_id=task_id, toggled_state=new_state
            )
        except Exception as exc:
            logger.exception("Failed to recalculate goal %s: %s", task["goal_id"], exc)
    return jsonable_encoder({"task": record, "goal": goal})


@router.delete("/v1/tasks/{task_id}")
async def delete_task(task_id: str, user_id: str = Depends(require_user_id)):
    try:
        deleted = await store.delete(store.TASKS, task_id, user_id=user_id)
    except Exception as exc:
        logger.exception("Failed to delete task: %s", exc)
        raise HTTPException(status_code=500, detail="Internal error")
    if not deleted:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"ok": True}
