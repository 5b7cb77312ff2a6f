from __future__ import annotations

import asyncio
import json
import logging
from datetime import date, tzinfo

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import StreamingResponse

from sprout_api import store
from sprout_api.auth import require_user_id, viewer_timezone, viewer_today
from sprout_api.services.task_view import project_tasks

logger = logging.getLogger(__name__)

router = APIRouter()

LIVE_COLLECTIONS = (store.TASKS, store.GOALS, store.NOTES, store.PROGRESS)
KEEPALIVE_SECONDS = 15.0


def _sse(event: str, payload: dict) -> str:
    return f"event: {event}\ndata: {json.dumps(jsonable_encoder(payload), ensure_ascii=False)}\n\n"


async def _snapshot(collection: str, user_id: str, today: date, tz: tzinfo) -> list[dict]:
    items = await store.query(collection, user_id=user_id)
    if collection == store.TASKS:
        items = project_tasks(items, today, tz)
    return items


@router.get("/v1/live/{collection}")
async def live_collection(
    collection: str,
    request: Request,
    user_id: str = Depends(require_user_id),
    tz: tzinfo = Depends(viewer_timezone),
    today: date = Depends(viewer_today),
):
    if collection not in LIVE_COLLECTIONS:
        raise HTTPException(status_code=404, detail="Unknown collection")

    queue: asyncio.Queue = asyncio.Queue()
    loop = asyncio.get_running_loop()

    def _on_change(event: dict) -> None:
        loop.call_soon_threadsafe(queue.put_nowait, event)

    subscription = store.subscribe(collection, user_id, _on_change)

    async def _stream():
        try:
            items = await _snapshot(collection, user_id, today, tz)
            yield _sse("snapshot", {"collection": collection, "items": items})
            while True:
                if await request.is_disconnected():
                    break
                try:
                    event = await asyncio.wait_for(queue.get(), timeout=KEEPALIVE_SECONDS)
                except asyncio.TimeoutError:
                    yield ": keepalive\n\n"
                    continue
                # Collapse bursts into one snapshot.
                while not queue.empty():
                    event = queue.get_nowait()
                items = await _snapshot(collection, user_id, today, tz)
                yield _sse("snapshot", {"collection": collection, "items": items, "change": event})
        except Exception as exc:
            logger.exception("Live stream for %s failed: %s", collection, exc)
        finally:
            subscription.unsubscribe()
            logger.debug("Live stream for %s/%s closed", collection, user_id)

    return StreamingResponse(
        _stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
