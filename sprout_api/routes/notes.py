from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.encoders import jsonable_encoder

from sprout_api import store
from sprout_api.auth import require_user_id
from sprout_api.schemas import NoteCreate, NotePatch

logger = logging.getLogger(__name__)

router = APIRouter()


def _clean_title(value: str | None) -> str:
    title = (value or "").strip()
    if not title:
        raise HTTPException(status_code=400, detail="Title is required")
    return title


@router.get("/v1/notes")
async def list_notes(user_id: str = Depends(require_user_id)):
    try:
        items = await store.query(store.NOTES, user_id=user_id)
    except Exception as exc:
        logger.exception("Failed to list notes: %s", exc)
        raise HTTPException(status_code=500, detail="Internal error")
    return {"items": jsonable_encoder(items)}


@router.post("/v1/notes")
async def create_note(payload: NoteCreate, user_id: str = Depends(require_user_id)):
    title = _clean_title(payload.title)
    try:
        record = await store.add(
            store.NOTES,
            {"user_id": user_id, "title": title, "content": payload.content or ""},
        )
    except Exception as exc:
        logger.exception("Failed to create note: %s", exc)
        raise HTTPException(status_code=500, detail="Internal error")
    return jsonable_encoder(record)


@router.patch("/v1/notes/{note_id}")
async def patch_note(note_id: str, payload: NotePatch, user_id: str = Depends(require_user_id)):
    patch = payload.model_dump(exclude_unset=True)
    if "title" in patch:
        patch["title"] = _clean_title(patch["title"])
    try:
        record = await store.update(store.NOTES, note_id, patch, user_id=user_id)
    except Exception as exc:
        logger.exception("Failed to update note: %s", exc)
        raise HTTPException(status_code=500, detail="Internal error")
    if record is None:
        raise HTTPException(status_code=404, detail="Note not found")
    return jsonable_encoder(record)


@router.delete("/v1/notes/{note_id}")
async def delete_note(note_id: str, user_id: str = Depends(require_user_id)):
    try:
        deleted = await store.delete(store.NOTES, note_id, user_id=user_id)
    except Exception as exc:
        logger.exception("Failed to delete note: %s", exc)
        raise HTTPException(status_code=500, detail="Internal error")
    if not deleted:
        raise HTTPException(status_code=404, detail="Note not found")
    return {"ok": True}
