"""Document store boundary.

Each collection is a table keyed by an opaque ``id`` and owned through a
``user_id`` column. Callers query by owner (and optionally by other equality
fields), ordered by a timestamp field, optionally limited. Every write
publishes a change event on the live hub once committed.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import text as sql_text
from sqlalchemy.exc import IntegrityError

from sprout_api.db import get_sessionmaker
from sprout_api.db_init import GOALS_TABLE, NOTES_TABLE, PROGRESS_TABLE, TASKS_TABLE
from sprout_api.live import Listener, Subscription, get_hub

logger = logging.getLogger(__name__)

TASKS = "tasks"
GOALS = "goals"
NOTES = "notes"
PROGRESS = "progress"

COLLECTIONS = {
    TASKS: {
        "table": TASKS_TABLE,
        "columns": [
            "id", "user_id", "title", "description", "status", "completed", "is_daily",
            "goal_id", "goal_title", "due_date", "last_completed_at", "created_at", "updated_at",
        ],
        "bool_columns": {"completed", "is_daily"},
        "int_columns": set(),
        "json_columns": set(),
    },
    GOALS: {
        "table": GOALS_TABLE,
        "columns": [
            "id", "user_id", "title", "description", "target_date", "progress", "completed",
            "status", "created_at", "updated_at",
        ],
        "bool_columns": {"completed"},
        "int_columns": {"progress"},
        "json_columns": set(),
    },
    NOTES: {
        "table": NOTES_TABLE,
        "columns": ["id", "user_id", "title", "content", "created_at", "updated_at"],
        "bool_columns": set(),
        "int_columns": set(),
        "json_columns": set(),
    },
    PROGRESS: {
        "table": PROGRESS_TABLE,
        "columns": [
            "id", "user_id", "level", "experience", "daily_streak", "last_login_date",
            "avatar_type", "avatar_level", "achievements", "created_at", "updated_at",
        ],
        "bool_columns": set(),
        "int_columns": {"level", "experience", "daily_streak", "avatar_level"},
        "json_columns": {"achievements"},
    },
}

ORDER_FIELDS = {"created_at", "updated_at", "last_completed_at"}
IMMUTABLE_FIELDS = {"id", "user_id", "created_at"}


class UnknownCollectionError(ValueError):
    pass


class UnknownFieldError(ValueError):
    pass


class DuplicateDocumentError(ValueError):
    pass


def _layout(collection: str) -> dict:
    layout = COLLECTIONS.get(collection)
    if layout is None:
        raise UnknownCollectionError(f"Unknown collection: {collection}")
    return layout


def _check_fields(layout: dict, names) -> None:
    unknown = [name for name in names if name not in layout["columns"]]
    if unknown:
        raise UnknownFieldError(f"Unknown field(s): {', '.join(sorted(unknown))}")


def new_id() -> str:
    return uuid4().hex


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _encode_value(layout: dict, key: str, value):
    if value is None:
        return None
    if key in layout["bool_columns"]:
        return int(bool(value))
    if key in layout["int_columns"]:
        return int(value)
    if key in layout["json_columns"]:
        return json.dumps(list(value), ensure_ascii=False)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


def _decode_row(layout: dict, row) -> dict:
    payload = dict(row)
    for key in layout["bool_columns"]:
        payload[key] = bool(int(payload.get(key) or 0))
    for key in layout["int_columns"]:
        if payload.get(key) is not None:
            payload[key] = int(payload[key])
    for key in layout["json_columns"]:
        raw = payload.get(key)
        try:
            decoded = json.loads(raw) if raw else []
        except (TypeError, ValueError):
            decoded = []
        payload[key] = decoded if isinstance(decoded, list) else []
    for key, value in list(payload.items()):
        if isinstance(value, datetime):
            payload[key] = value.isoformat()
    return payload


async def query(
    collection: str,
    user_id: str | None = None,
    where: dict | None = None,
    order_by: str = "created_at",
    descending: bool = True,
    limit: int | None = None,
) -> list[dict]:
    layout = _layout(collection)
    if order_by not in ORDER_FIELDS or order_by not in layout["columns"]:
        raise UnknownFieldError(f"Cannot order by {order_by}")
    clauses = []
    params: dict = {}
    if user_id is not None:
        clauses.append("user_id = :user_id")
        params["user_id"] = user_id
    for key, value in (where or {}).items():
        _check_fields(layout, [key])
        if value is None:
            clauses.append(f"{key} IS NULL")
            continue
        clauses.append(f"{key} = :w_{key}")
        params[f"w_{key}"] = _encode_value(layout, key, value)
    sql = f"SELECT {', '.join(layout['columns'])} FROM {layout['table']}"
    if clauses:
        sql += " WHERE " + " AND ".join(clauses)
    sql += f" ORDER BY {order_by} {'DESC' if descending else 'ASC'}, id"
    if limit is not None and int(limit) > 0:
        sql += " LIMIT :limit"
        params["limit"] = int(limit)
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(sql_text(sql), params)).mappings().all()
    return [_decode_row(layout, row) for row in rows]


async def get(collection: str, doc_id: str, user_id: str | None = None) -> dict | None:
    layout = _layout(collection)
    sql = f"SELECT {', '.join(layout['columns'])} FROM {layout['table']} WHERE id = :id"
    params = {"id": doc_id}
    if user_id is not None:
        sql += " AND user_id = :user_id"
        params["user_id"] = user_id
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(sql_text(sql), params)).mappings().fetchone()
    return _decode_row(layout, row) if row else None


async def add(collection: str, fields: dict, doc_id: str | None = None) -> dict:
    layout = _layout(collection)
    _check_fields(layout, fields.keys())
    if not fields.get("user_id"):
        raise ValueError("Documents require a user_id")
    timestamp = now_iso()
    record = {key: None for key in layout["columns"]}
    record.update(fields)
    record["id"] = doc_id or fields.get("id") or new_id()
    record["created_at"] = fields.get("created_at") or timestamp
    record["updated_at"] = timestamp
    params = {key: _encode_value(layout, key, record[key]) for key in layout["columns"]}
    columns = ", ".join(layout["columns"])
    placeholders = ", ".join(f":{key}" for key in layout["columns"])
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        try:
            await session.execute(
                sql_text(f"INSERT INTO {layout['table']} ({columns}) VALUES ({placeholders})"),
                params,
            )
            await session.commit()
        except IntegrityError as exc:
            await session.rollback()
            raise DuplicateDocumentError(f"{collection}/{record['id']} already exists") from exc
    created = _decode_row(layout, params)
    get_hub().publish(collection, created["user_id"], "added", created["id"])
    return created


async def update(collection: str, doc_id: str, fields: dict, user_id: str | None = None) -> dict | None:
    layout = _layout(collection)
    _check_fields(layout, fields.keys())
    updates = []
    params = {"id": doc_id}
    for key, value in fields.items():
        if key in IMMUTABLE_FIELDS or key == "updated_at":
            continue
        updates.append(f"{key} = :{key}")
        params[key] = _encode_value(layout, key, value)
    if not updates:
        return await get(collection, doc_id, user_id=user_id)
    updates.append("updated_at = :updated_at")
    params["updated_at"] = now_iso()
    sql = f"UPDATE {layout['table']} SET {', '.join(updates)} WHERE id = :id"
    if user_id is not None:
        sql += " AND user_id = :user_id"
        params["user_id"] = user_id
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        result = await session.execute(sql_text(sql), params)
        await session.commit()
    if not result.rowcount:
        return None
    record = await get(collection, doc_id)
    if record:
        get_hub().publish(collection, record["user_id"], "modified", doc_id)
    return record


async def delete(collection: str, doc_id: str, user_id: str | None = None) -> bool:
    layout = _layout(collection)
    existing = await get(collection, doc_id, user_id=user_id)
    if existing is None:
        return False
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(f"DELETE FROM {layout['table']} WHERE id = :id"),
            {"id": doc_id},
        )
        await session.commit()
    get_hub().publish(collection, existing["user_id"], "removed", doc_id)
    return True


def subscribe(collection: str, user_id: str, callback: Listener) -> Subscription:
    _layout(collection)
    return get_hub().subscribe(collection, user_id, callback)
