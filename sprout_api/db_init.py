from __future__ import annotations

from sqlalchemy import text as sql_text

from sprout_api.db import get_engine


TASKS_TABLE = "tasks"
GOALS_TABLE = "goals"
NOTES_TABLE = "notes"
PROGRESS_TABLE = "user_progress"


async def init_db():
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {TASKS_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    description TEXT DEFAULT '',
                    status TEXT NOT NULL DEFAULT 'planned',
                    completed INTEGER DEFAULT 0,
                    is_daily INTEGER DEFAULT 0,
                    goal_id TEXT,
                    goal_title TEXT,
                    due_date TEXT,
                    last_completed_at TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {GOALS_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    description TEXT DEFAULT '',
                    target_date TEXT,
                    progress INTEGER DEFAULT 0,
                    completed INTEGER DEFAULT 0,
                    status TEXT NOT NULL DEFAULT 'in_progress',
                    created_at TEXT NOT NULL,
                    updated_at TEXT
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {NOTES_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    content TEXT DEFAULT '',
                    created_at TEXT NOT NULL,
                    updated_at TEXT
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {PROGRESS_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    level INTEGER DEFAULT 1,
                    experience INTEGER DEFAULT 0,
                    daily_streak INTEGER DEFAULT 0,
                    last_login_date TEXT,
                    avatar_type TEXT DEFAULT 'tree',
                    avatar_level INTEGER DEFAULT 1,
                    achievements TEXT DEFAULT '[]',
                    created_at TEXT NOT NULL,
                    updated_at TEXT
                )
                """
            )
        )

    async def ensure_index(index_sql: str) -> None:
        try:
            async with engine.begin() as conn:
                await conn.execute(sql_text(index_sql))
        except Exception:
            return

    await ensure_index(
        f"CREATE INDEX IF NOT EXISTS idx_{TASKS_TABLE}_user_created "
        f"ON {TASKS_TABLE} (user_id, created_at)"
    )
    await ensure_index(
        f"CREATE INDEX IF NOT EXISTS idx_{TASKS_TABLE}_goal "
        f"ON {TASKS_TABLE} (goal_id)"
    )
    await ensure_index(
        f"CREATE INDEX IF NOT EXISTS idx_{GOALS_TABLE}_user_created "
        f"ON {GOALS_TABLE} (user_id, created_at)"
    )
    await ensure_index(
        f"CREATE INDEX IF NOT EXISTS idx_{NOTES_TABLE}_user_created "
        f"ON {NOTES_TABLE} (user_id, created_at)"
    )
