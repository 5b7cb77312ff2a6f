from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest.mock import patch

from sprout_api import db, live
from sprout_api.settings import reset_settings

TEST_SECRET = "test-backend-secret"


class TempDatabase:
    """Points the settings at a throwaway SQLite file for one test."""

    def __init__(self, **extra_env: str) -> None:
        self._tmp = TemporaryDirectory()
        path = Path(self._tmp.name) / "sprout.db"
        env = {
            "DATABASE_URL": f"sqlite+aiosqlite:///{path}",
            "BACKEND_SESSION_SECRET": TEST_SECRET,
            "APP_TIMEZONE": "UTC",
            "ALLOWED_USER_IDS": "",
            "IDENTITY_API_KEY": "",
            "IDENTITY_PROJECT_ID": "",
        }
        env.update(extra_env)
        self._env = patch.dict(os.environ, env)

    def start(self) -> None:
        self._env.start()
        reset_settings()
        db._engine = None
        db._session_factory = None
        live._hub = None

    def stop(self) -> None:
        db._engine = None
        db._session_factory = None
        live._hub = None
        reset_settings()
        self._env.stop()
        self._tmp.cleanup()


def utc(year: int, month: int, day: int, hour: int = 12, minute: int = 0) -> str:
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc).isoformat()


def make_task(task_id: str, **fields) -> dict:
    task = {
        "id": task_id,
        "user_id": "user-1",
        "title": task_id,
        "description": "",
        "status": "planned",
        "completed": False,
        "is_daily": False,
        "goal_id": None,
        "goal_title": None,
        "due_date": None,
        "last_completed_at": None,
        "created_at": utc(2024, 5, 1),
        "updated_at": utc(2024, 5, 1),
    }
    task.update(fields)
    return task


def make_goal(goal_id: str, **fields) -> dict:
    goal = {
        "id": goal_id,
        "user_id": "user-1",
        "title": goal_id,
        "description": "",
        "target_date": None,
        "progress": 0,
        "completed": False,
        "status": "in_progress",
        "created_at": utc(2024, 5, 1),
        "updated_at": utc(2024, 5, 1),
    }
    goal.update(fields)
    return goal
