from __future__ import annotations

from datetime import date, timezone
import unittest

from sprout_api.services.gamification import (
    avatar_stage,
    avatar_tier,
    initial_progress,
    level_for,
    level_progress,
    register_visit,
    sync_progress,
    unlocked_achievements,
)
from sprout_api.services.stats import compute_stats
from tests.helpers import make_goal, make_task, utc

TODAY = date(2024, 5, 10)


class TestComputeStats(unittest.TestCase):
    def test_counts_and_rates(self) -> None:
        tasks = [
            make_task("a", completed=True),
            make_task("b"),
            make_task("d1", is_daily=True, completed=True, last_completed_at=utc(2024, 5, 9)),
            make_task("d2", is_daily=True, last_completed_at=utc(2024, 5, 10)),
        ]
        goals = [make_goal("g1", progress=100), make_goal("g2"), make_goal("g3", status="completed")]
        stats = compute_stats(tasks, goals, TODAY, timezone.utc)
        self.assertEqual(4, stats["total_tasks"])
        self.assertEqual(2, stats["completed_tasks"])
        self.assertEqual(2, stats["pending_tasks"])
        self.assertEqual(2, stats["daily_tasks"])
        self.assertEqual(1, stats["completed_daily_tasks"])
        self.assertEqual(2, stats["completed_goals"])
        self.assertEqual(50, stats["task_completion_rate"])
        self.assertEqual(67, stats["goal_completion_rate"])

    def test_empty_rates_are_zero(self) -> None:
        stats = compute_stats([], [], TODAY, timezone.utc)
        self.assertEqual(0, stats["task_completion_rate"])
        self.assertEqual(0, stats["daily_completion_rate"])
        self.assertEqual(0, stats["goal_completion_rate"])


class TestLevels(unittest.TestCase):
    def test_level_and_avatar_tier(self) -> None:
        self.assertEqual(1, level_for(0))
        self.assertEqual(1, level_for(99))
        self.assertEqual(2, level_for(100))
        self.assertEqual(1, avatar_tier(1))
        self.assertEqual(2, avatar_tier(2))
        self.assertEqual(7, avatar_tier(40))
        self.assertEqual("Seed", avatar_stage(1)["name"])
        self.assertEqual("Ancient Tree", avatar_stage(9)["name"])

    def test_level_progress(self) -> None:
        self.assertEqual({"level": 2, "experience": 130, "percentage": 30, "to_next_level": 70}, level_progress(130))


class TestSyncProgress(unittest.TestCase):
    def test_returns_only_changes(self) -> None:
        progress = initial_progress("user-1")
        changes = sync_progress(progress, 12)
        self.assertEqual(120, changes["experience"])
        self.assertEqual(2, changes["level"])
        self.assertEqual(2, changes["avatar_level"])
        self.assertEqual(["first_task", "ten_tasks"], changes["achievements"])
        self.assertEqual({}, sync_progress({**progress, **changes}, 12))

    def test_achievements_are_never_removed(self) -> None:
        self.assertEqual(["week_streak", "first_task"], unlocked_achievements(["week_streak"], 1, 1, 0))


class TestRegisterVisit(unittest.TestCase):
    def test_streak_bookkeeping(self) -> None:
        progress = initial_progress("user-1")
        first = register_visit(progress, TODAY)
        self.assertEqual({"last_login_date": "2024-05-10", "daily_streak": 1}, first)
        progress.update(first)
        self.assertEqual({}, register_visit(progress, TODAY))
        following = register_visit(progress, date(2024, 5, 11))
        self.assertEqual(2, following["daily_streak"])
        progress.update(following)
        self.assertEqual(1, register_visit(progress, date(2024, 5, 20))["daily_streak"])

    def test_week_streak_unlocks(self) -> None:
        progress = {**initial_progress("user-1"), "daily_streak": 6, "last_login_date": "2024-05-09"}
        changes = register_visit(progress, TODAY)
        self.assertEqual(7, changes["daily_streak"])
        self.assertEqual(["week_streak"], changes["achievements"])


if __name__ == "__main__":
    unittest.main()
