from __future__ import annotations

from datetime import date, timezone
import unittest

from sprout_api.services.goal_progress import count_linked, goal_is_completed, goal_patch, progress_percent
from tests.helpers import make_goal, make_task, utc

TODAY = date(2024, 5, 10)


class TestProgressPercent(unittest.TestCase):
    def test_rounds_half_up(self) -> None:
        self.assertEqual(33, progress_percent(1, 3))
        self.assertEqual(67, progress_percent(2, 3))
        self.assertEqual(50, progress_percent(1, 2))
        self.assertEqual(13, progress_percent(1, 8))  # 12.5
        self.assertEqual(100, progress_percent(4, 4))

    def test_empty_goal_is_zero(self) -> None:
        self.assertEqual(0, progress_percent(0, 0))

    def test_goal_patch(self) -> None:
        self.assertEqual({"progress": 100, "completed": True, "status": "completed"}, goal_patch(100))
        self.assertEqual({"progress": 0, "completed": False, "status": "in_progress"}, goal_patch(0))
        self.assertEqual({"progress": 99, "completed": False, "status": "in_progress"}, goal_patch(99))


class TestCountLinked(unittest.TestCase):
    def test_toggled_task_uses_new_state(self) -> None:
        tasks = [
            make_task("a", goal_id="g", completed=False),
            make_task("b", goal_id="g", completed=True),
        ]
        self.assertEqual((2, 2), count_linked(tasks, TODAY, timezone.utc, toggled_id="a", toggled_state=True))
        self.assertEqual((0, 2), count_linked(tasks, TODAY, timezone.utc, toggled_id="b", toggled_state=False))

    def test_recurring_siblings_count_only_when_done_today(self) -> None:
        tasks = [
            make_task("daily-stale", goal_id="g", is_daily=True, completed=True, last_completed_at=utc(2024, 5, 9)),
            make_task("daily-today", goal_id="g", is_daily=True, completed=False, last_completed_at=utc(2024, 5, 10)),
        ]
        self.assertEqual((1, 2), count_linked(tasks, TODAY, timezone.utc))


class TestGoalIsCompleted(unittest.TestCase):
    def test_any_completion_marker_counts(self) -> None:
        self.assertTrue(goal_is_completed(make_goal("a", completed=True)))
        self.assertTrue(goal_is_completed(make_goal("b", status="completed")))
        self.assertTrue(goal_is_completed(make_goal("c", progress=100)))
        self.assertFalse(goal_is_completed(make_goal("d", progress=80)))


if __name__ == "__main__":
    unittest.main()
