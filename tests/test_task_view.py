from __future__ import annotations

from datetime import date, timezone
import unittest

from sprout_api.services.task_view import (
    build_view,
    due_date_status,
    filter_tasks,
    goal_summaries,
    sort_tasks,
    tasks_created_on,
)
from tests.helpers import make_goal, make_task, utc

TODAY = date(2024, 5, 10)


class TestSortOrder(unittest.TestCase):
    def test_overdue_today_future_undated_then_completed(self) -> None:
        tasks = [
            make_task("E", completed=True, due_date="2024-05-08"),
            make_task("D"),
            make_task("C", due_date="2024-05-13"),
            make_task("B", due_date="2024-05-10"),
            make_task("A", due_date="2024-05-09"),
        ]
        ordered = sort_tasks(tasks, TODAY)
        self.assertEqual(["A", "B", "C", "D", "E"], [task["id"] for task in ordered])

    def test_undated_tasks_newest_first(self) -> None:
        tasks = [
            make_task("old", created_at=utc(2024, 5, 1)),
            make_task("new", created_at=utc(2024, 5, 9)),
        ]
        self.assertEqual(["new", "old"], [task["id"] for task in sort_tasks(tasks, TODAY)])


class TestFilters(unittest.TestCase):
    def setUp(self) -> None:
        self.tasks = [
            make_task("daily", is_daily=True, completed=True),
            make_task("linked", goal_id="g1", goal_title="Run"),
            make_task("other", completed=True),
        ]

    def test_view_modes(self) -> None:
        self.assertEqual(["daily"], [t["id"] for t in filter_tasks(self.tasks, mode="daily")])
        self.assertEqual(["linked"], [t["id"] for t in filter_tasks(self.tasks, mode="goal", goal_id="g1")])

    def test_goal_filter_in_all_mode_and_completion(self) -> None:
        self.assertEqual(["linked"], [t["id"] for t in filter_tasks(self.tasks, goal_id="g1")])
        self.assertEqual(["daily", "other"], [t["id"] for t in filter_tasks(self.tasks, completion="completed")])
        self.assertEqual(["linked"], [t["id"] for t in filter_tasks(self.tasks, completion="pending")])

    def test_goal_mode_without_goal_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            filter_tasks(self.tasks, mode="goal")
        with self.assertRaises(ValueError):
            filter_tasks(self.tasks, mode="weekly")
        with self.assertRaises(ValueError):
            filter_tasks(self.tasks, completion="maybe")


class TestBuildView(unittest.TestCase):
    def test_all_mode_groups_daily_goals_and_other(self) -> None:
        tasks = [
            make_task("d1", is_daily=True, goal_id="g1", last_completed_at=utc(2024, 5, 10)),
            make_task("t1", goal_id="g2", goal_title="Read", created_at=utc(2024, 5, 5)),
            make_task("t2", goal_id="g1", goal_title="Run", created_at=utc(2024, 5, 4)),
            make_task("t3", goal_id="g2", goal_title="Read", completed=True),
            make_task("t4", goal_id="g3"),
            make_task("loose"),
        ]
        view = build_view(tasks, TODAY, timezone.utc)
        payload = view.as_dict()

        self.assertTrue(payload["grouped"])
        self.assertEqual(["d1"], [t["id"] for t in payload["daily"]])
        self.assertTrue(payload["daily"][0]["completed"])
        groups = payload["goal_groups"]
        self.assertEqual(["g2", "g1", "g3"], [g["goal_id"] for g in groups])
        self.assertEqual("Untitled", groups[2]["goal_title"])
        self.assertEqual(["t1", "t3"], [t["id"] for t in groups[0]["tasks"]])
        self.assertEqual(50, groups[0]["percentage"])
        self.assertEqual(["loose"], [t["id"] for t in payload["other"]])
        self.assertEqual(6, payload["counts"]["total"])

    def test_goal_progress_ignores_completion_filter(self) -> None:
        tasks = [
            make_task("done", goal_id="g1", goal_title="Run", completed=True),
            make_task("p1", goal_id="g1", goal_title="Run"),
            make_task("p2", goal_id="g1", goal_title="Run"),
            make_task("p3", goal_id="g1", goal_title="Run"),
        ]
        for completion, shown in (("pending", 3), ("completed", 1)):
            with self.subTest(completion=completion):
                group = build_view(tasks, TODAY, timezone.utc, completion=completion).as_dict()["goal_groups"][0]
                self.assertEqual(shown, len(group["tasks"]))
                self.assertEqual((1, 4, 25), (group["completed"], group["total"], group["percentage"]))

    def test_goal_progress_ignores_limit(self) -> None:
        tasks = [make_task(f"t{i}", goal_id="g1", completed=i == 0) for i in range(4)]
        group = build_view(tasks, TODAY, timezone.utc, limit=1).as_dict()["goal_groups"][0]
        self.assertEqual(["t1"], [t["id"] for t in group["tasks"]])
        self.assertEqual(25, group["percentage"])

    def test_other_modes_are_flat_and_limit_applies(self) -> None:
        tasks = [make_task(f"t{i}", is_daily=True, created_at=utc(2024, 5, i + 1)) for i in range(4)]
        view = build_view(tasks, TODAY, timezone.utc, mode="daily", limit=2)
        self.assertFalse(view.grouped)
        self.assertEqual(["t3", "t2"], [t["id"] for t in view.items])

    def test_build_view_does_not_mutate_input(self) -> None:
        task = make_task("d", is_daily=True, completed=True, last_completed_at=utc(2024, 5, 1))
        build_view([task], TODAY, timezone.utc)
        self.assertTrue(task["completed"])


class TestSupplements(unittest.TestCase):
    def test_due_date_status(self) -> None:
        self.assertEqual("none", due_date_status(make_task("a"), TODAY))
        self.assertEqual("overdue", due_date_status(make_task("a", due_date="2024-05-09"), TODAY))
        self.assertEqual("today", due_date_status(make_task("a", due_date="2024-05-10"), TODAY))
        self.assertEqual("soon", due_date_status(make_task("a", due_date="2024-05-12"), TODAY))
        self.assertEqual("future", due_date_status(make_task("a", due_date="2024-05-13"), TODAY))
        self.assertEqual("completed", due_date_status(make_task("a", due_date="2024-05-01", completed=True), TODAY))

    def test_tasks_created_on_local_day(self) -> None:
        tasks = [make_task("a", created_at=utc(2024, 5, 10, 1)), make_task("b", created_at=utc(2024, 5, 10, 15))]
        self.assertEqual(["a", "b"], [t["id"] for t in tasks_created_on(tasks, TODAY, timezone.utc)])

    def test_goal_summaries_counts_and_filter(self) -> None:
        goals = [make_goal("g1"), make_goal("g2", completed=True, status="completed", progress=100)]
        tasks = [
            make_task("a", goal_id="g1", completed=True),
            make_task("b", goal_id="g1"),
            make_task("c", goal_id="g1"),
        ]
        summaries = goal_summaries(goals, tasks, TODAY, timezone.utc)
        self.assertEqual(3, summaries[0]["tasks_count"])
        self.assertEqual(1, summaries[0]["completed_tasks_count"])
        self.assertEqual(33, summaries[0]["linked_progress"])
        self.assertEqual(0, summaries[1]["tasks_count"])
        self.assertEqual(["g1"], [g["id"] for g in goal_summaries(goals, tasks, TODAY, timezone.utc, "active")])
        self.assertEqual(["g2"], [g["id"] for g in goal_summaries(goals, tasks, TODAY, timezone.utc, "completed")])


if __name__ == "__main__":
    unittest.main()
