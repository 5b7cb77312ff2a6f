from __future__ import annotations

from datetime import date, timezone
from zoneinfo import ZoneInfo
import unittest

from sprout_api.services.daily_reset import (
    Correction,
    apply_corrections,
    completed_today,
    effective_completed,
    evaluate,
)
from tests.helpers import make_task, utc

TODAY = date(2024, 5, 10)


class TestCompletedToday(unittest.TestCase):
    def test_uses_local_calendar_date_not_elapsed_time(self) -> None:
        sao_paulo = ZoneInfo("America/Sao_Paulo")
        # 01:30 UTC on the 10th is still the 9th in Sao Paulo.
        self.assertFalse(completed_today(utc(2024, 5, 10, 1, 30), TODAY, sao_paulo))
        self.assertTrue(completed_today(utc(2024, 5, 10, 1, 30), date(2024, 5, 9), sao_paulo))
        # Late evening yesterday in UTC, a few minutes ago.
        self.assertFalse(completed_today(utc(2024, 5, 9, 23, 59), TODAY, timezone.utc))

    def test_missing_timestamp_is_never_today(self) -> None:
        self.assertFalse(completed_today(None, TODAY, timezone.utc))
        self.assertFalse(completed_today("not-a-date", TODAY, timezone.utc))

    def test_recurring_task_ignores_stored_flag(self) -> None:
        stale = make_task("a", is_daily=True, completed=True, last_completed_at=utc(2024, 5, 9))
        fresh = make_task("b", is_daily=True, completed=False, last_completed_at=utc(2024, 5, 10, 8))
        one_shot = make_task("c", completed=True, last_completed_at=utc(2024, 1, 1))
        self.assertFalse(effective_completed(stale, TODAY, timezone.utc))
        self.assertTrue(effective_completed(fresh, TODAY, timezone.utc))
        self.assertTrue(effective_completed(one_shot, TODAY, timezone.utc))


class TestEvaluate(unittest.TestCase):
    def test_corrections_in_both_directions(self) -> None:
        tasks = [
            make_task("stale", is_daily=True, completed=True, status="completed", last_completed_at=utc(2024, 5, 9)),
            make_task("fresh", is_daily=True, completed=False, last_completed_at=utc(2024, 5, 10, 7)),
            make_task("ok", is_daily=True, completed=False, last_completed_at=None),
            make_task("one-shot", completed=True, last_completed_at=utc(2024, 5, 1)),
        ]
        corrections = evaluate(tasks, TODAY, timezone.utc)
        self.assertEqual(
            [Correction("stale", False, "planned"), Correction("fresh", True, "completed")],
            corrections,
        )

    def test_apply_keeps_last_completed_at(self) -> None:
        task = make_task("stale", is_daily=True, completed=True, last_completed_at=utc(2024, 5, 9))
        corrected = apply_corrections([task], [Correction("stale", False, "planned")])
        self.assertFalse(corrected[0]["completed"])
        self.assertEqual("planned", corrected[0]["status"])
        self.assertEqual(utc(2024, 5, 9), corrected[0]["last_completed_at"])
        self.assertTrue(task["completed"])

    def test_second_pass_over_corrected_set_is_empty(self) -> None:
        tasks = [
            make_task("stale", is_daily=True, completed=True, last_completed_at=utc(2024, 5, 9)),
            make_task("fresh", is_daily=True, completed=False, last_completed_at=utc(2024, 5, 10, 7)),
        ]
        corrected = apply_corrections(tasks, evaluate(tasks, TODAY, timezone.utc))
        self.assertEqual([], evaluate(corrected, TODAY, timezone.utc))


if __name__ == "__main__":
    unittest.main()
