from __future__ import annotations

import threading
import unittest

from sprout_ui.data.api_client import ApiError
from sprout_ui.data.loaders import guarded_load, run_action
from sprout_ui.live import LiveQuery, SnapshotCache
from sprout_ui.session import SessionState
from sprout_ui.state.fetch_guard import FetchGuard


class _Context:
    def __init__(self) -> None:
        self.session = SessionState()
        self.fetch_guard = FetchGuard()
        self.cache = SnapshotCache()


class TestSessionState(unittest.TestCase):
    def test_subscribe_fires_immediately_and_on_transitions(self) -> None:
        session = SessionState()
        seen: list[dict] = []
        unsubscribe = session.subscribe(seen.append)
        self.assertEqual([{"user": None, "loading": True}], seen)

        session.set_user({"user_id": "u1", "email": "ana@example.com"})
        self.assertEqual("u1", seen[-1]["user"]["user_id"])
        self.assertFalse(seen[-1]["loading"])
        self.assertEqual("ana", session.display_name())

        unsubscribe()
        unsubscribe()
        session.clear()
        self.assertEqual(2, len(seen))
        self.assertFalse(session.is_authenticated)
        self.assertEqual(0, session.listener_count())

    def test_set_loading_only_notifies_on_change(self) -> None:
        session = SessionState()
        seen: list[dict] = []
        session.subscribe(seen.append)
        session.set_loading(True)
        session.set_loading(False)
        self.assertEqual([True, False], [state["loading"] for state in seen])

    def test_listener_failure_is_contained(self) -> None:
        session = SessionState()

        def broken(state: dict) -> None:
            raise RuntimeError("boom")

        with self.assertLogs("sprout_ui.session", level="ERROR"):
            session.subscribe(broken)
        seen: list[dict] = []
        session.subscribe(seen.append)
        with self.assertLogs("sprout_ui.session", level="ERROR"):
            session.set_user({"user_id": "u1"})
        self.assertEqual("u1", seen[-1]["user"]["user_id"])


class TestFetchGuard(unittest.TestCase):
    def test_late_result_is_discarded(self) -> None:
        guard = FetchGuard()
        applied: list[str] = []
        slow = guard.begin("tasks")
        fast = guard.begin("tasks")
        self.assertTrue(guard.apply("tasks", fast, applied.append, "fresh"))
        self.assertFalse(guard.apply("tasks", slow, applied.append, "stale"))
        self.assertEqual(["fresh"], applied)

    def test_keys_are_independent_and_invalidate(self) -> None:
        guard = FetchGuard()
        tasks = guard.begin("tasks")
        goals = guard.begin("goals")
        self.assertTrue(guard.is_current("tasks", tasks))
        guard.invalidate("goals")
        self.assertFalse(guard.is_current("goals", goals))
        self.assertTrue(guard.is_current("tasks", tasks))
        guard.invalidate()
        self.assertFalse(guard.is_current("tasks", tasks))


class TestLoaders(unittest.TestCase):
    def test_failure_yields_default_and_clears_loading(self) -> None:
        ctx = _Context()

        def failing():
            raise ApiError(500, "Internal error")

        with self.assertLogs("sprout_ui.data.loaders", level="ERROR"):
            result = guarded_load(ctx, "tasks", failing, default=[])
        self.assertEqual([], result)
        self.assertFalse(ctx.session.loading)
        self.assertEqual([], ctx.cache.get("tasks"))

    def test_superseded_fetch_returns_newer_value(self) -> None:
        ctx = _Context()

        def slow_fetch():
            # A newer result lands while this request is in flight.
            token = ctx.fetch_guard.begin("notes")
            ctx.fetch_guard.apply("notes", token, ctx.cache.put, "notes", [{"id": "new"}])
            return [{"id": "old"}]

        self.assertEqual([{"id": "new"}], guarded_load(ctx, "notes", slow_fetch, default=[]))
        self.assertEqual([{"id": "new"}], ctx.cache.get("notes"))

    def test_run_action_reports_message(self) -> None:
        def failing():
            raise ApiError(400, {"detail": "Title is required"})

        with self.assertLogs("sprout_ui.data.loaders", level="ERROR"):
            result, error = run_action(failing)
        self.assertIsNone(result)
        self.assertEqual("Title is required", error)
        self.assertEqual((3, None), run_action(lambda: 3))


class TestLiveQuery(unittest.TestCase):
    def test_snapshots_flow_until_stopped(self) -> None:
        delivered = threading.Event()
        release = threading.Event()
        received: list[list[dict]] = []

        def stream(path, stop_event=None):
            self.assertEqual("/v1/live/notes", path)
            yield "snapshot", {"items": [{"id": "n1"}]}
            release.wait(2)
            yield "snapshot", {"items": [{"id": "n2"}]}

        def on_snapshot(items):
            received.append(items)
            delivered.set()

        query = LiveQuery("notes", on_snapshot, guard=FetchGuard(), stream=stream)
        with query:
            self.assertTrue(delivered.wait(2))
        self.assertFalse(query.active)
        release.set()
        query._thread.join(2)
        self.assertEqual([[{"id": "n1"}]], received)

    def test_deliver_after_stop_is_ignored(self) -> None:
        received: list = []
        query = LiveQuery("notes", received.append, stream=lambda path, stop_event=None: iter(()))
        query.stop()
        self.assertFalse(query.deliver([{"id": "late"}]))
        self.assertEqual([], received)

    def test_rejected_stream_stops_query(self) -> None:
        def stream(path, stop_event=None):
            raise ApiError(403, "User not allowed")
            yield  # pragma: no cover

        query = LiveQuery("notes", lambda items: None, stream=stream)
        with self.assertLogs("sprout_ui.live", level="ERROR"):
            query.start()
            query._thread.join(2)
        self.assertFalse(query.active)


class TestSnapshotCache(unittest.TestCase):
    def test_put_get_discard(self) -> None:
        cache = SnapshotCache()
        self.assertIsNone(cache.get("notes"))
        cache.put("notes", ({"id": "a"},))
        self.assertEqual([{"id": "a"}], cache.get("notes"))
        cache.put("stats", {"total_tasks": 1})
        self.assertEqual({"total_tasks": 1}, cache.get("stats"))
        self.assertIsNotNone(cache.updated_at("notes"))
        cache.discard("notes")
        self.assertIsNone(cache.get("notes"))
        cache.discard()
        self.assertIsNone(cache.get("stats"))


if __name__ == "__main__":
    unittest.main()
