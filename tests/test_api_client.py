from __future__ import annotations

import unittest
from unittest.mock import MagicMock, patch

import requests

from sprout_ui.data import api_client, repositories
from sprout_ui.data.api_client import ApiError


def _response(status_code: int, payload=None, lines=None) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.json.return_value = payload
    response.text = str(payload)
    response.iter_lines.return_value = iter(lines or [])
    response.__enter__.return_value = response
    response.__exit__.return_value = False
    return response


class ApiClientTestCase(unittest.TestCase):
    def setUp(self) -> None:
        secrets = {
            ("app", "API_BASE_URL"): "http://api.test/",
            ("app", "BACKEND_SESSION_SECRET"): "secret",
        }
        self.user_id = "u1"
        api_client.configure(
            lambda path, default=None: secrets.get(tuple(path), default),
            lambda: self.user_id,
            lambda: "America/Sao_Paulo",
        )
        self.session = MagicMock()
        patcher = patch.object(api_client, "_SESSION", self.session)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.addCleanup(api_client.configure, None, None, None)


class TestRequest(ApiClientTestCase):
    def test_sends_identity_and_timezone_headers(self) -> None:
        self.session.request.return_value = _response(200, {"items": [{"id": "t1"}]})
        self.assertEqual([{"id": "t1"}], repositories.list_tasks())
        method, url = self.session.request.call_args.args
        headers = self.session.request.call_args.kwargs["headers"]
        self.assertEqual(("GET", "http://api.test/v1/tasks"), (method, url))
        self.assertEqual("secret", headers["X-Backend-Token"])
        self.assertEqual("u1", headers["X-User-Id"])
        self.assertEqual("America/Sao_Paulo", headers["X-Timezone"])

    def test_auth_calls_do_not_need_a_user(self) -> None:
        self.user_id = None
        self.session.request.return_value = _response(200, {"user_id": "u9"})
        self.assertEqual({"user_id": "u9"}, repositories.sign_in("ana@example.com", "secret1"))
        headers = self.session.request.call_args.kwargs["headers"]
        self.assertNotIn("X-User-Id", headers)
        with self.assertRaises(ApiError) as caught:
            repositories.list_goals()
        self.assertEqual(401, caught.exception.status_code)

    def test_error_response_raises_api_error(self) -> None:
        self.session.request.return_value = _response(401, {"detail": "Sign-in failed. Check your credentials."})
        with self.assertRaises(ApiError) as caught:
            repositories.sign_in("ana@example.com", "wrong")
        self.assertEqual(401, caught.exception.status_code)
        self.assertEqual("Sign-in failed. Check your credentials.", caught.exception.message)

    def test_transport_failure_raises_api_error(self) -> None:
        self.session.request.side_effect = requests.ConnectionError("refused")
        with self.assertLogs("sprout_ui.data.api_client", level="WARNING"):
            with self.assertRaises(ApiError) as caught:
                repositories.get_stats()
        self.assertEqual(0, caught.exception.status_code)

    def test_create_task_serialises_dates(self) -> None:
        from datetime import date

        self.session.request.return_value = _response(200, {"id": "t1"})
        repositories.create_task("Plan", goal_id="g1", due_date=date(2024, 5, 12))
        body = self.session.request.call_args.kwargs["json"]
        self.assertEqual("2024-05-12", body["due_date"])
        self.assertEqual("g1", body["goal_id"])
        self.assertFalse(body["is_daily"])


class TestStreamEvents(ApiClientTestCase):
    def test_parses_server_sent_events(self) -> None:
        self.session.get.return_value = _response(
            200,
            lines=[
                ": keepalive",
                "",
                "event: snapshot",
                'data: {"items": [{"id": "n1"}]}',
                "",
                "event: snapshot",
                "data: not-json",
                "",
            ],
        )
        with self.assertLogs("sprout_ui.data.api_client", level="WARNING"):
            events = list(api_client.stream_events("/v1/live/notes"))
        self.assertEqual([("snapshot", {"items": [{"id": "n1"}]})], events)
        self.assertTrue(self.session.get.call_args.kwargs["stream"])

    def test_rejected_stream_raises(self) -> None:
        self.session.get.return_value = _response(404, {"detail": "Unknown collection"})
        with self.assertRaises(ApiError) as caught:
            list(api_client.stream_events("/v1/live/habits"))
        self.assertEqual(404, caught.exception.status_code)


if __name__ == "__main__":
    unittest.main()
