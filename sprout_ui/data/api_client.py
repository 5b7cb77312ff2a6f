import json as jsonlib
import logging
import os
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)

_SECRET_GETTER = None
_USER_GETTER = None
_TIMEZONE_GETTER = None


class ApiError(RuntimeError):
    def __init__(self, status_code, detail):
        self.status_code = int(status_code or 0)
        self.detail = detail
        super().__init__(f"API error {self.status_code}: {detail}")

    @property
    def message(self):
        if isinstance(self.detail, dict):
            return str(self.detail.get("detail") or self.detail)
        return str(self.detail or "Request failed")


def _build_session():
    session = requests.Session()
    retry = Retry(
        total=2,
        backoff_factor=0.5,
        status_forcelist=(502, 503, 504),
        allowed_methods=("GET", "POST", "PUT", "PATCH", "DELETE"),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry, pool_connections=10, pool_maxsize=10)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


_SESSION = _build_session()


def configure(secret_getter, user_getter, timezone_getter=None):
    global _SECRET_GETTER, _USER_GETTER, _TIMEZONE_GETTER
    _SECRET_GETTER = secret_getter
    _USER_GETTER = user_getter
    _TIMEZONE_GETTER = timezone_getter


def _get_secret(path, default=None):
    if _SECRET_GETTER is None:
        return default
    return _SECRET_GETTER(path, default)


def api_base_url():
    return (
        _get_secret(("app", "API_BASE_URL"))
        or _get_secret(("API_BASE_URL",))
        or os.getenv("API_BASE_URL")
        or ""
    )


def backend_token():
    return (
        _get_secret(("app", "BACKEND_SESSION_SECRET"))
        or _get_secret(("BACKEND_SESSION_SECRET",))
        or os.getenv("BACKEND_SESSION_SECRET")
        or ""
    )


def is_enabled():
    return bool(api_base_url() and backend_token())


def _url(path):
    base = api_base_url().rstrip("/")
    if not base:
        raise ApiError(0, "API_BASE_URL not configured")
    return f"{base}{path}"


def _headers(authenticated=True):
    token = backend_token()
    if not token:
        raise ApiError(0, "BACKEND_SESSION_SECRET not configured")
    headers = {"X-Backend-Token": token}
    if authenticated:
        user_id = _USER_GETTER() if _USER_GETTER else None
        if not user_id:
            raise ApiError(401, "Missing user id for API request")
        headers["X-User-Id"] = user_id
    timezone_name = _TIMEZONE_GETTER() if _TIMEZONE_GETTER else None
    if timezone_name:
        headers["X-Timezone"] = timezone_name
    return headers


def _error_detail(response):
    try:
        payload = response.json()
    except ValueError:
        return response.text
    if isinstance(payload, dict) and "detail" in payload:
        return payload["detail"]
    return payload


def request(
    method: str,
    path: str,
    params: dict | None = None,
    json: dict | None = None,
    timeout: int = 10,
    authenticated: bool = True,
) -> Any:
    url = _url(path)
    headers = _headers(authenticated)
    try:
        response = _SESSION.request(method, url, params=params, json=json, headers=headers, timeout=timeout)
    except requests.RequestException as exc:
        logger.warning("API request %s %s failed: %s", method, path, exc)
        raise ApiError(0, "Backend unavailable") from exc
    if not response.ok:
        raise ApiError(response.status_code, _error_detail(response))
    if response.status_code == 204:
        return None
    return response.json()


def _parse_event(event_name, data_lines):
    raw = "\n".join(data_lines)
    try:
        payload = jsonlib.loads(raw) if raw else {}
    except ValueError:
        logger.warning("Discarding malformed live event: %s", raw[:200])
        return None
    return event_name or "message", payload


def stream_events(path, params=None, stop_event=None, timeout=(5, 65)):
    """Yield ``(event, payload)`` pairs from a server-sent event stream."""
    url = _url(path)
    headers = _headers(True)
    headers["Accept"] = "text/event-stream"
    try:
        response = _SESSION.get(url, params=params, headers=headers, stream=True, timeout=timeout)
    except requests.RequestException as exc:
        raise ApiError(0, "Backend unavailable") from exc
    with response:
        if not response.ok:
            raise ApiError(response.status_code, _error_detail(response))
        event_name = None
        data_lines = []
        for line in response.iter_lines(decode_unicode=True):
            if stop_event is not None and stop_event.is_set():
                return
            if line is None:
                continue
            if not line:
                if data_lines:
                    parsed = _parse_event(event_name, data_lines)
                    if parsed is not None:
                        yield parsed
                event_name = None
                data_lines = []
                continue
            if line.startswith(":"):
                continue
            field, _, value = line.partition(":")
            value = value[1:] if value.startswith(" ") else value
            if field == "event":
                event_name = value
            elif field == "data":
                data_lines.append(value)
