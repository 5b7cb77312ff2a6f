"""Live collection queries for the dashboard.

A :class:`LiveQuery` follows ``/v1/live/{collection}`` on a daemon thread and
hands every snapshot to its callback. Streamlit reruns cannot be driven from
a background thread, so snapshots land in a :class:`SnapshotCache` and
fragments re-render from there.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional

import requests

from sprout_ui.data import api_client
from sprout_ui.data.api_client import ApiError

logger = logging.getLogger(__name__)

RECONNECT_DELAYS = (1.0, 2.0, 5.0, 10.0, 30.0)


class SnapshotCache:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: Dict[str, Any] = {}
        self._updated: Dict[str, float] = {}

    def put(self, key: str, items) -> None:
        with self._lock:
            self._items[key] = list(items) if isinstance(items, (list, tuple)) else items
            self._updated[key] = time.time()

    def get(self, key: str, default=None):
        with self._lock:
            if key not in self._items:
                return default
            value = self._items[key]
            return list(value) if isinstance(value, list) else value

    def updated_at(self, key: str) -> Optional[float]:
        with self._lock:
            return self._updated.get(key)

    def discard(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._items.clear()
                self._updated.clear()
                return
            self._items.pop(key, None)
            self._updated.pop(key, None)


class LiveQuery:
    def __init__(
        self,
        collection: str,
        on_snapshot: Callable[[List[dict]], Any],
        guard=None,
        stream: Callable | None = None,
    ) -> None:
        self.collection = collection
        self._on_snapshot = on_snapshot
        self._guard = guard
        self._stream = stream or api_client.stream_events
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._active = False
        self._thread: Optional[threading.Thread] = None

    @property
    def active(self) -> bool:
        return self._active

    def start(self) -> "LiveQuery":
        with self._lock:
            if self._active:
                return self
            self._active = True
            self._stop.clear()
            self._thread = threading.Thread(
                target=self._run, name=f"live-{self.collection}", daemon=True
            )
            self._thread.start()
        return self

    def stop(self) -> None:
        with self._lock:
            self._active = False
            self._stop.set()

    def __enter__(self) -> "LiveQuery":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def deliver(self, items: List[dict]) -> bool:
        with self._lock:
            if not self._active:
                return False
            if self._guard is None:
                self._on_snapshot(items)
                return True
            token = self._guard.begin(self.collection)
            return self._guard.apply(self.collection, token, self._on_snapshot, items)

    def _run(self) -> None:
        attempt = 0
        while not self._stop.is_set():
            try:
                for event, payload in self._stream(f"/v1/live/{self.collection}", stop_event=self._stop):
                    if self._stop.is_set():
                        return
                    if event != "snapshot":
                        continue
                    attempt = 0
                    self.deliver(list((payload or {}).get("items") or []))
            except ApiError as exc:
                if exc.status_code in (401, 403, 404):
                    logger.error("Live query for %s rejected: %s", self.collection, exc)
                    self.stop()
                    return
                logger.warning("Live query for %s interrupted: %s", self.collection, exc)
            except requests.RequestException as exc:
                logger.warning("Live query for %s interrupted: %s", self.collection, exc)
            delay = RECONNECT_DELAYS[min(attempt, len(RECONNECT_DELAYS) - 1)]
            attempt += 1
            self._stop.wait(delay)
