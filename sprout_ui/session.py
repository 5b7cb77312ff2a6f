"""Per-browser-session identity holder.

One :class:`SessionState` lives in ``st.session_state`` for each browser
session and is handed to every view through the dashboard context. Views
observe it with :meth:`SessionState.subscribe`, which fires immediately with
the current state and again on every transition.
"""

from __future__ import annotations

import itertools
import logging
import threading
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

SessionListener = Callable[[dict], None]


class SessionState:
    def __init__(self) -> None:
        self._user: Optional[Dict[str, Any]] = None
        self._loading = True
        self._listeners: Dict[int, SessionListener] = {}
        self._ids = itertools.count(1)
        self._lock = threading.RLock()

    @property
    def user(self) -> Optional[Dict[str, Any]]:
        return dict(self._user) if self._user else None

    @property
    def user_id(self) -> Optional[str]:
        return (self._user or {}).get("user_id")

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id)

    def display_name(self) -> str:
        user = self._user or {}
        name = (user.get("display_name") or "").strip()
        if name:
            return name
        email = (user.get("email") or "").strip()
        return email.split("@")[0] if email else "there"

    def snapshot(self) -> dict:
        return {"user": self.user, "loading": self._loading}

    def subscribe(self, callback: SessionListener) -> Callable[[], None]:
        with self._lock:
            listener_id = next(self._ids)
            self._listeners[listener_id] = callback
        self._deliver(callback, self.snapshot())

        def unsubscribe() -> None:
            with self._lock:
                self._listeners.pop(listener_id, None)

        return unsubscribe

    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def set_user(self, user: Optional[Dict[str, Any]]) -> None:
        with self._lock:
            self._user = dict(user) if user else None
            self._loading = False
        self._notify()

    def clear(self) -> None:
        self.set_user(None)

    def set_loading(self, loading: bool) -> None:
        with self._lock:
            if self._loading == bool(loading):
                return
            self._loading = bool(loading)
        self._notify()

    def _notify(self) -> None:
        with self._lock:
            listeners = list(self._listeners.values())
        state = self.snapshot()
        for callback in listeners:
            self._deliver(callback, state)

    @staticmethod
    def _deliver(callback: SessionListener, state: dict) -> None:
        try:
            callback(state)
        except Exception:
            logger.exception("Session listener failed")
