"""In-process change feed for live queries.

Store writes publish a change event after commit; listeners registered for the
same ``(collection, user_id)`` pair are called synchronously. ``subscribe``
returns a :class:`Subscription` handle which must be released by the owner,
either by calling it or by leaving its ``with`` block.
"""

from __future__ import annotations

import itertools
import logging
import threading
from typing import Callable, Dict, Tuple

logger = logging.getLogger(__name__)

Listener = Callable[[dict], None]


class Subscription:
    def __init__(self, hub: "ChangeHub", key: Tuple[str, str], listener_id: int) -> None:
        self._hub = hub
        self._key = key
        self._listener_id = listener_id
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._hub._remove(self._key, self._listener_id)

    def __call__(self) -> None:
        self.unsubscribe()

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unsubscribe()


class ChangeHub:
    def __init__(self) -> None:
        self._listeners: Dict[Tuple[str, str], Dict[int, Listener]] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def subscribe(self, collection: str, user_id: str, callback: Listener) -> Subscription:
        key = (collection, user_id)
        listener_id = next(self._ids)
        with self._lock:
            self._listeners.setdefault(key, {})[listener_id] = callback
        return Subscription(self, key, listener_id)

    def _remove(self, key: Tuple[str, str], listener_id: int) -> None:
        with self._lock:
            listeners = self._listeners.get(key)
            if not listeners:
                return
            listeners.pop(listener_id, None)
            if not listeners:
                del self._listeners[key]

    def listener_count(self, collection: str, user_id: str) -> int:
        with self._lock:
            return len(self._listeners.get((collection, user_id), {}))

    def publish(self, collection: str, user_id: str | None, action: str, doc_id: str) -> int:
        if not user_id:
            return 0
        with self._lock:
            listeners = list(self._listeners.get((collection, user_id), {}).values())
        event = {"collection": collection, "user_id": user_id, "action": action, "id": doc_id}
        delivered = 0
        for callback in listeners:
            try:
                callback(event)
                delivered += 1
            except Exception:
                logger.exception("Live listener failed for %s/%s", collection, user_id)
        return delivered


_hub: ChangeHub | None = None


def get_hub() -> ChangeHub:
    global _hub
    if _hub is None:
        _hub = ChangeHub()
    return _hub
