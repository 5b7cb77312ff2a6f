from __future__ import annotations

import threading
from typing import Callable, Dict


class FetchGuard:
    """Generation counter per fetch key.

    ``begin`` hands out a token; a result is applied only while its token is
    still the latest for that key, so a slow response never overwrites what a
    newer fetch already stored.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._generations: Dict[str, int] = {}

    def begin(self, key: str = "default") -> int:
        with self._lock:
            token = self._generations.get(key, 0) + 1
            self._generations[key] = token
            return token

    def is_current(self, key: str, token: int) -> bool:
        with self._lock:
            return self._generations.get(key, 0) == token

    def apply(self, key: str, token: int, callback: Callable, *args) -> bool:
        with self._lock:
            if self._generations.get(key, 0) != token:
                return False
            callback(*args)
            return True

    def invalidate(self, key: str | None = None) -> None:
        with self._lock:
            keys = [key] if key is not None else list(self._generations)
            for name in keys:
                self._generations[name] = self._generations.get(name, 0) + 1
