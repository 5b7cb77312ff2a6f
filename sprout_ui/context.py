from dataclasses import dataclass, field
from typing import Any, Dict

from sprout_ui.live import SnapshotCache
from sprout_ui.session import SessionState
from sprout_ui.state.fetch_guard import FetchGuard


@dataclass
class DashboardContext:
    session: SessionState
    fetch_guard: FetchGuard = field(default_factory=FetchGuard)
    cache: SnapshotCache = field(default_factory=SnapshotCache)
    payload: Dict[str, Any] = field(default_factory=dict)

    def get(self, key, default=None):
        return self.payload.get(key, default)

    def __getitem__(self, key):
        return self.payload[key]
