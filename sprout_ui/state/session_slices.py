import streamlit as st

from sprout_ui.live import SnapshotCache
from sprout_ui.session import SessionState
from sprout_ui.state.fetch_guard import FetchGuard


PREFIX = "slice"
SHARED_PREFIX = "shared"


def get_slice(slice_name):
    key = f"{PREFIX}.{slice_name}"
    if key not in st.session_state:
        st.session_state[key] = {}
    return st.session_state[key]


def get_value(slice_name, name, default=None):
    payload = get_slice(slice_name)
    return payload.get(name, default)


def set_value(slice_name, name, value):
    payload = get_slice(slice_name)
    payload[name] = value


def clear_slice(slice_name):
    key = f"{PREFIX}.{slice_name}"
    if key in st.session_state:
        del st.session_state[key]


def _shared(name, factory):
    key = f"{SHARED_PREFIX}.{name}"
    if key not in st.session_state:
        st.session_state[key] = factory()
    return st.session_state[key]


def get_session_state() -> SessionState:
    return _shared("session", SessionState)


def get_fetch_guard() -> FetchGuard:
    return _shared("fetch_guard", FetchGuard)


def get_snapshot_cache() -> SnapshotCache:
    return _shared("snapshot_cache", SnapshotCache)


def get_live_queries() -> dict:
    return _shared("live_queries", dict)
