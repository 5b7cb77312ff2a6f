from datetime import date

import streamlit as st

from sprout_ui.auth import app_timezone, get_secret, load_local_env, render_login, restore_session
from sprout_ui.context import DashboardContext
from sprout_ui.data import api_client, repositories
from sprout_ui.data.loaders import guarded_load
from sprout_ui.header import render_global_header
from sprout_ui.logging_config import configure_logging
from sprout_ui.router import render_router
from sprout_ui.state import session_slices
from sprout_ui.tabs.notes_tab import stop_live_queries
from sprout_ui.theme import inject_theme_css

load_local_env()
configure_logging()
st.set_page_config(page_title="Sprout", page_icon="🌱", layout="wide")
inject_theme_css()

session = session_slices.get_session_state()
api_client.configure(get_secret, lambda: session.user_id, app_timezone)

if not api_client.is_enabled():
    st.error("API_BASE_URL and BACKEND_SESSION_SECRET must be configured.")
    st.stop()


def _on_session_change(state):
    # Live queries belong to the signed-in user; drop them on sign-out.
    if not state.get("user") and not state.get("loading"):
        stop_live_queries()
        session_slices.get_snapshot_cache().discard()
        session_slices.clear_slice("overview")


if "session.watch" not in st.session_state:
    st.session_state["session.watch"] = session.subscribe(_on_session_change)

restore_session(session)
if not session.is_authenticated:
    render_login(session)

context = DashboardContext(
    session=session,
    fetch_guard=session_slices.get_fetch_guard(),
    cache=session_slices.get_snapshot_cache(),
)
boot = guarded_load(context, "bootstrap", repositories.bootstrap, default=None)
try:
    today = date.fromisoformat((boot or {}).get("today") or "")
except ValueError:
    today = date.today()
context.payload.update(
    {
        "backend_ok": boot is not None,
        "progress": (boot or {}).get("progress") or {},
        "stats": (boot or {}).get("stats") or {},
        "today": today,
        "timezone": app_timezone(),
    }
)

render_global_header(context)
render_router(context)
