from __future__ import annotations

import logging
import os

import streamlit as st

from sprout_ui.data import repositories
from sprout_ui.data.api_client import ApiError

logger = logging.getLogger(__name__)

ENV_PATH = os.path.join(os.path.dirname(__file__), "..", ".env")
DEFAULT_TIMEZONE = "America/Sao_Paulo"

ENV_FALLBACK_KEYS = {
    ("app", "API_BASE_URL"): "API_BASE_URL",
    ("app", "BACKEND_SESSION_SECRET"): "BACKEND_SESSION_SECRET",
    ("app", "APP_TIMEZONE"): "APP_TIMEZONE",
}


def load_local_env():
    if not os.path.exists(ENV_PATH):
        return
    with open(ENV_PATH, "r", encoding="utf-8") as env_file:
        for raw_line in env_file:
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


def get_secret(path, default=None):
    env_key = ENV_FALLBACK_KEYS.get(tuple(path))
    if env_key:
        env_value = os.getenv(env_key)
        if env_value:
            return env_value
    try:
        current = st.secrets
        for key in path:
            if key not in current:
                return default
            current = current[key]
    except (FileNotFoundError, KeyError, TypeError):
        return default
    return current


def app_timezone():
    return str(get_secret(("app", "APP_TIMEZONE")) or DEFAULT_TIMEZONE).strip()


def federated_login_configured():
    try:
        return bool(st.secrets.get("auth", {}).get("google"))
    except FileNotFoundError:
        return False


def _provider_id_token():
    user = getattr(st, "user", None)
    if user is None or not getattr(user, "is_logged_in", False):
        return None
    tokens = getattr(user, "tokens", None) or {}
    try:
        return tokens.get("id")
    except AttributeError:
        return None


def restore_session(session):
    """Finish a provider login that Streamlit completed on the previous run."""
    if session.is_authenticated:
        return
    id_token = _provider_id_token()
    if not id_token:
        session.set_loading(False)
        return
    try:
        session.set_user(repositories.federated_sign_in(id_token))
    except ApiError as exc:
        logger.error("Federated sign-in failed: %s", exc)
        session.clear()
        st.session_state["auth.error"] = exc.message


def _submit(session, action, email, password):
    if not email.strip() or not password:
        st.session_state["auth.error"] = "Enter your email and password."
        return
    try:
        identity = action(email.strip(), password)
    except ApiError as exc:
        logger.warning("Authentication failed: %s", exc)
        st.session_state["auth.error"] = exc.message
        return
    st.session_state.pop("auth.error", None)
    session.set_user(identity)


def render_login(session):
    st.markdown("<div class='section-title'>Sprout</div>", unsafe_allow_html=True)
    st.caption("Grow your productivity one task at a time.")

    mode = st.segmented_control("Account", ["Sign in", "Create account"], default="Sign in", key="auth.mode")
    with st.form("auth.form", clear_on_submit=False):
        email = st.text_input("Email", key="auth.email")
        password = st.text_input("Password", type="password", key="auth.password")
        submitted = st.form_submit_button(mode or "Sign in")
    if submitted:
        action = repositories.sign_up if mode == "Create account" else repositories.sign_in
        _submit(session, action, email, password)

    if federated_login_configured():
        if st.button("Continue with Google", key="auth.google"):
            st.login("google")

    error = st.session_state.get("auth.error")
    if error:
        st.error(error)
    if session.is_authenticated:
        st.rerun()
    st.stop()


def sign_out(session):
    try:
        repositories.sign_out()
    except ApiError as exc:
        logger.warning("Sign-out call failed: %s", exc)
    session.clear()
    st.session_state.pop("auth.error", None)
    if getattr(getattr(st, "user", None), "is_logged_in", False):
        st.logout()
