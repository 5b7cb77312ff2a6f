import streamlit as st

from sprout_ui.auth import sign_out
from sprout_ui.constants import AVATAR_EMOJI
from sprout_ui.theme import toggle_theme


def render_global_header(ctx):
    session = ctx.session
    progress = ctx.get("progress") or {}
    backend_ok = ctx.get("backend_ok", True)
    tier = int(progress.get("avatar_level") or 1)
    emoji = AVATAR_EMOJI[max(0, min(tier, len(AVATAR_EMOJI)) - 1)]

    cols = st.columns([6, 2, 1, 1])
    cols[0].markdown(
        f"<div class='section-title'>{emoji} Hi, {session.display_name()}</div>",
        unsafe_allow_html=True,
    )
    cols[1].markdown(
        (
            "<div class='small-label'>"
            f"Level {int(progress.get('level') or 1)} • {int(progress.get('experience') or 0)} XP"
            f" • 🔥 {int(progress.get('daily_streak') or 0)}"
            "</div>"
        ),
        unsafe_allow_html=True,
    )
    if cols[2].button("🌓", key="header.theme", help="Toggle theme"):
        toggle_theme()
        st.rerun()
    if cols[3].button("Sign out", key="header.sign_out"):
        sign_out(session)
        st.rerun()

    if not backend_ok:
        st.warning("Backend warming up… data may take a moment to appear.")
