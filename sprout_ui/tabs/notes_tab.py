import html
import logging

import streamlit as st

from sprout_ui.constants import LIVE_REFRESH_SECONDS
from sprout_ui.data import repositories
from sprout_ui.data.loaders import run_action
from sprout_ui.live import LiveQuery
from sprout_ui.state import session_slices

logger = logging.getLogger(__name__)

NOTES_KEY = "notes"


def ensure_notes_query(ctx):
    queries = session_slices.get_live_queries()
    query = queries.get(NOTES_KEY)
    if query is not None and query.active:
        return query
    cache = ctx.cache
    query = LiveQuery(NOTES_KEY, lambda items: cache.put(NOTES_KEY, items), guard=ctx.fetch_guard)
    queries[NOTES_KEY] = query.start()
    logger.info("Started live notes query")
    return query


def stop_live_queries():
    queries = session_slices.get_live_queries()
    for query in queries.values():
        query.stop()
    queries.clear()


@st.fragment(run_every=LIVE_REFRESH_SECONDS)
def _render_notes_list(ctx):
    notes = ctx.cache.get(NOTES_KEY)
    if notes is None:
        st.caption("Loading notes…")
        return
    if not notes:
        st.info("No notes yet.")
        return
    for note in notes:
        note_id = note["id"]
        with st.container(border=True):
            cols = st.columns([8, 1, 1])
            cols[0].markdown(f"**{html.escape(note.get('title') or '')}**")
            with cols[1].popover("✏️"):
                title = st.text_input("Title", value=note.get("title") or "", key=f"notes.title.{note_id}")
                content = st.text_area("Content", value=note.get("content") or "", key=f"notes.content.{note_id}")
                if st.button("Save", key=f"notes.save.{note_id}"):
                    _, error = run_action(repositories.update_note, note_id, {"title": title, "content": content})
                    if error:
                        st.error(error)
            if cols[2].button("🗑️", key=f"notes.delete.{note_id}"):
                _, error = run_action(repositories.delete_note, note_id)
                if error:
                    st.error(error)
            if note.get("content"):
                st.markdown(html.escape(note["content"]).replace("\n", "  \n"))


def render_notes_tab(ctx):
    st.markdown("<div class='section-title'>Notes</div>", unsafe_allow_html=True)
    ensure_notes_query(ctx)

    with st.form("notes.create", clear_on_submit=True):
        title = st.text_input("Title")
        content = st.text_area("Content", height=100)
        submitted = st.form_submit_button("Add note")
    if submitted:
        if not title.strip():
            st.warning("Give the note a title.")
        else:
            _, error = run_action(repositories.create_note, title.strip(), content)
            if error:
                st.error(error)

    _render_notes_list(ctx)
