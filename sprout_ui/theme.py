import streamlit as st

THEME_PRESETS = {
    "light": {
        "bg_main": "#f4f8f1",
        "bg_card": "#ffffff",
        "border": "#b9cdb0",
        "text_main": "#23361f",
        "text_soft": "#55704c",
        "button": "#5e8d52",
        "button_hover": "#4b7541",
        "accent": "#7fb77e",
        "plot_grid": "#d6e3cf",
    },
    "dark": {
        "bg_main": "#0f1610",
        "bg_card": "#18231a",
        "border": "#35503a",
        "text_main": "#e6f1e3",
        "text_soft": "#a9c2a3",
        "button": "#3f6b45",
        "button_hover": "#4f8256",
        "accent": "#9fd39a",
        "plot_grid": "#2c3d2f",
    },
}


def ensure_theme_state():
    if st.session_state.get("ui_theme") not in THEME_PRESETS:
        st.session_state["ui_theme"] = "light"
    return st.session_state["ui_theme"]


def get_active_theme():
    name = ensure_theme_state()
    return name, THEME_PRESETS[name]


def toggle_theme():
    name = ensure_theme_state()
    st.session_state["ui_theme"] = "dark" if name == "light" else "light"


def inject_theme_css():
    _, theme = get_active_theme()
    st.markdown(
        f"""
<style>
:root {{
    --bg-main: {theme['bg_main']};
    --bg-card: {theme['bg_card']};
    --border: {theme['border']};
    --text-main: {theme['text_main']};
    --text-soft: {theme['text_soft']};
    --button: {theme['button']};
    --button-hover: {theme['button_hover']};
    --accent: {theme['accent']};
}}
.stApp {{ background: var(--bg-main); color: var(--text-main); }}
.section-title {{ font-size: 1.4rem; font-weight: 600; margin: 0.4rem 0 0.6rem; color: var(--text-main); }}
.small-label {{ font-size: 0.8rem; text-transform: uppercase; letter-spacing: 0.06em; color: var(--text-soft); }}
.card {{ background: var(--bg-card); border: 1px solid var(--border); border-radius: 10px; padding: 0.8rem 1rem; margin-bottom: 0.6rem; }}
.due-badge {{ border-radius: 6px; padding: 1px 6px; font-size: 0.75rem; color: #1b1b1b; }}
.task-done {{ text-decoration: line-through; color: var(--text-soft); }}
.stButton > button {{ background: var(--button); color: #fff; border: none; }}
.stButton > button:hover {{ background: var(--button-hover); color: #fff; }}
</style>
""",
        unsafe_allow_html=True,
    )
    return theme
