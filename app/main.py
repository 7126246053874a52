"""
app/main.py

VitalTrack — Streamlit entry point.
- Sidebar navigation (Overview / Profile / Reports / Trackers)
- Detail pages (report, comparison, PDF preview, records) reached via go()
- One request scope per visible page; leaving a page ignores its late responses
- Global theme injection
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import streamlit as st
from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

load_dotenv(PROJECT_ROOT / ".env")

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

from app.context import enter_page, get_context  # noqa: E402
from app.ui import inject_theme  # noqa: E402

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="VitalTrack",
    page_icon="🩺",
    layout="wide",
    initial_sidebar_state="expanded",
)

# ---------------------------------------------------------------------------
# Session defaults
# ---------------------------------------------------------------------------
if "current_page" not in st.session_state:
    st.session_state["current_page"] = "overview"

for _key in (
    "selected_report",
    "comparison_result",
    "pdf_preview",
    "record_condition_id",
    "record_edit",
    "history_condition_id",
    "confirm_delete_report",
    "confirm_delete_entry",
):
    st.session_state.setdefault(_key, None)


# ---------------------------------------------------------------------------
# Import helper
# ---------------------------------------------------------------------------
def _import_render(module_name: str):
    mod = __import__(f"app.pages.{module_name}", fromlist=["render"])
    return mod.render


inject_theme()

# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
NAV_OPTIONS = [
    ("Overview", "overview"),
    ("Profile", "profile"),
    ("Reports", "reports"),
    ("Trackers", "trackers"),
]

# detail page -> sidebar entry it belongs to
PARENT_PAGE = {
    "report_detail": "reports",
    "comparison": "reports",
    "pdf_preview": "reports",
    "add_record": "trackers",
    "tracker_history": "trackers",
}

PAGES = {key for _, key in NAV_OPTIONS} | set(PARENT_PAGE)

st.sidebar.title("🩺 VitalTrack")
st.sidebar.markdown("Reports, trackers and BMI in one place.")
st.sidebar.divider()

page_key = st.session_state["current_page"]
if page_key not in PAGES:
    logger.warning("Unknown page %r, falling back to overview", page_key)
    page_key = "overview"

labels = [label for label, _ in NAV_OPTIONS]
keys = [key for _, key in NAV_OPTIONS]
nav_key = PARENT_PAGE.get(page_key, page_key)


def _on_nav() -> None:
    picked = dict(NAV_OPTIONS)[st.session_state["nav_choice"]]
    st.session_state["current_page"] = picked


st.session_state["nav_choice"] = labels[keys.index(nav_key)]
st.sidebar.radio("Navigate", options=labels, key="nav_choice", on_change=_on_nav)

st.sidebar.divider()
st.sidebar.caption("Not a substitute for professional medical advice.")

ctx = get_context()
with st.sidebar.expander("API log"):
    history = list(ctx.client.history)[-20:]
    if not history:
        st.caption("No requests yet.")
    for item in reversed(history):
        status = item.response_status if item.response_status is not None else "—"
        st.caption(f"{item.timestamp:%H:%M:%S} {item.method} {item.url} → {status}")
        if item.error:
            st.caption(f"↳ {item.error}")

# ---------------------------------------------------------------------------
# Page routing
# ---------------------------------------------------------------------------
enter_page(page_key)
_import_render(page_key)()
