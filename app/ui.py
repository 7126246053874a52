# =========================
# app/ui.py
# =========================
from __future__ import annotations

import html

import streamlit as st

from pipelines.health_metrics import status_color


def inject_theme() -> None:
    st.markdown(
        """
<style>
/* ============================================================
   VitalTrack theme
   - Dark navy sidebar
   - Light canvas + white cards
   - Teal accent
   - Status dots (normal / warning / critical)
   ============================================================ */

/* Own router replaces Streamlit's multipage nav */
[data-testid="stSidebarNav"] { display: none !important; }

:root{
  --primary-2: 212 72% 16%;
  --accent: 177 60% 38%;
  --sidebar-text: 210 40% 92%;

  --canvas: #F6F8FB;
  --card: #FFFFFF;
  --border: rgba(15,23,42,0.10);
  --muted: rgba(15,23,42,0.55);
  --text: rgba(15,23,42,0.92);
}

.stApp { background: var(--canvas); }

.stApp, .stMarkdown, .stMarkdown p, .stCaption, .stText, .stAlert, label,
h1, h2, h3, h4, h5, h6, div[data-testid="stMarkdownContainer"] {
  color: var(--text) !important;
}

div.block-container {
  padding-top: 2.2rem;
  padding-bottom: 2.2rem;
}

/* =========================
   Sidebar
   ========================= */
section[data-testid="stSidebar"]{
  background: hsl(var(--primary-2)) !important;
  border-right: 1px solid rgba(255,255,255,0.07);
}
section[data-testid="stSidebar"] *{
  color: hsl(var(--sidebar-text)) !important;
}
section[data-testid="stSidebar"] .stRadio div[role="radiogroup"] > label{
  background: rgba(255,255,255,0.03);
  border: 1px solid rgba(255,255,255,0.08);
  border-radius: 14px;
  padding: 10px 12px;
  margin-bottom: 8px;
}

/* =========================
   Buttons
   ========================= */
.stButton>button{
  border-radius: 12px;
  border: 1px solid rgba(15,23,42,0.14);
}
.stButton>button[kind="primary"]{
  background: hsl(var(--accent)) !important;
  border: 1px solid hsl(var(--accent)) !important;
  color: white !important;
}

/* =========================
   Cards
   ========================= */
.vt-card{
  background: var(--card);
  border: 1px solid var(--border);
  border-radius: 16px;
  padding: 16px 16px;
  margin-bottom: 12px;
}
.vt-title{ font-weight: 800; font-size: 16px; margin-bottom: 2px; color: var(--text); }
.vt-sub{ color: var(--muted); font-size: 13px; margin-bottom: 0px; }
.vt-body{ font-size: 14px; line-height: 1.5; white-space: pre-wrap; color: var(--text); margin-top: 8px; }

.vt-metric-label{ color: var(--muted); font-size: 13px; margin-bottom: 6px; }
.vt-metric-value{ font-size: 30px; font-weight: 900; color: var(--text); line-height: 1.0; }
.vt-metric-foot{ margin-top: 6px; color: var(--muted); font-size: 12px; }

/* =========================
   Status dot
   ========================= */
.vt-dot{
  display:inline-block;
  width: 12px; height: 12px;
  border-radius: 999px;
  vertical-align: middle;
  margin-left: 6px;
}
.vt-empty{
  text-align:center;
  font-style: italic;
  color: var(--muted);
  padding: 20px;
}
</style>
        """,
        unsafe_allow_html=True,
    )


def _esc(x: str) -> str:
    """Escape any user/API-provided strings before injecting into HTML."""
    return html.escape(str(x or ""), quote=True)


def card_open(title: str, subtitle: str = "") -> None:
    sub = f'<div class="vt-sub">{_esc(subtitle)}</div>' if subtitle else ""
    st.markdown(
        f'<div class="vt-card"><div class="vt-title">{_esc(title)}</div>{sub}',
        unsafe_allow_html=True,
    )


def card_close() -> None:
    st.markdown("</div>", unsafe_allow_html=True)


def text_card(title: str, body: str) -> None:
    """A card with a heading and pre-wrapped plain text (escaped)."""
    st.markdown(
        f'<div class="vt-card"><div class="vt-title">{_esc(title)}</div>'
        f'<div class="vt-body">{_esc(body)}</div></div>',
        unsafe_allow_html=True,
    )


def empty_state(message: str) -> None:
    st.markdown(f'<div class="vt-card vt-empty">{_esc(message)}</div>', unsafe_allow_html=True)


def status_dot(status: str) -> str:
    return f'<span class="vt-dot" style="background:{status_color(status)};" title="{_esc(status)}"></span>'


def metric_card(label: str, value: str, foot: str | None = None) -> None:
    """
    metric_card renders plain text only (escaped).
    Render HTML such as status_dot outside of it.
    """
    foot_html = f'<div class="vt-metric-foot">{_esc(foot)}</div>' if foot else ""
    st.markdown(
        f"""
<div class="vt-card">
  <div class="vt-metric-label">{_esc(label)}</div>
  <div class="vt-metric-value">{_esc(value)}</div>
  {foot_html}
</div>
        """,
        unsafe_allow_html=True,
    )


def go(page: str, **state) -> None:
    """Navigate to *page*, stashing any page parameters in session state."""
    for k, v in state.items():
        st.session_state[k] = v
    st.session_state["current_page"] = page
    st.rerun()
