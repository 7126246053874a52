"""
app/pages/trackers.py

Condition catalog: every trackable condition with its factors, plus
shortcuts to record a value or browse history.
"""

from __future__ import annotations

import streamlit as st

from app.context import get_context, page_token
from app.ui import card_close, card_open, empty_state, go, inject_theme
from services.errors import VitalTrackError

_ICONS = {
    "blood pressure": "🫀",
    "blood sugar": "🩸",
    "glucose": "🩸",
    "weight": "⚖️",
    "heart": "❤️",
}


def _icon(name: str) -> str:
    lowered = name.lower()
    for keyword, icon in _ICONS.items():
        if keyword in lowered:
            return icon
    return "📋"


def render() -> None:
    inject_theme()
    st.title("Health Trackers")
    st.caption("Pick a condition to record a reading or see your history.")

    ctx = get_context()
    store = ctx.tracking_store
    token = page_token()

    with st.spinner("Loading..."):
        try:
            store.refresh_conditions(token)
        except VitalTrackError as e:
            st.error(f"Failed to fetch medical conditions. {e}")
        try:
            store.refresh_history(token=token)
        except VitalTrackError as e:
            st.error(f"Failed to fetch tracking data. {e}")

    conditions = store.conditions
    if not conditions:
        empty_state("No medical conditions available.")
        return

    cols = st.columns(2, gap="large")
    for index, entry in enumerate(conditions):
        condition = entry.medical_condition
        with cols[index % 2]:
            card_open(f"{_icon(condition.name)} {condition.name}", condition.description)
            for factor in entry.tracking_factors:
                unit = f" ({factor.unit})" if factor.unit else ""
                normal = f" · normal {factor.normal_range}" if factor.normal_range else ""
                st.caption(f"{factor.name}{unit}{normal}")
            card_close()

            c1, c2 = st.columns(2)
            with c1:
                if st.button("Add record", key=f"add_{condition.id}", use_container_width=True):
                    go("add_record", record_condition_id=condition.id, record_edit=None)
            with c2:
                has_history = store.track_for(condition.id) is not None
                if st.button(
                    "History",
                    key=f"hist_{condition.id}",
                    disabled=not has_history,
                    use_container_width=True,
                ):
                    go("tracker_history", history_condition_id=condition.id)
