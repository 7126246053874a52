"""
app/pages/add_record.py

Record (or edit) one combined entry for a condition: one numeric input per
tracking factor, required factors marked with *.
"""

from __future__ import annotations

import logging

import streamlit as st

from app.context import get_context, page_token
from app.ui import card_close, card_open, go, inject_theme
from services.errors import ValidationError, VitalTrackError
from stores.models import CombinedTracking

logger = logging.getLogger(__name__)


def render() -> None:
    inject_theme()

    ctx = get_context()
    store = ctx.tracking_store
    condition_id = st.session_state.get("record_condition_id")
    editing = st.session_state.get("record_edit")
    if not isinstance(editing, CombinedTracking):
        editing = None

    if condition_id and store.get_condition(condition_id) is None:
        try:
            store.refresh_conditions(page_token())
        except VitalTrackError as e:
            st.error(f"Failed to fetch medical conditions. {e}")

    entry = store.get_condition(condition_id) if condition_id else None
    if entry is None:
        st.title("Add Record")
        st.info("Pick a condition on the Trackers page first.")
        if st.button("Go to trackers"):
            go("trackers")
        return

    condition = entry.medical_condition
    st.title(("Edit " if editing else "Add ") + condition.name)
    st.caption("Fields marked * are required.")

    existing = {v.tracking_factor_id: v.value for v in editing.values} if editing else {}

    card_open(condition.name, condition.description)
    with st.form("record_form"):
        raw_values = {}
        for factor in entry.tracking_factors:
            label = factor.name + (f" ({factor.unit})" if factor.unit else "") + (" *" if factor.is_required else "")
            current = existing.get(factor.id)
            raw_values[factor.id] = st.text_input(
                label,
                value=f"{current:g}" if current is not None else "",
                placeholder=f"Normal range: {factor.normal_range}" if factor.normal_range else "",
                help=factor.description or None,
                key=f"factor_{factor.id}",
            )
        submitted = st.form_submit_button("Save", type="primary", use_container_width=True)
    card_close()

    if st.button("Cancel", use_container_width=True):
        go("tracker_history" if editing else "trackers", record_edit=None, history_condition_id=condition.id)

    if not submitted:
        return

    values = [{"id": fid, "value": raw} for fid, raw in raw_values.items() if raw.strip()]
    try:
        with st.spinner("Saving..."):
            if editing:
                store.update_entry(condition.id, editing.combined_tracking_id, values)
            else:
                store.save_entry(condition.id, values)
    except ValidationError as e:
        st.error(str(e))
        return
    except VitalTrackError as e:
        st.error(f"Failed to save record. {e}")
        return

    st.session_state["record_saved"] = True
    go("tracker_history", record_edit=None, history_condition_id=condition.id)
