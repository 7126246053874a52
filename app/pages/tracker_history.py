"""
app/pages/tracker_history.py

History for one condition: optional date filter, entries grouped by day,
edit and delete (with confirmation).
"""

from __future__ import annotations

import logging
from datetime import datetime, time

import streamlit as st

from app.context import get_context, page_token
from app.ui import card_close, card_open, empty_state, go, inject_theme, status_dot
from pipelines.health_metrics import format_reading, group_entries_by_date, reading_status
from services.errors import VitalTrackError

logger = logging.getLogger(__name__)


def _date_filter():
    with st.expander("Filter by date"):
        c1, c2 = st.columns(2)
        start = c1.date_input("From", value=None, key="history_start")
        end = c2.date_input("To", value=None, key="history_end")
    start_dt = datetime.combine(start, time.min) if start else None
    end_dt = datetime.combine(end, time.max) if end else None
    return start_dt, end_dt


def render() -> None:
    inject_theme()

    ctx = get_context()
    store = ctx.tracking_store
    condition_id = st.session_state.get("history_condition_id")
    token = page_token()

    if st.session_state.pop("record_saved", False):
        st.success("Record saved.")

    start, end = _date_filter()
    if start and end and start > end:
        st.error("The start date must be before the end date.")
        return

    with st.spinner("Loading history..."):
        try:
            store.refresh_history(start, end, token)
        except VitalTrackError as e:
            st.error(f"Failed to fetch tracking data. {e}")
        if not store.conditions:
            try:
                store.refresh_conditions(token)
            except VitalTrackError as e:
                st.error(f"Failed to fetch medical conditions. {e}")

    track = store.track_for(condition_id) if condition_id else None
    catalog = store.get_condition(condition_id) if condition_id else None
    name = track.medical_condition_name if track else (catalog.medical_condition.name if catalog else "Tracker")
    st.title(f"{name} History")

    b1, b2 = st.columns(2)
    with b1:
        if condition_id and st.button("Add record", type="primary", use_container_width=True):
            go("add_record", record_condition_id=condition_id, record_edit=None)
    with b2:
        if st.button("← Back to trackers", use_container_width=True):
            go("trackers")

    if track is None or not track.condition_values:
        empty_state("No records yet.")
        return

    factors = catalog.tracking_factors if catalog else []
    pending_delete = st.session_state.get("confirm_delete_entry")

    for day, entries in group_entries_by_date(track.condition_values).items():
        st.subheader(day.strftime("%A, %d %B %Y") if day else "Undated")
        for entry in entries:
            cid = entry.combined_tracking_id
            when = entry.recorded_at
            card_open(format_reading(entry.values), when.strftime("%H:%M") if when else "")
            st.markdown(
                "  \n".join(f"{v.name}: **{v.value:g}** {v.unit}".rstrip() for v in entry.values)
                + " "
                + status_dot(reading_status(entry.values, factors)),
                unsafe_allow_html=True,
            )
            card_close()

            c1, c2 = st.columns(2)
            with c1:
                if st.button("Edit", key=f"edit_{cid}", use_container_width=True):
                    go("add_record", record_condition_id=track.medical_condition_id, record_edit=entry)
            with c2:
                if st.button("Delete", key=f"del_{cid}", use_container_width=True):
                    st.session_state["confirm_delete_entry"] = cid
                    st.rerun()

            if pending_delete == cid:
                st.warning("Are you sure you want to delete this entry?")
                d1, d2 = st.columns(2)
                with d1:
                    if st.button("Delete", key=f"del_yes_{cid}", type="primary", use_container_width=True):
                        st.session_state["confirm_delete_entry"] = None
                        try:
                            with st.spinner("Deleting..."):
                                store.delete_entry(track.medical_condition_id, cid, token)
                        except VitalTrackError as e:
                            st.error(f"Failed to delete entry. {e}")
                        else:
                            if store.error:
                                st.warning(f"Entry deleted, but the history could not be refreshed. {store.error}")
                            else:
                                st.rerun()
                with d2:
                    if st.button("Cancel", key=f"del_no_{cid}", use_container_width=True):
                        st.session_state["confirm_delete_entry"] = None
                        st.rerun()
