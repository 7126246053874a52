"""
app/pages/report_detail.py

One report: metadata and its analysed description sections.
"""

from __future__ import annotations

import streamlit as st

from app.context import get_context, page_token
from app.renderers import render_report
from app.ui import go, inject_theme
from services.errors import VitalTrackError
from stores.models import Report


def render() -> None:
    inject_theme()

    report = st.session_state.get("selected_report")
    if not isinstance(report, Report):
        st.title("Report")
        st.info("No report selected.")
        if st.button("Back to reports"):
            go("reports")
        return

    st.title(report.title)

    if st.button("← Back to reports"):
        go("reports", selected_report=None)

    render_report(report)

    st.divider()
    confirming = st.session_state.get("confirm_delete_report") == report.report_id
    if not confirming:
        if st.button("Delete report", use_container_width=True):
            st.session_state["confirm_delete_report"] = report.report_id
            st.rerun()
        return

    st.warning("Are you sure you want to delete this report?")
    c1, c2 = st.columns(2)
    with c1:
        if st.button("Delete", type="primary", use_container_width=True):
            st.session_state["confirm_delete_report"] = None
            try:
                with st.spinner("Deleting..."):
                    get_context().report_store.delete(report.report_id, page_token())
            except VitalTrackError as e:
                st.error(f"Failed to delete report. {e}")
            else:
                go("reports", selected_report=None)
    with c2:
        if st.button("Cancel", use_container_width=True):
            st.session_state["confirm_delete_report"] = None
            st.rerun()
