"""
app/pages/comparison.py

Side-by-side comparison of the two selected reports.
"""

from __future__ import annotations

import streamlit as st

from app.context import get_context
from app.renderers import render_comparison
from app.ui import go, inject_theme
from stores.models import ComparisonResult


def render() -> None:
    inject_theme()
    st.title("Report Comparison")

    result = st.session_state.get("comparison_result")
    if not isinstance(result, ComparisonResult):
        st.info("Select two reports on the Reports page to compare them.")
        if st.button("Back to reports"):
            go("reports")
        return

    if st.button("← Back to reports"):
        go("reports", comparison_result=None)

    render_comparison(result, get_context().comparison.titles_for(result))
