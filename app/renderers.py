# app/renderers.py
from __future__ import annotations

import streamlit as st

from app.ui import empty_state, text_card
from pipelines.comparison import EMPTY_COMPARISON_MESSAGE, visible_sections
from stores.models import ComparisonResult, Report


def _fmt_dt(dt) -> str:
    return dt.strftime("%d %b %Y · %H:%M") if dt is not None else "—"


def render_report(report: Report) -> None:
    """
    Render one report: metadata, then every non-blank description section.
    Never shows raw JSON.
    """
    c1, c2, c3 = st.columns(3)
    c1.caption(f"Created: {_fmt_dt(report.created_at)}")
    c2.caption(f"Updated: {_fmt_dt(report.updated_at)}")
    c3.caption(f"Report ID: {report.report_id}")

    sections = report.description.sections()
    if not sections:
        empty_state("No description available for this report.")
    for heading, body in sections:
        text_card(heading, body)

    if report.report_url:
        st.link_button("Download report", report.report_url)


def render_comparison(result: ComparisonResult, titles: list[str]) -> None:
    """
    Render a comparison. Blank fields are skipped; with nothing to show the
    explicit empty state is rendered instead of empty sections.
    """
    if len(titles) == 2:
        st.caption("Comparing: " + " vs ".join(titles))
        left, mid, right = st.columns([1, 0.2, 1])
        left.markdown(f"**Report 1**  \n{titles[0]}")
        mid.markdown("**VS**")
        right.markdown(f"**Report 2**  \n{titles[1]}")

    sections = visible_sections(result)
    if not sections:
        empty_state(EMPTY_COMPARISON_MESSAGE)
        return
    for heading, body in sections:
        text_card(heading, body)
