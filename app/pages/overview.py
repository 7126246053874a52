"""
app/pages/overview.py

Overview: BMI card, profile summary and the blood pressure / blood sugar
tracker cards with their latest reading.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

import streamlit as st

from app.context import get_context, page_token
from app.ui import card_close, card_open, go, inject_theme, metric_card, status_dot
from pipelines.health_metrics import (
    INVALID_BMI,
    bmi_category,
    calculate_bmi,
    format_reading,
    latest_entry,
    reading_status,
)
from services.errors import VitalTrackError
from stores.models import UserConditionTrack

logger = logging.getLogger(__name__)

# (card title, keywords matched against condition names)
TRACKER_CARDS = [
    ("Blood Pressure", ("blood pressure",)),
    ("Blood Sugar", ("blood sugar", "glucose")),
]


def _tracker_card(ctx, title: str, track: Optional[UserConditionTrack]) -> None:
    entry = latest_entry(track)
    values = entry.values if entry else []
    factors = []
    if track is not None:
        catalog = ctx.tracking_store.get_condition(track.medical_condition_id)
        factors = catalog.tracking_factors if catalog else []
    status = reading_status(values, factors) if values else "unknown"
    when = entry.recorded_at if entry else None

    card_open(title)
    st.markdown(f"Last Reading: **{format_reading(values)}** {status_dot(status)}", unsafe_allow_html=True)
    st.caption("Last updated: " + (when.strftime("%d %b %Y · %H:%M") if when else "Never"))
    card_close()

    c1, c2 = st.columns(2)
    with c1:
        if st.button("Add record", key=f"add_{title}", use_container_width=True):
            condition = ctx.tracking_store.find_condition(title)
            if condition is None:
                go("trackers")
            else:
                go("add_record", record_condition_id=condition.medical_condition.id, record_edit=None)
    with c2:
        if track is not None and st.button("History", key=f"hist_{title}", use_container_width=True):
            go("tracker_history", history_condition_id=track.medical_condition_id)


def render() -> None:
    inject_theme()
    st.title("BMI Calculator")
    st.caption(datetime.now().strftime("%A, %d %B %Y"))

    ctx = get_context()
    token = page_token()

    with st.spinner("Loading..."):
        try:
            ctx.user_info = ctx.user_service.get_user_info()
        except VitalTrackError as e:
            st.error(f"Failed to fetch user information. {e}")
        try:
            ctx.tracking_store.refresh_history(token=token)
        except VitalTrackError as e:
            st.error(f"Failed to fetch tracking data. {e}")
        try:
            ctx.tracking_store.refresh_conditions(token=token)
        except VitalTrackError as e:
            st.error(f"Failed to fetch medical conditions. {e}")

    info = ctx.user_info
    bmi = calculate_bmi(info.weight, info.height) if info else 0
    category = bmi_category(bmi)

    left, right = st.columns([1, 1.25], gap="large")
    with left:
        metric_card("Your BMI", f"{bmi:.1f}" if bmi > 0 else "--", category)
        if category == INVALID_BMI and st.button("Update my measurements", use_container_width=True):
            go("profile")

    with right:
        card_open("Profile")
        if info:
            st.markdown(
                f"Name: **{info.name or '—'}**  \n"
                f"Age: **{info.age or '—'}**  \n"
                f"Gender: **{info.gender or '—'}**  \n"
                f"Weight: **{info.weight or '—'} kg**  \n"
                f"Height: **{info.height or '—'} cm**"
            )
        else:
            st.caption("No profile yet.")
        card_close()

    st.subheader("Health Trackers")
    cols = st.columns(len(TRACKER_CARDS), gap="large")
    for col, (title, keywords) in zip(cols, TRACKER_CARDS):
        with col:
            _tracker_card(ctx, title, ctx.tracking_store.find_track(*keywords))
