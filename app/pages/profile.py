"""
app/pages/profile.py

User information form (name, contact, weight, height, age, gender).
Saving sends the biometric fields to the backend and opens the overview.
"""

from __future__ import annotations

import streamlit as st

from app.context import get_context
from app.ui import card_close, card_open, go, inject_theme
from services.errors import VitalTrackError

GENDERS = ["Male", "Female", "Other"]


def render() -> None:
    inject_theme()
    st.title("User Information")
    st.caption("Your measurements drive the BMI calculator.")

    ctx = get_context()
    current = ctx.user_info

    card_open("Profile")
    with st.form("profile_form"):
        name = st.text_input("Name", value=current.name if current else "", placeholder="Enter your name")
        email = st.text_input("Email", placeholder="Enter your email")
        phone = st.text_input("Phone Number", placeholder="Enter your phone number")
        c1, c2 = st.columns(2)
        with c1:
            weight = st.text_input(
                "Weight (kg)",
                value=f"{current.weight:g}" if current and current.weight else "",
                placeholder="Enter your weight",
            )
            age = st.text_input(
                "Age", value=str(current.age) if current and current.age else "", placeholder="Enter your age"
            )
        with c2:
            height = st.text_input(
                "Height (cm)",
                value=f"{current.height:g}" if current and current.height else "",
                placeholder="Enter your height",
            )
            gender_idx = GENDERS.index(current.gender) if current and current.gender in GENDERS else None
            gender = st.radio("Gender", GENDERS, index=gender_idx, horizontal=True)
        submitted = st.form_submit_button("Submit", type="primary", use_container_width=True)
    card_close()

    if not submitted:
        return

    form = {
        "name": name,
        "email": email,
        "phone": phone,
        "weight": weight,
        "height": height,
        "age": age,
        "gender": gender or "",
    }
    with st.spinner("Saving..."):
        try:
            ctx.user_info = ctx.user_service.update_user_info(form)
        except VitalTrackError as e:
            st.error(f"Failed to submit user information. {e}")
            return

    go("overview")
