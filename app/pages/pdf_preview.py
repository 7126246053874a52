"""
app/pages/pdf_preview.py

Review a picked PDF before it is uploaded.
Confirm uploads it and opens the new report; Cancel discards it.
"""

from __future__ import annotations

import base64
import logging

import streamlit as st

from app.ui import card_close, card_open, go, inject_theme
from pipelines.pdf_preview import PdfPreview, PreviewState
from services.errors import VitalTrackError

logger = logging.getLogger(__name__)

# larger files are not embedded inline
_MAX_EMBED_BYTES = 8 * 1024 * 1024


def _embed(preview: PdfPreview) -> None:
    data = preview.local_path.read_bytes()
    if len(data) > _MAX_EMBED_BYTES:
        st.info("This PDF is too large to display inline. You can still upload it.")
        return
    encoded = base64.b64encode(data).decode("ascii")
    st.markdown(
        f'<iframe src="data:application/pdf;base64,{encoded}" width="100%" height="720" '
        'style="border:1px solid rgba(15,23,42,0.10); border-radius:12px;"></iframe>',
        unsafe_allow_html=True,
    )


def render() -> None:
    inject_theme()
    st.title("PDF Preview")

    preview = st.session_state.get("pdf_preview")
    if not isinstance(preview, PdfPreview):
        st.info("No document to preview. Pick a PDF on the Reports page.")
        if st.button("Back to reports"):
            go("reports")
        return

    if preview.state is PreviewState.loading:
        with st.spinner("Opening PDF..."):
            preview.load()

    if preview.state is PreviewState.error:
        st.error(f"Failed to load PDF: {preview.error}")
        if st.button("Back to reports", use_container_width=True):
            preview.cancel()
            go("reports", pdf_preview=None)
        return

    card_open(preview.document.name, f"{preview.page_count} page(s)" if preview.page_count else "")
    card_close()
    _embed(preview)

    c1, c2 = st.columns(2)
    with c1:
        if st.button("Upload", type="primary", use_container_width=True):
            try:
                with st.spinner("Uploading..."):
                    report = preview.confirm()
            except VitalTrackError as e:
                st.error(f"Failed to upload PDF. {e}")
            else:
                if preview.owns_file:
                    preview.local_path.unlink(missing_ok=True)
                go("report_detail", selected_report=report, pdf_preview=None)
    with c2:
        if st.button("Cancel", use_container_width=True):
            preview.cancel()
            go("reports", pdf_preview=None)
