"""
app/pages/reports.py

Reports page
- List of the user's reports (refreshed each time the page is opened)
- Upload a PDF/DOC/DOCX (PDFs open the preview step first)
- Scan a multi-page document with the camera, then upload the batch
- Compare mode: pick exactly two reports and open the comparison
- Delete with explicit confirmation, then refresh
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import streamlit as st

from app.context import current_scope, get_context, page_token
from app.ui import card_close, card_open, empty_state, go, inject_theme
from pipelines.pdf_preview import PdfPreview
from pipelines.preprocess import local_path, stage_capture, stage_document
from services.errors import CaptureError, ValidationError, VitalTrackError
from stores.models import ALLOWED_DOCUMENT_TYPES, PickedDocument

logger = logging.getLogger(__name__)

_EXT_TO_MIME = {ext: mime for mime, ext in ALLOWED_DOCUMENT_TYPES.items()}


def _mime_for(name: str, declared: Optional[str]) -> str:
    if declared in ALLOWED_DOCUMENT_TYPES:
        return declared
    return _EXT_TO_MIME.get(Path(name).suffix.lower().lstrip("."), declared or "")


class _CameraWidget:
    """Camera backed by ``st.camera_input``; each shot is staged once."""

    def __init__(self, staging_dir: Path, key: str = "scan_camera") -> None:
        self.staging_dir = staging_dir
        self.key = key

    def capture(self) -> Optional[str]:
        shot = st.camera_input("Take a photo of the page", key=self.key)
        if shot is None:
            return None
        consumed = st.session_state.setdefault("vt_consumed_shots", set())
        shot_id = getattr(shot, "file_id", None) or f"{shot.name}:{shot.size}"
        if shot_id in consumed:
            return None
        consumed.add(shot_id)
        return stage_capture(shot.getvalue(), self.staging_dir)


# -------------------------
# Report list
# -------------------------
def _render_list(ctx) -> None:
    store = ctx.report_store
    comparison = ctx.comparison

    top_l, top_r = st.columns([1, 1])
    with top_l:
        compare_mode = st.toggle("Compare mode", key="compare_mode")
    with top_r:
        if st.button("↻ Refresh", use_container_width=True):
            try:
                store.refresh(page_token())
            except VitalTrackError as e:
                st.error(f"Failed to fetch reports. Please try again. {e}")

    if not compare_mode and comparison.selected:
        comparison.clear_selection()

    reports = store.reports
    if not reports:
        empty_state("No reports yet. Upload a document or scan one to get started.")
        return

    if compare_mode:
        st.caption(f"Select two reports to compare ({len(comparison.selected)}/2 selected).")

    pending_delete = st.session_state.get("confirm_delete_report")

    for report in reports:
        card_open(report.title, report.updated_at.strftime("%d %b %Y · %H:%M") if report.updated_at else "")
        if compare_mode:
            selected = comparison.is_selected(report.report_id)
            st.checkbox(
                "Select",
                value=selected,
                key=f"sel_{report.report_id}",
                disabled=not selected and len(comparison.selected) >= 2,
                on_change=comparison.toggle_selection,
                args=(report.report_id,),
            )
        else:
            c1, c2 = st.columns(2)
            with c1:
                if st.button("View", key=f"view_{report.report_id}", use_container_width=True):
                    go("report_detail", selected_report=report)
            with c2:
                if st.button("Delete", key=f"del_{report.report_id}", use_container_width=True):
                    st.session_state["confirm_delete_report"] = report.report_id
                    st.rerun()

            if pending_delete == report.report_id:
                st.warning("Are you sure you want to delete this report?")
                d1, d2 = st.columns(2)
                with d1:
                    if st.button("Delete", key=f"del_yes_{report.report_id}", type="primary", use_container_width=True):
                        st.session_state["confirm_delete_report"] = None
                        try:
                            with st.spinner("Deleting..."):
                                store.delete(report.report_id, page_token())
                        except VitalTrackError as e:
                            st.error(f"Failed to delete report. {e}")
                        else:
                            if store.error:
                                st.warning(f"Report deleted, but the list could not be refreshed. {store.error}")
                            else:
                                st.rerun()
                with d2:
                    if st.button("Cancel", key=f"del_no_{report.report_id}", use_container_width=True):
                        st.session_state["confirm_delete_report"] = None
                        st.rerun()
        card_close()

    if compare_mode:
        ready = len(comparison.selected) == 2
        if st.button("Compare selected", type="primary", disabled=not ready, use_container_width=True):
            try:
                with st.spinner("Comparing..."):
                    result = comparison.compare()
            except VitalTrackError as e:
                st.error(str(e))
            else:
                go("comparison", comparison_result=result)


# -------------------------
# Document upload
# -------------------------
def _render_document_upload(ctx) -> None:
    uploaded = st.file_uploader(
        "Upload a report (PDF/DOC/DOCX)",
        type=list(ALLOWED_DOCUMENT_TYPES.values()),
        help="PDFs are shown for review before they are uploaded.",
    )
    if uploaded is None:
        return

    if not st.button("Continue", type="primary", use_container_width=True):
        return

    uri = stage_document(uploaded.getvalue(), uploaded.name, ctx.config.staging_dir)
    doc = PickedDocument(uri=uri, mime_type=_mime_for(uploaded.name, uploaded.type), name=uploaded.name)

    try:
        with st.spinner("Uploading..."):
            outcome = ctx.uploads.upload_single_document(doc, page_token(), owns_file=True)
    except VitalTrackError as e:
        local_path(uri).unlink(missing_ok=True)
        st.error(f"Failed to upload document. {e}")
        return

    if isinstance(outcome, PdfPreview):
        go("pdf_preview", pdf_preview=outcome)
    local_path(uri).unlink(missing_ok=True)
    go("report_detail", selected_report=outcome)


# -------------------------
# Camera batch
# -------------------------
def _render_scanner(ctx) -> None:
    session = ctx.capture
    camera = _CameraWidget(ctx.config.staging_dir)

    try:
        image = session.start_capture(camera) if session.is_empty else session.add_more(camera)
    except CaptureError as e:
        st.error(f"{e}. Please try again.")
        image = None
    if image is not None:
        st.toast(f"Page {len(session)} added")

    if session.is_empty:
        st.caption("Take a photo of each page; they are uploaded together as one report.")
        return

    st.markdown(f"**{len(session)} page(s) staged**")
    cols = st.columns(min(len(session), 4))
    for index, staged in enumerate(session.images):
        with cols[index % len(cols)]:
            st.image(str(local_path(staged.uri)), caption=f"Page {index + 1}", use_container_width=True)
            if st.button("Remove", key=f"discard_{index}_{staged.uri}", use_container_width=True):
                session.discard_item(index)
                st.rerun()

    c1, c2 = st.columns(2)
    with c1:
        if st.button(f"Upload {len(session)} page(s)", type="primary", use_container_width=True):
            try:
                with st.spinner("Uploading..."):
                    report = ctx.uploads.upload_image_batch(token=page_token())
            except ValidationError as e:
                st.error(str(e))
            except VitalTrackError as e:
                st.error(f"Failed to upload images. Your pages are still staged. {e}")
            else:
                go("report_detail", selected_report=report)
    with c2:
        if st.button("Discard all", use_container_width=True):
            session.clear()
            st.rerun()


def render() -> None:
    inject_theme()
    st.title("Reports")
    st.caption("Your uploaded medical reports.")

    ctx = get_context()
    store = ctx.report_store

    # refresh once per page visit
    scope = current_scope()
    if st.session_state.get("reports_refreshed_for") is not scope:
        st.session_state["reports_refreshed_for"] = scope
        try:
            with st.spinner("Loading reports..."):
                store.refresh(page_token())
        except VitalTrackError as e:
            st.error(f"Failed to fetch reports. Please try again. {e}")

    tab_list, tab_doc, tab_scan = st.tabs(["My reports", "Upload document", "Scan pages"])
    with tab_list:
        _render_list(ctx)
    with tab_doc:
        _render_document_upload(ctx)
    with tab_scan:
        _render_scanner(ctx)
