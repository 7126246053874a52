"""
pipelines/upload.py

Report ingestion: one picked document, or a batch of camera captures.

- DOC/DOCX upload immediately
- PDF goes through PdfPreview first; its confirm() performs the upload
- Image batches upload as one report (one file part per page)
- Success refreshes the Report Store before control returns to the page
- No automatic retry; a failed batch stays staged for another attempt
"""

from __future__ import annotations

import logging
from contextlib import ExitStack
from pathlib import Path
from typing import Callable, Optional, Sequence, Union

from pipelines.pdf_preview import PdfPreview, count_pdf_pages
from pipelines.preprocess import resolve_local_path
from services.errors import ServerError, TransportError, UploadError, ValidationError, VitalTrackError
from services.reports import ReportService
from stores.capture_session import CaptureSession
from stores.models import CapturedImage, PickedDocument, Report
from stores.report_store import ReportStore
from stores.tasks import CancelToken

logger = logging.getLogger(__name__)

IMAGE_MIME = "image/jpeg"


class UploadPipeline:
    def __init__(
        self,
        service: ReportService,
        store: ReportStore,
        session: CaptureSession,
        viewer: Callable[[Path], Optional[int]] = count_pdf_pages,
    ) -> None:
        self.service = service
        self.store = store
        self.session = session
        self.viewer = viewer

    # -------------------------
    # Single document
    # -------------------------
    def upload_single_document(
        self,
        doc: PickedDocument,
        token: Optional[CancelToken] = None,
        owns_file: bool = False,
    ) -> Union[Report, PdfPreview]:
        """
        Upload a picked document, or hand back a preview for a PDF.

        Returns:
            The created ``Report`` for DOC/DOCX; a ``PdfPreview`` in the
            LOADING state for PDF (call ``load()`` then ``confirm()``).

        Raises:
            ValidationError: Unsupported document type.
            UploadError:     The upload failed.
        """
        if not doc.is_supported:
            raise ValidationError(f"Unsupported document type: {doc.mime_type}")
        if doc.is_pdf:
            return PdfPreview(
                doc,
                on_confirm=lambda: self._upload_document(doc, token),
                viewer=self.viewer,
                owns_file=owns_file,
            )
        return self._upload_document(doc, token)

    def _upload_document(self, doc: PickedDocument, token: Optional[CancelToken]) -> Report:
        try:
            path = resolve_local_path(doc.uri)
        except FileNotFoundError as e:
            raise UploadError(str(e)) from e

        try:
            f = path.open("rb")
        except OSError as e:
            raise UploadError(f"Could not read {doc.name}: {e}") from e
        with f:
            report = self._send([(doc.name, f, doc.mime_type)], "document")

        self._refresh_after_upload(token)
        return report

    # -------------------------
    # Image batch
    # -------------------------
    def upload_image_batch(
        self,
        images: Optional[Sequence[CapturedImage]] = None,
        token: Optional[CancelToken] = None,
    ) -> Report:
        """
        Upload staged captures as one report.

        On success the capture session is cleared; on failure it is left
        intact so the user can retry without recapturing.

        Raises:
            ValidationError: The batch is empty (no request is sent).
            UploadError:     The upload failed.
        """
        batch = list(self.session.images if images is None else images)
        if not batch:
            raise ValidationError("No images to upload")

        with ExitStack() as stack:
            parts = []
            for index, image in enumerate(batch):
                try:
                    path = resolve_local_path(image.uri)
                except FileNotFoundError as e:
                    raise UploadError(f"Captured image {index + 1} is missing") from e
                try:
                    f = stack.enter_context(path.open("rb"))
                except OSError as e:
                    raise UploadError(f"Captured image {index + 1} could not be read: {e}") from e
                parts.append((f"image_{index}.jpg", f, IMAGE_MIME))
            report = self._send(parts, "image batch")

        self.session.clear()
        self._refresh_after_upload(token)
        return report

    # -------------------------
    # Helpers
    # -------------------------
    def _send(self, parts: list, what: str) -> Report:
        try:
            report = self.service.upload_report(parts)
        except (TransportError, ServerError) as e:
            logger.warning("Upload of %s (%d part(s)) failed: %s", what, len(parts), e)
            raise UploadError(f"Failed to upload {what}: {e}") from e
        logger.info("Uploaded %s as report %s", what, report.report_id)
        return report

    def _refresh_after_upload(self, token: Optional[CancelToken]) -> None:
        try:
            self.store.refresh(token)
        except VitalTrackError as e:
            # the upload itself succeeded; the store keeps the refresh error
            logger.warning("Refresh after upload failed: %s", e)
