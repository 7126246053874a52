"""
pipelines/pdf_preview.py

Inspect-before-upload step for picked PDFs.

States: LOADING -> READY -> CONFIRMED | CANCELLED | ERROR
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from pipelines.preprocess import resolve_local_path
from services.errors import UploadError, ValidationError
from stores.models import PickedDocument, Report

logger = logging.getLogger(__name__)

_PAGE_OBJECT = re.compile(rb"/Type\s*/Page(?![a-zA-Z])")


class PreviewState(str, Enum):
    loading = "loading"
    ready = "ready"
    confirmed = "confirmed"
    cancelled = "cancelled"
    error = "error"


def count_pdf_pages(path: Path) -> Optional[int]:
    """
    Default viewer check: the file must start like a PDF.

    Returns:
        Number of page objects found, or None when pages live in compressed
        object streams and cannot be counted without a full parser.

    Raises:
        ValueError: If the file is not a PDF.
    """
    with path.open("rb") as f:
        head = f.read(1024)
        if b"%PDF-" not in head:
            raise ValueError("Not a PDF document")
        body = head + f.read()
    pages = len(_PAGE_OBJECT.findall(body))
    return pages or None


class PdfPreview:
    """
    One preview of one picked PDF.

    ``on_confirm`` performs the actual upload and returns the created report.
    ``viewer`` opens the resolved file and returns its page count (or None);
    it raises if the file cannot be rendered.
    """

    def __init__(
        self,
        document: PickedDocument,
        on_confirm: Callable[[], Report],
        viewer: Callable[[Path], Optional[int]] = count_pdf_pages,
        owns_file: bool = False,
    ) -> None:
        self.document = document
        self._on_confirm = on_confirm
        self._viewer = viewer
        self.owns_file = owns_file
        self.state = PreviewState.loading
        self.local_path: Optional[Path] = None
        self.page_count: Optional[int] = None
        self.error: Optional[str] = None
        self.report: Optional[Report] = None

    def load(self) -> PreviewState:
        if self.state is not PreviewState.loading:
            return self.state
        try:
            path = resolve_local_path(self.document.uri)
            self.page_count = self._viewer(path)
        except (OSError, ValueError) as e:
            logger.warning("PDF preview of %s failed: %s", self.document.name, e)
            self.error = str(e) or "Failed to load PDF file"
            self.state = PreviewState.error
            return self.state

        self.local_path = path
        self.state = PreviewState.ready
        logger.debug("PDF preview ready: %s (%s pages)", path, self.page_count)
        return self.state

    def confirm(self) -> Report:
        """
        Upload the previewed document.

        Raises:
            ValidationError: The preview is not READY.
            UploadError: The upload failed; the preview is READY again.
        """
        if self.state is not PreviewState.ready:
            raise ValidationError(f"Cannot upload from the '{self.state.value}' state")

        try:
            report = self._on_confirm()
        except UploadError as e:
            logger.info("Upload from preview failed, staying ready: %s", e)
            raise

        self.report = report
        self.state = PreviewState.confirmed
        return report

    def cancel(self) -> None:
        if self.state is PreviewState.confirmed:
            return
        if self.owns_file:
            try:
                resolve_local_path(self.document.uri).unlink()
            except OSError:
                logger.debug("Staged PDF already gone: %s", self.document.uri)
        self.state = PreviewState.cancelled
