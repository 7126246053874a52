"""
Tests for report ingestion (pipelines/upload.py).

Business Rules:
- An empty image batch is rejected before any network call
- A successful batch clears the capture session and refreshes the report list
- A failed batch stays staged for a retry
- PDFs go through a preview; DOC/DOCX upload immediately
- A failed refresh after a successful upload does not fail the upload
"""
from unittest.mock import MagicMock, patch

import pytest

from pipelines.pdf_preview import PdfPreview, PreviewState
from pipelines.preprocess import stage_capture
from pipelines.upload import IMAGE_MIME, UploadPipeline
from services.errors import ServerError, TransportError, UploadError, ValidationError
from services.reports import ReportService
from stores.capture_session import CaptureSession
from stores.models import DOCX_MIME, PDF_MIME, CapturedImage, PickedDocument, Report
from stores.report_store import ReportStore


@pytest.fixture
def service():
    service = MagicMock(spec=ReportService)
    service.upload_report.return_value = Report(report_id="new-report")
    service.list_reports.return_value = [Report(report_id="new-report")]
    return service


@pytest.fixture
def session():
    return CaptureSession()


@pytest.fixture
def pipeline(service, session):
    return UploadPipeline(service, ReportStore(service), session)


@pytest.fixture
def staged(config, jpeg_bytes, session):
    """Two photos staged in the capture session."""

    def _stage(count=2):
        for _ in range(count):
            session.add(CapturedImage(uri=stage_capture(jpeg_bytes(), config.staging_dir)))
        return session.images

    return _stage


class TestImageBatch:
    """upload_image_batch"""

    def test_empty_batch_sends_nothing(self, pipeline, service):
        with pytest.raises(ValidationError):
            pipeline.upload_image_batch()
        service.upload_report.assert_not_called()

    def test_success_clears_session_and_refreshes(self, pipeline, service, session, staged):
        staged(2)

        report = pipeline.upload_image_batch()

        assert report.report_id == "new-report"
        assert session.is_empty
        service.list_reports.assert_called_once_with()
        assert [r.report_id for r in pipeline.store.reports] == ["new-report"]

        (parts,), _ = service.upload_report.call_args
        assert [name for name, _, _ in parts] == ["image_0.jpg", "image_1.jpg"]
        assert {mime for _, _, mime in parts} == {IMAGE_MIME}
        assert all(f.closed for _, f, _ in parts)

    @pytest.mark.parametrize("error", [ServerError("boom", status_code=500), TransportError("offline")])
    def test_failure_keeps_batch(self, pipeline, service, session, staged, error):
        images = staged(2)
        service.upload_report.side_effect = error

        with pytest.raises(UploadError) as exc_info:
            pipeline.upload_image_batch()

        assert exc_info.value.__cause__ is error
        assert session.images == images
        service.list_reports.assert_not_called()

    def test_missing_staged_file(self, pipeline, service, session, tmp_path):
        session.add(CapturedImage(uri=(tmp_path / "vanished.jpg").as_uri()))

        with pytest.raises(UploadError):
            pipeline.upload_image_batch()
        service.upload_report.assert_not_called()
        assert len(session) == 1

    def test_unreadable_staged_file(self, pipeline, service, session, staged):
        """An OS error opening a staged photo is an upload failure"""
        staged(1)

        with patch("pathlib.Path.open", side_effect=PermissionError("denied")):
            with pytest.raises(UploadError) as exc_info:
                pipeline.upload_image_batch()

        assert isinstance(exc_info.value.__cause__, PermissionError)
        service.upload_report.assert_not_called()
        assert len(session) == 1

    def test_refresh_failure_does_not_fail_upload(self, pipeline, service, session, staged):
        staged(1)
        service.list_reports.side_effect = TransportError("offline")

        report = pipeline.upload_image_batch()

        assert report.report_id == "new-report"
        assert session.is_empty
        assert pipeline.store.error


class TestSingleDocument:
    """upload_single_document"""

    def test_pdf_returns_preview(self, pipeline, service, pdf_file):
        doc = PickedDocument(uri=pdf_file.as_uri(), mime_type=PDF_MIME, name="lab.pdf")

        preview = pipeline.upload_single_document(doc)

        assert isinstance(preview, PdfPreview)
        service.upload_report.assert_not_called()

        preview.load()
        report = preview.confirm()

        assert report.report_id == "new-report"
        assert preview.state is PreviewState.confirmed
        (parts,), _ = service.upload_report.call_args
        assert parts[0][0] == "lab.pdf"
        assert parts[0][2] == PDF_MIME
        service.list_reports.assert_called_once_with()

    def test_pdf_upload_failure_is_retryable(self, pipeline, service, pdf_file):
        doc = PickedDocument(uri=pdf_file.as_uri(), mime_type=PDF_MIME, name="lab.pdf")
        preview = pipeline.upload_single_document(doc)
        preview.load()
        service.upload_report.side_effect = ServerError("busy", status_code=503)

        with pytest.raises(UploadError):
            preview.confirm()
        assert preview.state is PreviewState.ready

    def test_docx_uploads_immediately(self, pipeline, service, tmp_path):
        path = tmp_path / "letter.docx"
        path.write_bytes(b"PK\x03\x04")
        doc = PickedDocument(uri=path.as_uri(), mime_type=DOCX_MIME, name="letter.docx")

        report = pipeline.upload_single_document(doc)

        assert report.report_id == "new-report"
        service.upload_report.assert_called_once()
        service.list_reports.assert_called_once_with()

    def test_unsupported_type(self, pipeline, service, tmp_path):
        doc = PickedDocument(uri=(tmp_path / "a.txt").as_uri(), mime_type="text/plain", name="a.txt")

        with pytest.raises(ValidationError):
            pipeline.upload_single_document(doc)
        service.upload_report.assert_not_called()

    def test_unreadable_document(self, pipeline, service, tmp_path):
        path = tmp_path / "letter.doc"
        path.write_bytes(b"\xd0\xcf\x11\xe0")
        doc = PickedDocument(uri=path.as_uri(), mime_type="application/msword", name="letter.doc")

        with patch("pathlib.Path.open", side_effect=PermissionError("denied")):
            with pytest.raises(UploadError):
                pipeline.upload_single_document(doc)
        service.upload_report.assert_not_called()

    def test_missing_document(self, pipeline, service, tmp_path):
        doc = PickedDocument(uri=(tmp_path / "gone.doc").as_uri(), mime_type="application/msword", name="gone.doc")

        with pytest.raises(UploadError):
            pipeline.upload_single_document(doc)
        service.upload_report.assert_not_called()
