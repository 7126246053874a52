"""
services/reports.py

Report endpoints: list, multipart upload, delete, compare.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from pipelines.postprocess import parse_comparison, parse_report, parse_report_list
from services import config as cfg
from services.api_client import ApiClient, unwrap_envelope
from services.errors import ValidationError
from stores.models import ComparisonResult, Report

logger = logging.getLogger(__name__)

# (filename, fileobj, content_type)
FilePart = tuple[str, Any, str]


class ReportService:
    """Wraps the report endpoints for the configured user."""

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    @property
    def _config(self) -> cfg.ApiConfig:
        return self.client.config

    def list_reports(self) -> list[Report]:
        payload = self.client.get(self._config.path(cfg.GET_REPORTS))
        data = unwrap_envelope(payload, "Failed to fetch reports")
        reports = parse_report_list(data)
        logger.info("Fetched %d report(s)", len(reports))
        return reports

    def upload_report(self, parts: Sequence[FilePart]) -> Report:
        """
        Upload one or more file parts as a single report.

        Every part is sent under the configured multipart field name.

        Raises:
            ValidationError: If *parts* is empty.
            TransportError / ServerError: From the client.
        """
        if not parts:
            raise ValidationError("Nothing to upload")
        field = self._config.upload_field
        files = [(field, part) for part in parts]
        payload = self.client.post(self._config.path(cfg.UPLOAD_REPORT), files=files)
        data = unwrap_envelope(payload, "Failed to upload report")
        report = parse_report(data)
        logger.info("Uploaded %d file(s) as report %s", len(parts), report.report_id)
        return report

    def delete_report(self, report_id: str) -> None:
        path = self._config.path(cfg.DELETE_REPORT, report_id=report_id)
        payload = self.client.delete(path)
        unwrap_envelope(payload, "Failed to delete report")
        logger.info("Deleted report %s", report_id)

    def compare_reports(self, report_ids: Sequence[str]) -> ComparisonResult:
        """Ask the backend to compare exactly two reports."""
        if len(report_ids) != 2:
            raise ValidationError("Please select exactly two reports to compare")
        ids = (str(report_ids[0]), str(report_ids[1]))
        payload = self.client.post(
            self._config.path(cfg.COMPARE_REPORTS),
            json={"report_ids": list(ids)},
        )
        data = unwrap_envelope(payload, "Failed to compare reports")
        return parse_comparison(data, ids)
