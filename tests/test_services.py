"""
Tests for the endpoint wrappers (services/reports.py, services/trackers.py).

Requests go through a real ApiClient over a mocked requests.Session, so the
assertions check the exact method, path and body sent to the backend.
"""
from datetime import datetime
from io import BytesIO

import pytest

from services.errors import ServerError, ValidationError
from services.reports import ReportService
from services.trackers import TrackerService, build_tracking_payload

REPORT_RECORD = {
    "id": "r1",
    "title": "Blood panel",
    "created_at": "2024-03-01T10:00:00Z",
    "updated_at": "2024-03-02T10:00:00Z",
    "report_url": "https://files.example.com/r1.pdf",
    "report_description": {"summary": "All good", "vitals": "BP 120/80"},
}

CONDITION = {
    "medical_condition": {"id": "bp", "name": "Blood Pressure", "description": "Arterial pressure"},
    "tracking_factors": [
        {"id": "sys", "name": "Systolic", "unit": "mmHg", "normal_range": "90-120", "is_required": True},
        {"id": "dia", "name": "Diastolic", "unit": "mmHg", "normal_range": None, "is_required": True},
    ],
}


def _sent(http_session):
    args, kwargs = http_session.request.call_args
    return args[0], args[1], kwargs


class TestReportService:
    """Report endpoints"""

    def test_list_reports(self, client, http_session, respond):
        http_session.request.return_value = respond(200, {"success": True, "data": {"reports": [REPORT_RECORD]}})

        reports = ReportService(client).list_reports()

        assert [r.report_id for r in reports] == ["r1"]
        assert reports[0].description.vitals == "BP 120/80"
        method, url, _ = _sent(http_session)
        assert (method, url) == ("GET", "http://backend.test/api/v1/reports/user-1")

    def test_upload_sends_every_part_under_one_field(self, client, http_session, respond):
        """Each file part uses the configured multipart field name"""
        http_session.request.return_value = respond(200, {"success": True, "data": REPORT_RECORD})
        parts = [
            ("image_0.jpg", BytesIO(b"a"), "image/jpeg"),
            ("image_1.jpg", BytesIO(b"b"), "image/jpeg"),
        ]

        report = ReportService(client).upload_report(parts)

        assert report.report_id == "r1"
        method, url, kwargs = _sent(http_session)
        assert (method, url) == ("POST", "http://backend.test/api/v1/reports/upload/user-1")
        assert [name for name, _ in kwargs["files"]] == ["reports", "reports"]
        assert [part[0] for _, part in kwargs["files"]] == ["image_0.jpg", "image_1.jpg"]

    def test_upload_nothing_is_rejected(self, client, http_session):
        with pytest.raises(ValidationError):
            ReportService(client).upload_report([])
        http_session.request.assert_not_called()

    def test_delete_report(self, client, http_session, respond):
        http_session.request.return_value = respond(200, {"success": True})

        ReportService(client).delete_report("r1")

        method, url, _ = _sent(http_session)
        assert (method, url) == ("DELETE", "http://backend.test/api/v1/reports/user-1/r1")

    def test_compare_posts_both_ids(self, client, http_session, respond):
        http_session.request.return_value = respond(
            200, {"success": True, "data": {"comparison_result": {"summary": "Improved"}}}
        )

        result = ReportService(client).compare_reports(["r1", "r2"])

        assert result.report_ids == ("r1", "r2")
        assert result.summary == "Improved"
        method, url, kwargs = _sent(http_session)
        assert (method, url) == ("POST", "http://backend.test/api/v1/reports/compare/user-1")
        assert kwargs["json"] == {"report_ids": ["r1", "r2"]}

    @pytest.mark.parametrize("ids", [[], ["r1"], ["r1", "r2", "r3"]])
    def test_compare_requires_two_ids(self, client, http_session, ids):
        with pytest.raises(ValidationError):
            ReportService(client).compare_reports(ids)
        http_session.request.assert_not_called()


class TestBuildTrackingPayload:
    """Form values -> tracking_factors"""

    def test_converts_to_numbers(self):
        payload = build_tracking_payload([{"id": "sys", "value": "120"}, {"id": "dia", "value": " 80.5 "}])
        assert payload == [
            {"tracking_factor_id": "sys", "value": 120.0},
            {"tracking_factor_id": "dia", "value": 80.5},
        ]

    @pytest.mark.parametrize("value", ["abc", "", None, "nan", "inf", "-inf", float("inf")])
    def test_rejects_non_numeric(self, value):
        with pytest.raises(ValidationError):
            build_tracking_payload([{"id": "sys", "value": value}])

    def test_rejects_missing_id(self):
        with pytest.raises(ValidationError):
            build_tracking_payload([{"value": "1"}])

    def test_rejects_empty(self):
        with pytest.raises(ValidationError):
            build_tracking_payload([])


class TestTrackerService:
    """Condition catalog and tracking endpoints"""

    def test_get_medical_conditions(self, client, http_session, respond):
        http_session.request.return_value = respond(200, {"success": True, "data": [CONDITION]})

        catalog = TrackerService(client).get_medical_conditions()

        assert catalog[0].medical_condition.name == "Blood Pressure"
        assert catalog[0].tracking_factors[1].normal_range == ""
        assert _sent(http_session)[1] == "http://backend.test/api/v1/medical-conditions"

    def test_malformed_catalog_is_server_error(self, client, http_session, respond):
        http_session.request.return_value = respond(200, {"success": True, "data": [{"nope": 1}]})

        with pytest.raises(ServerError):
            TrackerService(client).get_medical_conditions()

    def test_history_sends_date_range(self, client, http_session, respond):
        http_session.request.return_value = respond(200, {"success": True, "data": []})

        TrackerService(client).get_user_condition_tracks(datetime(2024, 1, 1), datetime(2024, 1, 31, 23, 59))

        method, url, kwargs = _sent(http_session)
        assert url == "http://backend.test/api/v1/user-condition-track/user-1"
        assert kwargs["params"] == {"start_date": "2024-01-01T00:00:00", "end_date": "2024-01-31T23:59:00"}

    def test_save_tracking_info(self, client, http_session, respond):
        http_session.request.return_value = respond(200, {"success": True, "data": {"combined_tracking_id": "c1"}})

        data = TrackerService(client).save_tracking_info("bp", [{"id": "sys", "value": "120"}])

        assert data == {"combined_tracking_id": "c1"}
        method, url, kwargs = _sent(http_session)
        assert (method, url) == ("POST", "http://backend.test/api/v1/tracking/user-1")
        assert kwargs["json"] == {
            "medical_condition_id": "bp",
            "tracking_factors": [{"tracking_factor_id": "sys", "value": 120.0}],
        }

    def test_update_tracking_info(self, client, http_session, respond):
        http_session.request.return_value = respond(200, {"success": True, "data": None})

        TrackerService(client).update_tracking_info("bp", "c1", [{"id": "sys", "value": 118}])

        method, url, _ = _sent(http_session)
        assert (method, url) == ("PUT", "http://backend.test/api/v1/tracking/user-1/c1")

    def test_delete_tracker_entry(self, client, http_session, respond):
        http_session.request.return_value = respond(200, {"success": True})

        TrackerService(client).delete_tracker_entry("bp", "c1")

        method, url, _ = _sent(http_session)
        assert (method, url) == ("DELETE", "http://backend.test/api/v1/user-condition-track/user-1/c1")

    def test_invalid_values_send_nothing(self, client, http_session):
        with pytest.raises(ValidationError):
            TrackerService(client).save_tracking_info("bp", [{"id": "sys", "value": "high"}])
        http_session.request.assert_not_called()
