"""
Tests for the report list store (stores/report_store.py).

Business Rules:
- A refresh replaces the whole list
- Concurrent refreshes share one request
- A response that arrives after its page was left changes nothing
- Delete is sent first, then the list is refreshed; a failed delete changes nothing
"""
import threading
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import pytest

from services.errors import ResourceNotFoundError, TransportError
from services.reports import ReportService
from stores.models import Report
from stores.report_store import ReportStore
from stores.tasks import CancelToken, RequestScope


@pytest.fixture
def service():
    service = MagicMock(spec=ReportService)
    service.list_reports.return_value = [Report(report_id="a"), Report(report_id="b")]
    return service


@pytest.fixture
def store(service):
    return ReportStore(service)


class TestRefresh:
    def test_replaces_list(self, store, service):
        store.refresh()
        service.list_reports.return_value = [Report(report_id="c")]

        store.refresh()

        assert [r.report_id for r in store.reports] == ["c"]
        assert store.loaded
        assert not store.is_loading
        assert store.error is None

    def test_get(self, store):
        store.refresh()
        assert store.get("b").report_id == "b"
        assert store.get("zzz") is None

    def test_failure_sets_error_and_keeps_list(self, store, service):
        store.refresh()
        service.list_reports.side_effect = TransportError("offline")

        with pytest.raises(TransportError):
            store.refresh()

        assert store.error == "offline"
        assert not store.is_loading
        assert [r.report_id for r in store.reports] == ["a", "b"]

    def test_cancelled_token_leaves_store_unchanged(self, store):
        token = CancelToken()
        token.cancel()

        fetched = store.refresh(token)

        assert [r.report_id for r in fetched] == ["a", "b"]
        assert store.reports == []
        assert not store.loaded

    def test_cancelled_refresh_clears_loading_flag(self, store):
        """An abandoned refresh does not leave the store loading"""
        token = CancelToken()
        token.cancel()

        store.refresh(token)

        assert not store.is_loading

    def test_cancelled_failure_clears_loading_flag(self, store, service):
        token = CancelToken()
        token.cancel()
        service.list_reports.side_effect = TransportError("offline")

        with pytest.raises(TransportError):
            store.refresh(token)

        assert not store.is_loading
        assert store.error is None

    def test_closed_scope_discards_late_response(self, store, service):
        """The page is left while the request is in flight"""
        scope = RequestScope("reports")
        token = scope.token()

        def slow_list():
            scope.close()
            return [Report(report_id="late")]

        service.list_reports.side_effect = slow_list

        store.refresh(token)

        assert store.reports == []

    def test_concurrent_refreshes_share_one_request(self, store, service):
        started = threading.Event()
        release = threading.Event()

        def blocking_list():
            started.set()
            release.wait(timeout=5)
            return [Report(report_id="shared")]

        service.list_reports.side_effect = blocking_list

        with ThreadPoolExecutor(max_workers=2) as pool:
            first = pool.submit(store.refresh)
            assert started.wait(timeout=5)
            second = pool.submit(store.refresh)
            assert store._inflight.in_flight("reports")
            # give the second caller time to join the in-flight request
            threading.Event().wait(0.3)
            release.set()
            results = [first.result(timeout=5), second.result(timeout=5)]

        assert service.list_reports.call_count == 1
        assert [[r.report_id for r in res] for res in results] == [["shared"], ["shared"]]


class TestDelete:
    def test_delete_then_refresh(self, store, service):
        store.refresh()
        service.list_reports.return_value = [Report(report_id="b")]

        store.delete("a")

        service.delete_report.assert_called_once_with("a")
        assert [r.report_id for r in store.reports] == ["b"]

    def test_failed_delete_keeps_list(self, store, service):
        store.refresh()
        service.delete_report.side_effect = ResourceNotFoundError("Report not found", status_code=404)

        with pytest.raises(ResourceNotFoundError):
            store.delete("a")

        assert [r.report_id for r in store.reports] == ["a", "b"]
        assert store.error == "Report not found"
        assert service.list_reports.call_count == 1

    def test_refresh_failure_after_delete_is_not_a_delete_failure(self, store, service):
        """The delete went through; only the follow-up refresh failed"""
        store.refresh()
        service.list_reports.side_effect = TransportError("offline")

        store.delete("a")

        service.delete_report.assert_called_once_with("a")
        assert store.error == "offline"
        assert not store.is_loading
