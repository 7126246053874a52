"""
stores/report_store.py

In-memory source of truth for the current user's report list.

One instance per browser session (see app/context.py). The list is replaced
wholesale on every refresh; deletes are confirmed by the page first, then
sent, then followed by a refresh. Nothing is removed optimistically.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from services.errors import VitalTrackError
from services.reports import ReportService
from stores.models import Report
from stores.tasks import CancelToken, InflightCoalescer, is_cancelled

logger = logging.getLogger(__name__)


class ReportStore:
    def __init__(self, service: ReportService) -> None:
        self.service = service
        self._lock = threading.Lock()
        self._reports: list[Report] = []
        self._inflight = InflightCoalescer()
        self.is_loading = False
        self.error: Optional[str] = None
        self.loaded = False

    @property
    def reports(self) -> list[Report]:
        with self._lock:
            return list(self._reports)

    def get(self, report_id: str) -> Optional[Report]:
        with self._lock:
            for r in self._reports:
                if r.report_id == report_id:
                    return r
        return None

    def refresh(self, token: Optional[CancelToken] = None) -> list[Report]:
        """
        Fetch the full list and replace the current contents.

        Concurrent refreshes share one request. If *token* is cancelled by
        the time the response arrives, the store is left untouched.

        Returns:
            The fetched reports.

        Raises:
            VitalTrackError: The fetch failed; ``error`` holds the message.
        """
        self.is_loading = True
        self.error = None
        try:
            reports = self._inflight.run("reports", self.service.list_reports)
        except VitalTrackError as exc:
            if not is_cancelled(token):
                self.error = str(exc)
            raise
        finally:
            self.is_loading = False

        if is_cancelled(token):
            logger.debug("Discarding report list for a closed page")
            return reports

        with self._lock:
            self._reports = list(reports)
        self.loaded = True
        return reports

    def delete(self, report_id: str, token: Optional[CancelToken] = None) -> None:
        """
        Delete a report the user has already confirmed, then refresh.

        A failed follow-up refresh does not fail the delete; ``error`` keeps
        the refresh message.

        Raises:
            VitalTrackError: The delete failed; the list is left as it was.
        """
        self.error = None
        try:
            self.service.delete_report(report_id)
        except VitalTrackError as exc:
            if not is_cancelled(token):
                self.error = str(exc)
            logger.warning("Delete of report %s failed: %s", report_id, exc)
            raise
        try:
            self.refresh(token)
        except VitalTrackError as exc:
            logger.warning("Refresh after deleting report %s failed: %s", report_id, exc)
