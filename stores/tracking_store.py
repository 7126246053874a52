"""
stores/tracking_store.py

Condition catalog and the user's tracking history, held per browser session.

Saves and updates validate required factors before anything is sent. A
failed delete (including an entry the server no longer knows) leaves the
history exactly as it was.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from services.errors import ValidationError, VitalTrackError
from services.trackers import TrackerService
from stores.models import ConditionCatalogEntry, TrackingFactor, UserConditionTrack
from stores.tasks import CancelToken, InflightCoalescer, is_cancelled

logger = logging.getLogger(__name__)


def missing_required(
    factors: Sequence[TrackingFactor],
    values: Sequence[Mapping[str, Any]],
) -> list[str]:
    """Names of required factors without a non-blank value."""
    filled = set()
    for v in values:
        raw = v.get("value")
        if raw is not None and str(raw).strip():
            filled.add(str(v.get("id")))
    return [f.name for f in factors if f.is_required and f.id not in filled]


class TrackingStore:
    def __init__(self, service: TrackerService) -> None:
        self.service = service
        self._lock = threading.Lock()
        self._inflight = InflightCoalescer()
        self._conditions: list[ConditionCatalogEntry] = []
        self._tracks: list[UserConditionTrack] = []
        self.history_range: tuple[Optional[datetime], Optional[datetime]] = (None, None)
        self.is_loading = False
        self.error: Optional[str] = None

    # -------------------------
    # Catalog
    # -------------------------
    @property
    def conditions(self) -> list[ConditionCatalogEntry]:
        with self._lock:
            return list(self._conditions)

    def refresh_conditions(self, token: Optional[CancelToken] = None) -> list[ConditionCatalogEntry]:
        self.error = None
        try:
            conditions = self._inflight.run("conditions", self.service.get_medical_conditions)
        except VitalTrackError as exc:
            if not is_cancelled(token):
                self.error = str(exc)
            raise
        if not is_cancelled(token):
            with self._lock:
                self._conditions = list(conditions)
        return conditions

    def find_condition(self, name: str) -> Optional[ConditionCatalogEntry]:
        wanted = (name or "").strip().lower()
        for c in self.conditions:
            if c.medical_condition.name.lower() == wanted:
                return c
        return None

    def get_condition(self, condition_id: str) -> Optional[ConditionCatalogEntry]:
        for c in self.conditions:
            if c.medical_condition.id == condition_id:
                return c
        return None

    # -------------------------
    # History
    # -------------------------
    @property
    def tracks(self) -> list[UserConditionTrack]:
        with self._lock:
            return list(self._tracks)

    def refresh_history(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        token: Optional[CancelToken] = None,
    ) -> list[UserConditionTrack]:
        """Fetch the user's tracks, optionally limited to [start, end]."""
        self.is_loading = True
        self.error = None
        key = ("history", start, end)
        try:
            tracks = self._inflight.run(
                key, lambda: self.service.get_user_condition_tracks(start, end)
            )
        except VitalTrackError as exc:
            if not is_cancelled(token):
                self.error = str(exc)
            raise
        finally:
            self.is_loading = False

        if is_cancelled(token):
            logger.debug("Discarding tracking history for a closed page")
            return tracks

        with self._lock:
            self._tracks = list(tracks)
        self.history_range = (start, end)
        return tracks

    def track_for(self, condition_id: str) -> Optional[UserConditionTrack]:
        for t in self.tracks:
            if t.medical_condition_id == condition_id:
                return t
        return None

    def find_track(self, *keywords: str) -> Optional[UserConditionTrack]:
        """First track whose condition name contains any of *keywords*."""
        lowered = [k.lower() for k in keywords]
        for t in self.tracks:
            name = t.medical_condition_name.lower()
            if any(k in name for k in lowered):
                return t
        return None

    # -------------------------
    # Mutations
    # -------------------------
    def _check_required(self, condition_id: str, values: Sequence[Mapping[str, Any]]) -> None:
        entry = self.get_condition(condition_id)
        if entry is None:
            return
        missing = missing_required(entry.tracking_factors, values)
        if missing:
            raise ValidationError("Please fill in all required fields: " + ", ".join(missing))

    def save_entry(self, condition_id: str, values: Sequence[Mapping[str, Any]]) -> Any:
        """
        Record a new combined entry. Refreshing the history afterwards is
        left to the caller (the entry page navigates away first).

        Raises:
            ValidationError: Missing required factor or non-numeric value.
            VitalTrackError: The request failed.
        """
        self._check_required(condition_id, values)
        return self.service.save_tracking_info(condition_id, values)

    def update_entry(
        self,
        condition_id: str,
        combined_tracking_id: str,
        values: Sequence[Mapping[str, Any]],
    ) -> Any:
        self._check_required(condition_id, values)
        return self.service.update_tracking_info(condition_id, combined_tracking_id, values)

    def delete_entry(
        self,
        condition_id: str,
        combined_tracking_id: str,
        token: Optional[CancelToken] = None,
    ) -> None:
        """
        Delete an entry the user has confirmed, then refresh the history
        with the current date filter. A failed refresh is kept in ``error``
        without failing the delete.

        Raises:
            VitalTrackError: The delete failed; tracks are unchanged.
        """
        self.error = None
        try:
            self.service.delete_tracker_entry(condition_id, combined_tracking_id)
        except VitalTrackError as exc:
            if not is_cancelled(token):
                self.error = str(exc)
            logger.warning("Delete of tracking entry %s failed: %s", combined_tracking_id, exc)
            raise
        start, end = self.history_range
        try:
            self.refresh_history(start, end, token)
        except VitalTrackError as exc:
            logger.warning("Refresh after deleting entry %s failed: %s", combined_tracking_id, exc)
