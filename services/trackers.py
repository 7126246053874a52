"""
services/trackers.py

Medical condition catalog and tracking-entry endpoints.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from services import config as cfg
from services.api_client import ApiClient, unwrap_envelope
from services.errors import ServerError, ValidationError
from stores.models import ConditionCatalogEntry, UserConditionTrack

logger = logging.getLogger(__name__)


def build_tracking_payload(values: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """
    Convert ``[{"id": ..., "value": "120"}, ...]`` form values into the
    backend's ``tracking_factors`` list.

    Raises:
        ValidationError: If a value is missing or not numeric.
    """
    factors = []
    for item in values:
        factor_id = item.get("id")
        raw = item.get("value")
        if not factor_id:
            raise ValidationError("Tracking value without a factor id")
        try:
            number = float(str(raw).strip())
        except (TypeError, ValueError):
            raise ValidationError(f"'{raw}' is not a number") from None
        if not math.isfinite(number):
            raise ValidationError(f"'{raw}' is not a number")
        factors.append({"tracking_factor_id": str(factor_id), "value": number})
    if not factors:
        raise ValidationError("Please enter at least one value")
    return factors


def _iso(d: Optional[datetime]) -> Optional[str]:
    return d.isoformat() if d is not None else None


class TrackerService:
    """Wraps the condition catalog and tracking endpoints."""

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    @property
    def _config(self) -> cfg.ApiConfig:
        return self.client.config

    def get_medical_conditions(self) -> list[ConditionCatalogEntry]:
        payload = self.client.get(cfg.MEDICAL_CONDITIONS)
        data = unwrap_envelope(payload, "Failed to fetch medical conditions")
        try:
            return [ConditionCatalogEntry(**item) for item in data or []]
        except (PydanticValidationError, TypeError) as e:
            raise ServerError("Malformed medical condition catalog") from e

    def get_user_condition_tracks(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> list[UserConditionTrack]:
        payload = self.client.get(
            self._config.path(cfg.USER_CONDITION_TRACK),
            params={"start_date": _iso(start_date), "end_date": _iso(end_date)},
        )
        data = unwrap_envelope(payload, "Failed to fetch tracking history")
        try:
            return [UserConditionTrack(**item) for item in data or []]
        except (PydanticValidationError, TypeError) as e:
            raise ServerError("Malformed tracking history") from e

    def save_tracking_info(
        self,
        medical_condition_id: str,
        values: Sequence[Mapping[str, Any]],
    ) -> Any:
        """
        Record one combined entry for *medical_condition_id*.

        Returns:
            The ``data`` member of the backend envelope.
        """
        body = {
            "medical_condition_id": medical_condition_id,
            "tracking_factors": build_tracking_payload(values),
        }
        payload = self.client.post(self._config.path(cfg.TRACKING), json=body)
        data = unwrap_envelope(payload, "Failed to save record")
        logger.info("Saved tracking entry for condition %s", medical_condition_id)
        return data

    def update_tracking_info(
        self,
        medical_condition_id: str,
        combined_tracking_id: str,
        values: Sequence[Mapping[str, Any]],
    ) -> Any:
        body = {
            "medical_condition_id": medical_condition_id,
            "tracking_factors": build_tracking_payload(values),
        }
        path = self._config.path(cfg.UPDATE_TRACKING, combined_tracking_id=combined_tracking_id)
        payload = self.client.put(path, json=body)
        data = unwrap_envelope(payload, "Failed to update record")
        logger.info("Updated tracking entry %s", combined_tracking_id)
        return data

    def delete_tracker_entry(self, medical_condition_id: str, combined_tracking_id: str) -> None:
        path = self._config.path(cfg.DELETE_CONDITION_TRACK, combined_tracking_id=combined_tracking_id)
        payload = self.client.delete(path)
        unwrap_envelope(payload, "Failed to delete entry")
        logger.info(
            "Deleted tracking entry %s (condition %s)", combined_tracking_id, medical_condition_id
        )
