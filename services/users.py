"""
services/users.py

User profile endpoints (the biometric data behind the BMI card).
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError

from services import config as cfg
from services.api_client import ApiClient, unwrap_envelope
from services.errors import ServerError, ValidationError
from stores.models import UserInfo

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("name", "email", "phone", "weight", "height", "age", "gender")


def validate_profile_form(form: Mapping[str, Any]) -> dict[str, Any]:
    """
    Check the profile form and return the body the backend expects.

    Email and phone are required on the form but are not sent.

    Raises:
        ValidationError: On a missing field or a non-numeric measurement.
    """
    missing = [f for f in PROFILE_FIELDS if not str(form.get(f) or "").strip()]
    if missing:
        raise ValidationError("Please fill in all fields")

    try:
        age = int(str(form["age"]).strip())
        height = float(str(form["height"]).strip())
        weight = float(str(form["weight"]).strip())
    except ValueError:
        raise ValidationError("Age, height and weight must be numbers") from None

    if age <= 0 or height <= 0 or weight <= 0:
        raise ValidationError("Age, height and weight must be positive")

    return {
        "name": str(form["name"]).strip(),
        "age": age,
        "gender": str(form["gender"]).strip(),
        "height": height,
        "weight": weight,
    }


class UserService:
    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def get_user_info(self) -> UserInfo:
        payload = self.client.get(self.client.config.path(cfg.USER_INFO))
        data = unwrap_envelope(payload, "Failed to fetch user information")
        try:
            return UserInfo(**(data or {}))
        except (PydanticValidationError, TypeError) as e:
            raise ServerError("Malformed user information") from e

    def update_user_info(self, form: Mapping[str, Any]) -> UserInfo:
        body = validate_profile_form(form)
        payload = self.client.put(self.client.config.path(cfg.USER_INFO), json=body)
        data = unwrap_envelope(payload, "Failed to submit user information")
        logger.info("Updated user information for %s", self.client.config.user_id)
        if isinstance(data, dict) and data:
            try:
                return UserInfo(**{**body, **data})
            except PydanticValidationError:
                logger.warning("Ignoring malformed user info in update response")
        return UserInfo(id=self.client.config.user_id, **body)
