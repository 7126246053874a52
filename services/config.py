"""
services/config.py

Backend configuration for VitalTrack.

Values come from the environment (a local ``.env`` is loaded by app/main.py
through python-dotenv). Every setting has a default so the app starts
against a local backend without any configuration.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Endpoint paths (relative to base_url)
# ---------------------------------------------------------------------------

GET_REPORTS = "/api/v1/reports/{user_id}"
UPLOAD_REPORT = "/api/v1/reports/upload/{user_id}"
DELETE_REPORT = "/api/v1/reports/{user_id}/{report_id}"
COMPARE_REPORTS = "/api/v1/reports/compare/{user_id}"
MEDICAL_CONDITIONS = "/api/v1/medical-conditions"
USER_CONDITION_TRACK = "/api/v1/user-condition-track/{user_id}"
DELETE_CONDITION_TRACK = "/api/v1/user-condition-track/{user_id}/{combined_tracking_id}"
TRACKING = "/api/v1/tracking/{user_id}"
UPDATE_TRACKING = "/api/v1/tracking/{user_id}/{combined_tracking_id}"
USER_INFO = "/api/v1/user/info/{user_id}"

DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_USER_ID = "c9bded98-2233-42ce-9c2b-a353980a7b01"
DEFAULT_TIMEOUT = 60.0
DEFAULT_UPLOAD_FIELD = "reports"


def _default_staging_dir() -> Path:
    return Path(tempfile.gettempdir()) / "vitaltrack"


class ApiConfig(BaseModel):
    """Connection settings for the VitalTrack backend."""

    base_url: str = DEFAULT_BASE_URL
    user_id: str = DEFAULT_USER_ID
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    upload_field: str = Field(
        default=DEFAULT_UPLOAD_FIELD,
        description="Multipart field name shared by every uploaded file part.",
    )
    staging_dir: Path = Field(default_factory=_default_staging_dir)

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @classmethod
    def from_env(cls) -> "ApiConfig":
        """Build a config from ``VITALTRACK_*`` environment variables."""
        values: dict[str, object] = {}
        env_map = {
            "VITALTRACK_API_URL": "base_url",
            "VITALTRACK_USER_ID": "user_id",
            "VITALTRACK_API_TIMEOUT": "timeout",
            "VITALTRACK_UPLOAD_FIELD": "upload_field",
            "VITALTRACK_STAGING_DIR": "staging_dir",
        }
        for env_name, field_name in env_map.items():
            raw = os.environ.get(env_name)
            if raw:
                values[field_name] = raw
        config = cls(**values)
        logger.debug("ApiConfig loaded: base_url=%s user_id=%s", config.base_url, config.user_id)
        return config

    def path(self, template: str, **params: str) -> str:
        """Fill an endpoint template with the configured user id and *params*."""
        return template.format(user_id=self.user_id, **params)
