"""
Tests for backend configuration (services/config.py).
"""
from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError

from services import config as cfg
from services.config import ApiConfig


class TestApiConfig:
    """Defaults, environment and path templates"""

    def test_defaults(self):
        config = ApiConfig()
        assert config.base_url == "http://localhost:8000"
        assert config.user_id == cfg.DEFAULT_USER_ID
        assert config.timeout == 60.0
        assert config.upload_field == "reports"

    def test_trailing_slash_is_stripped(self):
        assert ApiConfig(base_url="https://api.example.com///").base_url == "https://api.example.com"

    def test_timeout_must_be_positive(self):
        with pytest.raises(PydanticValidationError):
            ApiConfig(timeout=0)

    def test_from_env(self, monkeypatch, tmp_path):
        """VITALTRACK_* variables override the defaults"""
        monkeypatch.setenv("VITALTRACK_API_URL", "https://health.example.com/")
        monkeypatch.setenv("VITALTRACK_USER_ID", "abc")
        monkeypatch.setenv("VITALTRACK_API_TIMEOUT", "12.5")
        monkeypatch.setenv("VITALTRACK_UPLOAD_FIELD", "files")
        monkeypatch.setenv("VITALTRACK_STAGING_DIR", str(tmp_path))

        config = ApiConfig.from_env()

        assert config.base_url == "https://health.example.com"
        assert config.user_id == "abc"
        assert config.timeout == 12.5
        assert config.upload_field == "files"
        assert config.staging_dir == Path(str(tmp_path))

    def test_empty_env_values_are_ignored(self, monkeypatch):
        monkeypatch.setenv("VITALTRACK_API_URL", "")
        monkeypatch.delenv("VITALTRACK_USER_ID", raising=False)

        assert ApiConfig.from_env().base_url == cfg.DEFAULT_BASE_URL

    def test_path_fills_user_and_params(self):
        config = ApiConfig(user_id="u9")
        assert config.path(cfg.GET_REPORTS) == "/api/v1/reports/u9"
        assert config.path(cfg.DELETE_REPORT, report_id="r1") == "/api/v1/reports/u9/r1"
        assert (
            config.path(cfg.DELETE_CONDITION_TRACK, combined_tracking_id="c7")
            == "/api/v1/user-condition-track/u9/c7"
        )
