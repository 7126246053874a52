"""
Shared fixtures for the VitalTrack test suite.

The backend is never contacted: ``requests.Session`` is replaced by a
MagicMock whose ``request`` returns real ``requests.Response`` objects.
"""
import json
from io import BytesIO
from unittest.mock import MagicMock

import pytest
import requests
from PIL import Image

from services.api_client import ApiClient
from services.config import ApiConfig

MINIMAL_PDF = (
    b"%PDF-1.4\n"
    b"1 0 obj << /Type /Catalog /Pages 2 0 R >> endobj\n"
    b"2 0 obj << /Type /Pages /Kids [3 0 R 4 0 R] /Count 2 >> endobj\n"
    b"3 0 obj << /Type /Page /Parent 2 0 R >> endobj\n"
    b"4 0 obj << /Type /Page /Parent 2 0 R >> endobj\n"
    b"%%EOF\n"
)


def build_response(status=200, body=None, raw=None):
    response = requests.Response()
    response.status_code = status
    response.encoding = "utf-8"
    response.headers["Content-Type"] = "application/json"
    if raw is not None:
        response._content = raw
    elif body is None:
        response._content = b""
    else:
        response._content = json.dumps(body).encode("utf-8")
    return response


@pytest.fixture
def respond():
    """Factory: ``respond(200, {...})`` -> requests.Response."""
    return build_response


@pytest.fixture
def config(tmp_path):
    return ApiConfig(
        base_url="http://backend.test/",
        user_id="user-1",
        staging_dir=tmp_path / "staging",
    )


@pytest.fixture
def http_session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(config, http_session):
    return ApiClient(config, session=http_session)


@pytest.fixture
def jpeg_bytes():
    """Factory: encoded JPEG of the given size."""

    def _make(size=(64, 48), mode="RGB"):
        buf = BytesIO()
        Image.new(mode, size, color=(200, 30, 30) if mode == "RGB" else 128).save(buf, format="JPEG")
        return buf.getvalue()

    return _make


@pytest.fixture
def pdf_file(tmp_path):
    path = tmp_path / "lab.pdf"
    path.write_bytes(MINIMAL_PDF)
    return path
