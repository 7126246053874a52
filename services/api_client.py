"""
services/api_client.py

Thin HTTP client for the VitalTrack backend.

- One ``requests.Session`` per client (per browser session in the app)
- Parsed JSON on 2xx, typed errors otherwise (see services/errors.py)
- Every call is logged and journaled in ``ApiClient.history`` for the
  sidebar debug panel
"""

from __future__ import annotations

import logging
from collections import deque
from datetime import datetime, timezone
from typing import Any, Optional

import requests

from services.config import ApiConfig
from services.errors import ResourceNotFoundError, ServerError, TransportError
from stores.models import ApiLogEntry

logger = logging.getLogger(__name__)

HISTORY_SIZE = 200


def _summarize_body(json_body: Any, files: Any) -> Any:
    """Keep the journal small: file parts are reduced to their names."""
    if files:
        return {"files": [part[1][0] for part in files]}
    return json_body


def _error_message(response: requests.Response) -> str:
    fallback = f"HTTP error! status: {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        msg = body.get("message") or body.get("detail")
        if isinstance(msg, str) and msg.strip():
            return msg
    return fallback


def unwrap_envelope(payload: Any, fallback: str) -> Any:
    """
    Return the ``data`` member of a ``{success, message, data}`` envelope.

    Raises:
        ServerError: If the envelope reports ``success: false``.
    """
    if not isinstance(payload, dict):
        return payload
    if payload.get("success") is False:
        raise ServerError(payload.get("message") or fallback)
    if "data" in payload:
        return payload["data"]
    return payload


class ApiClient:
    """Issues JSON / multipart requests against ``config.base_url``."""

    def __init__(
        self,
        config: ApiConfig,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config
        self.session = session or requests.Session()
        self.history: deque[ApiLogEntry] = deque(maxlen=HISTORY_SIZE)

    def url(self, path: str) -> str:
        return f"{self.config.base_url}{path}"

    # -------------------------
    # Verbs
    # -------------------------
    def get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None, files: Any = None) -> Any:
        return self.request("POST", path, json=json, files=files)

    def put(self, path: str, json: Any = None) -> Any:
        return self.request("PUT", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    # -------------------------
    # Core
    # -------------------------
    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json: Any = None,
        files: Any = None,
    ) -> Any:
        """
        Perform one request and return the decoded JSON body.

        Args:
            method: HTTP verb.
            path:   Path relative to the configured base URL.
            params: Optional query parameters (``None`` values are dropped).
            json:   JSON body (mutually exclusive with *files*).
            files:  ``requests``-style multipart file parts.

        Returns:
            The decoded JSON body, or ``{}`` for an empty 2xx body.

        Raises:
            TransportError:        Network failure or timeout.
            ResourceNotFoundError: HTTP 404.
            ServerError:           Any other non-2xx status or a non-JSON 2xx body.
        """
        url = self.url(path)
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        entry = ApiLogEntry(
            timestamp=datetime.now(timezone.utc),
            method=method,
            url=url,
            request_body=_summarize_body(json, files),
        )
        self.history.append(entry)
        logger.info("API request: %s %s", method, url)

        try:
            response = self.session.request(
                method,
                url,
                params=params or None,
                json=json,
                files=files,
                timeout=self.config.timeout,
            )
        except requests.RequestException as exc:
            entry.error = str(exc)
            logger.warning("API error: %s %s: %s", method, url, exc)
            raise TransportError(f"Could not reach the server: {exc}") from exc

        entry.response_status = response.status_code

        if not 200 <= response.status_code < 300:
            message = _error_message(response)
            entry.error = message
            logger.warning("API error: %s %s -> %d %s", method, url, response.status_code, message)
            if response.status_code == 404:
                raise ResourceNotFoundError(message, status_code=404)
            raise ServerError(message, status_code=response.status_code)

        if not response.content:
            logger.info("API response: %s %s -> %d (empty)", method, url, response.status_code)
            return {}

        try:
            data = response.json()
        except ValueError as exc:
            entry.error = "invalid JSON"
            logger.warning("API error: %s %s returned non-JSON body", method, url)
            raise ServerError("Server returned an invalid response", status_code=response.status_code) from exc

        logger.info("API response: %s %s -> %d", method, url, response.status_code)
        return data
