"""
services/errors.py

Typed failures for every user action in VitalTrack.

Pages catch ``VitalTrackError`` and present the message; nothing here is
fatal to the process.
"""

from __future__ import annotations


class VitalTrackError(Exception):
    """Base class for all VitalTrack failures."""


class ValidationError(VitalTrackError):
    """A precondition failed before any network call was made."""


class TransportError(VitalTrackError):
    """The backend could not be reached or the request was aborted."""


class ServerError(VitalTrackError):
    """The backend answered with a non-2xx status or ``success: false``."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ResourceNotFoundError(ServerError):
    """The referenced report, condition or entry no longer exists."""


class UploadError(VitalTrackError):
    """A report upload failed; the underlying cause is chained."""


class ComparisonError(VitalTrackError):
    """A report comparison failed; the underlying cause is chained."""


class CaptureError(VitalTrackError):
    """The camera failed to produce a photo. The caller may retry."""
