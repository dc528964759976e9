"""Exception hierarchy for the dewatermark client.

Every failure of the public operation surfaces as one of these. Nothing is
retried internally; callers decide whether to try again.
"""
from __future__ import annotations


class DeWatermarkError(Exception):
    """Base class for all client errors."""


class ExtractionError(DeWatermarkError):
    """The signing secret could not be recovered from the web front-end."""


class SigningError(DeWatermarkError):
    """The secret is unusable as an HMAC key, or a token failed verification."""


class DimensionError(DeWatermarkError):
    """Image width/height could not be read."""


class RemoteError(DeWatermarkError):
    """The erase endpoint failed or returned no usable image."""

    def __init__(self, message: str, *, status: int | None = None, body: str | None = None):
        detail = f"{message} (status={status})" if status is not None else message
        if body:
            detail = f"{detail}: {body}"
        super().__init__(detail)
        self.status = status
        self.body = body
