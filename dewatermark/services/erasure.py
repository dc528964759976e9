"""Multipart upload to the watermark-erasure endpoint."""
from __future__ import annotations

import base64
import binascii
import logging
from typing import Any, Dict

import httpx

from dewatermark.config import Settings, get_settings
from dewatermark.errors import RemoteError

logger = logging.getLogger(__name__)


class ErasureClient:  # pylint: disable=too-few-public-methods
    """Posts one image per call and decodes the returned image."""

    def __init__(self, client: httpx.AsyncClient, settings: Settings | None = None) -> None:
        self._client = client
        self._settings = settings or get_settings()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def erase(self, image: bytes, token: str) -> bytes:
        url = self._settings.erase_url
        files = {
            self._settings.upload_field: (self._settings.upload_filename, image, "application/octet-stream"),
        }
        data = {"zoom_factor": self._settings.zoom_factor}

        logger.debug("POST %s (%d bytes)", url, len(image))
        try:
            resp = await self._client.post(url, files=files, data=data, headers=self.build_headers(token))
        except httpx.HTTPError as exc:
            raise RemoteError(f"Request to {url} failed: {exc}") from exc

        body = resp.text
        if resp.status_code >= 400:
            raise RemoteError("Erase request rejected", status=resp.status_code, body=body)
        try:
            payload = resp.json()
        except ValueError as exc:
            raise RemoteError("Erase response is not JSON", status=resp.status_code, body=body) from exc

        encoded = _edited_image(payload)
        if encoded is None:
            raise RemoteError("Erase response has no edited image", status=resp.status_code, body=body)
        try:
            return base64.b64decode(encoded)
        except (binascii.Error, ValueError) as exc:
            raise RemoteError("Edited image is not valid base64", status=resp.status_code, body=body) from exc

    def build_headers(self, token: str) -> Dict[str, str]:
        site = self._settings.site_url
        return {
            "X-Api-Mode": "AUTO",
            "X-Service": "REMOVE_WATERMARK",
            "User-Agent": self._settings.user_agent,
            "Referer": f"{site}/",
            "Origin": site,
            "Host": httpx.URL(self._settings.api_url).host,
            "Authorization": f"Bearer {token}",
        }


def _edited_image(payload: Any) -> str | None:
    if not isinstance(payload, dict):
        return None
    edited = payload.get("edited_image")
    if not isinstance(edited, dict):
        return None
    image = edited.get("image")
    return image if isinstance(image, str) and image else None
