"""Sources of the HMAC secret used to sign bearer tokens.

The web front-end ships the secret inside its bundled ``_app`` script, right
after the API origin literal. :class:`ScrapedSecretSource` recovers it on every
call since the bundle, and with it the secret, changes on each deployment.
"""
from __future__ import annotations

import base64
import binascii
import logging
from abc import ABC, abstractmethod

import httpx

from dewatermark.config import Settings, get_settings
from dewatermark.errors import ExtractionError

logger = logging.getLogger(__name__)


class SecretSource(ABC):
    """Abstract provider of the raw signing secret."""

    name: str = "abstract"

    @abstractmethod
    async def get_secret(self) -> bytes:
        """Return the raw secret bytes."""


class StaticSecretSource(SecretSource):
    """Returns a fixed secret. Useful offline and in tests."""

    name = "static"

    def __init__(self, secret: bytes) -> None:
        self._secret = secret

    async def get_secret(self) -> bytes:
        return self._secret


class ScrapedSecretSource(SecretSource):
    """Scrapes the upload page and its app bundle for the secret."""

    name = "scraped"

    def __init__(self, client: httpx.AsyncClient, settings: Settings | None = None) -> None:
        self._client = client
        self._settings = settings or get_settings()

    async def get_secret(self) -> bytes:
        html = await self._fetch_text(self._settings.upload_page_url)
        script_url = find_bundle_url(html, self._settings)
        script = await self._fetch_text(script_url)
        encoded = find_encoded_secret(script, self._settings.api_url)
        logger.debug("Recovered signing secret from %s", script_url)
        return decode_secret(encoded)

    async def _fetch_text(self, url: str) -> str:
        logger.debug("GET %s", url)
        try:
            resp = await self._client.get(url, headers={"User-Agent": self._settings.user_agent})
        except httpx.HTTPError as exc:
            raise ExtractionError(f"Failed to fetch {url}: {exc}") from exc
        if resp.status_code >= 400:
            raise ExtractionError(f"Failed to fetch {url}: HTTP {resp.status_code}")
        return resp.text


# ------------------------------------------------------------------
# Parsing helpers
# ------------------------------------------------------------------

def find_bundle_url(html: str, settings: Settings) -> str:
    """Return the absolute URL of the ``_app`` bundle referenced by *html*."""

    fragment = settings.bundle_fragment
    _, found, tail = html.partition(fragment)
    if not found:
        raise ExtractionError(f"Bundle path {fragment!r} not found in upload page; site layout changed?")
    suffix, found, _ = tail.partition(".js")
    if not found:
        raise ExtractionError(f"Bundle path {fragment!r} has no .js extension in upload page")
    return f"{settings.site_url}{fragment}{suffix}.js"


def find_encoded_secret(script: str, api_origin: str) -> str:
    """Return the quoted literal that follows the ``"<api_origin>"`` literal."""

    marker = f'{api_origin}"'
    _, found, tail = script.partition(marker)
    if not found:
        raise ExtractionError(f"API origin {api_origin!r} not found in app bundle")
    parts = tail.split('"')
    if len(parts) < 3 or not parts[1]:
        raise ExtractionError("Secret literal not found after API origin in app bundle")
    return parts[1]


def decode_secret(encoded: str) -> bytes:
    """Decode a URL-safe base64 secret, with or without padding."""

    try:
        return base64.urlsafe_b64decode(encoded + "=" * (-len(encoded) % 4))
    except (binascii.Error, ValueError) as exc:
        raise ExtractionError(f"Secret literal is not valid base64url: {exc}") from exc
