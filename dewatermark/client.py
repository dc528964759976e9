"""Public entry point: erase the watermark from one image.

Each call re-derives the signing secret, mints its own token, prepares the
image and posts it. Nothing is cached between calls, so independent calls can
be awaited concurrently on the same instance.
"""
from __future__ import annotations

import asyncio
import logging

import httpx

from dewatermark.config import Settings, get_settings
from dewatermark.models import ProxyConfig
from dewatermark.services.erasure import ErasureClient
from dewatermark.services.image import resize_to_width
from dewatermark.services.secret_source import ScrapedSecretSource, SecretSource
from dewatermark.services.token import mint_token

logger = logging.getLogger(__name__)


class DeWatermark:
    """Async client for the dewatermark.ai erase endpoint.

    Parameters
    ----------
    proxy : ProxyConfig, optional
        Proxy for all outgoing requests. Fixed for the lifetime of the instance.
    settings : Settings, optional
        Endpoint and upload policy; defaults to :func:`get_settings`.
    secret_source : SecretSource, optional
        Where the signing secret comes from. Defaults to scraping the site.
    http_client : httpx.AsyncClient, optional
        Externally owned client. When given, ``proxy`` is ignored and
        :meth:`close` leaves the client open.
    """

    def __init__(
        self,
        proxy: ProxyConfig | None = None,
        *,
        settings: Settings | None = None,
        secret_source: SecretSource | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self.proxy = proxy
        self._owns_client = http_client is None
        if http_client is None:
            http_client = httpx.AsyncClient(
                timeout=self._settings.http_timeout,
                follow_redirects=True,
                proxy=proxy.url if proxy else None,
            )
        self._client = http_client
        self._secret_source = secret_source or ScrapedSecretSource(self._client, self._settings)
        self._erasure = ErasureClient(self._client, self._settings)

    async def erase_watermark(self, image: bytes) -> bytes:
        """Return the image bytes with the watermark removed."""

        token, prepared = await asyncio.gather(
            self._mint_token(),
            resize_to_width(image, self._settings.target_width),
            return_exceptions=True,
        )
        # Secret and token failures are raised ahead of image failures.
        for outcome in (token, prepared):
            if isinstance(outcome, BaseException):
                raise outcome

        result = await self._erasure.erase(prepared, token)
        logger.info("Erased watermark: %d bytes in, %d bytes out", len(image), len(result))
        return result

    async def _mint_token(self) -> str:
        secret = await self._secret_source.get_secret()
        logger.debug("Signing token with secret from %s source", self._secret_source.name)
        return mint_token(
            secret,
            self._settings.token_is_pro,
            subject=self._settings.token_subject,
            platform=self._settings.token_platform,
        )

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "DeWatermark":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


async def erase_watermark(image: bytes, proxy: ProxyConfig | None = None) -> bytes:
    """One-shot helper: erase the watermark using a short-lived client."""

    async with DeWatermark(proxy) as client:
        return await client.erase_watermark(image)
