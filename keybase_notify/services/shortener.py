"""Link shortening for notification messages."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import httpx

from keybase_notify.config import DEFAULT_HTTP_TIMEOUT_SECONDS, DEFAULT_SHORTENER_URL, Settings
from keybase_notify.utils import http_session

logger = logging.getLogger(__name__)


class Shortener(Protocol):
    async def shorten(self, url: str) -> str:
        ...


class UrlShortener:
    """Client for ``?format=simple&url=...`` style shortening endpoints (is.gd, v.gd)."""

    def __init__(
        self,
        endpoint: str = DEFAULT_SHORTENER_URL,
        *,
        timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.endpoint = endpoint
        self.timeout = timeout
        self._http_client = http_client

    @classmethod
    def from_settings(
        cls, settings: Settings, *, http_client: Optional[httpx.AsyncClient] = None
    ) -> "UrlShortener":
        return cls(settings.shortener_url, timeout=settings.http_timeout, http_client=http_client)

    async def shorten(self, url: str) -> str:
        """Shorten ``url``; any HTTP failure propagates to the caller."""
        async with http_session(self._http_client, self.timeout) as client:
            resp = await client.get(self.endpoint, params={"format": "simple", "url": url})
        resp.raise_for_status()
        short = resp.text.strip()
        if not short:
            raise httpx.HTTPStatusError(
                f"Empty answer from {self.endpoint}", request=resp.request, response=resp
            )
        logger.debug("Shortened %s to %s", url, short)
        return short
