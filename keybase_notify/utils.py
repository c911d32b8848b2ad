"""the beautiful world start from here."""

from __future__ import annotations

import hashlib
import hmac
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx


def first_line(text: str | None) -> str:
    """Return the first line of ``text`` (commit subjects, mostly)."""
    if not text:
        return ""
    return text.splitlines()[0]


def gh_verify(secret: str, body: bytes, signature_header: str | None) -> bool:
    """
    Verify GitHub webhook HMAC signature (X-Hub-Signature-256).

    Returns
    -------
    bool
        True if valid, False otherwise.
    """
    if not signature_header or not signature_header.startswith("sha256="):
        return False
    sig = signature_header.split("=", 1)[1]
    mac = hmac.new(secret.encode(), msg=body, digestmod=hashlib.sha256).hexdigest()
    return hmac.compare_digest(mac, sig)


@asynccontextmanager
async def http_session(
    client: Optional[httpx.AsyncClient], timeout: float
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield ``client`` as-is, or a short-lived client closed on exit."""
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(timeout=timeout) as fresh:
        yield fresh
