"""GitHub webhook router."""

from __future__ import annotations

import json
import logging
from functools import lru_cache

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from fastapi.responses import PlainTextResponse

from keybase_notify.config import Settings, load_settings
from keybase_notify.dispatcher import NotificationDispatcher
from keybase_notify.errors import ConfigError, EventPayloadError
from keybase_notify.services.keybase import KeybaseClient
from keybase_notify.services.shortener import UrlShortener
from keybase_notify.utils import gh_verify

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/wh", tags=["github"])


@lru_cache(maxsize=1)
def _cached_settings() -> Settings:
    return load_settings()


def get_settings() -> Settings:
    try:
        return _cached_settings()
    except ConfigError as exc:
        raise HTTPException(500, str(exc)) from exc


def get_dispatcher(settings: Settings = Depends(get_settings)) -> NotificationDispatcher:
    """A fresh dispatcher (and transport) for every delivery."""
    return NotificationDispatcher(
        settings,
        KeybaseClient.from_settings(settings),
        UrlShortener.from_settings(settings),
    )


@router.post("", response_class=PlainTextResponse)
async def github_webhook(
    request: Request,
    x_hub_signature_256: str | None = Header(None),
    x_github_event: str | None = Header(None),
    settings: Settings = Depends(get_settings),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """
    GitHub webhook endpoint.

    When a webhook secret is configured the payload signature is validated
    against `X-Hub-Signature-256`. Each delivery sends at most one Keybase
    message; the literal override message only applies to one-shot runs.
    """
    body = await request.body()
    if settings.webhook_secret and not gh_verify(
        settings.webhook_secret, body, x_hub_signature_256
    ):
        raise HTTPException(401, "Invalid signature")

    try:
        payload = json.loads(body or b"{}")
    except ValueError as exc:
        raise HTTPException(400, "Body is not valid JSON") from exc

    event = x_github_event or "unknown"
    try:
        message = await dispatcher.dispatch(event, payload, use_override=False)
    except EventPayloadError as exc:
        raise HTTPException(422, str(exc)) from exc

    if message is None:
        return "ignored"
    return f"{event} event forwarded"
