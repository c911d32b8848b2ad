"""One notification per GitHub event."""

from __future__ import annotations

import dataclasses
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Mapping, Optional

from keybase_notify.config import Settings
from keybase_notify.services.actors import resolve_actor
from keybase_notify.services.commits import filter_merge_commits
from keybase_notify.services.events import Notice, PushEvent, Unsupported, classify
from keybase_notify.services.formatting import format_message, needs_link
from keybase_notify.services.keybase import ChatTransport
from keybase_notify.services.shortener import Shortener

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """
    Turn one event into at most one Keybase chat message.

    A configured literal message is sent verbatim and skips everything else.
    Otherwise the event is classified; unsupported events end the run quietly,
    supported ones are credited to a resolved actor, rendered, and sent.
    """

    def __init__(
        self,
        settings: Settings,
        transport: ChatTransport,
        shortener: Shortener,
    ) -> None:
        self.settings = settings
        self.transport = transport
        self.shortener = shortener

    async def dispatch(
        self,
        event_name: Optional[str],
        payload: Optional[Mapping[str, Any]],
        *,
        use_override: bool = True,
    ) -> Optional[str]:
        """Return the message that was sent, or ``None`` when nothing was."""
        if use_override and self.settings.message:
            async with self._session():
                await self._send(self.settings.message)
            return self.settings.message

        event = classify(event_name, payload)
        if isinstance(event, Unsupported):
            logger.info(
                "Ignoring unsupported event %r (action %r)",
                event.event_name,
                event.action,
            )
            return None

        async with self._session():
            message = await self.render(event)
            await self._send(message)
        return message

    async def render(self, event: Notice) -> str:
        # Actor first: the formatter needs the resolved display string.
        actor = await resolve_actor(self.transport.get_keybase_username, event.actor_login)
        if isinstance(event, PushEvent):
            event = dataclasses.replace(event, commits=filter_merge_commits(event.commits))
        short_url = await self.shortener.shorten(event.url) if needs_link(event) else ""
        return format_message(event, actor, short_url)

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[None]:
        await self.transport.init()
        try:
            yield
        finally:
            await self.transport.deinit()

    async def _send(self, message: str) -> None:
        team_info = self.settings.team_info
        await self.transport.send_chat_message(team_info, message)
        logger.info("Sent notification to %s", team_info.channel or team_info.team_name)
