"""Resolving GitHub logins into Keybase mentions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

UsernameLookup = Callable[[str], Awaitable[str]]


@dataclass(frozen=True)
class ActorHandle:
    """
    The user credited with an event.

    ``keybase_username`` is empty when the GitHub login could not be mapped to
    a Keybase account; the message then names the GitHub user instead.
    """

    github_login: str
    keybase_username: str = ""

    @property
    def resolved(self) -> bool:
        return bool(self.keybase_username)


def actor_display(actor: ActorHandle) -> str:
    """Render an actor the same way in every message template."""
    if actor.resolved:
        return f"@{actor.keybase_username}"
    return f"GitHub user `{actor.github_login}`"


async def resolve_actor(lookup: UsernameLookup, github_login: str) -> ActorHandle:
    """
    Ask ``lookup`` for the Keybase account linked to ``github_login``.

    Lookup failures never abort a notification: any error, like an empty
    answer, falls back to the unresolved GitHub identity.
    """
    if not github_login:
        return ActorHandle(github_login="")

    try:
        username = await lookup(github_login)
    except Exception as exc:
        logger.info("User %s not found: %s", github_login, exc)
        return ActorHandle(github_login=github_login)

    username = (username or "").strip()
    if not username:
        logger.info("User %s has no linked Keybase account", github_login)
        return ActorHandle(github_login=github_login)

    logger.debug("Username lookup successful, found %s", username)
    return ActorHandle(github_login=github_login, keybase_username=username)
