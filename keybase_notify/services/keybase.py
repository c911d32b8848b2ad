"""Yet another keybase services"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from typing import Any, Optional, Protocol

import httpx

from keybase_notify.config import DEFAULT_HTTP_TIMEOUT_SECONDS, Settings, TeamInfo
from keybase_notify.errors import TransportError
from keybase_notify.utils import http_session

logger = logging.getLogger(__name__)

KEYBASE_API_BASE = "https://keybase.io/_/api/1.0"

JSONDict = dict[str, Any]


class ChatTransport(Protocol):
    """What the dispatcher needs from a chat backend."""

    async def init(self) -> None:
        ...

    async def deinit(self) -> None:
        ...

    async def send_chat_message(self, team_info: TeamInfo, message: str) -> None:
        ...

    async def get_keybase_username(self, github_login: str) -> str:
        ...


def build_channel(team_info: TeamInfo) -> JSONDict:
    """Channel object for ``keybase chat api``; a plain channel wins over team/topic."""
    channel: JSONDict = {
        "public": False,
        "topic_type": "chat",
        "name": "",
        "members_type": "",
        "topic_name": "",
    }
    if team_info.channel:
        channel["name"] = team_info.channel
    else:
        channel["name"] = team_info.team_name
        channel["members_type"] = "team"
        channel["topic_name"] = team_info.topic_name
    return channel


class KeybaseClient:
    """
    Keybase chat through the ``keybase`` CLI, plus GitHub → Keybase lookups
    through the public user API.
    """

    def __init__(
        self,
        username: str,
        paper_key: str,
        *,
        binary: str = "keybase",
        timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        http_client: Optional[httpx.AsyncClient] = None,
        api_base: str = KEYBASE_API_BASE,
    ) -> None:
        self.username = username
        self.paper_key = paper_key
        self.binary = binary
        self.timeout = timeout
        self.api_base = api_base.rstrip("/")
        self._http_client = http_client
        self._logged_in = False

    @classmethod
    def from_settings(
        cls, settings: Settings, *, http_client: Optional[httpx.AsyncClient] = None
    ) -> "KeybaseClient":
        return cls(
            settings.keybase_username,
            settings.keybase_paper_key,
            binary=settings.keybase_binary,
            timeout=settings.http_timeout,
            http_client=http_client,
        )

    async def _run(self, *args: str, extra_env: Optional[dict[str, str]] = None) -> str:
        env = dict(os.environ)
        if extra_env:
            env.update(extra_env)
        logger.debug("Running %s %s", self.binary, args[0])
        try:
            proc = await asyncio.create_subprocess_exec(
                self.binary,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=env,
            )
        except OSError as exc:
            raise TransportError(f"Cannot run {self.binary!r}: {exc}") from exc
        out, err = await proc.communicate()
        if proc.returncode != 0:
            raise TransportError(
                f"keybase {args[0]} failed ({proc.returncode}): "
                f"{err.decode(errors='replace').strip()}"
            )
        return out.decode(errors="replace")

    async def init(self) -> None:
        """Log in for this run with the paper key (never put on the command line)."""
        await self._run(
            "oneshot",
            "--username",
            self.username,
            extra_env={"KEYBASE_PAPERKEY": self.paper_key},
        )
        self._logged_in = True

    async def deinit(self) -> None:
        if not self._logged_in:
            return
        await self._run("logout", "--force")
        self._logged_in = False

    async def send_chat_message(self, team_info: TeamInfo, message: str) -> None:
        request = {
            "method": "send",
            "params": {
                "options": {
                    "channel": build_channel(team_info),
                    "message": {"body": message},
                }
            },
        }
        raw = await self._run("chat", "api", "-m", json.dumps(request))
        try:
            reply = json.loads(raw) if raw.strip() else {}
        except ValueError as exc:
            raise TransportError(f"Unreadable reply from keybase chat api: {raw!r}") from exc
        if isinstance(reply, dict) and reply.get("error"):
            error = reply["error"]
            detail = error.get("message") if isinstance(error, dict) else error
            raise TransportError(f"Keybase chat error: {detail}")

    async def get_keybase_username(self, github_login: str) -> str:
        """
        Return the Keybase username with a proven link to ``github_login``.

        An empty string means no linked account. HTTP failures are raised so
        the caller decides how to degrade.
        """
        if not github_login:
            return ""

        async with http_session(self._http_client, self.timeout) as client:
            resp = await client.get(
                f"{self.api_base}/user/lookup.json",
                params={"github": github_login, "fields": "basics"},
            )
        resp.raise_for_status()
        data = resp.json()

        them = (data.get("them") or []) if isinstance(data, dict) else []
        first = them[0] if them else None
        if not isinstance(first, dict):
            return ""
        basics = first.get("basics") or {}
        return str(basics.get("username") or "")
