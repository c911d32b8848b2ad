"""Shared fakes and payload loading for the test suite."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

from keybase_notify.config import TeamInfo

PAYLOADS = Path(__file__).resolve().parent / "payloads"
SHORT_URL = "https://example.com"


def load_payload(name: str) -> dict[str, Any]:
    with (PAYLOADS / name).open(encoding="utf-8") as fh:
        return json.load(fh)


class FakeKeybase:
    """Records every transport call; lookups answer from ``usernames``."""

    def __init__(
        self,
        usernames: Optional[dict[str, str]] = None,
        *,
        lookup_error: Optional[Exception] = None,
    ) -> None:
        self.usernames = usernames or {}
        self.lookup_error = lookup_error
        self.calls: list[str] = []
        self.sent: list[tuple[TeamInfo, str]] = []
        self.lookups: list[str] = []

    async def init(self) -> None:
        self.calls.append("init")

    async def deinit(self) -> None:
        self.calls.append("deinit")

    async def send_chat_message(self, team_info: TeamInfo, message: str) -> None:
        self.calls.append("send")
        self.sent.append((team_info, message))

    async def get_keybase_username(self, github_login: str) -> str:
        self.lookups.append(github_login)
        if self.lookup_error is not None:
            raise self.lookup_error
        return self.usernames.get(github_login, "")


class FakeShortener:
    def __init__(self, short_url: str = SHORT_URL, *, error: Optional[Exception] = None) -> None:
        self.short_url = short_url
        self.error = error
        self.urls: list[str] = []

    async def shorten(self, url: str) -> str:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.short_url
