"""the beautiful world start from here."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from keybase_notify.errors import ConfigError

load_dotenv()

DEFAULT_SHORTENER_URL = "https://is.gd/create.php"
DEFAULT_HTTP_TIMEOUT_SECONDS = 15
TRUTHY = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True)
class TeamInfo:
    """Where a message goes: a plain channel, or a team + topic pair."""

    channel: str = ""
    team_name: str = ""
    topic_name: str = ""


@dataclass(frozen=True)
class Settings:
    """App Settings"""

    keybase_username: str
    keybase_paper_key: str
    keybase_channel: str = ""
    keybase_team_name: str = ""
    keybase_topic_name: str = ""
    message: str = ""
    keybase_binary: str = "keybase"
    shortener_url: str = DEFAULT_SHORTENER_URL
    http_timeout: int = DEFAULT_HTTP_TIMEOUT_SECONDS
    webhook_secret: str = ""
    verbose: bool = False

    @property
    def team_info(self) -> TeamInfo:
        # Channel wins when both destinations are configured.
        if self.keybase_channel:
            return TeamInfo(channel=self.keybase_channel)
        return TeamInfo(
            team_name=self.keybase_team_name,
            topic_name=self.keybase_topic_name,
        )


def _input(env: Mapping[str, str], name: str) -> str:
    """Read a GitHub Actions style input (``INPUT_<NAME>``)."""
    key = f"INPUT_{name.replace(' ', '_').upper()}"
    return (env.get(key) or "").strip()


def _required_input(env: Mapping[str, str], name: str) -> str:
    value = _input(env, name)
    if not value:
        raise ConfigError(f"Input required and not supplied: {name}")
    return value


def _parse_timeout(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"HTTP_TIMEOUT_SECONDS must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"HTTP_TIMEOUT_SECONDS must be positive, got {value}")
    return value


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build validated settings from the process environment (or ``environ``).

    Credentials are checked first, then the destination: either a channel or
    both a team name and a topic name must be present.
    """
    env = os.environ if environ is None else environ

    username = _required_input(env, "keybase_username")
    paper_key = _required_input(env, "keybase_paper_key")
    channel = _input(env, "keybase_channel")
    team_name = _input(env, "keybase_team_name")
    topic_name = _input(env, "keybase_topic_name")

    if not channel and not (team_name and topic_name):
        raise ConfigError(
            "Input required and not supplied: keybase_channel "
            "(or both keybase_team_name and keybase_topic_name)"
        )

    verbose = (
        (env.get("RUNNER_DEBUG") or "") == "1"
        or (env.get("KEYBASE_NOTIFY_DEBUG") or "").strip().lower() in TRUTHY
    )

    return Settings(
        keybase_username=username,
        keybase_paper_key=paper_key,
        keybase_channel=channel,
        keybase_team_name=team_name,
        keybase_topic_name=topic_name,
        message=_input(env, "message"),
        keybase_binary=(env.get("KEYBASE_BINARY") or "keybase").strip(),
        shortener_url=(env.get("URL_SHORTENER_ENDPOINT") or DEFAULT_SHORTENER_URL).strip(),
        http_timeout=_parse_timeout(
            (env.get("HTTP_TIMEOUT_SECONDS") or str(DEFAULT_HTTP_TIMEOUT_SECONDS)).strip()
        ),
        webhook_secret=(env.get("GITHUB_WEBHOOK_SECRET") or "").strip(),
        verbose=verbose,
    )
