"""One-shot runner: notify Keybase about the GitHub event of this workflow run."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Optional

import httpx

from keybase_notify.config import load_settings
from keybase_notify.dispatcher import NotificationDispatcher
from keybase_notify.errors import ConfigError, KeybaseNotifyError
from keybase_notify.logging import setup_logging
from keybase_notify.services.keybase import KeybaseClient
from keybase_notify.services.shortener import UrlShortener

logger = logging.getLogger("keybase_notify")


def read_event_payload(path: Optional[str]) -> dict[str, Any]:
    """Load the webhook payload GitHub Actions left on disk; missing → empty."""
    if not path:
        return {}
    event_path = Path(path)
    if not event_path.is_file():
        logger.warning("Event payload %s does not exist", event_path)
        return {}
    with event_path.open(encoding="utf-8") as fh:
        data = json.load(fh)
    return data if isinstance(data, dict) else {}


async def run(
    event_name: Optional[str], event_path: Optional[str], verbose: bool = False
) -> Optional[str]:
    settings = load_settings()
    setup_logging(verbose or settings.verbose)

    payload = read_event_payload(event_path)
    logger.debug("GitHub event payload: %s", json.dumps(payload, indent=2, sort_keys=True))

    dispatcher = NotificationDispatcher(
        settings,
        KeybaseClient.from_settings(settings),
        UrlShortener.from_settings(settings),
    )
    return await dispatcher.dispatch(event_name, payload)


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="keybase-notify",
        description="Send a Keybase chat notification for a GitHub event",
    )
    parser.add_argument(
        "--event-name",
        default=os.getenv("GITHUB_EVENT_NAME"),
        help="GitHub event name (default: $GITHUB_EVENT_NAME)",
    )
    parser.add_argument(
        "--event-path",
        default=os.getenv("GITHUB_EVENT_PATH"),
        help="Path to the event JSON payload (default: $GITHUB_EVENT_PATH)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    try:
        asyncio.run(run(args.event_name, args.event_path, args.verbose))
    except ConfigError as exc:
        logger.error("%s", exc)
        return 1
    except (KeybaseNotifyError, httpx.HTTPError, json.JSONDecodeError) as exc:
        logger.error("Notification failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
