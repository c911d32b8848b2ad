"""Errors raised by keybase_notify."""

from __future__ import annotations


class KeybaseNotifyError(Exception):
    """Base class for every error this package raises on purpose."""


class ConfigError(KeybaseNotifyError, ValueError):
    """Raised when required inputs are missing or malformed."""


class EventPayloadError(KeybaseNotifyError, ValueError):
    """Raised when a supported event arrives without the fields it needs."""

    def __init__(self, event_name: str, detail: str) -> None:
        super().__init__(f"Malformed {event_name!r} payload: {detail}")
        self.event_name = event_name
        self.detail = detail


class TransportError(KeybaseNotifyError, RuntimeError):
    """Raised when the keybase CLI refuses a command."""
