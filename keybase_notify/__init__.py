"""GitHub → Keybase chat notifications."""

__version__ = "0.3.0"
