from __future__ import annotations

from typing import Any, Callable

import pytest

from keybase_notify.config import Settings


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    def _make(**overrides: Any) -> Settings:
        values: dict[str, Any] = {
            "keybase_username": "fakebob",
            "keybase_paper_key": "this is a fake paper key",
            "keybase_channel": "funtimes",
        }
        values.update(overrides)
        return Settings(**values)

    return _make
