"""Shared fixtures."""

from __future__ import annotations

import pytest

from switchboard.config.parser import _ENV_OVERRIDES


@pytest.fixture(autouse=True)
def _clean_agent_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's own agent environment out of the tests."""
    for var in _ENV_OVERRIDES:
        monkeypatch.delenv(var, raising=False)
