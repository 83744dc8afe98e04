"""Tests for the conversation session store."""

from __future__ import annotations

import logging

import pytest

from switchboard.agent.sessions import SessionStore


class TestSessionStore:
    def test_get_missing(self) -> None:
        assert SessionStore().get("C1") is None

    def test_set_and_get(self) -> None:
        store = SessionStore()
        store.set("C1", "sess-1")
        assert store.get("C1") == "sess-1"
        assert "C1" in store
        assert len(store) == 1

    def test_set_overwrites(self) -> None:
        store = SessionStore()
        store.set("C1", "sess-1")
        store.set("C1", "sess-2")
        assert store.get("C1") == "sess-2"
        assert len(store) == 1

    def test_keys_are_independent(self) -> None:
        store = SessionStore()
        store.set("C1", "a")
        store.set("C2", "b")
        assert store.get("C1") == "a"
        assert store.get("C2") == "b"

    def test_empty_id_drops_entry(self, caplog: pytest.LogCaptureFixture) -> None:
        store = SessionStore()
        store.set("C1", "sess-1")
        with caplog.at_level(logging.INFO, logger="switchboard.agent.sessions"):
            store.set("C1", "")
        assert store.get("C1") is None
        assert "C1" not in store
        assert "session continuity lost" in caplog.text

    def test_empty_id_for_unknown_key(self) -> None:
        store = SessionStore()
        store.set("C1", "")
        assert len(store) == 0

    def test_delete(self) -> None:
        store = SessionStore()
        store.set("C1", "sess-1")
        assert store.delete("C1") is True
        assert store.get("C1") is None
        assert store.delete("C1") is False

    def test_clear(self) -> None:
        store = SessionStore()
        store.set("C1", "a")
        store.set("C2", "b")
        store.clear()
        assert len(store) == 0
