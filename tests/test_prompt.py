"""Tests for the system-context preamble."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from switchboard.agent.prompt import (
    CHAT_SYSTEM_PROMPT,
    build_system_prompt,
    load_commands_document,
    wrap_system_context,
)


class TestCommandsDocument:
    def test_none(self) -> None:
        assert load_commands_document(None) == ""

    def test_missing_file_warns(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="switchboard.agent.prompt"):
            assert load_commands_document(tmp_path / "COMMANDS.md") == ""
        assert "commands document not found" in caplog.text

    def test_loaded_as_section(self, tmp_path: Path) -> None:
        path = tmp_path / "COMMANDS.md"
        path.write_text("!schedule list", encoding="utf-8")
        assert load_commands_document(path) == "\n\n## COMMANDS.md\n\n!schedule list"


class TestBuildSystemPrompt:
    def test_without_commands(self) -> None:
        assert build_system_prompt() == CHAT_SYSTEM_PROMPT

    def test_with_commands(self, tmp_path: Path) -> None:
        path = tmp_path / "COMMANDS.md"
        path.write_text("!timeout 600", encoding="utf-8")
        prompt = build_system_prompt(path)
        assert prompt.startswith(CHAT_SYSTEM_PROMPT)
        assert prompt.endswith("## COMMANDS.md\n\n!timeout 600")

    def test_mentions_session_continuity(self) -> None:
        assert "Session continuity" in CHAT_SYSTEM_PROMPT
        assert "AGENTS.md" in CHAT_SYSTEM_PROMPT


class TestWrapSystemContext:
    def test_wraps(self) -> None:
        assert wrap_system_context("rules", "question") == (
            "<system-context>\nrules\n</system-context>\n\nquestion"
        )

    def test_empty_system_prompt(self) -> None:
        assert wrap_system_context("", "question") == "question"
