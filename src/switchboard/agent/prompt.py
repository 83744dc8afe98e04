"""System-context preamble injected into agent prompts."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

#: Persona and session-continuation notice for runners that resume sessions.
CHAT_SYSTEM_PROMPT = """\
You are talking with people through a chat platform (Discord/Slack).

## Session continuity
This conversation is continued with the backend's resume option. Earlier
turns are preserved, so you remember what was said before. Do not claim
that a restart made you forget the conversation.

## At session start
Read AGENTS.md and follow its instructions (including anything it references).
Platform-specific commands (channel operations, file delivery, scheduling,
timeouts) are documented below."""


def load_commands_document(path: Path | None) -> str:
    """Return the command-reference section for *path*, or ``""``.

    A missing file is not an error: the preamble simply has no command
    reference.
    """
    if path is None:
        return ""
    if not path.is_file():
        logger.warning("commands document not found at %s", path)
        return ""
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        logger.error("failed to read commands document %s: %s", path, exc)
        return ""
    logger.info("loaded %s (%d bytes)", path.name, len(content))
    return f"\n\n## {path.name}\n\n{content}"


def build_system_prompt(commands_file: Path | None = None) -> str:
    """Full preamble: persona + continuity notice + command reference."""
    return CHAT_SYSTEM_PROMPT + load_commands_document(commands_file)


def wrap_system_context(system_prompt: str, prompt: str) -> str:
    """Prefix *prompt* with a ``<system-context>`` block.

    Used by backends that have no dedicated system-prompt flag.
    """
    if not system_prompt:
        return prompt
    return f"<system-context>\n{system_prompt}\n</system-context>\n\n{prompt}"
