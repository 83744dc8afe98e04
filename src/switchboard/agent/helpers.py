"""Shared helper functions for agent runners."""

from __future__ import annotations


def format_stderr_preview(stderr_text: str, max_lines: int = 5) -> str:
    """Extract and format the last N non-empty lines from stderr output."""
    lines = [line for line in stderr_text.split("\n") if line.strip()]
    last = lines[-max_lines:] if len(lines) > max_lines else lines
    return "\n  ".join(last)


def session_label(session_id: str | None) -> str:
    """Short log label for a session id: ``session: abcd1234...`` or ``new``."""
    if not session_id:
        return "new"
    return f"session: {session_id[:8]}..."


def as_str(value: object) -> str | None:
    """Return *value* if it is a non-empty string, else None."""
    if isinstance(value, str) and value:
        return value
    return None


def as_int(value: object) -> int:
    """Coerce a JSON token counter to int (missing or bogus -> 0)."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    return 0
