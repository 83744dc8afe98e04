"""Agent CLI backends — argv construction and event interpretation."""

from __future__ import annotations

from switchboard.agent.backends.base import Backend, CommandOptions
from switchboard.agent.backends.claude import ClaudeCodeBackend, merge_texts
from switchboard.agent.backends.codex import CodexBackend
from switchboard.agent.backends.gemini import GeminiBackend

#: Backend classes by registry name.
BACKENDS: dict[str, type[Backend]] = {
    ClaudeCodeBackend.name: ClaudeCodeBackend,
    CodexBackend.name: CodexBackend,
    GeminiBackend.name: GeminiBackend,
}


def get_backend(name: str) -> Backend:
    """Instantiate the backend registered under *name*."""
    try:
        return BACKENDS[name]()
    except KeyError:
        available = ", ".join(f"'{n}'" for n in BACKENDS)
        msg = f"Unknown agent backend '{name}' — available: {available}"
        raise ValueError(msg) from None


__all__ = [
    "BACKENDS",
    "Backend",
    "ClaudeCodeBackend",
    "CodexBackend",
    "CommandOptions",
    "GeminiBackend",
    "get_backend",
    "merge_texts",
]
