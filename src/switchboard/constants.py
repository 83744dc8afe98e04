"""Shared constants and type aliases for the Switchboard runtime."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

#: Default wall-clock budget for one agent run (5 minutes).
DEFAULT_TIMEOUT = 300.0

#: Seconds to wait after SIGTERM before SIGKILL.
SIGTERM_WAIT = 3.0

#: Maximum bytes per JSONL line from agent stdout (1 MB).
MAX_LINE_BYTES = 1_048_576

#: Bytes requested per stdout read while streaming.
READ_CHUNK_BYTES = 65_536

#: Callback receiving ``(fragment, accumulated_text)`` during streaming.
TextCallback = Callable[[str, str], Awaitable[None] | None]

#: Callback receiving a single terminal value (result or exception).
TerminalCallback = Callable[[Any], Awaitable[None] | None]
