"""Backend protocol and the resolved per-run command options."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, ClassVar

from switchboard.agent.models import StreamEvent


@dataclass(frozen=True)
class CommandOptions:
    """Options for one invocation, after request overrides are applied."""

    prompt: str
    session_id: str | None = None
    skip_permissions: bool = False
    model: str | None = None
    workdir: Path | None = None
    system_prompt: str = ""
    streaming: bool = False


class Backend:
    """One agent CLI family: how to invoke it and how to read its output.

    Subclasses provide ``build_args`` and ``interpret``.  Adding a backend
    means adding a subclass; the runner never inspects backend events
    directly.
    """

    #: Registry name, e.g. ``"codex"``.
    name: ClassVar[str] = ""
    #: Human-readable name for messages.
    display_name: ClassVar[str] = ""
    #: Executable looked up on PATH.
    executable: ClassVar[str] = ""
    #: Whether the preamble is injected at all.
    injects_system_prompt: ClassVar[bool] = True
    #: Retry once without the session id when a resumed run exits non-zero.
    retry_stale_session: ClassVar[bool] = False

    def build_args(self, options: CommandOptions) -> list[str]:
        """Return the ordered argument list (without the executable)."""
        raise NotImplementedError

    def interpret(self, obj: dict[str, Any]) -> list[StreamEvent]:
        """Map one decoded JSON object to zero or more normalized events."""
        raise NotImplementedError

    def merge_final(self, accumulated: str, final: str) -> str:
        """Combine a ``TextFinal`` with the text accumulated so far.

        Default: a final message supersedes everything before it.
        """
        return final

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"
