"""Error taxonomy for agent runs.

Decode-level problems (non-JSON noise, unknown events) never surface here;
they are absorbed by the stream decoder.  Everything below is fatal for the
run that raised it.
"""

from __future__ import annotations

from switchboard.agent.helpers import format_stderr_preview


class AgentError(Exception):
    """Base class for process-level agent failures."""

    def __init__(self, message: str, backend: str = "") -> None:
        super().__init__(message)
        self.backend = backend


class SpawnFailureError(AgentError):
    """The agent executable could not be launched."""


class AgentTimeoutError(AgentError):
    """The run exceeded its wall-clock budget and the process was terminated."""

    def __init__(self, message: str, backend: str = "", timeout: float = 0.0) -> None:
        super().__init__(message, backend)
        self.timeout = timeout


class NonZeroExitError(AgentError):
    """The agent process exited with a non-zero status."""

    def __init__(
        self,
        message: str,
        backend: str = "",
        returncode: int | None = None,
        stderr: str = "",
        stopped: bool = False,
    ) -> None:
        super().__init__(message, backend)
        self.returncode = returncode
        self.stderr = stderr
        #: The process was stopped on purpose (cancel, registry stop or
        #: supersession), whatever exit status it chose.
        self.stopped = stopped

    @property
    def signalled(self) -> bool:
        """True when the process was killed by a signal (e.g. cancellation)."""
        return self.returncode is not None and self.returncode < 0

    @property
    def stderr_preview(self) -> str:
        """Last few non-empty stderr lines, for user-facing messages."""
        return format_stderr_preview(self.stderr)


class BackendReportedError(AgentError):
    """The backend's own terminal event reported a failure."""
