"""Agent process orchestration and streaming protocol layer."""

from switchboard.agent.backends import (
    BACKENDS,
    Backend,
    ClaudeCodeBackend,
    CodexBackend,
    CommandOptions,
    GeminiBackend,
    get_backend,
)
from switchboard.agent.decoder import StreamDecoder
from switchboard.agent.errors import (
    AgentError,
    AgentTimeoutError,
    BackendReportedError,
    NonZeroExitError,
    SpawnFailureError,
)
from switchboard.agent.factory import create_runner, get_backend_display_name
from switchboard.agent.models import (
    BackendError,
    Ignorable,
    RunRequest,
    RunResult,
    SessionId,
    StreamComplete,
    StreamEvent,
    StreamFailed,
    StreamItem,
    StreamText,
    TextDelta,
    TextFinal,
    Usage,
)
from switchboard.agent.registry import ProcessRegistry
from switchboard.agent.runner import AgentRunner
from switchboard.agent.sessions import SessionStore

__all__ = [
    "BACKENDS",
    "AgentError",
    "AgentRunner",
    "AgentTimeoutError",
    "Backend",
    "BackendError",
    "BackendReportedError",
    "ClaudeCodeBackend",
    "CodexBackend",
    "CommandOptions",
    "GeminiBackend",
    "Ignorable",
    "NonZeroExitError",
    "ProcessRegistry",
    "RunRequest",
    "RunResult",
    "SessionId",
    "SessionStore",
    "SpawnFailureError",
    "StreamComplete",
    "StreamDecoder",
    "StreamEvent",
    "StreamFailed",
    "StreamItem",
    "StreamText",
    "TextDelta",
    "TextFinal",
    "Usage",
    "create_runner",
    "get_backend",
    "get_backend_display_name",
]
