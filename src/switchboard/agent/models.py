"""Pydantic v2 models for run requests, results and normalized stream events."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class RunRequest(BaseModel):
    """One logical request against an agent backend.

    Options left as ``None`` fall back to the runner's configured defaults.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    prompt: str = Field(description="User prompt text")
    session_id: str | None = Field(
        default=None,
        description="Backend session to continue, if any",
    )
    skip_permissions: bool | None = Field(
        default=None,
        description="Bypass the backend's approval prompts",
    )
    model: str | None = Field(default=None, description="Backend model override")
    workdir: Path | None = Field(
        default=None,
        description="Working directory for the agent process",
    )
    conversation_key: str | None = Field(
        default=None,
        description="Conversation the process is registered under",
    )

    def without_session(self) -> RunRequest:
        """Return a copy of this request that starts a fresh session."""
        return self.model_copy(update={"session_id": None})


class RunResult(BaseModel):
    """Final outcome of a successful run.

    An empty ``session_id`` means the backend did not report one; callers
    should treat that as "continuation unavailable", not as an error.
    """

    model_config = ConfigDict(frozen=True)

    text: str = Field(description="Final response text")
    session_id: str = Field(default="", description="Backend session identifier")


# ------------------------------------------------------------------ #
# Normalized stream events
# ------------------------------------------------------------------ #


class _EventBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class TextDelta(_EventBase):
    """Incremental text, appended to the accumulated response."""

    type: Literal["text_delta"] = "text_delta"
    fragment: str


class TextFinal(_EventBase):
    """A complete message; merged into the accumulated text per backend rule."""

    type: Literal["text_final"] = "text_final"
    text: str


class SessionId(_EventBase):
    """Backend-issued session identifier."""

    type: Literal["session_id"] = "session_id"
    session_id: str


class Usage(_EventBase):
    """Token usage counters (observability only)."""

    type: Literal["usage"] = "usage"
    input_tokens: int = 0
    output_tokens: int = 0
    cached_tokens: int = 0


class BackendError(_EventBase):
    """The backend reported a failure in its own terminal event."""

    type: Literal["backend_error"] = "backend_error"
    message: str


class Ignorable(_EventBase):
    """A recognised-but-irrelevant or unknown event."""

    type: Literal["ignorable"] = "ignorable"


StreamEvent = Annotated[
    TextDelta | TextFinal | SessionId | Usage | BackendError | Ignorable,
    Field(discriminator="type"),
]


# ------------------------------------------------------------------ #
# Channel-style stream items
# ------------------------------------------------------------------ #


class StreamText(BaseModel):
    """A text update: the new fragment and the running total."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    delta: str
    text: str


class StreamComplete(BaseModel):
    """Terminal item: the run succeeded."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["complete"] = "complete"
    result: RunResult


class StreamFailed(BaseModel):
    """Terminal item: the run failed with *error*."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: Literal["failed"] = "failed"
    error: Exception


StreamItem = StreamText | StreamComplete | StreamFailed
