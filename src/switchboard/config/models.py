"""Pydantic v2 models for switchboard.yaml configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from switchboard.constants import DEFAULT_TIMEOUT

BackendName = Literal["claude-code", "codex", "gemini"]


class AgentSettings(BaseModel):
    """Defaults applied to every run of a runner."""

    model_config = ConfigDict(extra="forbid")

    backend: BackendName = Field(
        default="claude-code",
        description="Agent CLI family to invoke",
    )
    model: str | None = Field(
        default=None,
        description="Model passed to the CLI via --model",
    )
    timeout: float = Field(
        default=DEFAULT_TIMEOUT,
        gt=0,
        description="Wall-clock budget per run, in seconds",
    )
    workdir: Path | None = Field(
        default=None,
        description="Working directory for agent processes",
    )
    skip_permissions: bool = Field(
        default=False,
        description="Bypass approval prompts unless a request says otherwise",
    )
    commands_file: Path | None = Field(
        default=None,
        description="Command-reference document appended to the system prompt",
    )
    streaming: bool = Field(
        default=True,
        description="Whether front-ends should prefer streaming runs",
    )


class SwitchboardConfig(BaseModel):
    """Top-level switchboard.yaml configuration."""

    model_config = ConfigDict(extra="forbid")

    agent: AgentSettings = Field(
        default_factory=AgentSettings,
        description="Agent runner settings",
    )
