"""switchboard ask — run one prompt through an agent CLI."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

import click

from switchboard.agent.errors import AgentError, NonZeroExitError
from switchboard.agent.factory import create_runner, get_backend_display_name
from switchboard.agent.models import RunRequest, RunResult
from switchboard.agent.registry import ProcessRegistry
from switchboard.config.models import AgentSettings
from switchboard.config.parser import ConfigError, load_config

#: Registry key used for the single conversation a terminal session runs.
_CLI_CONVERSATION = "cli"


@click.command()
@click.argument("prompt")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to switchboard.yaml.",
)
@click.option(
    "--backend",
    type=click.Choice(["claude-code", "codex", "gemini"]),
    default=None,
    help="Agent backend (overrides config).",
)
@click.option("--model", default=None, help="Model passed to the agent CLI.")
@click.option(
    "--workdir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Working directory for the agent process.",
)
@click.option("--session", "session_id", default=None, help="Session id to resume.")
@click.option(
    "--yes",
    "-y",
    "skip_permissions",
    is_flag=True,
    help="Skip the agent's permission prompts.",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Timeout in seconds (overrides config).",
)
@click.option(
    "--stream/--no-stream",
    default=None,
    help="Print text as it arrives (default from config).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def ask(
    prompt: str,
    config_path: Path | None,
    backend: str | None,
    model: str | None,
    workdir: Path | None,
    session_id: str | None,
    skip_permissions: bool,
    timeout: float | None,
    stream: bool | None,
    verbose: bool,
) -> None:
    """Send PROMPT to the configured agent and print its reply."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    try:
        config = load_config(config_path)
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from None

    overrides: dict[str, Any] = {}
    if backend is not None:
        overrides["backend"] = backend
    if timeout is not None:
        overrides["timeout"] = timeout
    settings = config.agent.model_copy(update=overrides)
    streaming = settings.streaming if stream is None else stream

    request = RunRequest(
        prompt=prompt,
        session_id=session_id,
        skip_permissions=skip_permissions or None,
        model=model,
        workdir=workdir,
        conversation_key=_CLI_CONVERSATION,
    )

    try:
        result = asyncio.run(_ask(settings, request, streaming))
    except AgentError as exc:
        error_msg = f"Error: {exc}"
        if isinstance(exc, NonZeroExitError) and exc.stderr_preview:
            error_msg += f". Stderr:\n  {exc.stderr_preview}"
        click.echo(error_msg, err=True)
        raise SystemExit(1) from None

    if not streaming:
        click.echo(result.text)
    if result.session_id:
        name = get_backend_display_name(settings.backend)
        click.echo(f"[{name} session: {result.session_id}]", err=True)


async def _ask(
    settings: AgentSettings, request: RunRequest, streaming: bool
) -> RunResult:
    registry = ProcessRegistry()
    runner = create_runner(settings, registry=registry)
    try:
        if not streaming:
            return await runner.run(request)

        printed = ""

        def _on_text(_delta: str, text: str) -> None:
            nonlocal printed
            # Codex replaces text wholesale; only print what is new.
            if text.startswith(printed):
                click.echo(text[len(printed) :], nl=False)
            else:
                click.echo("\n" + text, nl=False)
            printed = text

        result = await runner.run_stream(request, on_text=_on_text)
        click.echo("")
        return result
    finally:
        registry.stop_all()
