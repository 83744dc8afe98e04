"""Gemini CLI backend (``gemini --prompt``)."""

from __future__ import annotations

from typing import Any

from switchboard.agent.backends.base import Backend, CommandOptions
from switchboard.agent.helpers import as_int, as_str
from switchboard.agent.models import (
    BackendError,
    Ignorable,
    SessionId,
    StreamEvent,
    TextDelta,
    TextFinal,
    Usage,
)


class GeminiBackend(Backend):
    """Print-style backend that loads its own context file.

    Gemini reads GEMINI.md from the workspace itself, so no preamble is
    injected.  Stale ``--resume`` ids make it exit non-zero, hence the
    retry.
    """

    name = "gemini"
    display_name = "Gemini"
    executable = "gemini"
    injects_system_prompt = False
    retry_stale_session = True

    def build_args(self, options: CommandOptions) -> list[str]:
        args: list[str] = []

        if options.skip_permissions:
            args.append("--yolo")

        if options.model:
            args.extend(["--model", options.model])

        if options.session_id:
            args.extend(["--resume", options.session_id])

        output_format = "stream-json" if options.streaming else "json"
        args.extend(["--output-format", output_format, "--prompt", options.prompt])
        return args

    def interpret(self, obj: dict[str, Any]) -> list[StreamEvent]:
        event_type = obj.get("type")
        events: list[StreamEvent] = []

        if event_type == "init":
            session_id = as_str(obj.get("session_id"))
            if session_id:
                events.append(SessionId(session_id=session_id))

        elif event_type == "message":
            content = as_str(obj.get("content"))
            if obj.get("role") == "assistant" and content:
                events.append(TextDelta(fragment=content))

        elif event_type == "result":
            session_id = as_str(obj.get("session_id"))
            if session_id:
                events.append(SessionId(session_id=session_id))
            if obj.get("status") == "error":
                error = obj.get("error")
                message = error.get("message") if isinstance(error, dict) else None
                events.append(
                    BackendError(message=as_str(message) or "Gemini CLI returned error")
                )
                return events
            stats = obj.get("stats")
            if isinstance(stats, dict):
                events.append(
                    Usage(
                        input_tokens=as_int(stats.get("input_tokens")),
                        output_tokens=as_int(stats.get("output_tokens")),
                        cached_tokens=as_int(stats.get("cached")),
                    )
                )

        elif event_type is None and "response" in obj:
            # Buffered ``--output-format json`` document.
            session_id = as_str(obj.get("session_id"))
            if session_id:
                events.append(SessionId(session_id=session_id))
            response = obj.get("response")
            if isinstance(response, str):
                events.append(TextFinal(text=response))

        return events or [Ignorable()]
