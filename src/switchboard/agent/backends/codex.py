"""Codex CLI backend (``codex exec --json``)."""

from __future__ import annotations

import logging
from typing import Any

from switchboard.agent.backends.base import Backend, CommandOptions
from switchboard.agent.helpers import as_int, as_str
from switchboard.agent.models import (
    Ignorable,
    SessionId,
    StreamEvent,
    TextDelta,
    TextFinal,
    Usage,
)
from switchboard.agent.prompt import wrap_system_context

logger = logging.getLogger(__name__)


class CodexBackend(Backend):
    """Exec-style backend.

    Global flags must precede the ``resume`` pseudo-subcommand, and the
    prompt (with the preamble inlined) is always last.  Streaming and
    buffered runs use the same argv.
    """

    name = "codex"
    display_name = "Codex"
    executable = "codex"

    def build_args(self, options: CommandOptions) -> list[str]:
        args = ["exec", "--json"]

        if options.skip_permissions:
            args.append("--dangerously-bypass-approvals-and-sandbox")
        else:
            args.append("--full-auto")

        # Allow running outside a git repository.
        args.append("--skip-git-repo-check")

        if options.model:
            args.extend(["--model", options.model])

        if options.workdir:
            args.extend(["--cd", str(options.workdir)])

        # --model/--cd must come before the resume subcommand.
        if options.session_id:
            args.extend(["resume", options.session_id])

        args.append(wrap_system_context(options.system_prompt, options.prompt))
        return args

    def interpret(self, obj: dict[str, Any]) -> list[StreamEvent]:
        """Map a Codex ``--json`` event.

        Codex emits these top-level event types:

        * ``thread.started`` — carries ``thread_id`` (the resume handle).
        * ``item.completed`` — an ``agent_message`` item is a complete reply;
          each one replaces the previous one.
        * ``turn.completed`` — token usage.
        * ``turn.failed`` / ``error`` — logged only.

        Older releases used ``session_id``, ``agent_message_delta``,
        ``message`` and ``result``; those are still understood.
        """
        events: list[StreamEvent] = []

        session_id = self._extract_session_id(obj)
        if session_id:
            events.append(SessionId(session_id=session_id))

        text_event = self._extract_text(obj)
        if text_event is not None:
            events.append(text_event)

        event_type = obj.get("type")
        if event_type == "turn.completed":
            usage = obj.get("usage")
            if isinstance(usage, dict):
                events.append(
                    Usage(
                        input_tokens=as_int(usage.get("input_tokens")),
                        output_tokens=as_int(usage.get("output_tokens")),
                        cached_tokens=as_int(usage.get("cached_input_tokens")),
                    )
                )
        elif event_type == "turn.failed":
            error = obj.get("error")
            message = error.get("message") if isinstance(error, dict) else error
            logger.warning("codex turn failed: %s", message)
        elif event_type == "error":
            logger.warning("codex error: %s", obj.get("message"))

        return events or [Ignorable()]

    @staticmethod
    def _extract_session_id(obj: dict[str, Any]) -> str | None:
        if obj.get("type") == "thread.started":
            thread_id = as_str(obj.get("thread_id"))
            if thread_id:
                return thread_id
        return as_str(obj.get("thread_id")) or as_str(obj.get("session_id"))

    @staticmethod
    def _extract_text(obj: dict[str, Any]) -> StreamEvent | None:
        event_type = obj.get("type")

        if event_type == "item.completed":
            item = obj.get("item")
            if isinstance(item, dict) and item.get("type") == "agent_message":
                text = as_str(item.get("text"))
                if text:
                    return TextFinal(text=text)

        delta = _delta_text(obj)
        if delta:
            return TextDelta(fragment=delta)

        if event_type == "message":
            content = as_str(obj.get("content"))
            if content:
                return TextFinal(text=content)

        result = as_str(obj.get("result"))
        if result:
            return TextFinal(text=result)

        return None


def _delta_text(obj: dict[str, Any]) -> str | None:
    """Text of an ``agent_message_delta`` event, top-level or under ``msg``."""
    for candidate in (obj, obj.get("msg")):
        if isinstance(candidate, dict) and candidate.get("type") == "agent_message_delta":
            return as_str(candidate.get("delta"))
    return None
