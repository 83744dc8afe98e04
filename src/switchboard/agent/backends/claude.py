"""Claude Code CLI backend (``claude -p``)."""

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


def merge_texts(streamed: str, result: str) -> str:
    """Merge text streamed so far with the terminal ``result`` text.

    Some CLI versions drop narration written before a tool call from the
    final ``result`` field, so streamed text is kept unless the result
    already contains it.
    """
    if not streamed:
        return result
    if not result:
        return streamed
    if streamed in result:
        return result
    return streamed + result


class ClaudeCodeBackend(Backend):
    """Print-style backend.

    Buffered runs use ``--output-format json`` (one result document);
    streaming runs use ``stream-json`` with ``--verbose``.  The preamble is
    passed through ``--append-system-prompt``.
    """

    name = "claude-code"
    display_name = "Claude Code"
    executable = "claude"
    retry_stale_session = True

    def build_args(self, options: CommandOptions) -> list[str]:
        if options.streaming:
            args = ["-p", "--output-format", "stream-json", "--verbose"]
        else:
            args = ["-p", "--output-format", "json"]

        if options.skip_permissions:
            args.append("--dangerously-skip-permissions")

        if options.session_id:
            args.extend(["--resume", options.session_id])

        if options.model:
            args.extend(["--model", options.model])

        args.extend(["--append-system-prompt", options.system_prompt])
        args.append(options.prompt)
        return args

    def interpret(self, obj: dict[str, Any]) -> list[StreamEvent]:
        """Map a Claude ``stream-json`` event (or the ``json`` result document).

        * ``system``    — init event with ``session_id``.
        * ``assistant`` — API message; ``text`` blocks inside
          ``message.content[]`` are streamed deltas.
        * ``result``    — terminal event: session id, final text or error.

        ``user`` (tool result echoes) and unknown types are ignorable.
        """
        event_type = obj.get("type")

        if event_type == "system":
            session_id = as_str(obj.get("session_id"))
            if session_id:
                return [SessionId(session_id=session_id)]

        elif event_type == "assistant":
            message = obj.get("message")
            content = message.get("content") if isinstance(message, dict) else None
            if isinstance(content, list):
                deltas: list[StreamEvent] = [
                    TextDelta(fragment=block["text"])
                    for block in content
                    if isinstance(block, dict)
                    and block.get("type") == "text"
                    and as_str(block.get("text"))
                ]
                if deltas:
                    return deltas

        elif event_type == "result":
            return self._interpret_result(obj)

        return [Ignorable()]

    def merge_final(self, accumulated: str, final: str) -> str:
        return merge_texts(accumulated, final)

    @staticmethod
    def _interpret_result(obj: dict[str, Any]) -> list[StreamEvent]:
        events: list[StreamEvent] = []

        session_id = as_str(obj.get("session_id"))
        if session_id:
            events.append(SessionId(session_id=session_id))

        subtype = as_str(obj.get("subtype")) or ""
        result = obj.get("result")
        if obj.get("is_error") is True or subtype.startswith("error"):
            message = as_str(result) or subtype or "unknown error"
            events.append(BackendError(message=message))
            return events

        usage = obj.get("usage")
        if isinstance(usage, dict):
            events.append(
                Usage(
                    input_tokens=as_int(usage.get("input_tokens")),
                    output_tokens=as_int(usage.get("output_tokens")),
                    cached_tokens=as_int(usage.get("cache_read_input_tokens")),
                )
            )

        if isinstance(result, str):
            events.append(TextFinal(text=result))

        return events
