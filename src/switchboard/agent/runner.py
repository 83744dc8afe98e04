"""Agent runner — spawns one CLI process per request and decodes its JSONL."""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from switchboard.agent.backends.base import Backend, CommandOptions
from switchboard.agent.decoder import StreamDecoder
from switchboard.agent.errors import (
    AgentError,
    AgentTimeoutError,
    BackendReportedError,
    NonZeroExitError,
    SpawnFailureError,
)
from switchboard.agent.helpers import session_label
from switchboard.agent.models import (
    BackendError,
    RunRequest,
    RunResult,
    SessionId,
    StreamComplete,
    StreamFailed,
    StreamItem,
    StreamText,
    TextDelta,
    TextFinal,
    Usage,
)
from switchboard.agent.prompt import build_system_prompt
from switchboard.agent.registry import ProcessRegistry
from switchboard.config.models import AgentSettings
from switchboard.constants import (
    MAX_LINE_BYTES,
    READ_CHUNK_BYTES,
    SIGTERM_WAIT,
    TerminalCallback,
    TextCallback,
)

logger = logging.getLogger(__name__)


@dataclass
class _RunState:
    """Mutable accumulation for a single process."""

    text: str = ""
    session_id: str = ""
    backend_error: str | None = None
    decoded: int = 0


class AgentRunner:
    """Runs requests against one backend.

    Every run spawns a fresh process (stdin closed, stdout/stderr piped),
    optionally registered in a shared ``ProcessRegistry`` under the
    request's conversation key.  Three ways to consume a run:

    * ``run()``        — buffer everything, return the result.
    * ``run_stream()`` — decode as bytes arrive, report through callbacks.
    * ``stream()``     — async iterator of ``StreamItem``; the last item is
      ``StreamComplete`` or ``StreamFailed``.
    """

    def __init__(
        self,
        backend: Backend,
        settings: AgentSettings | None = None,
        registry: ProcessRegistry | None = None,
        system_prompt: str | None = None,
    ) -> None:
        self._backend = backend
        self._settings = settings if settings is not None else AgentSettings()
        self._registry = registry
        if not backend.injects_system_prompt:
            self._system_prompt = ""
        elif system_prompt is not None:
            self._system_prompt = system_prompt
        else:
            self._system_prompt = build_system_prompt(self._settings.commands_file)

        self._current: asyncio.subprocess.Process | None = None
        self._cancelled: asyncio.subprocess.Process | None = None

    @property
    def backend(self) -> Backend:
        return self._backend

    @property
    def timeout(self) -> float:
        return self._settings.timeout

    @property
    def current_pid(self) -> int | None:
        """PID of the process this runner is waiting on, if any."""
        proc = self._current
        if proc is not None and proc.returncode is None:
            return proc.pid
        return None

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    async def run(self, request: RunRequest) -> RunResult:
        """Run *request* to completion with full buffering."""
        return await self._run_with_recovery(request, streaming=False, on_text=None)

    async def run_stream(
        self,
        request: RunRequest,
        on_text: TextCallback | None = None,
        on_complete: TerminalCallback | None = None,
        on_error: TerminalCallback | None = None,
    ) -> RunResult:
        """Run *request*, reporting text as it streams in.

        ``on_text(fragment, accumulated)`` fires for every text event.
        Exactly one of ``on_complete(result)`` / ``on_error(exc)`` fires
        before this coroutine returns or raises.  Callbacks may be plain
        functions or coroutine functions.
        """
        try:
            result = await self._run_with_recovery(
                request, streaming=True, on_text=on_text
            )
        except Exception as exc:
            await _call(on_error, exc)
            raise
        await _call(on_complete, result)
        return result

    async def stream(self, request: RunRequest) -> AsyncIterator[StreamItem]:
        """Yield text updates, then one terminal item.

        Closing the iterator before the terminal item cancels the run and
        terminates the process.
        """
        queue: asyncio.Queue[StreamItem] = asyncio.Queue()

        def _on_text(delta: str, text: str) -> None:
            queue.put_nowait(StreamText(delta=delta, text=text))

        async def _produce() -> None:
            try:
                result = await self._run_with_recovery(
                    request, streaming=True, on_text=_on_text
                )
            except AgentError as exc:
                queue.put_nowait(StreamFailed(error=exc))
            else:
                queue.put_nowait(StreamComplete(result=result))

        producer = asyncio.create_task(_produce())
        try:
            while True:
                get = asyncio.ensure_future(queue.get())
                done, _ = await asyncio.wait(
                    {get, producer}, return_when=asyncio.FIRST_COMPLETED
                )
                if get in done:
                    item = get.result()
                else:
                    get.cancel()
                    # Re-raises anything other than AgentError.
                    producer.result()
                    item = queue.get_nowait()
                yield item
                if isinstance(item, (StreamComplete, StreamFailed)):
                    return
        finally:
            if not producer.done():
                producer.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await producer

    def cancel(self) -> bool:
        """Terminate the process this runner is currently waiting on.

        The pending run settles with an error once the process exits.

        Returns:
            True if a running process was signalled.
        """
        pid = self.current_pid
        proc = self._current
        self._current = None
        if pid is None or proc is None:
            return False
        self._cancelled = proc
        logger.info("%s: cancelling pid %d", self._backend.name, pid)
        with contextlib.suppress(ProcessLookupError):
            proc.terminate()
        return True

    # ------------------------------------------------------------------ #
    # Execution
    # ------------------------------------------------------------------ #

    async def _run_with_recovery(
        self,
        request: RunRequest,
        *,
        streaming: bool,
        on_text: TextCallback | None,
    ) -> RunResult:
        try:
            return await self._execute(request, streaming=streaming, on_text=on_text)
        except NonZeroExitError as exc:
            if (
                not request.session_id
                or not self._backend.retry_stale_session
                or exc.signalled
                or exc.stopped
            ):
                raise
            logger.warning(
                "%s: session resume failed (%s), retrying without session: %s %s",
                self._backend.name,
                session_label(request.session_id),
                exc,
                exc.stderr_preview,
            )
            return await self._execute(
                request.without_session(), streaming=streaming, on_text=on_text
            )

    async def _execute(
        self,
        request: RunRequest,
        *,
        streaming: bool,
        on_text: TextCallback | None,
    ) -> RunResult:
        options = self._command_options(request, streaming)
        args = self._backend.build_args(options)
        proc = await self._spawn(args, options)

        key = request.conversation_key
        self._current = proc
        if key and self._registry is not None:
            self._registry.register(key, proc)

        state = _RunState()
        stderr_task = asyncio.create_task(_read_all(proc.stderr))
        try:
            try:
                returncode = await asyncio.wait_for(
                    self._communicate(proc, state, streaming, on_text),
                    timeout=self._settings.timeout,
                )
            except TimeoutError:
                await _terminate(proc)
                msg = (
                    f"{self._backend.display_name} CLI timed out after "
                    f"{self._settings.timeout:g}s"
                )
                raise AgentTimeoutError(
                    msg, self._backend.name, timeout=self._settings.timeout
                ) from None
            stderr_text = (await stderr_task).decode(errors="replace").strip()
        except BaseException:
            # Callback errors and task cancellation must not orphan the child.
            if proc.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    proc.terminate()
            raise
        finally:
            if not stderr_task.done():
                stderr_task.cancel()
            stopped = self._cancelled is proc or bool(
                key
                and self._registry is not None
                and not self._registry.owns(key, proc)
            )
            if self._cancelled is proc:
                self._cancelled = None
            if self._current is proc:
                self._current = None
            if key and self._registry is not None:
                self._registry.release(key, proc)

        if state.backend_error is not None:
            raise BackendReportedError(
                f"{self._backend.display_name} CLI returned error: {state.backend_error}",
                self._backend.name,
            )

        if returncode != 0:
            msg = f"{self._backend.display_name} CLI exited with code {returncode}"
            raise NonZeroExitError(
                msg,
                self._backend.name,
                returncode=returncode,
                stderr=stderr_text,
                stopped=stopped,
            )

        if stderr_text:
            logger.debug("%s stderr: %s", self._backend.name, stderr_text[:2048])

        return RunResult(text=state.text, session_id=state.session_id)

    async def _spawn(
        self, args: list[str], options: CommandOptions
    ) -> asyncio.subprocess.Process:
        backend = self._backend
        workdir = options.workdir
        if workdir is not None and not workdir.is_dir():
            msg = f"Working directory not found: {workdir}"
            raise SpawnFailureError(msg, backend.name)

        mode = "Streaming" if options.streaming else "Executing"
        logger.info(
            "%s: %s in %s (%s)",
            backend.name,
            mode,
            workdir or "default dir",
            session_label(options.session_id),
        )

        try:
            return await asyncio.create_subprocess_exec(
                backend.executable,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(workdir) if workdir is not None else None,
                limit=MAX_LINE_BYTES,
            )
        except FileNotFoundError as exc:
            msg = (
                f"{backend.display_name} CLI not found. "
                f"Make sure '{backend.executable}' is installed and on your PATH."
            )
            raise SpawnFailureError(msg, backend.name) from exc
        except OSError as exc:
            msg = f"Failed to spawn {backend.display_name} CLI: {exc}"
            raise SpawnFailureError(msg, backend.name) from exc

    async def _communicate(
        self,
        proc: asyncio.subprocess.Process,
        state: _RunState,
        streaming: bool,
        on_text: TextCallback | None,
    ) -> int:
        """Consume stdout until EOF, then wait for the exit status."""
        if proc.stdout is not None:
            if streaming:
                decoder = StreamDecoder()
                while True:
                    chunk = await proc.stdout.read(READ_CHUNK_BYTES)
                    if not chunk:
                        break
                    for obj in decoder.feed(chunk):
                        await self._apply(obj, state, on_text)
                for obj in decoder.flush():
                    await self._apply(obj, state, on_text)
            else:
                data = await proc.stdout.read()
                for obj in StreamDecoder.decode_all(data):
                    await self._apply(obj, state, on_text)
                if state.decoded == 0:
                    # Nothing parseable: hand back the raw output.
                    state.text = data.decode(errors="replace").strip()
        return await proc.wait()

    async def _apply(
        self,
        obj: dict[str, Any],
        state: _RunState,
        on_text: TextCallback | None,
    ) -> None:
        state.decoded += 1
        for event in self._backend.interpret(obj):
            match event:
                case SessionId(session_id=session_id):
                    state.session_id = session_id
                case TextDelta(fragment=fragment):
                    state.text += fragment
                    await _call(on_text, fragment, state.text)
                case TextFinal(text=text):
                    state.text = self._backend.merge_final(state.text, text)
                    await _call(on_text, text, state.text)
                case Usage():
                    logger.info(
                        "%s: usage input=%d (cached=%d), output=%d",
                        self._backend.name,
                        event.input_tokens,
                        event.cached_tokens,
                        event.output_tokens,
                    )
                case BackendError(message=message):
                    if state.backend_error is None:
                        state.backend_error = message

    def _command_options(self, request: RunRequest, streaming: bool) -> CommandOptions:
        settings = self._settings
        skip = request.skip_permissions
        if skip is None:
            skip = settings.skip_permissions
        workdir: Path | None = request.workdir or settings.workdir
        return CommandOptions(
            prompt=request.prompt,
            session_id=request.session_id,
            skip_permissions=skip,
            model=request.model or settings.model,
            workdir=workdir,
            system_prompt=self._system_prompt,
            streaming=streaming,
        )


async def _call(callback: Any, *args: Any) -> None:
    """Invoke a sync or async callback, if set."""
    if callback is None:
        return
    outcome = callback(*args)
    if inspect.isawaitable(outcome):
        await outcome


async def _read_all(stream: asyncio.StreamReader | None) -> bytes:
    if stream is None:
        return b""
    return await stream.read()


async def _terminate(proc: asyncio.subprocess.Process) -> None:
    """SIGTERM, wait briefly, then SIGKILL."""
    with contextlib.suppress(ProcessLookupError):
        proc.terminate()
    try:
        await asyncio.wait_for(proc.wait(), timeout=SIGTERM_WAIT)
    except TimeoutError:
        with contextlib.suppress(ProcessLookupError):
            proc.kill()
        await proc.wait()
