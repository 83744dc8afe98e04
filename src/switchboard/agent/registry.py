"""Process registry — at most one in-flight agent process per conversation."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Iterator

from asyncio.subprocess import Process

logger = logging.getLogger(__name__)


class ProcessRegistry:
    """Maps a conversation key to its single running agent process.

    Registering a process under an occupied key terminates the previous
    occupant first.  Entries are removed by ``stop()`` or by the runner's
    exit notification (``release()``), which only removes the entry if it
    still refers to the process that exited.

    Not thread-safe: all calls are expected on the event loop thread.
    """

    def __init__(self) -> None:
        self._processes: dict[str, Process] = {}

    def __len__(self) -> int:
        return len(self._processes)

    def keys(self) -> Iterator[str]:
        return iter(list(self._processes))

    def register(self, key: str, proc: Process) -> None:
        """Store *proc* under *key*, terminating any previous process."""
        self.stop(key)
        self._processes[key] = proc
        logger.debug("registered pid %s for %s", proc.pid, key)

    def owns(self, key: str, proc: Process) -> bool:
        """True if *key* still maps to *proc* (not stopped or superseded)."""
        return self._processes.get(key) is proc

    def release(self, key: str, proc: Process) -> None:
        """Exit notification: drop *key* if it still maps to *proc*."""
        if self.owns(key, proc):
            del self._processes[key]
            logger.debug("released pid %s for %s", proc.pid, key)

    def stop(self, key: str) -> bool:
        """Terminate the process under *key*.

        Sends SIGTERM and removes the entry without waiting for the exit.

        Returns:
            True if a running process was signalled.
        """
        proc = self._processes.pop(key, None)
        if proc is None or proc.returncode is not None:
            return False
        with contextlib.suppress(ProcessLookupError):
            proc.terminate()
        logger.info("stopped pid %s for %s", proc.pid, key)
        return True

    def is_running(self, key: str) -> bool:
        proc = self._processes.get(key)
        return proc is not None and proc.returncode is None

    def stop_all(self) -> None:
        """Terminate every registered process."""
        for key in list(self._processes):
            self.stop(key)
