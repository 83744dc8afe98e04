"""Session store — last known backend session id per conversation."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class SessionStore:
    """Plain in-memory map from conversation key to session id.

    Entries never expire; ``delete()`` is the explicit "new session"
    operation.  Storing an empty id drops the entry, since it means the
    backend offered no way to continue.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, str] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, key: str) -> str | None:
        return self._sessions.get(key)

    def set(self, key: str, session_id: str) -> None:
        if not session_id:
            if self._sessions.pop(key, None) is not None:
                logger.info("%s: session continuity lost", key)
            return
        self._sessions[key] = session_id

    def delete(self, key: str) -> bool:
        """Forget the session for *key*. Returns True if one existed."""
        return self._sessions.pop(key, None) is not None

    def clear(self) -> None:
        self._sessions.clear()
