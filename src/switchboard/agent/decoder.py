"""Stream decoder — byte chunks in, complete JSON objects out."""

from __future__ import annotations

import codecs
import json
import logging
from typing import Any

from switchboard.constants import MAX_LINE_BYTES

logger = logging.getLogger(__name__)


class StreamDecoder:
    """Incremental JSONL decoder with a carry-over buffer.

    Every complete line is parsed as it arrives; the trailing fragment is
    kept until the next chunk or ``flush()``.  Blank lines, non-JSON lines
    and JSON values that are not objects are dropped: agent CLIs print
    diagnostic noise on stdout in some versions.
    """

    def __init__(self, max_line_bytes: int = MAX_LINE_BYTES) -> None:
        self._max_line_bytes = max_line_bytes
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._skipping = False

    @property
    def pending(self) -> str:
        """The retained, possibly incomplete, trailing fragment."""
        return self._buffer

    def feed(self, chunk: bytes) -> list[dict[str, Any]]:
        """Consume *chunk* and return every object completed by it."""
        self._buffer += self._utf8.decode(chunk)
        lines = self._buffer.split("\n")
        self._buffer = lines.pop()

        objects: list[dict[str, Any]] = []
        for line in lines:
            if self._skipping:
                # Tail of an oversized line.
                self._skipping = False
                continue
            if self._oversized(line):
                continue
            obj = self._parse(line)
            if obj is not None:
                objects.append(obj)

        # Characters never outnumber bytes, so this bounds the fragment early;
        # completed lines get the exact byte check above.
        if len(self._buffer) > self._max_line_bytes:
            self._warn_oversized()
            self._buffer = ""
            self._skipping = True

        return objects

    def flush(self) -> list[dict[str, Any]]:
        """Emit the trailing fragment if it is a complete JSON object.

        Called at process exit: the last event often arrives without a
        trailing newline.
        """
        self._buffer += self._utf8.decode(b"", final=True)
        line, self._buffer = self._buffer, ""
        if self._skipping:
            self._skipping = False
            return []
        if self._oversized(line):
            return []
        obj = self._parse(line)
        return [obj] if obj is not None else []

    @classmethod
    def decode_all(cls, data: bytes) -> list[dict[str, Any]]:
        """Decode a complete stdout capture.

        A single (possibly pretty-printed) JSON document is accepted as-is;
        anything else is decoded line by line.
        """
        text = data.decode(errors="replace").strip()
        if not text:
            return []
        if text.startswith("{"):
            try:
                doc = json.loads(text)
            except json.JSONDecodeError:
                pass
            else:
                if isinstance(doc, dict):
                    return [doc]

        decoder = cls()
        objects = decoder.feed(data)
        objects.extend(decoder.flush())
        return objects

    def _oversized(self, line: str) -> bool:
        if len(line.encode("utf-8", errors="replace")) <= self._max_line_bytes:
            return False
        self._warn_oversized()
        return True

    def _warn_oversized(self) -> None:
        logger.warning("stdout line exceeds %d bytes, skipping", self._max_line_bytes)

    def _parse(self, line: str) -> dict[str, Any] | None:
        line = line.strip()
        if not line:
            return None
        try:
            obj = json.loads(line)
        except json.JSONDecodeError:
            logger.debug("dropping non-JSON stdout line: %s", line[:200])
            return None
        if not isinstance(obj, dict):
            logger.debug("dropping non-object JSON line: %s", line[:200])
            return None
        return obj
