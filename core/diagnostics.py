"""
core.diagnostics
~~~~~~~~~~~~~~~~
Rolling window over ffmpeg's stderr, used to explain a failed run
without keeping the whole log around.
"""

from __future__ import annotations

from collections import deque

from core.progress import LineBuffer

MAX_LINES     = 8
EXCERPT_LINES = 3
SEPARATOR     = " | "


class DiagnosticLog:
    """Keeps the last MAX_LINES non-empty stderr lines of one invocation."""

    def __init__(self, max_lines: int = MAX_LINES):
        self._lines: deque[str] = deque(maxlen=max_lines)
        self._buffer = LineBuffer()

    def feed(self, chunk: bytes | str) -> None:
        for line in self._buffer.feed(chunk):
            self.add(line)

    def flush(self) -> None:
        for line in self._buffer.flush():
            self.add(line)

    def add(self, line: str) -> None:
        line = line.strip()
        if line:
            self._lines.append(line)

    def lines(self) -> list[str]:
        return list(self._lines)

    def tail(self, n: int = EXCERPT_LINES) -> list[str]:
        if n <= 0:
            return []
        return list(self._lines)[-n:]

    def excerpt(self, n: int = EXCERPT_LINES) -> str:
        """Last *n* lines joined for a one-line error message ("" if none)."""
        return SEPARATOR.join(self.tail(n))

    def __len__(self) -> int:
        return len(self._lines)
