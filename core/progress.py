"""
core.progress
~~~~~~~~~~~~~
Incremental parsing of ffmpeg's `-progress pipe:1` output.

ffmpeg writes blocks of key=value lines to stdout, e.g.

    out_time_ms=5000000
    out_time=00:00:05.000000
    speed=2.01x
    progress=continue

and finishes with `progress=end`. QProcess hands us that stream in
arbitrary chunks, so a line (or a multi-byte character) can be split
across two reads; LineBuffer keeps the partial tail between calls.
"""

from __future__ import annotations

import codecs
import re

_NEWLINE = re.compile(r"\r?\n")


class LineBuffer:
    """Turns a stream of byte chunks into complete text lines."""

    def __init__(self, encoding: str = "utf-8"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._pending = ""

    def feed(self, chunk: bytes | str) -> list[str]:
        """Return every line completed by *chunk*; keep the rest pending."""
        if isinstance(chunk, (bytes, bytearray, memoryview)):
            text = self._decoder.decode(bytes(chunk))
        else:
            text = chunk
        if not text:
            return []

        parts = _NEWLINE.split(self._pending + text)
        self._pending = parts.pop()
        return parts

    def flush(self) -> list[str]:
        """Return whatever is left once the stream has closed."""
        rest = self._pending + self._decoder.decode(b"", final=True)
        self._pending = ""
        # A lone trailing "\r" is a line ending whose "\n" never came.
        rest = rest.rstrip("\r")
        return [rest] if rest else []

    @property
    def pending(self) -> str:
        return self._pending


class ProgressParser:
    """
    Feed it stdout chunks; get back new fractional progress values.

    Values are clamped to [0, 1] and only strictly increasing values are
    returned, so a consumer always sees a non-decreasing sequence.
    Without a duration the percentage cannot be computed and only
    `progress=end` produces a value.
    """

    def __init__(self, duration_ms: int | None):
        self._duration_ms = duration_ms if duration_ms and duration_ms > 0 else None
        self._lines = LineBuffer()
        self._last: float | None = None

    @property
    def duration_known(self) -> bool:
        return self._duration_ms is not None

    @property
    def last(self) -> float | None:
        return self._last

    def feed(self, chunk: bytes | str) -> list[float]:
        return self._consume(self._lines.feed(chunk))

    def flush(self) -> list[float]:
        return self._consume(self._lines.flush())

    # ── Internal ──────────────────────────────────────────────────────────────

    def _consume(self, lines: list[str]) -> list[float]:
        updates: list[float] = []
        for line in lines:
            value = self._parse_line(line)
            if value is None:
                continue
            value = min(max(value, 0.0), 1.0)
            if self._last is None or value > self._last:
                self._last = value
                updates.append(value)
        return updates

    def _parse_line(self, line: str) -> float | None:
        key, sep, value = line.strip().partition("=")
        if not sep or not key:
            return None
        value = value.strip()

        if key == "progress" and value == "end":
            return 1.0

        if key == "out_time_ms" and self._duration_ms is not None:
            # Despite the name ffmpeg reports this counter in microseconds.
            try:
                out_time_us = int(value)
            except ValueError:
                return None
            return (out_time_us / 1000) / self._duration_ms

        return None
