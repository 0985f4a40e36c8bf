"""
core.probe
~~~~~~~~~~
Thin wrappers around the ffprobe / ffmpeg CLIs.

ProbeClient asks ffprobe for a source's duration without blocking the
event loop; the answer is delivered to a callback as integer
milliseconds, or None when it cannot be determined. A missing duration
only means progress is shown as indeterminate, so nothing here raises.
"""

from __future__ import annotations

import math
import re
import subprocess
from pathlib import Path
from typing import Callable

from PySide6.QtCore import QObject, QProcess

from core.command_builder import build_probe_args

_ENCODER_LINE = re.compile(r"^\s*[A-Z.]{6}\s+([0-9A-Za-z_]+)\s")


# ── Public API ────────────────────────────────────────────────────────────────

def parse_duration_ms(output: str) -> int | None:
    """Parse ffprobe's bare `format=duration` output ("12.345000\n")."""
    try:
        seconds = float((output or "").strip())
    except ValueError:
        return None
    if not math.isfinite(seconds) or seconds < 0:
        return None
    return round(seconds * 1000)


def list_encoders(ffmpeg: str) -> list[str]:
    """
    Names of the encoders this ffmpeg build supports.
    Returns an empty list if ffmpeg cannot be run.
    """
    try:
        result = subprocess.run(
            [ffmpeg, "-hide_banner", "-encoders"],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            timeout=30,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        print(f"[PROBE] Could not list encoders: {exc}")
        return []

    if result.returncode != 0:
        return []

    encoders = []
    for line in result.stdout.splitlines():
        match = _ENCODER_LINE.match(line)
        if match:
            encoders.append(match.group(1))
    return encoders


class ProbeClient(QObject):
    """
    Runs one ffprobe duration query at a time.

    Usage:
        client = ProbeClient("ffprobe", parent=self)
        client.request_duration(Path("clip.mov"), self._on_duration)
    """

    def __init__(self, ffprobe: str, parent=None):
        super().__init__(parent)
        self._ffprobe = ffprobe
        self._process: QProcess | None = None
        self._callback: Callable[[int | None], None] | None = None

    @property
    def busy(self) -> bool:
        return self._process is not None

    def request_duration(self, source: Path, callback: Callable[[int | None], None]) -> None:
        """Start the query; *callback* is invoked exactly once."""
        if self._process is not None:
            raise RuntimeError("A duration query is already in flight.")

        self._callback = callback
        process = QProcess(self)
        process.setProcessChannelMode(QProcess.ProcessChannelMode.SeparateChannels)
        process.finished.connect(self._on_finished)
        process.errorOccurred.connect(self._on_error)
        self._process = process

        args = build_probe_args(Path(source))
        print(f"[PROBE] {self._ffprobe} {' '.join(args)}")
        process.start(self._ffprobe, args)

    def abort(self) -> None:
        """Kill an in-flight query. The callback still fires, with None."""
        if self._process is not None and self._process.state() != QProcess.ProcessState.NotRunning:
            print("[PROBE] Aborting duration query")
            self._process.kill()

    # ── QProcess callbacks ────────────────────────────────────────────────────

    def _on_finished(self, exit_code: int, exit_status: QProcess.ExitStatus) -> None:
        process = self._process
        if process is None:
            return

        duration_ms = None
        if exit_status == QProcess.ExitStatus.NormalExit and exit_code == 0:
            output = bytes(process.readAllStandardOutput().data()).decode("utf-8", errors="replace")
            duration_ms = parse_duration_ms(output)
            if duration_ms is None:
                print(f"[PROBE] Unparsable duration output: {output.strip()!r}")
        else:
            print(f"[PROBE] ffprobe exited with code {exit_code} ({exit_status.name})")

        self._deliver(duration_ms)

    def _on_error(self, error: QProcess.ProcessError) -> None:
        # Every other error is followed by finished(); FailedToStart is not.
        if error != QProcess.ProcessError.FailedToStart or self._process is None:
            return
        print(f"[PROBE] ffprobe failed to start: {self._process.errorString()}")
        self._deliver(None)

    def _deliver(self, duration_ms: int | None) -> None:
        process, callback = self._process, self._callback
        self._process = None
        self._callback = None
        if process is not None:
            process.deleteLater()
        print(f"[PROBE] Duration = {duration_ms} ms")
        if callback is not None:
            callback(duration_ms)
