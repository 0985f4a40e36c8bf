"""
core.command_builder
~~~~~~~~~~~~~~~~~~~~
Builds ffmpeg / ffprobe CLI commands as plain list[str].

Keeping command construction separate means you can:
  - log / print the exact command before running it
  - show the user what they are about to run
  - unit-test flag generation without running any process
"""

from __future__ import annotations

import shlex
from pathlib import Path

from core.models import JobRequest

PROGRESS_FLAGS = ["-progress", "pipe:1", "-nostats"]


def build_transcode_args(request: JobRequest, output_file: Path) -> list[str]:
    """
    Build the ffmpeg argument vector (without the executable) for one job.

    The structure is:
        -y | -n               ← overwrite, or fail if the output exists
        -i <source>
        <request.args>        ← passed through verbatim
        -progress pipe:1      ← machine-readable key=value progress on stdout
        -nostats              ← suppress human-readable stats on stderr
        <output>

    Example output:
        ['-n', '-i', '/rushes/clip.mov',
         '-c:v', 'libx264', '-c:a', 'aac',
         '-progress', 'pipe:1', '-nostats',
         '/proxies/clip.mp4']
    """
    return [*_logical_args(request, output_file)[:-1], *PROGRESS_FLAGS, str(output_file)]


def build_probe_args(source: Path) -> list[str]:
    """ffprobe arguments that print only the container duration, in seconds."""
    return [
        "-v", "error",
        "-show_entries", "format=duration",
        "-of", "default=noprint_wrappers=1:nokey=1",
        str(source),
    ]


def build_invocation_summary(executable: str, request: JobRequest, output_file: Path) -> str:
    """
    The command as the user thinks of it: progress/quiet flags left out,
    arguments containing whitespace wrapped in double quotes.
    """
    return command_as_string([executable, *_logical_args(request, output_file)])


def command_as_string(cmd: list[str]) -> str:
    """Human-readable version of the command for display and logging."""
    return " ".join(_quote(part) for part in cmd)


def split_extra_args(text: str) -> list[str]:
    """
    Split the free-form "advanced args" field into a list.

    Raises ValueError on unbalanced quotes.
    """
    text = (text or "").strip()
    if not text:
        return []
    return shlex.split(text)


# ── Internal helpers ──────────────────────────────────────────────────────────

def _logical_args(request: JobRequest, output_file: Path) -> list[str]:
    return [
        "-y" if request.overwrite else "-n",
        "-i", str(request.source_path),
        *request.args,
        str(output_file),
    ]


def _quote(value: str) -> str:
    if any(ch.isspace() for ch in value):
        escaped = value.replace('"', '\\"')
        return f'"{escaped}"'
    return value
