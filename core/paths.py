"""
core.paths
~~~~~~~~~~
Single source of truth for filesystem paths used across the app, and
the lookup that decides which ffmpeg / ffprobe executables to run.

Lookup order for each binary:
  1. an explicit override (chosen by the user, persisted in settings)
  2. FFMPEG_PATH / FFPROBE_PATH environment variables
  3. the bare name on PATH
  4. EXTRA_DIRS: common install locations that GUI launches
     frequently leave off PATH, then the project's own bin/ folder
"""

from __future__ import annotations

import os
import subprocess
from pathlib import Path

from core.models import BinaryResolution

# Project root = the directory that contains main.py
PROJECT_ROOT = Path(__file__).resolve().parent.parent

BIN_DIR    = PROJECT_ROOT / "bin"
EXTRA_DIRS = [Path("/opt/homebrew/bin"), Path("/usr/local/bin"), Path("/opt/local/bin"), BIN_DIR]

DEFAULT_FFMPEG  = "ffmpeg"
DEFAULT_FFPROBE = "ffprobe"

NOT_FOUND_MESSAGE = (
    "FFmpeg/FFprobe not found. Install ffmpeg with your package manager "
    "(e.g. apt install ffmpeg, brew install ffmpeg) or locate the binaries."
)


# ── Public API ────────────────────────────────────────────────────────────────

def is_executable(path: Path | str) -> bool:
    path = Path(path)
    return path.is_file() and os.access(path, os.X_OK)


def check_binary(cmd: str) -> tuple[bool, str]:
    """
    Run `<cmd> -version`.
    Returns (ok, first line of the version banner).
    """
    try:
        result = subprocess.run(
            [cmd, "-version"],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            timeout=15,
        )
    except (OSError, subprocess.SubprocessError):
        return False, ""
    if result.returncode != 0:
        return False, ""
    lines = result.stdout.splitlines()
    return True, lines[0].strip() if lines else ""


def resolve_binary(name_or_path: str) -> str | None:
    """Return a runnable command for *name_or_path*, or None."""
    if not name_or_path:
        return None

    candidate = Path(name_or_path).expanduser()
    if candidate.is_absolute() or os.sep in name_or_path:
        return str(candidate) if is_executable(candidate) else None

    if check_binary(name_or_path)[0]:
        return name_or_path

    for folder in EXTRA_DIRS:
        path = folder / name_or_path
        if is_executable(path):
            return str(path)
    return None


def sibling_ffprobe(ffmpeg_path: str) -> str | None:
    """An executable ffprobe next to a user-selected ffmpeg, if there is one."""
    folder = Path(ffmpeg_path).expanduser().parent
    for name in ("ffprobe", "ffprobe.exe"):
        candidate = folder / name
        if is_executable(candidate):
            return str(candidate)
    return None


def resolve_binaries(
    ffmpeg_override: str | None = None,
    ffprobe_override: str | None = None,
) -> BinaryResolution:
    """
    Work out which ffmpeg / ffprobe to use and whether they actually run.
    Never raises; a failed lookup is reported through `ok` and `message`.
    """
    ffmpeg_candidate  = ffmpeg_override  or os.environ.get("FFMPEG_PATH")  or DEFAULT_FFMPEG
    ffprobe_candidate = ffprobe_override or os.environ.get("FFPROBE_PATH") or DEFAULT_FFPROBE

    ffmpeg_resolved  = resolve_binary(ffmpeg_candidate)
    ffprobe_resolved = resolve_binary(ffprobe_candidate)

    ffmpeg_ok,  ffmpeg_version  = check_binary(ffmpeg_resolved)  if ffmpeg_resolved  else (False, "")
    ffprobe_ok, ffprobe_version = check_binary(ffprobe_resolved) if ffprobe_resolved else (False, "")
    ok = ffmpeg_ok and ffprobe_ok

    resolution = BinaryResolution(
        ok=ok,
        ffmpeg=ffmpeg_resolved or ffmpeg_candidate,
        ffprobe=ffprobe_resolved or ffprobe_candidate,
        ffmpeg_version=ffmpeg_version,
        ffprobe_version=ffprobe_version,
        message="" if ok else NOT_FOUND_MESSAGE,
    )
    print(f"[PATHS] ffmpeg='{resolution.ffmpeg}' ok={ffmpeg_ok} | "
          f"ffprobe='{resolution.ffprobe}' ok={ffprobe_ok}")
    return resolution
