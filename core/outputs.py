"""
core.outputs
~~~~~~~~~~~~
Pure functions for naming output files and avoiding collisions.
No Qt and no subprocess, so they unit-test in isolation.
"""

from __future__ import annotations

import os
from pathlib import Path


# ── Public API ────────────────────────────────────────────────────────────────

def build_output_path(
    source: Path,
    output_dir: Path | str | None,
    template: str,
    ext: str,
) -> Path:
    """
    Given a source file, return the desired output path.

    `template` may use {name} (source stem) and {ext} (preset extension).
    An empty `output_dir` means "same folder as the source".

    Example:
        source     = Path("/rushes/clip.mov")
        output_dir = ""
        template   = "{name}_proxy.{ext}"
        ext        = "mp4"
        → Path("/rushes/clip_proxy.mp4")
    """
    source = Path(source)
    folder = Path(output_dir) if output_dir else source.parent
    rendered = (template or "{name}.{ext}").replace("{name}", source.stem).replace("{ext}", ext)
    return folder / rendered


def allocate_output_path(desired: Path, overwrite: bool) -> Path:
    """
    Decide where ffmpeg should actually write.

    With `overwrite` the desired path is returned untouched and ffmpeg
    replaces whatever is there. Otherwise the first of
        clip.mp4, clip-1.mp4, clip-2.mp4, ...
    that does not exist yet is returned.

    Holds no state of its own: the filesystem is the only record of
    which names are taken, so every call sees the outputs earlier jobs
    have already produced.
    """
    desired = Path(desired)
    if overwrite or not _occupied(desired):
        return desired

    stem, suffix = desired.stem, desired.suffix
    counter = 1
    while True:
        candidate = desired.with_name(f"{stem}-{counter}{suffix}")
        if not _occupied(candidate):
            return candidate
        counter += 1


# ── Internal helpers ──────────────────────────────────────────────────────────

def _occupied(path: Path) -> bool:
    # lexists so a dangling symlink still counts as taken
    return os.path.lexists(path)
