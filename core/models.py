"""
core.models
~~~~~~~~~~~
Pure dataclasses. No Qt and no I/O.
These travel freely between core and ui.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


# ── Enums ─────────────────────────────────────────────────────────────────────

class JobStatus(str, Enum):
    QUEUED   = "queued"    # waiting in the backlog
    RUNNING  = "running"   # owns the single active slot
    DONE     = "done"      # ffmpeg exited 0
    ERROR    = "error"     # launch failure or non-zero exit
    CANCELED = "canceled"  # removed by the user

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({JobStatus.DONE, JobStatus.ERROR, JobStatus.CANCELED})


# ── Requests and jobs ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class JobRequest:
    """
    One conversion the caller wants done.

    `args` is passed verbatim to ffmpeg between the input and the output,
    e.g. ["-c:v", "libx264", "-crf", "23", "-c:a", "aac"].
    """
    id: str
    source_path: Path
    output_path: Path
    args: tuple[str, ...] = ()
    overwrite: bool = False

    def __post_init__(self):
        object.__setattr__(self, "source_path", Path(self.source_path))
        object.__setattr__(self, "output_path", Path(self.output_path))
        object.__setattr__(self, "args", tuple(self.args))


@dataclass
class Job:
    """Queue-owned runtime record for a submitted JobRequest."""
    request: JobRequest
    status: JobStatus = JobStatus.QUEUED
    progress: float | None = 0.0
    resolved_output_path: Path | None = None
    message: str = ""
    error_detail: str | None = None
    invocation_summary: str | None = None

    @property
    def id(self) -> str:
        return self.request.id


# Attributes a JobUpdate may carry.
UPDATE_FIELDS = (
    "status",
    "progress",
    "resolved_output_path",
    "message",
    "error_detail",
    "invocation_summary",
)


@dataclass(frozen=True)
class JobUpdate:
    """
    Partial change notification for one job.

    Only the fields that changed are present in `changes`; an absent key
    means "keep what you had", while a present key with value None means
    the field was cleared.
    """
    job_id: str
    changes: dict = field(default_factory=dict)

    def __contains__(self, name: str) -> bool:
        return name in self.changes

    def get(self, name: str, default=None):
        return self.changes.get(name, default)

    def apply_to(self, target) -> None:
        """Copy the present fields onto any object with matching attributes."""
        for name, value in self.changes.items():
            setattr(target, name, value)


# ── Presets ───────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class OutputPreset:
    id: str
    label: str
    ext: str                       # without the dot, e.g. "mp4"
    args: tuple[str, ...]          # raw ffmpeg flags


# ── Binary resolution (returned by core.paths) ────────────────────────────────

@dataclass
class BinaryResolution:
    ok: bool
    ffmpeg: str
    ffprobe: str
    ffmpeg_version: str = ""
    ffprobe_version: str = ""
    message: str = ""


# ── Application settings (persisted by core.config) ───────────────────────────

DEFAULT_THEME = "dark_lightgreen.xml"


@dataclass
class Settings:
    ffmpeg_path: str = ""                 # empty → auto-detect
    ffprobe_path: str = ""
    output_dir: str = ""                  # empty → next to the source file
    name_template: str = "{name}.{ext}"
    preset_id: str = ""
    extra_args: str = ""
    overwrite: bool = False
    show_command: bool = False
    cancel_grace_seconds: int = 10        # 0 disables the forced kill
    theme: str = DEFAULT_THEME            # any qt-material theme file
