from .models import JobRequest, Job, JobStatus, JobUpdate, OutputPreset, Settings, BinaryResolution
from .job_queue import JobQueue
from .worker import JobRunner
from .probe import ProbeClient, parse_duration_ms, list_encoders
from .progress import LineBuffer, ProgressParser
from .diagnostics import DiagnosticLog
from .outputs import allocate_output_path, build_output_path
from .command_builder import build_transcode_args, build_invocation_summary, split_extra_args

__all__ = [
    "JobRequest", "Job", "JobStatus", "JobUpdate", "OutputPreset", "Settings", "BinaryResolution",
    "JobQueue", "JobRunner",
    "ProbeClient", "parse_duration_ms", "list_encoders",
    "LineBuffer", "ProgressParser",
    "DiagnosticLog",
    "allocate_output_path", "build_output_path",
    "build_transcode_args", "build_invocation_summary", "split_extra_args",
]
