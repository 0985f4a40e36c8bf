"""
core.worker
~~~~~~~~~~~
JobRunner supervises one ffmpeg invocation for one Job, from path
allocation to exit, on the Qt event loop. Nothing blocks: the duration
probe, stdout/stderr and the exit all arrive as QProcess callbacks.

Signals
-------
changed(object)  dict of field → new value, for the queue to apply to the Job
finished()       emitted once, after the job reached its terminal state
"""

from __future__ import annotations

from PySide6.QtCore import QObject, QProcess, QTimer, Signal

from core.command_builder import build_invocation_summary, build_transcode_args
from core.diagnostics import DiagnosticLog
from core.models import Job, JobStatus
from core.outputs import allocate_output_path
from core.probe import ProbeClient
from core.progress import ProgressParser

TOOL_NAME = "FFmpeg"


class JobRunner(QObject):

    changed  = Signal(object)   # dict of field → value
    finished = Signal()

    def __init__(
        self,
        job: Job,
        ffmpeg: str,
        ffprobe: str,
        cancel_grace_ms: int = 0,
        parent=None,
    ):
        super().__init__(parent)
        self._job = job
        self._ffmpeg = ffmpeg
        self._cancel_grace_ms = cancel_grace_ms
        self._probe = ProbeClient(ffprobe, parent=self)
        self._process: QProcess | None = None
        self._progress: ProgressParser | None = None
        self._diagnostics = DiagnosticLog()
        self._kill_timer: QTimer | None = None
        self._done = False
        print(f"[RUNNER] Created for '{job.request.source_path.name}' (id={job.id})")

    @property
    def job(self) -> Job:
        return self._job

    # ── Entry point ───────────────────────────────────────────────────────────

    def start(self) -> None:
        request = self._job.request
        output = allocate_output_path(request.output_path, request.overwrite)
        if output != request.output_path:
            print(f"[RUNNER] '{request.output_path.name}' exists, writing '{output.name}' instead")

        self._emit(
            status=JobStatus.RUNNING,
            resolved_output_path=output,
            progress=None,
            message="Probing",
            error_detail=None,
        )
        self._probe.request_duration(request.source_path, self._on_duration)

    # ── Cancel ────────────────────────────────────────────────────────────────

    def cancel(self) -> None:
        """
        Ask the process to stop. The queue has already marked the job
        canceled; the terminal update comes from the exit callback.
        """
        print(f"[RUNNER] cancel() called for id={self._job.id}")
        if self._process is None:
            self._probe.abort()
            return

        if self._process.state() == QProcess.ProcessState.NotRunning:
            print("[RUNNER] cancel(): no running process to terminate")
            return

        self._process.terminate()
        print("[RUNNER] Terminate signal sent")

        if self._cancel_grace_ms > 0 and self._kill_timer is None:
            self._kill_timer = QTimer(self)
            self._kill_timer.setSingleShot(True)
            self._kill_timer.timeout.connect(self._force_kill)
            self._kill_timer.start(self._cancel_grace_ms)

    def _force_kill(self) -> None:
        if self._process is not None and self._process.state() != QProcess.ProcessState.NotRunning:
            print(f"[RUNNER] Process ignored terminate for {self._cancel_grace_ms} ms, killing")
            self._process.kill()

    # ── Launch ────────────────────────────────────────────────────────────────

    def _on_duration(self, duration_ms: int | None) -> None:
        if self._job.status is JobStatus.CANCELED:
            print("[RUNNER] Canceled while probing, not launching ffmpeg")
            self._finish(message="Canceled", progress=None)
            return

        request = self._job.request
        output = self._job.resolved_output_path
        args = build_transcode_args(request, output)

        self._progress = ProgressParser(duration_ms)
        if not self._progress.duration_known:
            print("[RUNNER] Warning: duration unknown, progress will be indeterminate")

        self._emit(
            invocation_summary=build_invocation_summary(self._ffmpeg, request, output),
            progress=0.0 if self._progress.duration_known else None,
            message="Processing",
        )

        process = QProcess(self)
        process.setProcessChannelMode(QProcess.ProcessChannelMode.SeparateChannels)
        process.readyReadStandardOutput.connect(self._read_stdout)
        process.readyReadStandardError.connect(self._read_stderr)
        process.finished.connect(self._on_finished)
        process.errorOccurred.connect(self._on_error)
        self._process = process

        print(f"[RUNNER] Command:\n  {self._ffmpeg} {' '.join(args)}")
        process.start(self._ffmpeg, args)

    # ── Streams ───────────────────────────────────────────────────────────────

    def _read_stdout(self) -> None:
        if self._process is None or self._progress is None:
            return
        chunk = bytes(self._process.readAllStandardOutput().data())
        self._report(self._progress.feed(chunk))

    def _read_stderr(self) -> None:
        if self._process is None:
            return
        self._diagnostics.feed(bytes(self._process.readAllStandardError().data()))

    def _report(self, values: list[float]) -> None:
        for value in values:
            # A canceled job keeps its cleared progress until it settles.
            if self._job.status is not JobStatus.RUNNING:
                return
            self._emit(progress=value)

    # ── Exit ──────────────────────────────────────────────────────────────────

    def _on_finished(self, exit_code: int, exit_status: QProcess.ExitStatus) -> None:
        if self._done:
            return
        self._read_stdout()
        self._read_stderr()
        if self._progress is not None:
            self._report(self._progress.flush())
        self._diagnostics.flush()

        crashed = exit_status != QProcess.ExitStatus.NormalExit
        print(f"[RUNNER] ffmpeg exited with code {exit_code} ({exit_status.name})")

        if self._job.status is JobStatus.CANCELED:
            self._finish(message="Canceled", progress=None)
        elif exit_code == 0 and not crashed:
            self._finish(status=JobStatus.DONE, progress=1.0, message="Done")
        else:
            code = "unknown" if crashed else str(exit_code)
            detail = f"{TOOL_NAME} exited with code {code}"
            excerpt = self._diagnostics.excerpt()
            if excerpt:
                detail = f"{detail} | {excerpt}"
            self._finish(
                status=JobStatus.ERROR,
                progress=None,
                message="Failed",
                error_detail=detail,
            )

    def _on_error(self, error: QProcess.ProcessError) -> None:
        # Every other error is followed by finished(); FailedToStart is not.
        if error != QProcess.ProcessError.FailedToStart or self._done:
            return
        reason = self._process.errorString() if self._process is not None else str(error)
        print(f"[RUNNER] ❌ ffmpeg failed to start: {reason}")
        if self._job.status is JobStatus.CANCELED:
            self._finish(message="Canceled", progress=None)
            return
        self._finish(
            status=JobStatus.ERROR,
            progress=None,
            message="Failed to start",
            error_detail=reason,
        )

    # ── Helpers ───────────────────────────────────────────────────────────────

    def _finish(self, **changes) -> None:
        self._done = True
        if self._kill_timer is not None:
            self._kill_timer.stop()
        if self._process is not None:
            self._process.deleteLater()
            self._process = None
        self._emit(**changes)
        print(f"[RUNNER] Finished id={self._job.id} → {self._job.status.value}")
        self.finished.emit()

    def _emit(self, **changes) -> None:
        self.changed.emit(changes)
