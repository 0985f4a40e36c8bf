"""
core.job_queue
~~~~~~~~~~~~~~
JobQueue owns every Job record and the FIFO backlog, and runs the jobs
one at a time through a JobRunner.

All methods are meant to be called from the Qt event-loop thread, which
is also where the runner's callbacks arrive, so the state below is never
touched concurrently.
"""

from __future__ import annotations

from typing import Callable, Iterable

from PySide6.QtCore import QObject, Signal

from core.models import Job, JobRequest, JobStatus, JobUpdate
from core.worker import JobRunner


class JobQueue(QObject):

    job_updated = Signal(object)   # JobUpdate

    def __init__(
        self,
        ffmpeg: str = "ffmpeg",
        ffprobe: str = "ffprobe",
        cancel_grace_ms: int = 10_000,
        parent=None,
    ):
        super().__init__(parent)
        self._ffmpeg = ffmpeg
        self._ffprobe = ffprobe
        self.cancel_grace_ms = cancel_grace_ms
        self._jobs: dict[str, Job] = {}
        self._backlog: list[str] = []
        self._active: JobRunner | None = None

    # ── Configuration ─────────────────────────────────────────────────────────

    def set_binaries(self, ffmpeg: str, ffprobe: str) -> None:
        """Executables used from the next dispatch on."""
        print(f"[QUEUE] Using ffmpeg='{ffmpeg}' ffprobe='{ffprobe}'")
        self._ffmpeg = ffmpeg
        self._ffprobe = ffprobe

    # ── Subscription ──────────────────────────────────────────────────────────

    def on_update(self, handler: Callable[[JobUpdate], None]) -> Callable[[], None]:
        """Connect *handler* to job updates; returns a function that disconnects it."""
        self.job_updated.connect(handler)

        def unsubscribe():
            self.job_updated.disconnect(handler)

        return unsubscribe

    # ── Public API ────────────────────────────────────────────────────────────

    def submit(self, requests: Iterable[JobRequest]) -> int:
        accepted = 0
        for request in requests:
            existing = self._jobs.get(request.id)
            if existing is not None and existing.status is JobStatus.RUNNING:
                print(f"[QUEUE] submit: '{request.id}' is running, duplicate dropped")
                continue

            job = Job(request=request)
            self._jobs[request.id] = job
            if request.id not in self._backlog:
                self._backlog.append(request.id)
            accepted += 1

            print(f"[QUEUE] Queued '{request.id}': '{request.source_path}' → '{request.output_path}'")
            self._update(
                job,
                status=JobStatus.QUEUED,
                progress=0.0,
                message="Queued",
                resolved_output_path=None,
                error_detail=None,
                invocation_summary=None,
            )

        print(f"[QUEUE] submit: accepted {accepted}, backlog now {len(self._backlog)}")
        self._dispatch()
        return accepted

    def cancel(self, job_id: str) -> bool:
        job = self._jobs.get(job_id)
        if job is None:
            print(f"[QUEUE] cancel: '{job_id}' not found")
            return False

        if job.status is JobStatus.QUEUED:
            print(f"[QUEUE] cancel: removing queued '{job_id}' from backlog")
            self._backlog = [i for i in self._backlog if i != job_id]
            self._update(job, status=JobStatus.CANCELED, progress=None, message="Canceled")
            return True

        runner = self._active
        if job.status is JobStatus.RUNNING and runner is not None and runner.job is job:
            print(f"[QUEUE] cancel: stopping running '{job_id}'")
            self._update(job, status=JobStatus.CANCELED, progress=None, message="Canceling")
            runner.cancel()
            return True

        print(f"[QUEUE] cancel: '{job_id}' is already {job.status.value}, ignored")
        return False

    def purge(self, job_ids: Iterable[str] | None = None) -> int:
        """
        Forget finished jobs (done, error, canceled). With *job_ids*, only
        those; queued and running jobs are never removed.
        """
        targets = list(self._jobs) if job_ids is None else list(job_ids)
        settling = self._active.job if self._active is not None else None
        removed = 0
        for job_id in targets:
            job = self._jobs.get(job_id)
            # A canceled job whose process has not exited yet is still settling.
            if job is not None and job.status.is_terminal and job is not settling:
                del self._jobs[job_id]
                removed += 1
        print(f"[QUEUE] purge: removed {removed} finished job(s)")
        return removed

    @property
    def is_busy(self) -> bool:
        return self._active is not None or bool(self._backlog)

    # ── Dispatch ──────────────────────────────────────────────────────────────

    def _dispatch(self) -> None:
        while self._active is None and self._backlog:
            job_id = self._backlog.pop(0)
            job = self._jobs.get(job_id)
            if job is None or job.status is not JobStatus.QUEUED:
                print(f"[QUEUE] _dispatch: skipping '{job_id}'")
                continue

            print(f"[QUEUE] _dispatch: starting '{job_id}' ({len(self._backlog)} left in backlog)")
            runner = JobRunner(
                job,
                self._ffmpeg,
                self._ffprobe,
                cancel_grace_ms=self.cancel_grace_ms,
                parent=self,
            )
            runner.changed.connect(lambda changes, j=job: self._update(j, **changes))
            runner.finished.connect(lambda r=runner: self._on_runner_finished(r))
            self._active = runner
            runner.start()

    def _on_runner_finished(self, runner: JobRunner) -> None:
        job = runner.job
        print(f"[QUEUE] Runner finished: '{job.id}' → {job.status.value}")
        if self._active is runner:
            self._active = None
        runner.deleteLater()
        self._dispatch()

    # ── Helpers ───────────────────────────────────────────────────────────────

    def _update(self, job: Job, **changes) -> None:
        status = changes.get("status")
        if status is not None and status is not job.status:
            print(f"[QUEUE] Status '{job.id}': {job.status.value} → {status.value}")
        for name, value in changes.items():
            setattr(job, name, value)
        if self._jobs.get(job.id) is job:
            self.job_updated.emit(JobUpdate(job.id, dict(changes)))
