"""
Pytest configuration for the test suite.

The queue tests drive real QProcess invocations against tiny Python
scripts standing in for ffmpeg / ffprobe. What each fake does for a
given source file is read from a behaviors.json next to the scripts,
and every ffmpeg launch is appended to calls.jsonl.
"""

import json
import os
import stat
import sys
from pathlib import Path

# Offscreen platform so the suite runs without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# Add project root to Python path for test imports
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from core.job_queue import JobQueue


FAKE_FFMPEG = """\
import json, signal, sys, time
from pathlib import Path

HERE = Path(__file__).resolve().parent
args = sys.argv[1:]
if args == ["-version"]:
    print("ffmpeg version 6.1-fake Copyright (c) the fakes")
    sys.exit(0)

source = Path(args[args.index("-i") + 1]).name
output = Path(args[-1])
table = json.loads((HERE / "behaviors.json").read_text())["ffmpeg"]
b = table.get(source, table.get("*", {}))

if b.get("ignore_term"):
    signal.signal(signal.SIGTERM, signal.SIG_IGN)
elif b.get("term_exit") is not None:
    signal.signal(signal.SIGTERM, lambda *_: sys.exit(b["term_exit"]))

with open(HERE / "calls.jsonl", "a") as fh:
    fh.write(json.dumps(args) + "\\n")

if b.get("touch_output", True):
    output.parent.mkdir(parents=True, exist_ok=True)
    output.touch()
for line in b.get("stdout", []):
    sys.stdout.write(line + "\\n")
    sys.stdout.flush()
for line in b.get("stderr", []):
    sys.stderr.write(line + "\\n")
    sys.stderr.flush()
if b.get("tick"):
    # keep reporting progress for the whole sleep
    deadline = time.time() + b.get("sleep", 0)
    n = 0
    while time.time() < deadline:
        n += 1
        sys.stdout.write(f"out_time_ms={n * 100000}\\nprogress=continue\\n")
        sys.stdout.flush()
        time.sleep(b["tick"])
else:
    time.sleep(b.get("sleep", 0))
sys.exit(b.get("exit", 0))
"""

FAKE_FFPROBE = """\
import json, sys, time
from pathlib import Path

HERE = Path(__file__).resolve().parent
args = sys.argv[1:]
if args == ["-version"]:
    print("ffprobe version 6.1-fake Copyright (c) the fakes")
    sys.exit(0)

source = Path(args[-1]).name
table = json.loads((HERE / "behaviors.json").read_text())["ffprobe"]
b = table.get(source, table.get("*", {}))
with open(HERE / "probes.jsonl", "a") as fh:
    fh.write(json.dumps(args) + "\\n")
time.sleep(b.get("sleep", 0))
sys.stdout.write(b.get("output", "10.000000\\n"))
sys.exit(b.get("exit", 0))
"""


def write_script(path: Path, body: str) -> Path:
    """Write an executable Python script using the running interpreter."""
    path.write_text(f"#!{sys.executable}\n{body}", encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


class FakeTools:
    """The fake ffmpeg / ffprobe pair and the knobs that steer them."""

    def __init__(self, root: Path):
        root.mkdir(parents=True, exist_ok=True)
        self.root = root
        self.ffmpeg = str(write_script(root / "ffmpeg", FAKE_FFMPEG))
        self.ffprobe = str(write_script(root / "ffprobe", FAKE_FFPROBE))
        self._behaviors = {"ffmpeg": {}, "ffprobe": {}}
        self._save()

    def ffmpeg_does(self, source: str = "*", **behavior) -> None:
        self._behaviors["ffmpeg"][source] = behavior
        self._save()

    def ffprobe_does(self, source: str = "*", **behavior) -> None:
        self._behaviors["ffprobe"][source] = behavior
        self._save()

    def calls(self) -> list[list[str]]:
        log = self.root / "calls.jsonl"
        if not log.exists():
            return []
        return [json.loads(line) for line in log.read_text().splitlines() if line.strip()]

    def launched_sources(self) -> list[str]:
        return [Path(args[args.index("-i") + 1]).name for args in self.calls()]

    def probed_sources(self) -> list[str]:
        log = self.root / "probes.jsonl"
        if not log.exists():
            return []
        return [Path(json.loads(line)[-1]).name for line in log.read_text().splitlines() if line.strip()]

    def _save(self) -> None:
        (self.root / "behaviors.json").write_text(json.dumps(self._behaviors))


class UpdateRecorder:
    """Collects every JobUpdate a queue emits."""

    def __init__(self, queue: JobQueue):
        self.updates = []
        queue.on_update(self.updates.append)

    def for_job(self, job_id: str) -> list:
        return [u for u in self.updates if u.job_id == job_id]

    def statuses(self, job_id: str) -> list:
        return [u.get("status") for u in self.for_job(job_id) if "status" in u]

    def progress(self, job_id: str) -> list:
        return [u.get("progress") for u in self.for_job(job_id) if "progress" in u]

    def state(self, job_id: str) -> dict:
        """Observer-side view: later updates override earlier ones, field by field."""
        merged = {}
        for update in self.for_job(job_id):
            merged.update(update.changes)
        return merged


@pytest.fixture
def fake_tools(tmp_path):
    return FakeTools(tmp_path / "bin")


@pytest.fixture
def media_dir(tmp_path):
    folder = tmp_path / "media"
    folder.mkdir()
    return folder


@pytest.fixture
def job_queue(qtbot, fake_tools):
    queue = JobQueue(fake_tools.ffmpeg, fake_tools.ffprobe, cancel_grace_ms=0)
    yield queue
    # Leave no fake process behind
    for job_id in list(queue._jobs):
        queue.cancel(job_id)
    qtbot.waitUntil(lambda: not queue.is_busy, timeout=10000)


@pytest.fixture
def recorder(job_queue):
    return UpdateRecorder(job_queue)
