# ui/dialogs/binary_setup.py

from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QFileDialog
)
from PySide6.QtCore import Qt

from core.models import BinaryResolution, Settings
from core.paths import resolve_binaries, sibling_ffprobe


class BinarySetupDialog(QDialog):
    """
    Shown when ffmpeg/ffprobe cannot be run.
    Lets the user point at the binaries and closes automatically once
    both resolve. The chosen paths are written into *settings*.
    """

    def __init__(self, settings: Settings, resolution: BinaryResolution, parent=None):
        super().__init__(parent)
        self.settings = settings
        self.resolution = resolution

        self.setWindowTitle("FFmpeg not found")
        self.setMinimumWidth(460)
        self.setStyleSheet("background-color: #1a1a1a; color: #e0e0e0;")

        layout = QVBoxLayout(self)
        layout.setContentsMargins(24, 24, 24, 24)
        layout.setSpacing(12)

        self._status_lbl = QLabel()
        self._status_lbl.setWordWrap(True)
        self._status_lbl.setStyleSheet("font-size: 10pt; color: #e74c3c;")
        self._status_lbl.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._status_lbl)

        self._paths_lbl = QLabel()
        self._paths_lbl.setWordWrap(True)
        self._paths_lbl.setStyleSheet("font-size: 9pt; color: #999;")
        layout.addWidget(self._paths_lbl)

        btn_row = QHBoxLayout()
        locate_ffmpeg = QPushButton("Locate ffmpeg…")
        locate_ffprobe = QPushButton("Locate ffprobe…")
        close_btn = QPushButton("Close")
        locate_ffmpeg.clicked.connect(self._locate_ffmpeg)
        locate_ffprobe.clicked.connect(self._locate_ffprobe)
        close_btn.clicked.connect(self.reject)
        btn_row.addWidget(locate_ffmpeg)
        btn_row.addWidget(locate_ffprobe)
        btn_row.addStretch()
        btn_row.addWidget(close_btn)
        layout.addLayout(btn_row)

        self._show_resolution()

    # ── Browse helpers ────────────────────────────────────────────────────────

    def _locate_ffmpeg(self):
        path, _ = QFileDialog.getOpenFileName(self, "Select ffmpeg binary")
        if not path:
            return
        self.settings.ffmpeg_path = path
        if not self.settings.ffprobe_path:
            self.settings.ffprobe_path = sibling_ffprobe(path) or ""
        self._re_resolve()

    def _locate_ffprobe(self):
        path, _ = QFileDialog.getOpenFileName(self, "Select ffprobe binary")
        if not path:
            return
        self.settings.ffprobe_path = path
        self._re_resolve()

    # ── Result ────────────────────────────────────────────────────────────────

    def _re_resolve(self):
        self.resolution = resolve_binaries(
            self.settings.ffmpeg_path or None,
            self.settings.ffprobe_path or None,
        )
        if self.resolution.ok:
            self.accept()
        else:
            self._show_resolution()

    def _show_resolution(self):
        self._status_lbl.setText(self.resolution.message or "FFmpeg is ready.")
        self._paths_lbl.setText(
            f"ffmpeg:  {self.resolution.ffmpeg}\nffprobe: {self.resolution.ffprobe}"
        )
