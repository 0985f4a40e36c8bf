from PySide6.QtWidgets import (
    QMainWindow, QWidget, QHBoxLayout, QVBoxLayout,
    QLabel, QStackedWidget, QSizePolicy
)
from PySide6.QtCore import Qt

from core import JobQueue
from core.config import load_settings, save_settings
from core.paths import resolve_binaries
from ui.dialogs.binary_setup import BinarySetupDialog
from ui.pages import HomePage
from ui.pages._job_card import QueueItem


class _Row(QWidget):
    """A label/value pair for the details panel."""

    def __init__(self, label: str, parent=None):
        super().__init__(parent)
        self.setStyleSheet("background: transparent;")
        col = QVBoxLayout(self)
        col.setContentsMargins(0, 0, 0, 0)
        col.setSpacing(1)

        lbl = QLabel(label.upper())
        lbl.setStyleSheet("color: #555; font-size: 8pt; font-weight: 700; letter-spacing: 1px;")
        col.addWidget(lbl)

        self.value = QLabel("—")
        self.value.setStyleSheet("color: #cccccc; font-size: 10pt;")
        self.value.setWordWrap(True)
        self.value.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
        col.addWidget(self.value)

    def set(self, text: str):
        self.value.setText(text or "—")


class _SidePanel(QWidget):
    """Right-hand details panel. Shows info about the selected file."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setStyleSheet("background-color: #1a1a1a;")
        self.setSizePolicy(QSizePolicy.Policy.Fixed, QSizePolicy.Policy.Expanding)

        root = QVBoxLayout(self)
        root.setContentsMargins(0, 16, 0, 16)
        root.setSpacing(0)

        # ── Header ────────────────────────────────────────────────────────────
        title = QLabel("DETAILS")
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        title.setStyleSheet(
            "color: #666; font-size: 8pt; font-weight: 700; letter-spacing: 2px;"
        )
        root.addWidget(title)

        sep = QWidget()
        sep.setFixedHeight(1)
        sep.setStyleSheet("background-color: #2e2e2e; margin-top: 8px; margin-bottom: 12px;")
        root.addWidget(sep)

        # ── Stacked: placeholder vs content ───────────────────────────────────
        self._stack = QStackedWidget()
        root.addWidget(self._stack, 1)

        # Page 0: placeholder
        ph = QLabel("Select a file\nto see details.")
        ph.setAlignment(Qt.AlignmentFlag.AlignCenter)
        ph.setStyleSheet("color: #444; font-size: 9pt;")
        self._stack.addWidget(ph)

        # Page 1: item details
        content = QWidget()
        content.setStyleSheet("background: transparent;")
        col = QVBoxLayout(content)
        col.setContentsMargins(16, 0, 16, 0)
        col.setSpacing(14)

        self._r_source   = _Row("Source")
        self._r_output   = _Row("Output")
        self._r_status   = _Row("Status")
        self._r_progress = _Row("Progress")
        self._r_error    = _Row("Error")
        self._r_command  = _Row("Command")

        for row in (
            self._r_source, self._r_output, self._r_status,
            self._r_progress, self._r_error, self._r_command,
        ):
            col.addWidget(row)

            sep = QWidget()
            sep.setFixedHeight(1)
            sep.setStyleSheet("background-color: #2e2e2e;")
            col.addWidget(sep)

        col.addStretch()
        self._stack.addWidget(content)

    # ── Public API ────────────────────────────────────────────────────────────

    def show_item(self, item: QueueItem) -> None:
        """Populate the panel with the given item's data."""
        status = str(getattr(item.status, "value", item.status))
        progress = "—" if item.progress is None else f"{item.progress * 100:.0f}%"

        self._r_source.set(str(item.source_path))
        self._r_output.set(str(item.destination))
        self._r_status.set(f"{status.capitalize()}  {item.message}".strip())
        self._r_progress.set(progress)
        self._r_error.set(item.error_detail or "")
        self._r_command.set(item.invocation_summary or "")

        self._stack.setCurrentIndex(1)

    def clear(self) -> None:
        """Go back to the placeholder."""
        self._stack.setCurrentIndex(0)


# ── Main Window ───────────────────────────────────────────────────────────────

class MainWindow(QMainWindow):
    """Top-level application window."""

    def __init__(self):
        super().__init__()

        self.settings = load_settings()

        # ── Binary check, before anything else ────────────────────
        resolution = resolve_binaries(
            self.settings.ffmpeg_path or None,
            self.settings.ffprobe_path or None,
        )
        if not resolution.ok:
            dialog = BinarySetupDialog(self.settings, resolution, self)
            # Closing without fixing it is fine: the page keeps a banner
            # up and Start stays disabled.
            dialog.exec()
            resolution = dialog.resolution
            save_settings(self.settings)

        self.queue = JobQueue(
            resolution.ffmpeg,
            resolution.ffprobe,
            cancel_grace_ms=self.settings.cancel_grace_seconds * 1000,
            parent=self,
        )

        self.setWindowTitle("Batch Transcoder")
        self.resize(1100, 700)
        self.setMinimumSize(800, 500)
        self.setStyleSheet("background-color: #121212;")
        self.setContentsMargins(0, 0, 0, 0)

        central = QWidget()
        self.setCentralWidget(central)

        outer = QHBoxLayout(central)
        outer.setContentsMargins(0, 0, 0, 0)
        outer.setSpacing(0)

        self._home_page = HomePage(self.queue, self.settings, resolution)

        self._side_panel = _SidePanel()
        self._side_panel.setFixedWidth(300)

        separator = QWidget()
        separator.setFixedWidth(1)
        separator.setStyleSheet("background-color: #2e2e2e;")

        outer.addWidget(self._home_page, 1)
        outer.addWidget(separator)
        outer.addWidget(self._side_panel)

        # ── Wire detail panel signals ─────────────────────────────────────────
        self._home_page.item_selected.connect(self._side_panel.show_item)
        self._home_page.item_deselected.connect(self._side_panel.clear)
