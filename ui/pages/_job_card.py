from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from PySide6.QtWidgets import (
    QFrame, QVBoxLayout, QSizePolicy, QLabel, QHBoxLayout,
    QProgressBar, QWidget, QPushButton
)
from PySide6.QtCore import Qt, Signal

from core.models import JobUpdate


@dataclass
class QueueItem:
    """
    The page's view of one file. Starts out "idle" (added but not
    submitted); after that every field is driven by JobUpdates.
    """
    id: str
    source_path: Path
    output_path: Path
    status: str = "idle"
    progress: float | None = None
    resolved_output_path: Path | None = None
    message: str = ""
    error_detail: str | None = None
    invocation_summary: str | None = None

    @property
    def destination(self) -> Path:
        return self.resolved_output_path or self.output_path

    @property
    def settling(self) -> bool:
        """Canceled, but the process has not exited yet."""
        return self.status == "canceled" and self.message == "Canceling"


class StatusBadge(QLabel):
    """A colored status indicator badge."""

    def __init__(self, status: str, parent=None):
        super().__init__(parent)
        self.set_status(status)

    def set_status(self, status: str):
        status_map = {
            "idle":     ("Ready",    "#666666"),
            "queued":   ("Queued",   "#f39c12"),
            "running":  ("Running",  "#27ae60"),
            "done":     ("Done",     "#558B6E"),
            "error":    ("Failed",   "#e74c3c"),
            "canceled": ("Canceled", "#7f8c8d"),
        }
        text, color = status_map.get(status, ("Unknown", "#888888"))
        self.setText(text)
        self.setStyleSheet(f"""
            QLabel {{
                background-color: {color};
                color: white;
                padding: 4px 12px;
                border-radius: 4px;
                font-size: 8pt;
                font-weight: 600;
            }}
        """)


def _action_button(label: str, color: str, hover: str) -> QPushButton:
    """Factory for the small action-bar buttons."""
    btn = QPushButton(label)
    btn.setFixedHeight(26)
    btn.setCursor(Qt.CursorShape.PointingHandCursor)
    btn.setStyleSheet(f"""
        QPushButton {{
            background-color: {color};
            color: white;
            border: none;
            border-radius: 5px;
            padding: 0 14px;
            font-size: 9pt;
            font-weight: 600;
        }}
        QPushButton:hover   {{ background-color: {hover}; }}
    """)
    return btn


class JobCard(QFrame):
    """
    One row of the queue.

    Signals
    -------
    card_selected(JobCard)  – emitted when this card is clicked so the
                              home page can highlight it in the side panel
    cancel_requested(str)   – item id
    reveal_requested(str)   – item id
    remove_requested(str)   – item id
    """

    card_selected    = Signal(object)   # passes self
    cancel_requested = Signal(str)
    reveal_requested = Signal(str)
    remove_requested = Signal(str)

    _STYLE_BASE = """
        QFrame#JobCard {{
            background-color: #2a2a2a;
            border: 1px solid {border};
            border-radius: 8px;
        }}
    """

    def __init__(self, item: QueueItem, show_command: bool = False, parent=None):
        super().__init__(parent)
        self.item = item
        self._show_command = show_command

        self.setObjectName("JobCard")
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Fixed)
        self.set_selected(False)
        self._setup_ui()
        self.refresh_display()

    # ── Style helpers ─────────────────────────────────────────────────────────

    def set_selected(self, selected: bool):
        border = "#558B6E" if selected else "#3a3a3a"
        self.setStyleSheet(self._STYLE_BASE.format(border=border))

    # ── UI construction ───────────────────────────────────────────────────────

    def _setup_ui(self):
        root = QVBoxLayout(self)
        root.setContentsMargins(14, 10, 14, 10)
        root.setSpacing(6)

        # ── Top row ───────────────────────────────────────────────────────────
        top_row = QHBoxLayout()
        top_row.setSpacing(12)

        info_col = QVBoxLayout()
        info_col.setSpacing(2)
        info_col.setContentsMargins(0, 0, 0, 0)

        self.title_label = QLabel(self.item.source_path.name)
        self.title_label.setStyleSheet(
            "color: #e0e0e0; font-size: 11pt; font-weight: 600; background: transparent;"
        )
        info_col.addWidget(self.title_label)

        self.details_label = QLabel()
        self.details_label.setStyleSheet("color: #888; font-size: 8pt; background: transparent;")
        self.details_label.setWordWrap(True)
        info_col.addWidget(self.details_label)

        top_row.addLayout(info_col, 1)

        self._cancel_btn = _action_button("Cancel", "#c0392b", "#e74c3c")
        self._reveal_btn = _action_button("Show",   "#3d7ec9", "#5592d6")
        self._remove_btn = _action_button("Remove", "#444444", "#666666")
        self._cancel_btn.clicked.connect(lambda: self.cancel_requested.emit(self.item.id))
        self._reveal_btn.clicked.connect(lambda: self.reveal_requested.emit(self.item.id))
        self._remove_btn.clicked.connect(lambda: self.remove_requested.emit(self.item.id))
        for btn in (self._cancel_btn, self._reveal_btn, self._remove_btn):
            top_row.addWidget(btn)

        self.status_badge = StatusBadge(self.item.status)
        top_row.addWidget(self.status_badge)

        root.addLayout(top_row)

        # ── Progress bar ──────────────────────────────────────────────────────
        self.progress_bar = QProgressBar()
        self.progress_bar.setStyleSheet("""
            QProgressBar {
                border: 1px solid #444;
                border-radius: 4px;
                background-color: #1a1a1a;
                text-align: center;
                height: 16px;
            }
            QProgressBar::chunk { background-color: #558B6E; }
        """)
        self.progress_bar.setRange(0, 100)
        self.progress_bar.setValue(0)
        root.addWidget(self.progress_bar)

        # ── Message / error / command labels ──────────────────────────────────
        self.message_label = QLabel()
        self.message_label.setStyleSheet("color: #999; font-size: 8pt; background: transparent;")
        root.addWidget(self.message_label)

        self.error_label = QLabel()
        self.error_label.setStyleSheet("color: #e74c3c; font-size: 8pt; background: transparent;")
        self.error_label.setWordWrap(True)
        self.error_label.setVisible(False)
        root.addWidget(self.error_label)

        self.command_label = QLabel()
        self.command_label.setStyleSheet(
            "color: #777; font-family: monospace; font-size: 8pt; background: transparent;"
        )
        self.command_label.setWordWrap(True)
        self.command_label.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
        self.command_label.setVisible(False)
        root.addWidget(self.command_label)

        self.setMinimumHeight(70)

    # ── Click handling ────────────────────────────────────────────────────────

    def mousePressEvent(self, event):
        if event.button() == Qt.MouseButton.LeftButton:
            self.card_selected.emit(self)
        super().mousePressEvent(event)

    # ── Updates (called by HomePage) ──────────────────────────────────────────

    def apply_update(self, update: JobUpdate):
        update.apply_to(self.item)
        self.refresh_display()

    def set_show_command(self, show: bool):
        self._show_command = show
        self.refresh_display()

    def refresh_display(self):
        item = self.item
        status = str(getattr(item.status, "value", item.status))

        self.details_label.setText(f"→  {item.destination}")
        self.status_badge.set_status(status)

        # Running without a known duration: busy indicator instead of a bar
        if status == "running" and item.progress is None:
            self.progress_bar.setRange(0, 0)
        else:
            self.progress_bar.setRange(0, 100)
            self.progress_bar.setValue(int(round((item.progress or 0) * 100)))
        self.progress_bar.setVisible(status not in ("idle", "error", "canceled"))

        self.message_label.setText(item.message or "")
        self.message_label.setVisible(bool(item.message))

        self.error_label.setText(item.error_detail or "")
        self.error_label.setVisible(status == "error" and bool(item.error_detail))

        self.command_label.setText(item.invocation_summary or "")
        self.command_label.setVisible(self._show_command and bool(item.invocation_summary))

        self._cancel_btn.setVisible(status in ("queued", "running"))
        self._reveal_btn.setVisible(status == "done")
        self._remove_btn.setVisible(status not in ("queued", "running"))
