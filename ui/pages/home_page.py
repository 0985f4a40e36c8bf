from __future__ import annotations

import uuid
from pathlib import Path

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QScrollArea,
    QFrame, QFormLayout, QComboBox, QLineEdit, QCheckBox, QFileDialog,
    QMessageBox
)
from PySide6.QtCore import Qt, QUrl, Signal
from PySide6.QtGui import QDesktopServices

from core.command_builder import split_extra_args
from core.config import save_settings
from core.job_queue import JobQueue
from core.models import BinaryResolution, JobRequest, JobUpdate, Settings
from core.outputs import build_output_path
from core.presets import OUTPUT_PRESETS, get_preset, required_encoders
from core.probe import list_encoders
from ui.dialogs.binary_setup import BinarySetupDialog
from ui.pages._job_card import JobCard, QueueItem


_HEADER_BUTTON = """
    QPushButton {{
        background-color: {color};
        color: white;
        border: none;
        border-radius: 6px;
        padding: 0 14px;
        font-size: 10pt;
        font-weight: 600;
    }}
    QPushButton:hover    {{ background-color: {hover}; }}
    QPushButton:disabled {{ background-color: #333; color: #777; }}
"""


def _header_button(label: str, color: str = "#444444", hover: str = "#666666") -> QPushButton:
    btn = QPushButton(label)
    btn.setFixedHeight(32)
    btn.setCursor(Qt.CursorShape.PointingHandCursor)
    btn.setStyleSheet(_HEADER_BUTTON.format(color=color, hover=hover))
    return btn


class HomePage(QWidget):
    """Conversion options on top, the queue of files below."""

    item_selected   = Signal(object)   # QueueItem
    item_deselected = Signal()

    def __init__(self, queue: JobQueue, settings: Settings, resolution: BinaryResolution, parent=None):
        super().__init__(parent)
        self.queue = queue
        self.settings = settings
        self.resolution = resolution
        self._cards: dict[str, JobCard] = {}   # item id → card
        self._selected_card: JobCard | None = None
        self._encoders: set[str] = set()         # empty when unknown

        self.queue.job_updated.connect(self._on_job_updated)

        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        root.setSpacing(0)

        root.addWidget(self._build_header())
        root.addWidget(self._build_banner())
        root.addWidget(self._build_options())

        # ── Scroll area ───────────────────────────────────────────────────────
        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setFrameShape(QFrame.Shape.NoFrame)
        scroll.setStyleSheet("background-color: #121212;")
        root.addWidget(scroll, 1)

        canvas = QWidget()
        canvas.setStyleSheet("background-color: #121212;")
        self._cards_layout = QVBoxLayout(canvas)
        self._cards_layout.setContentsMargins(16, 16, 16, 16)
        self._cards_layout.setSpacing(8)
        self._cards_layout.setAlignment(Qt.AlignmentFlag.AlignTop)
        scroll.setWidget(canvas)

        # ── Empty-state label ─────────────────────────────────────────────────
        self._empty_label = QLabel("No files yet.\nClick  ＋ Add Files  to get started.")
        self._empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._empty_label.setStyleSheet("color: #555; font-size: 11pt; padding-top: 40px;")
        self._cards_layout.addWidget(self._empty_label)

        self._apply_resolution(resolution)
        self._refresh_summary()

    # ── UI construction ───────────────────────────────────────────────────────

    def _build_header(self) -> QWidget:
        header_bar = QWidget()
        header_bar.setFixedHeight(56)
        header_bar.setStyleSheet("background-color: #1e1e1e; border-bottom: 1px solid #333;")
        header_layout = QHBoxLayout(header_bar)
        header_layout.setContentsMargins(16, 0, 16, 0)

        page_title = QLabel("Queue")
        page_title.setStyleSheet("color: #e0e0e0; font-size: 14pt; font-weight: 700;")
        header_layout.addWidget(page_title)

        self._summary_label = QLabel()
        self._summary_label.setStyleSheet("color: #888; font-size: 9pt; padding-left: 12px;")
        header_layout.addWidget(self._summary_label)
        header_layout.addStretch()

        self.add_btn    = _header_button("＋  Add Files")
        self.start_btn  = _header_button("▶  Start Queue", "#558B6E", "#67a382")
        self.reset_btn  = _header_button("Reset Failed")
        self.clear_btn  = _header_button("Clear Finished")

        self.add_btn.clicked.connect(self._add_files)
        self.start_btn.clicked.connect(self._start_queue)
        self.reset_btn.clicked.connect(self._reset_failed)
        self.clear_btn.clicked.connect(self._clear_finished)

        for btn in (self.add_btn, self.start_btn, self.reset_btn, self.clear_btn):
            header_layout.addWidget(btn)
        return header_bar

    def _build_banner(self) -> QWidget:
        self._banner = QWidget()
        self._banner.setStyleSheet("background-color: #3b1f1f;")
        row = QHBoxLayout(self._banner)
        row.setContentsMargins(16, 8, 16, 8)

        self._banner_label = QLabel()
        self._banner_label.setWordWrap(True)
        self._banner_label.setStyleSheet("color: #f0b0b0; font-size: 9pt;")
        row.addWidget(self._banner_label, 1)

        locate_btn = _header_button("Locate binaries…", "#c0392b", "#e74c3c")
        locate_btn.clicked.connect(self._locate_binaries)
        row.addWidget(locate_btn)
        return self._banner

    def _build_options(self) -> QWidget:
        panel = QWidget()
        panel.setStyleSheet("background-color: #181818; color: #cccccc;")
        form = QFormLayout(panel)
        form.setContentsMargins(16, 12, 16, 12)

        self.preset_combo = QComboBox()
        for preset in OUTPUT_PRESETS:
            self.preset_combo.addItem(preset.label, userData=preset.id)
        index = self.preset_combo.findData(get_preset(self.settings.preset_id).id)
        self.preset_combo.setCurrentIndex(max(index, 0))
        form.addRow("Preset:", self.preset_combo)

        self._preset_warning = QLabel()
        self._preset_warning.setStyleSheet("color: #e0a040; font-size: 9pt;")
        self._preset_warning.setWordWrap(True)
        self._preset_warning.hide()
        form.addRow("", self._preset_warning)

        out_row = QHBoxLayout()
        self.output_dir_edit = QLineEdit(self.settings.output_dir)
        self.output_dir_edit.setPlaceholderText("Same as input folder")
        choose_btn = QPushButton("Choose…")
        clear_btn = QPushButton("Clear")
        choose_btn.clicked.connect(self._choose_output_dir)
        clear_btn.clicked.connect(lambda: self.output_dir_edit.setText(""))
        out_row.addWidget(self.output_dir_edit, 1)
        out_row.addWidget(choose_btn)
        out_row.addWidget(clear_btn)
        form.addRow("Output folder:", out_row)

        self.template_edit = QLineEdit(self.settings.name_template)
        self.template_edit.setToolTip("Use {name} for the source name and {ext} for the preset extension.")
        form.addRow("Output naming:", self.template_edit)

        self.extra_args_edit = QLineEdit(self.settings.extra_args)
        self.extra_args_edit.setPlaceholderText("e.g. -vf scale=1280:-2 -r 30")
        form.addRow("Advanced args:", self.extra_args_edit)

        checks = QHBoxLayout()
        self.overwrite_check = QCheckBox("Overwrite outputs")
        self.overwrite_check.setChecked(self.settings.overwrite)
        self.show_command_check = QCheckBox("Show ffmpeg command")
        self.show_command_check.setChecked(self.settings.show_command)
        checks.addWidget(self.overwrite_check)
        checks.addWidget(self.show_command_check)
        checks.addStretch()
        form.addRow("", checks)

        self.preset_combo.currentIndexChanged.connect(self._on_options_changed)
        self.output_dir_edit.textChanged.connect(self._on_options_changed)
        self.template_edit.textChanged.connect(self._on_options_changed)
        self.extra_args_edit.textChanged.connect(self._on_options_changed)
        self.overwrite_check.toggled.connect(self._on_options_changed)
        self.show_command_check.toggled.connect(self._on_show_command_toggled)
        return panel

    # ── Options ───────────────────────────────────────────────────────────────

    def _on_options_changed(self, *_):
        self.settings.preset_id = self.preset_combo.currentData()
        self.settings.output_dir = self.output_dir_edit.text().strip()
        self.settings.name_template = self.template_edit.text()
        self.settings.extra_args = self.extra_args_edit.text()
        self.settings.overwrite = self.overwrite_check.isChecked()
        save_settings(self.settings)
        self._refresh_preset_warning()

        # Files not submitted yet follow the current options
        for card in self._cards.values():
            if card.item.status == "idle":
                card.item.output_path = self._desired_output(card.item.source_path)
                card.refresh_display()

    def _on_show_command_toggled(self, checked: bool):
        self.settings.show_command = checked
        save_settings(self.settings)
        for card in self._cards.values():
            card.set_show_command(checked)

    def _choose_output_dir(self):
        path = QFileDialog.getExistingDirectory(self, "Select output folder")
        if path:
            self.output_dir_edit.setText(path)

    def _desired_output(self, source: Path) -> Path:
        preset = get_preset(self.settings.preset_id)
        return build_output_path(source, self.settings.output_dir, self.settings.name_template, preset.ext)

    # ── Binaries ──────────────────────────────────────────────────────────────

    def _locate_binaries(self):
        dialog = BinarySetupDialog(self.settings, self.resolution, self)
        dialog.exec()
        save_settings(self.settings)
        self._apply_resolution(dialog.resolution)

    def _apply_resolution(self, resolution: BinaryResolution):
        self.resolution = resolution
        self.queue.set_binaries(resolution.ffmpeg, resolution.ffprobe)
        self._banner_label.setText(resolution.message)
        self._banner.setVisible(not resolution.ok)
        self._encoders = set(list_encoders(resolution.ffmpeg)) if resolution.ok else set()
        self._refresh_preset_warning()
        self._refresh_summary()

    # ── Queue actions ─────────────────────────────────────────────────────────

    def _add_files(self):
        paths, _ = QFileDialog.getOpenFileNames(self, "Add files to convert")
        existing = {card.item.source_path for card in self._cards.values()}
        for raw in paths:
            source = Path(raw)
            if source in existing:
                continue
            item = QueueItem(
                id=uuid.uuid4().hex,
                source_path=source,
                output_path=self._desired_output(source),
            )
            self._add_card(item)
        self._refresh_summary()

    def _start_queue(self):
        idle = [card.item for card in self._cards.values() if card.item.status == "idle"]
        if not idle:
            return
        try:
            extra = split_extra_args(self.settings.extra_args)
        except ValueError as exc:
            QMessageBox.warning(self, "Advanced args", f"Could not parse the advanced args:\n{exc}")
            return

        preset = get_preset(self.settings.preset_id)
        requests = [
            JobRequest(
                id=item.id,
                source_path=item.source_path,
                output_path=item.output_path,
                args=(*preset.args, *extra),
                overwrite=self.settings.overwrite,
            )
            for item in idle
        ]
        self.queue.submit(requests)

    def _reset_failed(self):
        reset_ids = []
        for card in self._cards.values():
            if card.item.status in ("error", "canceled") and not card.item.settling:
                card.item.status = "idle"
                card.item.progress = None
                card.item.message = ""
                card.item.error_detail = None
                card.item.invocation_summary = None
                card.item.resolved_output_path = None
                card.item.output_path = self._desired_output(card.item.source_path)
                card.refresh_display()
                reset_ids.append(card.item.id)
        self.queue.purge(reset_ids)
        self._refresh_summary()

    def _clear_finished(self):
        done_ids = [i for i, card in self._cards.items() if card.item.status == "done"]
        for item_id in done_ids:
            self._remove_card(item_id)
        self.queue.purge(done_ids)
        self._refresh_summary()

    # ── Card factory ──────────────────────────────────────────────────────────

    def _add_card(self, item: QueueItem):
        if not self._cards:
            self._empty_label.hide()
        card = JobCard(item, show_command=self.settings.show_command)
        card.card_selected.connect(self._on_card_selected)
        card.cancel_requested.connect(self.queue.cancel)
        card.reveal_requested.connect(self._on_reveal_requested)
        card.remove_requested.connect(self._on_remove_requested)
        self._cards[item.id] = card
        self._cards_layout.addWidget(card)

    def _remove_card(self, item_id: str):
        card = self._cards.pop(item_id, None)
        if card is None:
            return
        if self._selected_card is card:
            self._selected_card = None
            self.item_deselected.emit()
        self._cards_layout.removeWidget(card)
        card.deleteLater()
        if not self._cards:
            self._empty_label.show()

    # ── Card signal handlers ──────────────────────────────────────────────────

    def _on_card_selected(self, clicked_card: JobCard):
        if self._selected_card and self._selected_card is not clicked_card:
            self._selected_card.set_selected(False)
        self._selected_card = clicked_card
        clicked_card.set_selected(True)
        self.item_selected.emit(clicked_card.item)

    def _on_reveal_requested(self, item_id: str):
        card = self._cards.get(item_id)
        if card:
            QDesktopServices.openUrl(QUrl.fromLocalFile(str(card.item.destination.parent)))

    def _on_remove_requested(self, item_id: str):
        self._remove_card(item_id)
        self.queue.purge([item_id])
        self._refresh_summary()

    # ── Queue signal handlers ─────────────────────────────────────────────────

    def _on_job_updated(self, update: JobUpdate):
        card = self._cards.get(update.job_id)
        if card is None:
            return
        card.apply_update(update)
        if self._selected_card is card:
            self.item_selected.emit(card.item)
        if "status" in update:
            self._refresh_summary()

    # ── Helpers ───────────────────────────────────────────────────────────────

    def _refresh_preset_warning(self):
        preset = get_preset(self.settings.preset_id)
        missing = [e for e in required_encoders(preset) if self._encoders and e not in self._encoders]
        if missing:
            self._preset_warning.setText(
                f"This ffmpeg build has no {', '.join(missing)} encoder; jobs with this preset will fail."
            )
        self._preset_warning.setVisible(bool(missing))

    def _refresh_summary(self):
        counts = {"queued": 0, "running": 0, "done": 0, "error": 0}
        for card in self._cards.values():
            status = str(getattr(card.item.status, "value", card.item.status))
            if status in counts:
                counts[status] += 1
        self._summary_label.setText(
            f"Total: {len(self._cards)}   Queued: {counts['queued']}   "
            f"Running: {counts['running']}   Done: {counts['done']}   Failed: {counts['error']}"
        )
        has_idle = any(card.item.status == "idle" for card in self._cards.values())
        busy = counts["queued"] + counts["running"] > 0
        self.start_btn.setEnabled(self.resolution.ok and has_idle and not busy)
