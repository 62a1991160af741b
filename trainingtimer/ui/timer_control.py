"""Start/Pause and Reset buttons."""

from __future__ import annotations

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import QHBoxLayout, QPushButton, QWidget

from ..timer.models import TrainingState


class TimerControl(QWidget):
    """Emits ``start_requested`` so the window can unlock audio first."""

    start_requested = pyqtSignal()
    stop_requested = pyqtSignal()
    reset_requested = pyqtSignal()

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._running = False

        row = QHBoxLayout(self)
        row.setSpacing(12)
        row.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._start_pause_btn = QPushButton("Start", self)
        self._start_pause_btn.setObjectName("primaryButton")
        self._start_pause_btn.setMinimumWidth(100)
        self._start_pause_btn.clicked.connect(self._on_start_pause)

        self._reset_btn = QPushButton("Reset", self)
        self._reset_btn.setObjectName("secondaryButton")
        self._reset_btn.setToolTip("Reset Timer")
        self._reset_btn.clicked.connect(self.reset_requested)

        row.addWidget(self._start_pause_btn)
        row.addWidget(self._reset_btn)

    def refresh(self, state: TrainingState) -> None:
        self._running = state.is_running
        self._start_pause_btn.setText("Pause" if state.is_running else "Start")
        self._start_pause_btn.setVisible(not state.is_finished)

    def _on_start_pause(self) -> None:
        if self._running:
            self.stop_requested.emit()
        else:
            self.start_requested.emit()
