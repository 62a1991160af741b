"""Workout plan editor.

One row per timer (name, work, rest, sets, move up/down, remove), the
default rest for new timers, and an add button.  The editor never
touches the state itself: every edit is validated here and emitted as
a reducer event through ``event_requested``.  Editing is locked while
the workout runs.
"""

from __future__ import annotations

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import (
    QFormLayout, QFrame, QHBoxLayout, QLabel, QLineEdit,
    QPushButton, QSpinBox, QVBoxLayout, QWidget,
)

from ..timer.models import (
    TimerField, TimerItem, TrainingState,
    parse_default_interval, parse_field_value,
)
from ..timer.reducer import (
    AddTimer, RemoveTimer, ReorderTimer, SetDefaultInterval, UpdateTimer,
)

MAX_SECONDS = 24 * 60 * 60
MAX_SETS = 99


def _spin(minimum: int, maximum: int, suffix: str) -> QSpinBox:
    spin = QSpinBox()
    spin.setRange(minimum, maximum)
    spin.setSuffix(suffix)
    return spin


class TimerRow(QFrame):
    """Inputs for a single ``TimerItem``."""

    field_changed = pyqtSignal(str, object, object)   # id, TimerField, raw value
    remove_requested = pyqtSignal(str)
    move_requested = pyqtSignal(str, int)             # id, -1 up / +1 down

    def __init__(self, item: TimerItem, index: int, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setObjectName("timerRow")
        self._timer_id = item.id

        row = QHBoxLayout(self)
        row.setContentsMargins(8, 6, 8, 6)
        row.setSpacing(8)

        self._index_label = QLabel(self)
        self._index_label.setObjectName("rowIndex")
        self._index_label.setFixedWidth(28)
        row.addWidget(self._index_label)

        self._name_edit = QLineEdit(self)
        self._name_edit.setMaxLength(60)
        self._name_edit.textEdited.connect(
            lambda text: self._emit(TimerField.NAME, text)
        )
        row.addWidget(self._name_edit, stretch=2)

        self._work_spin = _spin(1, MAX_SECONDS, " s")
        self._work_spin.setToolTip("Work")
        self._work_spin.valueChanged.connect(
            lambda v: self._emit(TimerField.WORK_DURATION, v)
        )
        row.addWidget(self._work_spin)

        self._interval_spin = _spin(0, MAX_SECONDS, " s")
        self._interval_spin.setToolTip("Rest")
        self._interval_spin.valueChanged.connect(
            lambda v: self._emit(TimerField.INTERVAL_DURATION, v)
        )
        row.addWidget(self._interval_spin)

        self._sets_spin = _spin(1, MAX_SETS, " sets")
        self._sets_spin.valueChanged.connect(
            lambda v: self._emit(TimerField.SETS, v)
        )
        row.addWidget(self._sets_spin)

        self._up_btn = QPushButton("↑", self)
        self._up_btn.setFixedWidth(28)
        self._up_btn.clicked.connect(lambda: self.move_requested.emit(self._timer_id, -1))
        row.addWidget(self._up_btn)

        self._down_btn = QPushButton("↓", self)
        self._down_btn.setFixedWidth(28)
        self._down_btn.clicked.connect(lambda: self.move_requested.emit(self._timer_id, 1))
        row.addWidget(self._down_btn)

        self._remove_btn = QPushButton("×", self)
        self._remove_btn.setObjectName("dangerButton")
        self._remove_btn.setFixedWidth(28)
        self._remove_btn.setToolTip("Remove timer")
        self._remove_btn.clicked.connect(lambda: self.remove_requested.emit(self._timer_id))
        row.addWidget(self._remove_btn)

        self.populate(item, index, total=index + 1, locked=False, active=False)

    @property
    def timer_id(self) -> str:
        return self._timer_id

    @property
    def is_active(self) -> bool:
        return bool(self.property("active"))

    def populate(
        self, item: TimerItem, index: int, *, total: int, locked: bool, active: bool,
    ) -> None:
        """Show *item* without echoing the values back as edits."""
        self._index_label.setText(f"#{index + 1}")
        if self.is_active != active:
            self.setProperty("active", active)
            self.style().unpolish(self)
            self.style().polish(self)

        widgets = (self._name_edit, self._work_spin, self._interval_spin, self._sets_spin)
        for w in widgets:
            w.blockSignals(True)
        try:
            self._name_edit.setPlaceholderText(f"Training {index + 1}")
            if self._name_edit.text() != item.name:
                self._name_edit.setText(item.name)
            self._work_spin.setValue(item.work_duration)
            self._interval_spin.setValue(item.interval_duration)
            self._sets_spin.setValue(item.sets)
        finally:
            for w in widgets:
                w.blockSignals(False)

        for w in widgets:
            w.setEnabled(not locked)
        self._up_btn.setEnabled(not locked and index > 0)
        self._down_btn.setEnabled(not locked and index < total - 1)
        self._remove_btn.setVisible(total > 1)
        self._remove_btn.setEnabled(not locked)

    def _emit(self, timer_field: TimerField, raw: object) -> None:
        self.field_changed.emit(self._timer_id, timer_field, raw)


class PlanEditor(QWidget):
    """Edits the plan by emitting reducer events."""

    event_requested = pyqtSignal(object)

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._rows: list[TimerRow] = []
        self._timer_ids: tuple[str, ...] = ()
        self._build_ui()

    # ── build ─────────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        root.setSpacing(8)

        header = QLabel("Timers")
        header.setStyleSheet("font-size: 15px; font-weight: 700;")
        root.addWidget(header)

        form = QFormLayout()
        self._default_interval_spin = _spin(0, MAX_SECONDS, " s")
        self._default_interval_spin.valueChanged.connect(self._on_default_interval)
        form.addRow("Default rest:", self._default_interval_spin)
        root.addLayout(form)

        self._rows_layout = QVBoxLayout()
        self._rows_layout.setSpacing(4)
        root.addLayout(self._rows_layout)

        self._add_btn = QPushButton("+ Add Timer", self)
        self._add_btn.setObjectName("secondaryButton")
        self._add_btn.clicked.connect(lambda: self.event_requested.emit(AddTimer()))
        root.addWidget(self._add_btn)
        root.addStretch()

    # ── refresh ───────────────────────────────────────────────────────

    def refresh(self, state: TrainingState) -> None:
        ids = tuple(t.id for t in state.timers)
        if ids != self._timer_ids:
            self._rebuild_rows(state)
            self._timer_ids = ids

        locked = state.is_running
        total = len(state.timers)
        for index, (row, item) in enumerate(zip(self._rows, state.timers)):
            row.populate(
                item, index, total=total, locked=locked,
                active=index == state.current_timer_index and not state.is_finished,
            )

        self._default_interval_spin.blockSignals(True)
        self._default_interval_spin.setValue(state.default_interval)
        self._default_interval_spin.blockSignals(False)
        self._default_interval_spin.setEnabled(not locked)
        self._add_btn.setEnabled(not locked)

    def _rebuild_rows(self, state: TrainingState) -> None:
        for row in self._rows:
            self._rows_layout.removeWidget(row)
            row.deleteLater()
        self._rows = []
        for index, item in enumerate(state.timers):
            row = TimerRow(item, index, self)
            row.field_changed.connect(self._on_field_changed)
            row.remove_requested.connect(
                lambda timer_id: self.event_requested.emit(RemoveTimer(timer_id))
            )
            row.move_requested.connect(self._on_move)
            self._rows_layout.addWidget(row)
            self._rows.append(row)

    # ── handlers ──────────────────────────────────────────────────────

    def _on_field_changed(self, timer_id: str, timer_field: TimerField, raw: object) -> None:
        value = parse_field_value(timer_field, raw)
        if value is None:
            return
        self.event_requested.emit(UpdateTimer(timer_id, {timer_field: value}))

    def _on_default_interval(self, raw: int) -> None:
        seconds = parse_default_interval(raw)
        if seconds is not None:
            self.event_requested.emit(SetDefaultInterval(seconds))

    def _on_move(self, timer_id: str, delta: int) -> None:
        if timer_id not in self._timer_ids:
            return
        source = self._timer_ids.index(timer_id)
        destination = source + delta
        if 0 <= destination < len(self._timer_ids):
            self.event_requested.emit(ReorderTimer(source, destination))
