"""Current phase card: what is running, how long is left, what comes next."""

from __future__ import annotations

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QFrame, QLabel, QVBoxLayout, QWidget

from ..timer.models import TimerItem, TrainingState


# ── text helpers ─────────────────────────────────────────────────────────


def format_time(seconds: int) -> str:
    m, s = divmod(max(0, seconds), 60)
    return f"{m:02d}:{s:02d}"


def timer_display_name(item: TimerItem, index: int) -> str:
    """The timer's name, or ``Training N`` for an unnamed one."""
    return item.name or f"Training {index + 1}"


def phase_title(state: TrainingState) -> str:
    if state.is_finished:
        return "FINISHED"
    if state.is_interval:
        return "REST"
    item = state.current_timer
    if item is None:
        return ""
    return timer_display_name(item, state.current_timer_index)


def set_caption(state: TrainingState) -> str:
    """``Set n/m`` during work on a multi-set timer, else empty."""
    item = state.current_timer
    if state.is_finished or state.is_interval or item is None or item.sets <= 1:
        return ""
    return f"Set {state.current_set_index + 1}/{item.sets}"


def next_caption(state: TrainingState) -> str:
    if state.is_finished:
        return "Great Workout!"
    if not state.is_interval:
        if state.is_last_set and state.is_last_timer:
            return "Next: Finish"
        return "Next: Rest"
    if not state.is_last_set:
        return f"Next: Set {state.current_set_index + 2}"
    if state.is_last_timer:
        return "Next: Finish"
    index = state.current_timer_index + 1
    return f"Next: {timer_display_name(state.timers[index], index)}"


# ── widget ───────────────────────────────────────────────────────────────


class TimerDisplay(QWidget):
    """Big countdown with phase title and next-phase hint."""

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._build_ui()

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)

        self._card = QFrame(self)
        self._card.setObjectName("card")
        root.addWidget(self._card)

        layout = QVBoxLayout(self._card)
        layout.setContentsMargins(24, 20, 24, 20)
        layout.setSpacing(6)
        layout.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._title_label = QLabel(self._card)
        self._title_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._title_label.setStyleSheet("font-size: 22px; font-weight: 700;")
        layout.addWidget(self._title_label)

        self._set_label = QLabel(self._card)
        self._set_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._set_label)

        self._time_label = QLabel(self._card)
        self._time_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._time_label.setStyleSheet("font-size: 64px; font-weight: 300;")
        layout.addWidget(self._time_label)

        self._next_label = QLabel(self._card)
        self._next_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._next_label)

    def refresh(self, state: TrainingState) -> None:
        self._title_label.setText(phase_title(state))
        caption = set_caption(state)
        self._set_label.setText(caption)
        self._set_label.setVisible(bool(caption))
        self._time_label.setText(format_time(state.remaining_time))
        self._next_label.setText(next_caption(state))
        self._card.setProperty("phase", state.phase.value)
        self._card.style().unpolish(self._card)
        self._card.style().polish(self._card)
