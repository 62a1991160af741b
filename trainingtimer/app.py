"""Main application window for Training Timer."""

from __future__ import annotations

import logging
from pathlib import Path

from PyQt6.QtCore import Qt, QTimer
from PyQt6.QtGui import QAction, QKeySequence
from PyQt6.QtWidgets import (
    QApplication, QFileDialog, QLabel, QMainWindow, QMessageBox, QScrollArea,
    QVBoxLayout, QWidget,
)

from .audio.sounds import SoundCuePlayer
from .settings import Settings, load_settings, save_settings
from .storage.state_store import (
    BlobStore, PlanImportError, StateStore, export_state, import_state,
)
from .timer.engine import TimerEngine
from .timer.models import CueKind, Phase, TrainingState
from .timer.reducer import LoadState
from .ui.plan_editor import PlanEditor
from .ui.settings_dialog import SettingsDialog
from .ui.timer_control import TimerControl
from .ui.timer_display import TimerDisplay, format_time

logger = logging.getLogger(__name__)

APP_TITLE = "Training Timer"

STYLESHEET = """
QFrame#card { border-radius: 16px; background-color: #1E1E2E; color: #CDD6F4; }
QFrame#card[phase="work"] { border: 2px solid #A6E3A1; }
QFrame#card[phase="interval"] { border: 2px solid #89B4FA; }
QFrame#card[phase="finished"] { border: 2px solid #F9E2AF; }
QFrame#timerRow { border-radius: 8px; background-color: rgba(127,127,127,0.08); }
QFrame#timerRow[active="true"] { border: 2px solid #A6E3A1; }
QLabel#rowIndex { color: #7F849C; }
"""


class TrainingTimerApp(QMainWindow):
    """Main application window."""

    def __init__(self, settings: Settings | None = None) -> None:
        super().__init__()
        self.setWindowTitle(APP_TITLE)
        self.setMinimumSize(420, 600)

        self._settings: Settings = settings or load_settings()
        self.resize(self._settings.window_width, self._settings.window_height)
        self.setStyleSheet(STYLESHEET)

        # ── geometry save timer ───────────────────────────────────────
        self._geometry_save_timer = QTimer(self)
        self._geometry_save_timer.setSingleShot(True)
        self._geometry_save_timer.setInterval(500)
        self._geometry_save_timer.timeout.connect(self._save_geometry)

        # ── audio (silent until the first Start click) ────────────────
        self._cue_player = SoundCuePlayer(parent=self)
        self._cue_player.set_volume(self._settings.sound_volume)
        self._cue_player.set_enabled(self._settings.sound_enabled)

        # ── engine ────────────────────────────────────────────────────
        self._engine = TimerEngine(
            self,
            repository=StateStore(BlobStore()),
            cue_player=self._cue_player,
        )
        self._engine.state_changed.connect(self._on_state_changed)
        self._engine.tick.connect(self._on_tick)
        self._engine.phase_changed.connect(self._on_phase_changed)
        self._engine.finished.connect(self._on_finished)

        # ── central widget ────────────────────────────────────────────
        central = QWidget()
        self.setCentralWidget(central)
        root_layout = QVBoxLayout(central)
        root_layout.setContentsMargins(16, 12, 16, 12)
        root_layout.setSpacing(8)

        title = QLabel("Training Timer")
        title.setStyleSheet("font-size: 18px; font-weight: 700;")
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        root_layout.addWidget(title)

        self._display = TimerDisplay(central)
        root_layout.addWidget(self._display)

        self._controls = TimerControl(central)
        self._controls.start_requested.connect(self._on_start)
        self._controls.stop_requested.connect(self._engine.stop)
        self._controls.reset_requested.connect(self._engine.reset)
        root_layout.addWidget(self._controls)

        scroll = QScrollArea(central)
        scroll.setWidgetResizable(True)
        self._plan_editor = PlanEditor()
        self._plan_editor.event_requested.connect(self._engine.dispatch)
        scroll.setWidget(self._plan_editor)
        root_layout.addWidget(scroll, stretch=1)

        self._status_bar = self.statusBar()

        self._build_menu_bar()
        self._restore_geometry()
        self._on_state_changed(self._engine.state)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC
    # ══════════════════════════════════════════════════════════════════

    @property
    def engine(self) -> TimerEngine:
        return self._engine

    # ══════════════════════════════════════════════════════════════════
    #  MENU BAR
    # ══════════════════════════════════════════════════════════════════

    def _build_menu_bar(self) -> None:
        menu_bar = self.menuBar()

        # ── File menu ────────────────────────────────────────────────
        file_menu = menu_bar.addMenu("File")

        import_action = QAction("Import Plan…", self)
        import_action.setShortcut(QKeySequence("Ctrl+O"))
        import_action.triggered.connect(self._import_plan)
        file_menu.addAction(import_action)

        export_action = QAction("Export Plan…", self)
        export_action.setShortcut(QKeySequence("Ctrl+E"))
        export_action.triggered.connect(self._export_plan)
        file_menu.addAction(export_action)

        file_menu.addSeparator()

        prefs_action = QAction("Preferences…", self)
        prefs_action.setMenuRole(QAction.MenuRole.PreferencesRole)
        prefs_action.setShortcut(QKeySequence("Ctrl+,"))
        prefs_action.triggered.connect(self._open_settings)
        file_menu.addAction(prefs_action)

        quit_action = QAction("Quit Training Timer", self)
        quit_action.setMenuRole(QAction.MenuRole.QuitRole)
        quit_action.setShortcut(QKeySequence("Ctrl+Q"))
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

        # ── View menu ────────────────────────────────────────────────
        view_menu = menu_bar.addMenu("View")

        self._aot_action = QAction("Always on Top", self)
        self._aot_action.setCheckable(True)
        self._aot_action.setChecked(self._settings.always_on_top)
        self._aot_action.triggered.connect(self._toggle_always_on_top)
        view_menu.addAction(self._aot_action)
        self._apply_always_on_top(self._settings.always_on_top)

    # ══════════════════════════════════════════════════════════════════
    #  ENGINE SIGNALS
    # ══════════════════════════════════════════════════════════════════

    def _on_start(self) -> None:
        # Audio may only be unlocked from a user action.
        self._cue_player.initialize()
        self._engine.start()

    def _on_state_changed(self, state: TrainingState) -> None:
        self._display.refresh(state)
        self._controls.refresh(state)
        self._plan_editor.refresh(state)
        if state.is_finished:
            self._status_bar.showMessage("Workout complete")
        elif state.is_running:
            self._status_bar.showMessage("Running")
        else:
            self._status_bar.showMessage("Paused" if self._started(state) else "Ready")

    def _on_tick(self, remaining: int) -> None:
        if self._engine.is_running:
            self.setWindowTitle(f"{format_time(remaining)} · {APP_TITLE}")
        else:
            self.setWindowTitle(APP_TITLE)

    def _on_phase_changed(self, phase: Phase) -> None:
        # Flash the taskbar entry when the window is in the background.
        QApplication.alert(self)

    def _on_finished(self) -> None:
        logger.info("Workout finished")

    @staticmethod
    def _started(state: TrainingState) -> bool:
        first = state.timers[0]
        return not (
            state.current_timer_index == 0
            and state.current_set_index == 0
            and not state.is_interval
            and state.remaining_time == first.work_duration
        )

    # ══════════════════════════════════════════════════════════════════
    #  IMPORT / EXPORT
    # ══════════════════════════════════════════════════════════════════

    def _import_plan(self) -> None:
        filename, _ = QFileDialog.getOpenFileName(
            self, "Import Plan", str(Path.home()), "Training plans (*.json)",
        )
        if not filename:
            return
        try:
            state = import_state(Path(filename))
        except PlanImportError as exc:
            logger.warning("%s", exc)
            QMessageBox.warning(self, "Import Plan", str(exc))
            return
        self._engine.dispatch(LoadState(state))
        self._status_bar.showMessage(f"Imported {Path(filename).name}")

    def _export_plan(self) -> None:
        filename, _ = QFileDialog.getSaveFileName(
            self, "Export Plan", str(Path.home() / "training-plan.json"),
            "Training plans (*.json)",
        )
        if not filename:
            return
        try:
            export_state(self._engine.state, Path(filename))
        except OSError as exc:
            logger.warning("Export failed: %s", exc)
            QMessageBox.warning(self, "Export Plan", f"Cannot write {filename}: {exc}")
            return
        self._status_bar.showMessage(f"Exported {Path(filename).name}")

    # ══════════════════════════════════════════════════════════════════
    #  SETTINGS
    # ══════════════════════════════════════════════════════════════════

    def _open_settings(self) -> None:
        def _preview() -> None:
            self._apply_settings()
            self._cue_player.initialize()
            self._cue_player.play(CueKind.FINISH)

        dlg = SettingsDialog(self._settings, self, sound_preview_callback=_preview)
        dlg.exec()
        self._apply_settings()

    def _apply_settings(self) -> None:
        self._cue_player.set_volume(self._settings.sound_volume)
        self._cue_player.set_enabled(self._settings.sound_enabled)

    # ══════════════════════════════════════════════════════════════════
    #  WINDOW STATE
    # ══════════════════════════════════════════════════════════════════

    def _restore_geometry(self) -> None:
        s = self._settings
        if s.window_x is not None and s.window_y is not None:
            self.move(s.window_x, s.window_y)

    def _save_geometry(self) -> None:
        geo = self.geometry()
        self._settings.window_x = geo.x()
        self._settings.window_y = geo.y()
        self._settings.window_width = geo.width()
        self._settings.window_height = geo.height()
        save_settings(self._settings)

    def _schedule_geometry_save(self) -> None:
        self._geometry_save_timer.start()

    def _toggle_always_on_top(self) -> None:
        on_top = self._aot_action.isChecked()
        self._settings.always_on_top = on_top
        save_settings(self._settings)
        self._apply_always_on_top(on_top)

    def _apply_always_on_top(self, on_top: bool) -> None:
        self.setWindowFlag(Qt.WindowType.WindowStaysOnTopHint, on_top)
        if self.isVisible():
            self.show()

    # ══════════════════════════════════════════════════════════════════
    #  WINDOW EVENTS
    # ══════════════════════════════════════════════════════════════════

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self._save_geometry()
        self._engine.shutdown()
        event.accept()

    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self._schedule_geometry_save()

    def moveEvent(self, event) -> None:  # type: ignore[override]
        super().moveEvent(event)
        self._schedule_geometry_save()

    def keyPressEvent(self, event) -> None:  # type: ignore[override]
        """Space toggles start/pause."""
        if event.key() == Qt.Key.Key_Space and not event.modifiers():
            if self._engine.is_running:
                self._engine.stop()
            elif not self._engine.state.is_finished:
                self._on_start()
            event.accept()
            return
        super().keyPressEvent(event)
