"""UI package."""

from .timer_display import TimerDisplay
from .timer_control import TimerControl
from .plan_editor import PlanEditor, TimerRow
from .settings_dialog import SettingsDialog

__all__ = [
    "TimerDisplay",
    "TimerControl",
    "PlanEditor",
    "TimerRow",
    "SettingsDialog",
]
