from .clock import Clock, SystemClock
from .config import PomodoroConfig
from .cues import CuePlayer
from .persistence import (
    JsonFileSessionStore,
    PersistedSession,
    SessionStore,
    SessionStoreError,
)
from .reminders import NotificationError, Notifier, Reminder, ReminderScheduler
from .service import PomodoroEngine
from .session import (
    PomodoroActionResult,
    PomodoroPhase,
    PomodoroSnapshot,
    PomodoroTick,
    RunState,
)
from .strict_mode import (
    EmergencyExitGuard,
    OverlayPresenter,
    StrictModeEnforcer,
    StrictModeOverlay,
    should_enforce,
)

__all__ = [
    "Clock",
    "CuePlayer",
    "EmergencyExitGuard",
    "JsonFileSessionStore",
    "NotificationError",
    "Notifier",
    "OverlayPresenter",
    "PersistedSession",
    "PomodoroActionResult",
    "PomodoroConfig",
    "PomodoroEngine",
    "PomodoroPhase",
    "PomodoroSnapshot",
    "PomodoroTick",
    "Reminder",
    "ReminderScheduler",
    "RunState",
    "SessionStore",
    "SessionStoreError",
    "StrictModeEnforcer",
    "StrictModeOverlay",
    "SystemClock",
    "should_enforce",
]
