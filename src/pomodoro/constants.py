"""Phase, run-state, action, and reason constants used by the session engine."""

from __future__ import annotations

PHASE_FOCUS = "focus"
PHASE_SHORT_BREAK = "shortBreak"
PHASE_LONG_BREAK = "longBreak"

BREAK_PHASES: frozenset[str] = frozenset({PHASE_SHORT_BREAK, PHASE_LONG_BREAK})

PHASE_TITLES: dict[str, str] = {
    PHASE_FOCUS: "Focus",
    PHASE_SHORT_BREAK: "Short Break",
    PHASE_LONG_BREAK: "Long Break",
}

STATE_IDLE = "idle"
STATE_RUNNING = "running"
STATE_PAUSED = "paused"

ACTIVE_STATES: frozenset[str] = frozenset({STATE_RUNNING, STATE_PAUSED})

DEFAULT_FOCUS_MINUTES = 25
DEFAULT_SHORT_BREAK_MINUTES = 5
DEFAULT_LONG_BREAK_MINUTES = 15
DEFAULT_CYCLE_BEFORE_LONG_BREAK = 4

COUNTDOWN_CUE_THRESHOLD_SECONDS = 6
MAX_PHASE_SECONDS = 24 * 60 * 60
REMINDER_LEAD_SECONDS = 60
DOUBLE_PRESS_INTERVAL_SECONDS = 0.65
DUPLICATE_PRESS_WINDOW_SECONDS = 0.15

ACTION_START = "start"
ACTION_PAUSE = "pause"
ACTION_RESUME = "resume"
ACTION_RESET = "reset"
ACTION_SKIP = "skip"
ACTION_START_NEXT_BREAK = "start_next_break_now"
ACTION_START_BREAK = "start_break"
ACTION_EXTEND_FOCUS = "extend_focus"
ACTION_BYPASS_STRICT_MODE = "bypass_strict_mode"
ACTION_RESTORE = "restore"
ACTION_CONFIG = "config"

ACTION_TICK = "tick"
ACTION_COMPLETED = "completed"

REASON_STARTED = "started"
REASON_STARTED_BREAK = "started_break"
REASON_RESET = "reset"
REASON_PAUSED = "paused"
REASON_RESUMED = "resumed"
REASON_SKIPPED = "skipped"
REASON_EXTENDED = "extended"
REASON_BYPASSED = "bypassed"
REASON_CONFIG_UPDATED = "config_updated"
REASON_NOT_RUNNING = "not_running"
REASON_NOT_PAUSED = "not_paused"
REASON_NOT_ACTIVE = "not_active"
REASON_NOT_FOCUS = "not_focus"
REASON_NOT_BREAK = "not_break"
REASON_NOT_WAITING = "not_waiting"
REASON_INVALID_MINUTES = "invalid_minutes"

REASON_FRESH = "fresh"
REASON_RESTORED = "restored"
REASON_RESUMED_AFTER_RESTART = "resumed_after_restart"
REASON_EXPIRED_WHILE_AWAY = "expired_while_away"

REASON_TICK = "tick"
REASON_COMPLETED = "completed"
