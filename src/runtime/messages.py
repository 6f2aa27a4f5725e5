"""Status and rejection text builders for session updates."""

from __future__ import annotations

from pomodoro import PomodoroSnapshot
from pomodoro.constants import (
    ACTION_BYPASS_STRICT_MODE,
    ACTION_EXTEND_FOCUS,
    ACTION_PAUSE,
    ACTION_RESUME,
    ACTION_START_BREAK,
    ACTION_START_NEXT_BREAK,
    REASON_INVALID_MINUTES,
    REASON_NOT_ACTIVE,
    REASON_NOT_BREAK,
    REASON_NOT_FOCUS,
    REASON_NOT_PAUSED,
    REASON_NOT_RUNNING,
    REASON_NOT_WAITING,
)


def status_message(snapshot: PomodoroSnapshot) -> str:
    """Build one-line status text for the current session snapshot."""
    title = f"{snapshot.phase_title} {snapshot.cycle_text}"
    if snapshot.is_running:
        return f"{title} running ({snapshot.formatted_remaining} left)"
    if snapshot.is_waiting_to_start_break and snapshot.remaining_seconds >= snapshot.duration_seconds:
        return f"{title} ready to start"
    if snapshot.is_paused:
        return f"{title} paused ({snapshot.formatted_remaining} left)"
    return "Ready"


def rejection_text(action: str, reason: str) -> str:
    """Explain why an action was not applied in the current state."""
    if reason == REASON_NOT_RUNNING and action == ACTION_PAUSE:
        return "The timer is not running."
    if reason == REASON_NOT_PAUSED and action == ACTION_RESUME:
        return "The timer is not paused."
    if reason == REASON_NOT_FOCUS and action == ACTION_EXTEND_FOCUS:
        return "Only a focus session can be extended."
    if reason == REASON_NOT_FOCUS and action == ACTION_START_NEXT_BREAK:
        return "A break is already in progress."
    if reason == REASON_NOT_ACTIVE and action == ACTION_EXTEND_FOCUS:
        return "Start the focus session before extending it."
    if reason == REASON_INVALID_MINUTES:
        return "Extension must be between one minute and 24 hours."
    if reason == REASON_NOT_BREAK and action == ACTION_BYPASS_STRICT_MODE:
        return "Strict mode can only be bypassed during a break."
    if reason == REASON_NOT_WAITING and action == ACTION_START_BREAK:
        return "There is no break waiting to start."
    return "That action is not possible right now."
