"""Websocket event and command constants shared with the presentation client."""

from __future__ import annotations

# Outbound event types
EVENT_HELLO = "hello"
EVENT_POMODORO = "pomodoro"
EVENT_STRICT_MODE = "strict_mode"
EVENT_REMINDER = "reminder"
EVENT_REMINDER_WITHDRAWN = "reminder_withdrawn"
EVENT_ERROR = "error"

# Inbound message types
MESSAGE_COMMAND = "command"
MESSAGE_REMINDER_ACTION = "reminder_action"
MESSAGE_KEY = "key"
MESSAGE_HOTKEY = "hotkey"

# Command names accepted with MESSAGE_COMMAND
COMMAND_START = "start"
COMMAND_TOGGLE = "toggle"
COMMAND_PAUSE = "pause"
COMMAND_RESUME = "resume"
COMMAND_RESET = "reset"
COMMAND_SKIP = "skip"
COMMAND_START_BREAK = "start_break"
COMMAND_BYPASS_STRICT_MODE = "bypass_strict_mode"
COMMAND_EXTEND_FOCUS = "extend_focus"

HOTKEY_EMERGENCY_EXIT = "emergency_exit"

STICKY_EVENT_TYPES: frozenset[str] = frozenset(
    {
        EVENT_POMODORO,
        EVENT_STRICT_MODE,
        EVENT_REMINDER,
        EVENT_ERROR,
    }
)

STICKY_EVENT_ORDER: tuple[str, ...] = (
    EVENT_POMODORO,
    EVENT_STRICT_MODE,
    EVENT_REMINDER,
    EVENT_ERROR,
)
