"""Dispatcher that routes client messages to the session engine."""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Optional

from contracts.ui_protocol import (
    COMMAND_BYPASS_STRICT_MODE,
    COMMAND_EXTEND_FOCUS,
    COMMAND_PAUSE,
    COMMAND_RESET,
    COMMAND_RESUME,
    COMMAND_SKIP,
    COMMAND_START,
    COMMAND_START_BREAK,
    COMMAND_TOGGLE,
    HOTKEY_EMERGENCY_EXIT,
    MESSAGE_COMMAND,
    MESSAGE_HOTKEY,
    MESSAGE_KEY,
    MESSAGE_REMINDER_ACTION,
)
from pomodoro import (
    PomodoroActionResult,
    PomodoroEngine,
    ReminderScheduler,
    StrictModeEnforcer,
)

from .ui import RuntimeUIPublisher


class RuntimeCommandDispatcher:
    """Routes decoded client messages to engine, reminder, and strict-mode handlers."""
    def __init__(
        self,
        *,
        logger: logging.Logger,
        engine: PomodoroEngine,
        reminders: ReminderScheduler,
        enforcer: StrictModeEnforcer,
        ui: RuntimeUIPublisher,
    ):
        self._logger = logger
        self._engine = engine
        self._reminders = reminders
        self._enforcer = enforcer
        self._ui = ui
        self._commands: dict[str, Callable[[dict[str, Any]], PomodoroActionResult]] = {
            COMMAND_START: lambda _: engine.start(),
            COMMAND_TOGGLE: lambda _: engine.toggle_play_pause(),
            COMMAND_PAUSE: lambda _: engine.pause(),
            COMMAND_RESUME: lambda _: engine.resume(),
            COMMAND_RESET: lambda _: engine.reset(),
            COMMAND_SKIP: lambda _: engine.skip(),
            COMMAND_START_BREAK: lambda _: engine.start_current_break_if_needed(),
            COMMAND_BYPASS_STRICT_MODE: lambda _: engine.bypass_strict_mode_for_current_break(),
            COMMAND_EXTEND_FOCUS: self._extend_focus,
        }

    def handle_message(self, message: dict[str, Any]) -> Optional[PomodoroActionResult]:
        message_type = message.get("type")
        if message_type == MESSAGE_COMMAND:
            return self._handle_command(message)
        if message_type == MESSAGE_REMINDER_ACTION:
            action_id = message.get("action")
            if not isinstance(action_id, str):
                self._logger.warning("Reminder action without identifier: %s", message)
                return None
            return self._publish_rejection(self._reminders.handle_action(action_id))
        if message_type == MESSAGE_KEY:
            key = message.get("key")
            if isinstance(key, str):
                self._enforcer.handle_key(key)
            return None
        if message_type == MESSAGE_HOTKEY:
            if message.get("name") == HOTKEY_EMERGENCY_EXIT:
                self._enforcer.handle_emergency_hotkey()
            else:
                self._logger.warning("Unsupported hotkey: %s", message.get("name"))
            return None

        self._logger.warning("Unsupported client message type: %s", message_type)
        return None

    def _handle_command(self, message: dict[str, Any]) -> Optional[PomodoroActionResult]:
        name = message.get("name")
        handler = self._commands.get(name) if isinstance(name, str) else None
        if handler is None:
            self._logger.warning("Unsupported command: %s", name)
            return None
        return self._publish_rejection(handler(message))

    def _extend_focus(self, message: dict[str, Any]) -> PomodoroActionResult:
        raw_minutes = message.get("minutes", 1)
        if (
            isinstance(raw_minutes, bool)
            or not isinstance(raw_minutes, (int, float))
            or not math.isfinite(raw_minutes)
        ):
            minutes = 0
        else:
            minutes = int(raw_minutes)
        return self._engine.extend_current_focus(minutes)

    def _publish_rejection(
        self,
        result: Optional[PomodoroActionResult],
    ) -> Optional[PomodoroActionResult]:
        # Accepted results reach the UI through the engine observer.
        if result is not None and not result.accepted:
            self._ui.publish_pomodoro_update(
                result.snapshot,
                action=result.action,
                accepted=False,
                reason=result.reason,
            )
        return result
