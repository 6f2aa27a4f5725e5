"""One-shot "focus almost done" reminder with actionable responses."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Optional, Protocol

from .constants import REMINDER_LEAD_SECONDS
from .service import PomodoroEngine
from .session import PomodoroActionResult, PomodoroSnapshot

REMINDER_ACTION_START_NEXT_BREAK_NOW = "start-next-break-now"
REMINDER_ACTION_ADD_ONE_MINUTE = "add-one-minute"
REMINDER_ACTION_ADD_FIVE_MINUTES = "add-five-minutes"
REMINDER_ACTION_SKIP_BREAK = "skip-break"


class NotificationError(Exception):
    """Raised when notifications are unavailable or denied."""


@dataclass(frozen=True)
class ReminderAction:
    id: str
    title: str


REMINDER_ACTIONS: tuple[ReminderAction, ...] = (
    ReminderAction(REMINDER_ACTION_START_NEXT_BREAK_NOW, "Start break now"),
    ReminderAction(REMINDER_ACTION_ADD_ONE_MINUTE, "+1 minute"),
    ReminderAction(REMINDER_ACTION_ADD_FIVE_MINUTES, "+5 minutes"),
    ReminderAction(REMINDER_ACTION_SKIP_BREAK, "Skip break"),
)


@dataclass(frozen=True)
class Reminder:
    id: str
    title: str
    body: str
    actions: tuple[ReminderAction, ...] = REMINDER_ACTIONS


class Notifier(Protocol):
    def post(self, reminder: Reminder) -> bool:
        ...

    def withdraw(self, reminder_id: str) -> None:
        ...


class ReminderScheduler:
    """Engine observer posting at most one reminder per running focus phase."""

    def __init__(
        self,
        engine: PomodoroEngine,
        notifier: Optional[Notifier] = None,
        *,
        lead_seconds: int = REMINDER_LEAD_SECONDS,
        logger: Optional[logging.Logger] = None,
    ):
        self._engine = engine
        self._notifier = notifier
        self._lead_seconds = max(1, int(lead_seconds))
        self._logger = logger or logging.getLogger("reminders")
        self._latched = False
        self._phase_sequence: Optional[int] = None
        self._pending_id: Optional[str] = None

    @property
    def latched(self) -> bool:
        return self._latched

    @property
    def pending_reminder_id(self) -> Optional[str]:
        return self._pending_id

    def handle_engine_event(self, result: PomodoroActionResult) -> None:
        self.evaluate(result.snapshot)

    def evaluate(self, snapshot: PomodoroSnapshot) -> Optional[Reminder]:
        config = self._engine.config
        eligible = (
            config.enabled
            and config.notifications_enabled
            and snapshot.is_focus
            and snapshot.is_running
        )
        if not eligible or snapshot.phase_sequence != self._phase_sequence:
            self._withdraw_pending()
            self._latched = False
        self._phase_sequence = snapshot.phase_sequence

        if not eligible or self._latched:
            return None
        if snapshot.remaining_seconds > self._lead_seconds:
            return None

        self._latched = True
        reminder = Reminder(
            id=uuid.uuid4().hex,
            title="Focus almost done",
            body=f"{snapshot.formatted_remaining} left in this focus session.",
        )
        if self._post(reminder):
            self._pending_id = reminder.id
        return reminder

    def handle_action(self, action_id: str) -> Optional[PomodoroActionResult]:
        """Apply a reminder response; unknown identifiers are ignored."""
        self._withdraw_pending()
        self._logger.info("Reminder action received: %s", action_id)

        if action_id == REMINDER_ACTION_START_NEXT_BREAK_NOW:
            return self._engine.start_next_break_now()
        if action_id == REMINDER_ACTION_ADD_ONE_MINUTE:
            self._latched = False
            return self._engine.extend_current_focus(1)
        if action_id == REMINDER_ACTION_ADD_FIVE_MINUTES:
            self._latched = False
            return self._engine.extend_current_focus(5)
        if action_id == REMINDER_ACTION_SKIP_BREAK:
            return self._engine.skip()

        self._logger.warning("Ignoring unknown reminder action: %s", action_id)
        return None

    def _post(self, reminder: Reminder) -> bool:
        if self._notifier is None:
            return False
        try:
            posted = bool(self._notifier.post(reminder))
        except NotificationError as error:
            self._logger.warning("Reminder not delivered: %s", error)
            return False
        if posted:
            self._logger.info("Reminder posted: id=%s", reminder.id)
        else:
            self._logger.warning("Reminder not delivered: notifier declined")
        return posted

    def _withdraw_pending(self) -> None:
        pending_id = self._pending_id
        self._pending_id = None
        if pending_id is None or self._notifier is None:
            return
        try:
            self._notifier.withdraw(pending_id)
        except NotificationError as error:
            self._logger.warning("Reminder withdrawal failed: %s", error)
