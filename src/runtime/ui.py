from __future__ import annotations

from typing import Any, Optional, Protocol

from contracts.ui_protocol import (
    EVENT_POMODORO,
    EVENT_REMINDER,
    EVENT_REMINDER_WITHDRAWN,
    EVENT_STRICT_MODE,
)
from pomodoro import PomodoroActionResult, PomodoroSnapshot, Reminder, StrictModeOverlay

from .messages import rejection_text, status_message


class UIServerLike(Protocol):
    @property
    def is_running(self) -> bool:
        ...

    def publish(self, event_type: str, **payload: Any) -> None:
        ...


def snapshot_payload(snapshot: PomodoroSnapshot) -> dict[str, Any]:
    return {
        "phase": snapshot.phase,
        "phase_title": snapshot.phase_title,
        "state": snapshot.run_state,
        "remaining_seconds": snapshot.remaining_seconds,
        "duration_seconds": snapshot.duration_seconds,
        "formatted_remaining": snapshot.formatted_remaining,
        "progress": round(snapshot.progress, 4),
        "completed_focus_sessions": snapshot.completed_focus_sessions,
        "cycle_text": snapshot.cycle_text,
        "waiting_to_start_break": snapshot.is_waiting_to_start_break,
        "strict_mode_bypassed": snapshot.strict_mode_bypassed,
    }


class RuntimeUIPublisher:
    def __init__(self, ui_server: Optional[UIServerLike]):
        self._ui_server = ui_server

    @property
    def is_available(self) -> bool:
        return self._ui_server is not None and self._ui_server.is_running

    def publish(self, event_type: str, **payload: Any) -> None:
        if self._ui_server:
            self._ui_server.publish(event_type, **payload)

    def handle_engine_event(self, result: PomodoroActionResult) -> None:
        self.publish_pomodoro_update(
            result.snapshot,
            action=result.action,
            accepted=result.accepted,
            reason=result.reason,
        )

    def publish_pomodoro_update(
        self,
        snapshot: PomodoroSnapshot,
        *,
        action: str,
        accepted: Optional[bool] = None,
        reason: str = "",
    ) -> None:
        payload: dict[str, Any] = {
            "action": action,
            **snapshot_payload(snapshot),
        }
        if accepted is not None:
            payload["accepted"] = accepted
        if reason:
            payload["reason"] = reason
        if accepted is False:
            payload["message"] = rejection_text(action, reason)
        else:
            payload["message"] = status_message(snapshot)
        self.publish(EVENT_POMODORO, **payload)

    def publish_strict_mode(self, active: bool, overlay: Optional[StrictModeOverlay] = None) -> None:
        payload: dict[str, Any] = {"active": active}
        if overlay is not None:
            payload.update(snapshot_payload(overlay.snapshot))
            payload["skip_hint"] = overlay.skip_hint
            if overlay.eye_exercise:
                payload["eye_exercise"] = overlay.eye_exercise
        self.publish(EVENT_STRICT_MODE, **payload)

    def publish_reminder(self, reminder: Reminder) -> None:
        self.publish(
            EVENT_REMINDER,
            id=reminder.id,
            title=reminder.title,
            body=reminder.body,
            actions=[{"id": action.id, "title": action.title} for action in reminder.actions],
        )

    def publish_reminder_withdrawn(self, reminder_id: str) -> None:
        self.publish(EVENT_REMINDER_WITHDRAWN, id=reminder_id)


class UIOverlayPresenter:
    """Forwards strict-mode block changes to the presentation client."""
    def __init__(self, ui: RuntimeUIPublisher):
        self._ui = ui

    def show(self, overlay: StrictModeOverlay) -> None:
        self._ui.publish_strict_mode(True, overlay)

    def update(self, overlay: StrictModeOverlay) -> None:
        self._ui.publish_strict_mode(True, overlay)

    def hide(self) -> None:
        self._ui.publish_strict_mode(False)


class UIReminderNotifier:
    """Delivers reminders as websocket events; unavailable without a connected server."""
    def __init__(self, ui: RuntimeUIPublisher):
        self._ui = ui

    def post(self, reminder: Reminder) -> bool:
        if not self._ui.is_available:
            return False
        self._ui.publish_reminder(reminder)
        return True

    def withdraw(self, reminder_id: str) -> None:
        self._ui.publish_reminder_withdrawn(reminder_id)
