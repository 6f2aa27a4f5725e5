import unittest
from datetime import datetime, timedelta, timezone

from pomodoro import NotificationError, PomodoroConfig, PomodoroEngine, Reminder, ReminderScheduler


class _FakeClock:
    def __init__(self):
        self.current = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


class _RecordingNotifier:
    def __init__(self, accept: bool = True):
        self.posted: list[Reminder] = []
        self.withdrawn: list[str] = []
        self._accept = accept

    def post(self, reminder: Reminder) -> bool:
        self.posted.append(reminder)
        return self._accept

    def withdraw(self, reminder_id: str) -> None:
        self.withdrawn.append(reminder_id)


class _DeniedNotifier:
    def post(self, reminder: Reminder) -> bool:
        raise NotificationError("permission denied")

    def withdraw(self, reminder_id: str) -> None:
        raise NotificationError("permission denied")


def _setup(notifier=None, **config_overrides):
    clock = _FakeClock()
    engine = PomodoroEngine(PomodoroConfig(**config_overrides), clock=clock)
    notifier = notifier if notifier is not None else _RecordingNotifier()
    scheduler = ReminderScheduler(engine, notifier, lead_seconds=60)
    engine.subscribe(scheduler.handle_engine_event)
    return engine, scheduler, notifier, clock


def _run_until(engine: PomodoroEngine, clock: _FakeClock, seconds: int) -> None:
    for _ in range(seconds):
        clock.advance(1)
        engine.tick()


class ReminderSchedulerTests(unittest.TestCase):
    def test_posts_single_reminder_when_lead_reached(self) -> None:
        engine, scheduler, notifier, clock = _setup(focus_minutes=3)
        engine.start()

        _run_until(engine, clock, 119)
        self.assertEqual([], notifier.posted)

        _run_until(engine, clock, 30)
        self.assertEqual(1, len(notifier.posted))
        self.assertTrue(scheduler.latched)
        reminder = notifier.posted[0]
        self.assertEqual("Focus almost done", reminder.title)
        self.assertEqual(
            ["start-next-break-now", "add-one-minute", "add-five-minutes", "skip-break"],
            [action.id for action in reminder.actions],
        )

    def test_no_reminder_when_notifications_disabled(self) -> None:
        engine, _, notifier, clock = _setup(focus_minutes=2, notifications_enabled=False)
        engine.start()
        _run_until(engine, clock, 90)
        self.assertEqual([], notifier.posted)

    def test_no_reminder_during_breaks(self) -> None:
        engine, _, notifier, clock = _setup(short_break_minutes=2)
        engine.start()
        engine.skip()
        _run_until(engine, clock, 90)
        self.assertEqual([], notifier.posted)

    def test_pause_withdraws_pending_reminder(self) -> None:
        engine, scheduler, notifier, clock = _setup(focus_minutes=2)
        engine.start()
        _run_until(engine, clock, 61)
        reminder_id = notifier.posted[0].id

        engine.pause()

        self.assertEqual([reminder_id], notifier.withdrawn)
        self.assertFalse(scheduler.latched)
        self.assertIsNone(scheduler.pending_reminder_id)

    def test_disabling_notifications_withdraws_pending_reminder(self) -> None:
        engine, scheduler, notifier, clock = _setup(focus_minutes=2)
        engine.start()
        _run_until(engine, clock, 61)
        reminder_id = notifier.posted[0].id

        engine.set_config(PomodoroConfig(focus_minutes=2, notifications_enabled=False))

        self.assertEqual([reminder_id], notifier.withdrawn)
        self.assertIsNone(scheduler.pending_reminder_id)
        _run_until(engine, clock, 30)
        self.assertEqual(1, len(notifier.posted))

    def test_add_five_minutes_extends_and_allows_new_reminder(self) -> None:
        engine, scheduler, notifier, clock = _setup(focus_minutes=2)
        engine.start()
        _run_until(engine, clock, 61)

        result = scheduler.handle_action("add-five-minutes")

        self.assertTrue(result.accepted)
        self.assertEqual(59 + 300, result.snapshot.remaining_seconds)
        self.assertEqual([notifier.posted[0].id], notifier.withdrawn)
        self.assertFalse(scheduler.latched)

        _run_until(engine, clock, 300)
        self.assertEqual(2, len(notifier.posted))

    def test_start_next_break_now_action_starts_break(self) -> None:
        engine, scheduler, _, clock = _setup(focus_minutes=2)
        engine.start()
        _run_until(engine, clock, 61)

        result = scheduler.handle_action("start-next-break-now")

        self.assertEqual("shortBreak", result.snapshot.phase)
        self.assertEqual(1, result.snapshot.completed_focus_sessions)

    def test_skip_break_action_skips_current_phase(self) -> None:
        engine, scheduler, _, _ = _setup()
        engine.start()
        engine.skip()

        result = scheduler.handle_action("skip-break")

        self.assertEqual("focus", result.snapshot.phase)

    def test_unknown_action_is_ignored(self) -> None:
        engine, scheduler, _, _ = _setup()
        engine.start()

        with self.assertLogs("reminders", level="WARNING"):
            result = scheduler.handle_action("snooze")

        self.assertIsNone(result)
        self.assertEqual("running", engine.snapshot().run_state)

    def test_denied_notifications_leave_engine_untouched(self) -> None:
        engine, scheduler, _, clock = _setup(notifier=_DeniedNotifier(), focus_minutes=2)
        engine.start()

        with self.assertLogs("reminders", level="WARNING"):
            _run_until(engine, clock, 61)

        self.assertTrue(scheduler.latched)
        self.assertIsNone(scheduler.pending_reminder_id)
        self.assertEqual("running", engine.snapshot().run_state)
        self.assertEqual(59, engine.snapshot().remaining_seconds)


if __name__ == "__main__":
    unittest.main()
