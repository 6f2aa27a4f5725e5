import json
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

from pomodoro import (
    JsonFileSessionStore,
    PersistedSession,
    PomodoroConfig,
    PomodoroEngine,
    SessionStoreError,
)

_NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


class _FakeClock:
    def __init__(self, start: datetime = _NOW):
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


class _MemoryStore:
    def __init__(self, record: Optional[PersistedSession] = None):
        self.record = record
        self.saved: list[PersistedSession] = []

    def save(self, record: PersistedSession) -> None:
        self.record = record
        self.saved.append(record)

    def load(self) -> Optional[PersistedSession]:
        return self.record


class _BrokenStore:
    def save(self, record: PersistedSession) -> None:
        raise SessionStoreError("disk full")

    def load(self) -> Optional[PersistedSession]:
        return None


class SessionRestoreTests(unittest.TestCase):
    def test_restore_without_record_starts_fresh(self) -> None:
        engine = PomodoroEngine(PomodoroConfig(), clock=_FakeClock(), store=_MemoryStore())

        result = engine.restore()

        self.assertEqual("fresh", result.reason)
        self.assertEqual("idle", result.snapshot.run_state)
        self.assertEqual("focus", result.snapshot.phase)
        self.assertEqual(1500, result.snapshot.remaining_seconds)

    def test_restore_paused_copies_values_verbatim(self) -> None:
        store = _MemoryStore(
            PersistedSession(
                phase="shortBreak",
                state="paused",
                paused_remaining_seconds=123.0,
                phase_end=None,
                completed_focus_sessions=3,
                strict_mode_bypassed=True,
            )
        )
        engine = PomodoroEngine(PomodoroConfig(), clock=_FakeClock(), store=store)

        result = engine.restore()

        self.assertEqual("restored", result.reason)
        self.assertEqual("shortBreak", result.snapshot.phase)
        self.assertEqual("paused", result.snapshot.run_state)
        self.assertEqual(123, result.snapshot.remaining_seconds)
        self.assertEqual(3, result.snapshot.completed_focus_sessions)
        self.assertTrue(result.snapshot.strict_mode_bypassed)

    def test_restore_running_before_deadline_keeps_running(self) -> None:
        store = _MemoryStore(
            PersistedSession(
                phase="focus",
                state="running",
                paused_remaining_seconds=1500.0,
                phase_end=_NOW + timedelta(minutes=10),
                completed_focus_sessions=1,
            )
        )
        engine = PomodoroEngine(PomodoroConfig(), clock=_FakeClock(), store=store)

        result = engine.restore()

        self.assertEqual("resumed_after_restart", result.reason)
        self.assertEqual("running", result.snapshot.run_state)
        self.assertEqual(600, result.snapshot.remaining_seconds)

    def test_restore_after_deadline_completes_exactly_one_focus(self) -> None:
        store = _MemoryStore(
            PersistedSession(
                phase="focus",
                state="running",
                paused_remaining_seconds=1500.0,
                phase_end=_NOW - timedelta(minutes=10),
                completed_focus_sessions=2,
            )
        )
        engine = PomodoroEngine(
            PomodoroConfig(short_break_minutes=5, auto_start_breaks=True),
            clock=_FakeClock(),
            store=store,
        )

        result = engine.restore()

        self.assertEqual("expired_while_away", result.reason)
        self.assertEqual(3, result.snapshot.completed_focus_sessions)
        self.assertEqual("shortBreak", result.snapshot.phase)
        self.assertEqual("running", result.snapshot.run_state)
        self.assertEqual(300, result.snapshot.remaining_seconds)

    def test_restore_after_long_absence_advances_one_step_only(self) -> None:
        store = _MemoryStore(
            PersistedSession(
                phase="shortBreak",
                state="running",
                paused_remaining_seconds=300.0,
                phase_end=_NOW - timedelta(hours=6),
                completed_focus_sessions=1,
            )
        )
        engine = PomodoroEngine(PomodoroConfig(), clock=_FakeClock(), store=store)

        result = engine.restore()

        self.assertEqual("focus", result.snapshot.phase)
        self.assertEqual("paused", result.snapshot.run_state)
        self.assertEqual(1, result.snapshot.completed_focus_sessions)

    def test_restore_from_corrupt_file_starts_fresh(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "session.json"
            path.write_text("{not json", encoding="utf-8")
            engine = PomodoroEngine(
                PomodoroConfig(),
                clock=_FakeClock(),
                store=JsonFileSessionStore(path),
            )

            with self.assertLogs("pomodoro.store", level="WARNING"):
                result = engine.restore()

            self.assertEqual("fresh", result.reason)
            self.assertEqual("idle", result.snapshot.run_state)
            self.assertEqual(0, result.snapshot.completed_focus_sessions)

    def test_restore_from_oversized_paused_file_starts_fresh(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "session.json"
            path.write_text(
                json.dumps(
                    {
                        "phase": "focus",
                        "state": "paused",
                        "pausedRemainingSeconds": 1e20,
                        "phaseEndTimestamp": None,
                        "completedFocusSessions": 1,
                    }
                ),
                encoding="utf-8",
            )
            engine = PomodoroEngine(
                PomodoroConfig(),
                clock=_FakeClock(),
                store=JsonFileSessionStore(path),
            )

            with self.assertLogs("pomodoro.store", level="WARNING"):
                result = engine.restore()

            self.assertEqual("fresh", result.reason)
            self.assertTrue(engine.start().accepted)

    def test_restore_clamps_far_future_deadline(self) -> None:
        store = _MemoryStore(
            PersistedSession(
                phase="focus",
                state="running",
                paused_remaining_seconds=0.0,
                phase_end=datetime(9999, 12, 31, 23, 59, tzinfo=timezone.utc),
                completed_focus_sessions=0,
            )
        )
        engine = PomodoroEngine(PomodoroConfig(), clock=_FakeClock(), store=store)

        result = engine.restore()
        extended = engine.extend_current_focus(5)
        paused = engine.pause()
        resumed = engine.resume()

        self.assertEqual("resumed_after_restart", result.reason)
        self.assertEqual(86400, result.snapshot.remaining_seconds)
        self.assertEqual("invalid_minutes", extended.reason)
        self.assertTrue(paused.accepted)
        self.assertTrue(resumed.accepted)
        self.assertEqual(_NOW + timedelta(days=1), store.record.phase_end)

    def test_restore_clamps_oversized_paused_remaining(self) -> None:
        store = _MemoryStore(
            PersistedSession(
                phase="focus",
                state="paused",
                paused_remaining_seconds=1e20,
                phase_end=None,
                completed_focus_sessions=0,
            )
        )
        engine = PomodoroEngine(PomodoroConfig(), clock=_FakeClock(), store=store)

        restored = engine.restore()
        resumed = engine.resume()

        self.assertEqual(86400, restored.snapshot.remaining_seconds)
        self.assertTrue(resumed.accepted)
        self.assertEqual("running", resumed.snapshot.run_state)

    def test_every_accepted_mutation_is_persisted(self) -> None:
        store = _MemoryStore()
        clock = _FakeClock()
        engine = PomodoroEngine(PomodoroConfig(), clock=clock, store=store)
        engine.restore()

        engine.start()
        engine.pause()
        engine.pause()
        engine.resume()

        self.assertEqual(
            ["idle", "running", "paused", "running"],
            [record.state for record in store.saved],
        )
        self.assertEqual(clock.now() + timedelta(seconds=1500), store.record.phase_end)

    def test_persist_failure_is_logged_and_mutation_still_applies(self) -> None:
        engine = PomodoroEngine(PomodoroConfig(), clock=_FakeClock(), store=_BrokenStore())

        with self.assertLogs("pomodoro", level="WARNING"):
            result = engine.start()

        self.assertTrue(result.accepted)
        self.assertEqual("running", engine.snapshot().run_state)

    def test_round_trip_through_file_resumes_in_new_engine(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "state" / "session.json"
            clock = _FakeClock()
            first = PomodoroEngine(
                PomodoroConfig(),
                clock=clock,
                store=JsonFileSessionStore(path),
            )
            first.start()
            clock.advance(300)

            second = PomodoroEngine(
                PomodoroConfig(),
                clock=clock,
                store=JsonFileSessionStore(path),
            )
            result = second.restore()

            self.assertEqual("resumed_after_restart", result.reason)
            self.assertEqual(1200, result.snapshot.remaining_seconds)


if __name__ == "__main__":
    unittest.main()
