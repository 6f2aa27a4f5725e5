"""Thread-safe focus/break session state machine with wall-clock deadlines."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Optional

from .clock import Clock, SystemClock
from .config import PomodoroConfig
from .constants import (
    ACTION_BYPASS_STRICT_MODE,
    ACTION_COMPLETED,
    ACTION_CONFIG,
    ACTION_EXTEND_FOCUS,
    ACTION_PAUSE,
    ACTION_RESET,
    ACTION_RESTORE,
    ACTION_RESUME,
    ACTION_SKIP,
    ACTION_START,
    ACTION_START_BREAK,
    ACTION_START_NEXT_BREAK,
    ACTION_TICK,
    BREAK_PHASES,
    COUNTDOWN_CUE_THRESHOLD_SECONDS,
    MAX_PHASE_SECONDS,
    PHASE_FOCUS,
    PHASE_LONG_BREAK,
    PHASE_SHORT_BREAK,
    REASON_BYPASSED,
    REASON_COMPLETED,
    REASON_CONFIG_UPDATED,
    REASON_EXPIRED_WHILE_AWAY,
    REASON_EXTENDED,
    REASON_FRESH,
    REASON_INVALID_MINUTES,
    REASON_NOT_ACTIVE,
    REASON_NOT_BREAK,
    REASON_NOT_FOCUS,
    REASON_NOT_PAUSED,
    REASON_NOT_RUNNING,
    REASON_NOT_WAITING,
    REASON_PAUSED,
    REASON_RESET,
    REASON_RESTORED,
    REASON_RESUMED,
    REASON_RESUMED_AFTER_RESTART,
    REASON_SKIPPED,
    REASON_STARTED_BREAK,
    REASON_STARTED,
    REASON_TICK,
    STATE_IDLE,
    STATE_PAUSED,
    STATE_RUNNING,
)
from .cues import CuePlayer, play_cue
from .persistence import PersistedSession, SessionStore, SessionStoreError
from .session import (
    PomodoroActionResult,
    PomodoroPhase,
    PomodoroSnapshot,
    PomodoroTick,
    Session,
    whole_seconds,
)

PomodoroObserver = Callable[[PomodoroActionResult], None]


class PomodoroEngine:
    """Single owner of the focus/break session.

    Every trigger (controls, ticks, reminder actions, hotkeys, restore) goes
    through one of the public methods below. Each accepted mutation is
    persisted and then broadcast to observers while the lock is held, so
    observers see snapshots in mutation order. Remaining time is always
    derived from the absolute deadline; ``tick`` is only a prompt to re-check.
    """

    def __init__(
        self,
        config: Optional[PomodoroConfig] = None,
        *,
        clock: Optional[Clock] = None,
        store: Optional[SessionStore] = None,
        cue_player: Optional[CuePlayer] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._config = config or PomodoroConfig()
        self._clock = clock or SystemClock()
        self._store = store
        self._cue_player = cue_player
        self._logger = logger or logging.getLogger("pomodoro")
        self._lock = threading.RLock()
        self._observers: list[PomodoroObserver] = []

        focus_seconds = self._config.duration_seconds(PHASE_FOCUS)
        self._session = Session(
            paused_remaining=focus_seconds,
            phase_duration=focus_seconds,
        )
        self._last_emitted_remaining: Optional[int] = None

    @property
    def config(self) -> PomodoroConfig:
        with self._lock:
            return self._config

    def subscribe(self, observer: PomodoroObserver) -> None:
        with self._lock:
            if observer not in self._observers:
                self._observers.append(observer)

    def unsubscribe(self, observer: PomodoroObserver) -> None:
        with self._lock:
            if observer in self._observers:
                self._observers.remove(observer)

    def snapshot(self) -> PomodoroSnapshot:
        with self._lock:
            return self._snapshot_locked(self._clock.now())

    def set_config(self, config: PomodoroConfig) -> PomodoroActionResult:
        """Swap configuration; a phase already in progress keeps its deadline."""
        with self._lock:
            self._config = config
            self._logger.info(
                "Pomodoro config updated: focus=%sm short=%sm long=%sm cycle=%s strict=%s",
                config.focus_minutes,
                config.short_break_minutes,
                config.long_break_minutes,
                config.cycle_before_long_break,
                config.strict_mode_enabled,
            )
            result = PomodoroActionResult(
                action=ACTION_CONFIG,
                accepted=True,
                reason=REASON_CONFIG_UPDATED,
                snapshot=self._snapshot_locked(self._clock.now()),
            )
            self._notify_locked(result)
            return result

    def restore(self) -> PomodoroActionResult:
        """Rebuild the session from the store; run once at startup."""
        with self._lock:
            record = self._store.load() if self._store is not None else None
            now = self._clock.now()
            if record is None:
                self._reset_locked()
                self._logger.info("Pomodoro session initialized fresh")
                return self._commit_locked(ACTION_RESTORE, REASON_FRESH, now)

            reason = self._apply_record_locked(record, now)
            return self._commit_locked(ACTION_RESTORE, reason, now)

    def start(self) -> PomodoroActionResult:
        with self._lock:
            now = self._clock.now()
            self._begin_locked(PHASE_FOCUS, True, now)
            return self._commit_locked(ACTION_START, REASON_STARTED, now)

    def toggle_play_pause(self) -> PomodoroActionResult:
        with self._lock:
            state = self._session.run_state
            if state == STATE_IDLE:
                return self.start()
            if state == STATE_RUNNING:
                return self.pause()
            return self.resume()

    def pause(self) -> PomodoroActionResult:
        with self._lock:
            now = self._clock.now()
            session = self._session
            if session.run_state != STATE_RUNNING:
                return self._reject_locked(ACTION_PAUSE, REASON_NOT_RUNNING, now)

            session.paused_remaining = session.remaining_seconds(now)
            session.phase_end = None
            session.run_state = STATE_PAUSED
            self._logger.info(
                "Pomodoro paused: phase=%s remaining=%.1fs",
                session.phase,
                session.paused_remaining,
            )
            return self._commit_locked(ACTION_PAUSE, REASON_PAUSED, now)

    def resume(self) -> PomodoroActionResult:
        with self._lock:
            now = self._clock.now()
            session = self._session
            if session.run_state != STATE_PAUSED:
                return self._reject_locked(ACTION_RESUME, REASON_NOT_PAUSED, now)

            self._resume_locked(now)
            self._logger.info(
                "Pomodoro resumed: phase=%s remaining=%.1fs",
                session.phase,
                session.paused_remaining,
            )
            return self._commit_locked(ACTION_RESUME, REASON_RESUMED, now)

    def reset(self) -> PomodoroActionResult:
        with self._lock:
            now = self._clock.now()
            self._reset_locked()
            self._logger.info("Pomodoro reset")
            return self._commit_locked(ACTION_RESET, REASON_RESET, now)

    def skip(self) -> PomodoroActionResult:
        with self._lock:
            return self._skip_locked(ACTION_SKIP)

    def start_next_break_now(self) -> PomodoroActionResult:
        with self._lock:
            if self._session.phase != PHASE_FOCUS:
                return self._reject_locked(
                    ACTION_START_NEXT_BREAK,
                    REASON_NOT_FOCUS,
                    self._clock.now(),
                )
            return self._skip_locked(ACTION_START_NEXT_BREAK)

    def start_current_break_if_needed(self) -> PomodoroActionResult:
        with self._lock:
            session = self._session
            if session.phase not in BREAK_PHASES or session.run_state != STATE_PAUSED:
                return self._reject_locked(
                    ACTION_START_BREAK,
                    REASON_NOT_WAITING,
                    self._clock.now(),
                )

            now = self._clock.now()
            self._resume_locked(now)
            self._logger.info("Break started: phase=%s", session.phase)
            return self._commit_locked(ACTION_START_BREAK, REASON_STARTED_BREAK, now)

    def extend_current_focus(self, minutes: int) -> PomodoroActionResult:
        with self._lock:
            now = self._clock.now()
            session = self._session
            if minutes <= 0:
                return self._reject_locked(ACTION_EXTEND_FOCUS, REASON_INVALID_MINUTES, now)
            if session.phase != PHASE_FOCUS:
                return self._reject_locked(ACTION_EXTEND_FOCUS, REASON_NOT_FOCUS, now)
            if session.remaining_seconds(now) + minutes * 60 > MAX_PHASE_SECONDS:
                return self._reject_locked(ACTION_EXTEND_FOCUS, REASON_INVALID_MINUTES, now)

            extra = timedelta(minutes=minutes)
            if session.run_state == STATE_RUNNING and session.phase_end is not None:
                session.phase_end = session.phase_end + extra
            elif session.run_state == STATE_PAUSED:
                session.paused_remaining += extra.total_seconds()
            else:
                return self._reject_locked(ACTION_EXTEND_FOCUS, REASON_NOT_ACTIVE, now)

            if session.remaining_seconds(now) > COUNTDOWN_CUE_THRESHOLD_SECONDS:
                session.countdown_cue_played = False
            self._logger.info(
                "Focus extended: minutes=%d remaining=%.1fs",
                minutes,
                session.remaining_seconds(now),
            )
            return self._commit_locked(ACTION_EXTEND_FOCUS, REASON_EXTENDED, now)

    def bypass_strict_mode_for_current_break(self) -> PomodoroActionResult:
        with self._lock:
            now = self._clock.now()
            session = self._session
            if session.phase not in BREAK_PHASES:
                return self._reject_locked(ACTION_BYPASS_STRICT_MODE, REASON_NOT_BREAK, now)

            session.strict_mode_bypassed = True
            self._logger.info("Strict mode bypassed for current %s", session.phase)
            return self._commit_locked(ACTION_BYPASS_STRICT_MODE, REASON_BYPASSED, now)

    def tick(self) -> Optional[PomodoroTick]:
        """Re-check the deadline; returns a tick when the visible value changed."""
        with self._lock:
            session = self._session
            if session.run_state != STATE_RUNNING:
                return None

            now = self._clock.now()
            remaining = session.remaining_seconds(now)
            if remaining <= 0:
                self._logger.info("Pomodoro phase completed: phase=%s", session.phase)
                play_cue(self._cue_player, self._config.end_cue_id, self._logger)
                self._complete_phase_locked(now)
                result = self._commit_locked(ACTION_COMPLETED, REASON_COMPLETED, now)
                return PomodoroTick(snapshot=result.snapshot, completed=True)

            if (
                not session.countdown_cue_played
                and remaining <= COUNTDOWN_CUE_THRESHOLD_SECONDS
            ):
                session.countdown_cue_played = True
                play_cue(self._cue_player, self._config.tick_cue_id, self._logger)

            visible = whole_seconds(remaining)
            if visible == self._last_emitted_remaining:
                return None

            self._last_emitted_remaining = visible
            snapshot = self._snapshot_locked(now)
            self._notify_locked(
                PomodoroActionResult(
                    action=ACTION_TICK,
                    accepted=True,
                    reason=REASON_TICK,
                    snapshot=snapshot,
                )
            )
            return PomodoroTick(snapshot=snapshot)

    def _resume_locked(self, now: datetime) -> None:
        session = self._session
        session.phase_end = now + timedelta(seconds=session.paused_remaining)
        session.run_state = STATE_RUNNING
        self._last_emitted_remaining = None

    def _skip_locked(self, action: str) -> PomodoroActionResult:
        now = self._clock.now()
        self._logger.info("Pomodoro phase skipped: phase=%s", self._session.phase)
        play_cue(self._cue_player, self._config.end_cue_id, self._logger)
        self._complete_phase_locked(now)
        return self._commit_locked(action, REASON_SKIPPED, now)

    def _complete_phase_locked(self, now: datetime) -> None:
        session = self._session
        config = self._config
        if session.phase == PHASE_FOCUS:
            session.completed_focus_count += 1
            long_break = session.completed_focus_count % config.cycle_before_long_break == 0
            next_phase: PomodoroPhase = PHASE_LONG_BREAK if long_break else PHASE_SHORT_BREAK
            self._begin_locked(next_phase, config.auto_start_breaks, now)
            return

        self._begin_locked(PHASE_FOCUS, config.auto_start_focus, now)

    def _begin_locked(
        self,
        phase: PomodoroPhase,
        start_immediately: bool,
        now: datetime,
    ) -> None:
        session = self._session
        duration = self._config.duration_seconds(phase)
        session.phase = phase
        if phase == PHASE_FOCUS:
            session.strict_mode_bypassed = False
        session.phase_duration = duration
        session.paused_remaining = duration
        session.countdown_cue_played = False
        session.phase_sequence += 1
        self._last_emitted_remaining = None

        if start_immediately:
            session.run_state = STATE_RUNNING
            session.phase_end = now + timedelta(seconds=duration)
        else:
            session.run_state = STATE_PAUSED
            session.phase_end = None

        self._logger.info(
            "Pomodoro phase began: phase=%s state=%s duration=%ss completed=%d",
            phase,
            session.run_state,
            int(duration),
            session.completed_focus_count,
        )

    def _reset_locked(self) -> None:
        focus_seconds = self._config.duration_seconds(PHASE_FOCUS)
        session = self._session
        session.phase = PHASE_FOCUS
        session.run_state = STATE_IDLE
        session.phase_duration = focus_seconds
        session.paused_remaining = focus_seconds
        session.phase_end = None
        session.completed_focus_count = 0
        session.strict_mode_bypassed = False
        session.countdown_cue_played = False
        session.phase_sequence += 1
        self._last_emitted_remaining = None

    def _apply_record_locked(self, record: PersistedSession, now: datetime) -> str:
        session = self._session
        session.phase = record.phase
        session.phase_duration = self._config.duration_seconds(record.phase)
        session.completed_focus_count = record.completed_focus_sessions
        session.strict_mode_bypassed = record.strict_mode_bypassed and record.phase != PHASE_FOCUS
        session.countdown_cue_played = False
        session.phase_sequence += 1
        self._last_emitted_remaining = None

        if record.state != STATE_RUNNING or record.phase_end is None:
            session.run_state = record.state if record.state != STATE_RUNNING else STATE_PAUSED
            session.paused_remaining = min(
                max(0.0, record.paused_remaining_seconds),
                float(MAX_PHASE_SECONDS),
            )
            session.phase_end = None
            self._logger.info(
                "Pomodoro session restored: phase=%s state=%s remaining=%.1fs completed=%d",
                session.phase,
                session.run_state,
                session.paused_remaining,
                session.completed_focus_count,
            )
            return REASON_RESTORED

        remaining = min(
            max(0.0, (record.phase_end - now).total_seconds()),
            float(MAX_PHASE_SECONDS),
        )
        if remaining > 0:
            session.run_state = STATE_RUNNING
            session.paused_remaining = remaining
            session.phase_end = now + timedelta(seconds=remaining)
            self._logger.info(
                "Pomodoro session resumed after restart: phase=%s remaining=%.1fs",
                session.phase,
                remaining,
            )
            return REASON_RESUMED_AFTER_RESTART

        # One cascade step only, however many phase boundaries elapsed.
        session.run_state = STATE_RUNNING
        session.paused_remaining = 0.0
        session.phase_end = record.phase_end
        self._logger.info(
            "Pomodoro phase expired while away: phase=%s overdue=%.1fs",
            session.phase,
            (now - record.phase_end).total_seconds(),
        )
        self._complete_phase_locked(now)
        return REASON_EXPIRED_WHILE_AWAY

    def _commit_locked(self, action: str, reason: str, now: datetime) -> PomodoroActionResult:
        self._persist_locked()
        result = PomodoroActionResult(
            action=action,
            accepted=True,
            reason=reason,
            snapshot=self._snapshot_locked(now),
        )
        self._notify_locked(result)
        return result

    def _reject_locked(self, action: str, reason: str, now: datetime) -> PomodoroActionResult:
        self._logger.debug("Pomodoro action rejected: action=%s reason=%s", action, reason)
        return PomodoroActionResult(
            action=action,
            accepted=False,
            reason=reason,
            snapshot=self._snapshot_locked(now),
        )

    def _persist_locked(self) -> None:
        if self._store is None:
            return

        session = self._session
        record = PersistedSession(
            phase=session.phase,
            state=session.run_state,
            paused_remaining_seconds=max(0.0, session.paused_remaining),
            phase_end=session.phase_end,
            completed_focus_sessions=session.completed_focus_count,
            strict_mode_bypassed=session.strict_mode_bypassed,
        )
        try:
            self._store.save(record)
        except (SessionStoreError, OSError) as error:
            self._logger.warning("Session snapshot not persisted: %s", error)

    def _notify_locked(self, result: PomodoroActionResult) -> None:
        for observer in tuple(self._observers):
            try:
                observer(result)
            except Exception as error:
                self._logger.error(
                    "Pomodoro observer failed: action=%s error=%s",
                    result.action,
                    error,
                    exc_info=True,
                )

    def _snapshot_locked(self, now: datetime) -> PomodoroSnapshot:
        session = self._session
        return PomodoroSnapshot(
            phase=session.phase,
            run_state=session.run_state,
            remaining_seconds=whole_seconds(session.remaining_seconds(now)),
            duration_seconds=int(session.phase_duration),
            completed_focus_sessions=session.completed_focus_count,
            cycle_length=self._config.cycle_before_long_break,
            strict_mode_bypassed=session.strict_mode_bypassed,
            phase_sequence=session.phase_sequence,
        )
