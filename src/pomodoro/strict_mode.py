"""Strict-mode break enforcement and the emergency-exit key protocol."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from .config import PomodoroConfig
from .constants import DOUBLE_PRESS_INTERVAL_SECONDS, DUPLICATE_PRESS_WINDOW_SECONDS
from .service import PomodoroEngine
from .session import PomodoroActionResult, PomodoroSnapshot

ESCAPE_KEY = "escape"
KEY_SOURCE_OVERLAY = "overlay"
KEY_SOURCE_HOTKEY = "hotkey"
_KEY_ALIASES = {"esc": ESCAPE_KEY}

EYE_EXERCISES: tuple[str, ...] = (
    "Look up and down slowly for 20 seconds",
    "Look left and right, then blink 10 times",
    "Focus on a far object for 20 seconds",
    "Draw gentle circles with your eyes",
)
EYE_EXERCISE_ROTATION_SECONDS = 20


def should_enforce(config: PomodoroConfig, snapshot: PomodoroSnapshot) -> bool:
    """Return whether the blocking break overlay applies right now."""
    return (
        config.strict_mode_enabled
        and config.enabled
        and snapshot.has_active_session
        and snapshot.is_break
        and not snapshot.strict_mode_bypassed
    )


def eye_exercise_for(remaining_seconds: int) -> str:
    index = (max(0, int(remaining_seconds)) // EYE_EXERCISE_ROTATION_SECONDS) % len(EYE_EXERCISES)
    return EYE_EXERCISES[index]


def normalize_key(key: str) -> str:
    lowered = (key or "").strip().lower()
    return _KEY_ALIASES.get(lowered, lowered)


@dataclass(frozen=True)
class StrictModeOverlay:
    """Everything a presenter needs to draw the break block."""
    snapshot: PomodoroSnapshot
    skip_hint: str
    eye_exercise: Optional[str] = None


class OverlayPresenter(Protocol):
    def show(self, overlay: StrictModeOverlay) -> None:
        ...

    def update(self, overlay: StrictModeOverlay) -> None:
        ...

    def hide(self) -> None:
        ...


class EmergencyExitGuard:
    """Tracks emergency-exit presses.

    The bare escape binding needs two presses within ``interval_seconds``;
    any other binding fires on a single press. Unrelated keys drop a pending
    press. The same physical press may arrive from both the overlay and the
    global hotkey; a press from another source within
    ``DUPLICATE_PRESS_WINDOW_SECONDS`` of the previous one is ignored.
    """

    def __init__(
        self,
        binding: str = ESCAPE_KEY,
        interval_seconds: float = DOUBLE_PRESS_INTERVAL_SECONDS,
    ):
        self._binding = normalize_key(binding) or ESCAPE_KEY
        self._interval_seconds = max(0.0, float(interval_seconds))
        self._pending_press: Optional[float] = None
        self._last_press: Optional[tuple[str, float]] = None

    @property
    def binding(self) -> str:
        return self._binding

    @property
    def requires_double_press(self) -> bool:
        return self._binding == ESCAPE_KEY

    @property
    def has_pending_press(self) -> bool:
        return self._pending_press is not None

    def clear(self) -> None:
        self._pending_press = None
        self._last_press = None

    def press(self, key: str, now: float, source: str = KEY_SOURCE_OVERLAY) -> bool:
        """Register a key-down at ``now``; return True when a skip is due."""
        if normalize_key(key) != self._binding:
            self._pending_press = None
            self._last_press = None
            return False

        last = self._last_press
        if (
            last is not None
            and last[0] != source
            and 0.0 <= now - last[1] <= DUPLICATE_PRESS_WINDOW_SECONDS
        ):
            return False
        self._last_press = (source, now)

        if not self.requires_double_press:
            self._pending_press = None
            return True

        pending = self._pending_press
        if pending is not None and 0.0 <= now - pending <= self._interval_seconds:
            self._pending_press = None
            return True

        self._pending_press = now
        return False


class StrictModeEnforcer:
    """Engine observer that shows or hides the break block.

    Holds no session state of its own: the overlay is a pure function of the
    latest snapshot and configuration.
    """

    def __init__(
        self,
        engine: PomodoroEngine,
        presenter: Optional[OverlayPresenter] = None,
        *,
        emergency_exit_key: str = ESCAPE_KEY,
        double_press_interval_seconds: float = DOUBLE_PRESS_INTERVAL_SECONDS,
        eye_exercises_enabled: bool = False,
        monotonic: Callable[[], float] = time.monotonic,
        logger: Optional[logging.Logger] = None,
    ):
        self._engine = engine
        self._presenter = presenter
        self._guard = EmergencyExitGuard(
            emergency_exit_key,
            double_press_interval_seconds,
        )
        self._eye_exercises_enabled = eye_exercises_enabled
        self._monotonic = monotonic
        self._logger = logger or logging.getLogger("strict_mode")
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    @property
    def guard(self) -> EmergencyExitGuard:
        return self._guard

    def handle_engine_event(self, result: PomodoroActionResult) -> None:
        self.refresh(result.snapshot)

    def refresh(self, snapshot: PomodoroSnapshot) -> bool:
        enforce = should_enforce(self._engine.config, snapshot)
        if enforce:
            overlay = self._build_overlay(snapshot)
            if not self._active:
                self._active = True
                self._guard.clear()
                self._logger.info("Strict mode block shown: phase=%s", snapshot.phase)
                if self._presenter:
                    self._presenter.show(overlay)
            elif self._presenter:
                self._presenter.update(overlay)
            return True

        if self._active:
            self._active = False
            self._guard.clear()
            self._logger.info("Strict mode block hidden: phase=%s", snapshot.phase)
            if self._presenter:
                self._presenter.hide()
        return False

    def handle_key(
        self,
        key: str,
        now: Optional[float] = None,
        source: str = KEY_SOURCE_OVERLAY,
    ) -> bool:
        """Feed a key-down from the overlay; return True if it skipped the break."""
        if not self._active:
            self._guard.clear()
            return False

        pressed_at = self._monotonic() if now is None else now
        if not self._guard.press(key, pressed_at, source):
            return False

        self._logger.info("Emergency exit: skipping %s", self._engine.snapshot().phase)
        self._engine.skip()
        return True

    def handle_emergency_hotkey(self, now: Optional[float] = None) -> bool:
        return self.handle_key(self._guard.binding, now, KEY_SOURCE_HOTKEY)

    def _build_overlay(self, snapshot: PomodoroSnapshot) -> StrictModeOverlay:
        if self._guard.requires_double_press:
            skip_hint = "Press Esc twice to skip"
        else:
            skip_hint = f"Press {self._guard.binding} to skip"
        return StrictModeOverlay(
            snapshot=snapshot,
            skip_hint=skip_hint,
            eye_exercise=(
                eye_exercise_for(snapshot.remaining_seconds)
                if self._eye_exercises_enabled
                else None
            ),
        )
