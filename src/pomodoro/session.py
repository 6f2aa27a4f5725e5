"""Session aggregate and the immutable views published to observers."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal, Optional

from .constants import (
    ACTIVE_STATES,
    BREAK_PHASES,
    PHASE_FOCUS,
    PHASE_TITLES,
    STATE_IDLE,
    STATE_PAUSED,
    STATE_RUNNING,
)

PomodoroPhase = Literal["focus", "shortBreak", "longBreak"]
RunState = Literal["idle", "running", "paused"]


@dataclass
class Session:
    """Mutable timer state; only ``PomodoroEngine`` writes to it."""
    phase: PomodoroPhase = PHASE_FOCUS
    run_state: RunState = STATE_IDLE
    paused_remaining: float = 0.0
    phase_duration: float = 0.0
    phase_end: Optional[datetime] = None
    completed_focus_count: int = 0
    strict_mode_bypassed: bool = False
    countdown_cue_played: bool = field(default=False, compare=False)
    phase_sequence: int = field(default=0, compare=False)

    def remaining_seconds(self, now: datetime) -> float:
        if self.phase_end is None:
            return max(0.0, self.paused_remaining)
        return max(0.0, (self.phase_end - now).total_seconds())


@dataclass(frozen=True)
class PomodoroSnapshot:
    """Immutable session view shared by every observer of a mutation."""
    phase: PomodoroPhase
    run_state: RunState
    remaining_seconds: int
    duration_seconds: int
    completed_focus_sessions: int
    cycle_length: int
    strict_mode_bypassed: bool = False
    phase_sequence: int = 0

    @property
    def is_running(self) -> bool:
        return self.run_state == STATE_RUNNING

    @property
    def is_paused(self) -> bool:
        return self.run_state == STATE_PAUSED

    @property
    def has_active_session(self) -> bool:
        return self.run_state in ACTIVE_STATES

    @property
    def is_focus(self) -> bool:
        return self.phase == PHASE_FOCUS

    @property
    def is_break(self) -> bool:
        return self.phase in BREAK_PHASES

    @property
    def is_waiting_to_start_break(self) -> bool:
        return self.is_break and self.is_paused

    @property
    def phase_title(self) -> str:
        return PHASE_TITLES[self.phase]

    @property
    def progress(self) -> float:
        total = max(1, self.duration_seconds)
        return min(max((total - self.remaining_seconds) / total, 0.0), 1.0)

    @property
    def cycle_text(self) -> str:
        cycle = max(1, self.cycle_length)
        current = (self.completed_focus_sessions % cycle) + 1
        return f"({current}/{cycle})"

    @property
    def formatted_remaining(self) -> str:
        return format_remaining(self.remaining_seconds)


@dataclass(frozen=True)
class PomodoroActionResult:
    """Result envelope returned after applying an engine operation."""
    action: str
    accepted: bool
    reason: str
    snapshot: PomodoroSnapshot


@dataclass(frozen=True)
class PomodoroTick:
    """Tick payload emitted while a phase is running."""
    snapshot: PomodoroSnapshot
    completed: bool = False


def whole_seconds(remaining: float) -> int:
    """Round a float remaining time up to whole seconds for display."""
    return max(0, int(math.ceil(remaining - 1e-9)))


def format_remaining(seconds: int) -> str:
    total = max(0, int(seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"
