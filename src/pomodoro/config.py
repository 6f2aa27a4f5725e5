"""Immutable engine configuration with clamped durations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .constants import (
    DEFAULT_CYCLE_BEFORE_LONG_BREAK,
    DEFAULT_FOCUS_MINUTES,
    DEFAULT_LONG_BREAK_MINUTES,
    DEFAULT_SHORT_BREAK_MINUTES,
    PHASE_FOCUS,
    PHASE_LONG_BREAK,
    PHASE_SHORT_BREAK,
)


@dataclass(frozen=True)
class PomodoroConfig:
    """Engine settings; durations and cycle length are clamped to at least 1."""
    focus_minutes: int = DEFAULT_FOCUS_MINUTES
    short_break_minutes: int = DEFAULT_SHORT_BREAK_MINUTES
    long_break_minutes: int = DEFAULT_LONG_BREAK_MINUTES
    cycle_before_long_break: int = DEFAULT_CYCLE_BEFORE_LONG_BREAK
    auto_start_breaks: bool = True
    auto_start_focus: bool = False
    strict_mode_enabled: bool = False
    notifications_enabled: bool = True
    tick_cue_id: Optional[str] = None
    end_cue_id: Optional[str] = None
    enabled: bool = True

    def __post_init__(self) -> None:
        for field_name in (
            "focus_minutes",
            "short_break_minutes",
            "long_break_minutes",
            "cycle_before_long_break",
        ):
            object.__setattr__(self, field_name, max(1, int(getattr(self, field_name))))
        object.__setattr__(self, "tick_cue_id", self.tick_cue_id or None)
        object.__setattr__(self, "end_cue_id", self.end_cue_id or None)

    def duration_seconds(self, phase: str) -> float:
        if phase == PHASE_FOCUS:
            return float(self.focus_minutes * 60)
        if phase == PHASE_SHORT_BREAK:
            return float(self.short_break_minutes * 60)
        if phase == PHASE_LONG_BREAK:
            return float(self.long_break_minutes * 60)
        raise ValueError(f"Unknown phase: {phase}")

    @classmethod
    def from_settings(cls, app_config) -> "PomodoroConfig":
        pomodoro = app_config.pomodoro
        cues = app_config.cues
        return cls(
            focus_minutes=pomodoro.focus_minutes,
            short_break_minutes=pomodoro.short_break_minutes,
            long_break_minutes=pomodoro.long_break_minutes,
            cycle_before_long_break=pomodoro.cycle_before_long_break,
            auto_start_breaks=pomodoro.auto_start_breaks,
            auto_start_focus=pomodoro.auto_start_focus,
            strict_mode_enabled=app_config.strict_mode.enabled,
            notifications_enabled=app_config.notifications.enabled,
            tick_cue_id=cues.tick_cue if cues.enabled else None,
            end_cue_id=cues.end_cue if cues.enabled else None,
            enabled=pomodoro.enabled,
        )
