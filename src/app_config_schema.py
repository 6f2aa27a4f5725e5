"""Dataclass schema objects used by runtime configuration loading."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

DEFAULT_CONFIG_FILE = "config.toml"
DEFAULT_SESSION_FILE = "~/.local/state/pomodoro/session.json"


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


@dataclass(frozen=True)
class PomodoroSettings:
    """Phase durations and cycling behaviour from `[pomodoro]`."""
    enabled: bool = True
    focus_minutes: int = 25
    short_break_minutes: int = 5
    long_break_minutes: int = 15
    cycle_before_long_break: int = 4
    auto_start_breaks: bool = True
    auto_start_focus: bool = False


@dataclass(frozen=True)
class StrictModeSettings:
    """Break enforcement settings from `[strict_mode]`."""
    enabled: bool = False
    emergency_exit_key: str = "escape"
    double_press_interval_ms: int = 650
    eye_exercises_enabled: bool = False


@dataclass(frozen=True)
class NotificationSettings:
    """Pre-expiry reminder settings from `[notifications]`."""
    enabled: bool = True
    reminder_lead_seconds: int = 60


@dataclass(frozen=True)
class CueSettings:
    """Sound cue settings from `[cues]`."""
    enabled: bool = True
    sounds_dir: str = ""
    tick_cue: str = "tick"
    end_cue: str = "end"
    output_device: Optional[int] = None


@dataclass(frozen=True)
class PersistenceSettings:
    """Session snapshot location from `[persistence]`."""
    enabled: bool = True
    session_file: str = DEFAULT_SESSION_FILE


@dataclass(frozen=True)
class UIServerSettings:
    """Built-in UI server settings from `[ui_server]`."""
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765
    index_file: str = ""


@dataclass(frozen=True)
class AppConfig:
    """Complete typed runtime configuration loaded from `config.toml`."""
    pomodoro: PomodoroSettings
    strict_mode: StrictModeSettings
    notifications: NotificationSettings
    cues: CueSettings
    persistence: PersistenceSettings
    ui_server: UIServerSettings
    source_file: str
