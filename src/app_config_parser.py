"""Typed parser for config.toml sections into immutable app settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from app_config_schema import (
    DEFAULT_SESSION_FILE,
    AppConfig,
    AppConfigurationError,
    CueSettings,
    NotificationSettings,
    PersistenceSettings,
    PomodoroSettings,
    StrictModeSettings,
    UIServerSettings,
)


def parse_app_config(
    raw: Mapping[str, Any],
    *,
    base_dir: Path,
    source_file: str,
) -> AppConfig:
    """Parse raw TOML mappings into strongly typed application settings."""
    return AppConfig(
        pomodoro=_parse_pomodoro_settings(_section(raw, "pomodoro")),
        strict_mode=_parse_strict_mode_settings(_section(raw, "strict_mode")),
        notifications=_parse_notification_settings(_section(raw, "notifications")),
        cues=_parse_cue_settings(_section(raw, "cues"), base_dir=base_dir),
        persistence=_parse_persistence_settings(
            _section(raw, "persistence"),
            base_dir=base_dir,
        ),
        ui_server=_parse_ui_server_settings(_section(raw, "ui_server"), base_dir=base_dir),
        source_file=source_file,
    )


def _parse_pomodoro_settings(section: Mapping[str, Any]) -> PomodoroSettings:
    # Durations below one minute are clamped, never rejected.
    return PomodoroSettings(
        enabled=_as_bool(section.get("enabled", True), "pomodoro.enabled"),
        focus_minutes=_as_at_least_one(
            section.get("focus_minutes", 25),
            "pomodoro.focus_minutes",
        ),
        short_break_minutes=_as_at_least_one(
            section.get("short_break_minutes", 5),
            "pomodoro.short_break_minutes",
        ),
        long_break_minutes=_as_at_least_one(
            section.get("long_break_minutes", 15),
            "pomodoro.long_break_minutes",
        ),
        cycle_before_long_break=_as_at_least_one(
            section.get("cycle_before_long_break", 4),
            "pomodoro.cycle_before_long_break",
        ),
        auto_start_breaks=_as_bool(
            section.get("auto_start_breaks", True),
            "pomodoro.auto_start_breaks",
        ),
        auto_start_focus=_as_bool(
            section.get("auto_start_focus", False),
            "pomodoro.auto_start_focus",
        ),
    )


def _parse_strict_mode_settings(section: Mapping[str, Any]) -> StrictModeSettings:
    interval_ms = _as_int(
        section.get("double_press_interval_ms", 650),
        "strict_mode.double_press_interval_ms",
    )
    if interval_ms <= 0:
        raise AppConfigurationError("strict_mode.double_press_interval_ms must be positive.")
    return StrictModeSettings(
        enabled=_as_bool(section.get("enabled", False), "strict_mode.enabled"),
        emergency_exit_key=(
            _as_str(
                section.get("emergency_exit_key", "escape"),
                "strict_mode.emergency_exit_key",
            ).lower()
            or "escape"
        ),
        double_press_interval_ms=interval_ms,
        eye_exercises_enabled=_as_bool(
            section.get("eye_exercises_enabled", False),
            "strict_mode.eye_exercises_enabled",
        ),
    )


def _parse_notification_settings(section: Mapping[str, Any]) -> NotificationSettings:
    return NotificationSettings(
        enabled=_as_bool(section.get("enabled", True), "notifications.enabled"),
        reminder_lead_seconds=max(
            1,
            _as_int(
                section.get("reminder_lead_seconds", 60),
                "notifications.reminder_lead_seconds",
            ),
        ),
    )


def _parse_cue_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> CueSettings:
    sounds_dir = _as_str(section.get("sounds_dir", "sounds"), "cues.sounds_dir")
    return CueSettings(
        enabled=_as_bool(section.get("enabled", True), "cues.enabled"),
        sounds_dir=_resolve_path(base_dir, sounds_dir),
        tick_cue=_as_str(section.get("tick_cue", "tick"), "cues.tick_cue"),
        end_cue=_as_str(section.get("end_cue", "end"), "cues.end_cue"),
        output_device=(
            _as_int(section.get("output_device"), "cues.output_device")
            if "output_device" in section
            else None
        ),
    )


def _parse_persistence_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> PersistenceSettings:
    session_file = _as_str(
        section.get("session_file", DEFAULT_SESSION_FILE),
        "persistence.session_file",
    )
    return PersistenceSettings(
        enabled=_as_bool(section.get("enabled", True), "persistence.enabled"),
        session_file=_resolve_path(base_dir, session_file or DEFAULT_SESSION_FILE),
    )


def _parse_ui_server_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> UIServerSettings:
    index_file = _as_str(section.get("index_file", ""), "ui_server.index_file")
    return UIServerSettings(
        enabled=_as_bool(section.get("enabled", True), "ui_server.enabled"),
        host=_as_str(section.get("host", "127.0.0.1"), "ui_server.host"),
        port=_as_int(section.get("port", 8765), "ui_server.port"),
        index_file=_resolve_path(base_dir, index_file) if index_file else "",
    )


def _section(root: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    raw = root.get(name, {})
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise AppConfigurationError(f"[{name}] must be a table.")
    return raw


def _as_str(value: Any, field: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    raise AppConfigurationError(f"{field} must be a string.")


def _as_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    raise AppConfigurationError(f"{field} must be a boolean.")


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        base = 16 if text.startswith("0x") else 10
        try:
            return int(text, base)
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be an integer.") from error
    raise AppConfigurationError(f"{field} must be an integer.")


def _as_at_least_one(value: Any, field: str) -> int:
    return max(1, _as_int(value, field))


def _resolve_path(base_dir: Path, raw: str) -> str:
    if not raw:
        return ""
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return str(path)
