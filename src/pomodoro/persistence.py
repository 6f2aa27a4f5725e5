"""JSON persistence for the session snapshot."""

from __future__ import annotations

import json
import logging
import math
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Optional, Protocol

from .constants import (
    MAX_PHASE_SECONDS,
    PHASE_FOCUS,
    PHASE_TITLES,
    STATE_IDLE,
    STATE_PAUSED,
    STATE_RUNNING,
)
from .session import PomodoroPhase, RunState

_VALID_STATES = frozenset({STATE_IDLE, STATE_RUNNING, STATE_PAUSED})


class SessionStoreError(Exception):
    """Raised when the session snapshot cannot be written."""


class SessionDecodeError(ValueError):
    """Raised when a stored snapshot is malformed."""


@dataclass(frozen=True)
class PersistedSession:
    """Durable subset of the session written after every mutation."""
    phase: PomodoroPhase
    state: RunState
    paused_remaining_seconds: float
    phase_end: Optional[datetime]
    completed_focus_sessions: int
    strict_mode_bypassed: bool = False


class SessionStore(Protocol):
    def save(self, record: PersistedSession) -> None:
        ...

    def load(self) -> Optional[PersistedSession]:
        ...


def encode_session(record: PersistedSession) -> dict[str, Any]:
    return {
        "phase": record.phase,
        "state": record.state,
        "pausedRemainingSeconds": max(0.0, float(record.paused_remaining_seconds)),
        "phaseEndTimestamp": (
            record.phase_end.astimezone(timezone.utc).isoformat()
            if record.phase_end is not None
            else None
        ),
        "completedFocusSessions": int(record.completed_focus_sessions),
        "strictModeBypassedForCurrentBreak": bool(record.strict_mode_bypassed),
    }


def decode_session(raw: Any) -> PersistedSession:
    if not isinstance(raw, Mapping):
        raise SessionDecodeError("Session snapshot must be a JSON object")

    phase = raw.get("phase")
    if phase not in PHASE_TITLES:
        raise SessionDecodeError(f"Unknown phase: {phase!r}")

    state = raw.get("state")
    if state not in _VALID_STATES:
        raise SessionDecodeError(f"Unknown state: {state!r}")

    paused_remaining = raw.get("pausedRemainingSeconds", 0)
    if isinstance(paused_remaining, bool) or not isinstance(paused_remaining, (int, float)):
        raise SessionDecodeError("pausedRemainingSeconds must be a number")
    if not math.isfinite(paused_remaining):
        raise SessionDecodeError("pausedRemainingSeconds must be finite")
    if paused_remaining > MAX_PHASE_SECONDS:
        raise SessionDecodeError(
            f"pausedRemainingSeconds exceeds {MAX_PHASE_SECONDS}s: {paused_remaining!r}"
        )

    completed = raw.get("completedFocusSessions", 0)
    if isinstance(completed, bool) or not isinstance(completed, int) or completed < 0:
        raise SessionDecodeError("completedFocusSessions must be a non-negative integer")

    phase_end = _parse_timestamp(raw.get("phaseEndTimestamp"))
    if state == STATE_RUNNING and phase_end is None:
        raise SessionDecodeError("Running session is missing phaseEndTimestamp")

    bypassed = raw.get("strictModeBypassedForCurrentBreak", False)
    if not isinstance(bypassed, bool):
        raise SessionDecodeError("strictModeBypassedForCurrentBreak must be a boolean")

    return PersistedSession(
        phase=phase,
        state=state,
        paused_remaining_seconds=max(0.0, float(paused_remaining)),
        phase_end=phase_end if state == STATE_RUNNING else None,
        completed_focus_sessions=completed,
        strict_mode_bypassed=bypassed and phase != PHASE_FOCUS,
    )


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise SessionDecodeError("phaseEndTimestamp must be an ISO-8601 string or null")
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError as error:
        raise SessionDecodeError(f"Invalid phaseEndTimestamp: {value!r}") from error
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class JsonFileSessionStore:
    """Stores the snapshot as a JSON document, replaced atomically on save."""

    def __init__(self, path: str | Path, logger: Optional[logging.Logger] = None):
        self._path = Path(path).expanduser()
        self._logger = logger or logging.getLogger("pomodoro.store")

    @property
    def path(self) -> Path:
        return self._path

    def save(self, record: PersistedSession) -> None:
        content = json.dumps(encode_session(record), indent=2) + "\n"
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=".tmp_",
                suffix=".json",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(content)
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(temp_path, self._path)
            except BaseException:
                if os.path.exists(temp_path):
                    os.unlink(temp_path)
                raise
        except OSError as error:
            raise SessionStoreError(
                f"Failed to write session snapshot {self._path}: {error}"
            ) from error

    def load(self) -> Optional[PersistedSession]:
        if not self._path.exists():
            return None

        try:
            text = self._path.read_text(encoding="utf-8")
            return decode_session(json.loads(text))
        except (OSError, ValueError) as error:
            # json.JSONDecodeError and SessionDecodeError are both ValueErrors.
            self._logger.warning(
                "Ignoring unreadable session snapshot %s: %s",
                self._path,
                error,
            )
            return None
