"""Configuration model for sound cue assets and output selection."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class CueConfigurationError(Exception):
    """Raised when sound cue configuration is invalid."""


@dataclass(frozen=True)
class CueConfig:
    """Resolved sound directory and optional output-device selection."""
    sounds_dir: str
    output_device_index: Optional[int] = None

    @classmethod
    def from_settings(cls, settings) -> "CueConfig":
        sounds_dir = (settings.sounds_dir or "").strip()
        if not sounds_dir:
            raise CueConfigurationError("cues.sounds_dir cannot be empty")

        path = Path(sounds_dir)
        if not path.is_dir():
            raise CueConfigurationError(f"Sound directory not found: {path}")

        return cls(
            sounds_dir=str(path),
            output_device_index=settings.output_device,
        )
