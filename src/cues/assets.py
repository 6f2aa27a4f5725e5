"""WAV decoding for sound cues."""

from __future__ import annotations

import wave
from dataclasses import dataclass
from pathlib import Path

import numpy as np

_SAMPLE_DTYPES = {
    1: np.uint8,
    2: np.int16,
    4: np.int32,
}


class CueAssetError(Exception):
    """Raised when a cue asset is missing or cannot be decoded."""


@dataclass(frozen=True)
class CueAsset:
    """Decoded PCM samples shaped ``(frames, channels)`` as float32."""
    samples: np.ndarray
    sample_rate_hz: int

    @property
    def duration_seconds(self) -> float:
        return len(self.samples) / float(self.sample_rate_hz)


def cue_path(sounds_dir: str | Path, cue_id: str) -> Path:
    name = Path(cue_id).name
    if not name or name != cue_id:
        raise CueAssetError(f"Invalid cue id: {cue_id!r}")
    return Path(sounds_dir) / f"{name}.wav"


def load_cue_asset(path: Path) -> CueAsset:
    if not path.is_file():
        raise CueAssetError(f"Cue asset not found: {path}")

    try:
        with wave.open(str(path), "rb") as wav:
            channels = wav.getnchannels()
            sample_width = wav.getsampwidth()
            sample_rate_hz = wav.getframerate()
            frames = wav.readframes(wav.getnframes())
    except (OSError, EOFError, wave.Error) as error:
        raise CueAssetError(f"Failed to read cue asset {path}: {error}") from error

    dtype = _SAMPLE_DTYPES.get(sample_width)
    if dtype is None:
        raise CueAssetError(f"Unsupported sample width {sample_width} in {path}")

    data = np.frombuffer(frames, dtype=dtype).astype(np.float32)
    if sample_width == 1:
        data = (data - 128.0) / 128.0
    else:
        data = data / float(2 ** (8 * sample_width - 1))

    if len(data) == 0:
        raise CueAssetError(f"Cue asset is empty: {path}")

    return CueAsset(
        samples=data.reshape(-1, channels),
        sample_rate_hz=sample_rate_hz,
    )
