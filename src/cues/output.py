"""Sounddevice-backed playback for engine sound cues."""

import logging
import threading
from pathlib import Path
from typing import Optional

import sounddevice as sd

from .assets import CueAsset, CueAssetError, cue_path, load_cue_asset
from .config import CueConfig


class SoundDeviceCuePlayer:
    """Plays cached WAV cues without blocking; one cue is audible at a time."""
    def __init__(
        self,
        config: CueConfig,
        logger: Optional[logging.Logger] = None,
    ):
        self._sounds_dir = Path(config.sounds_dir)
        self._output_device_index = config.output_device_index
        self._logger = logger or logging.getLogger(__name__)
        self._assets: dict[str, CueAsset] = {}
        self._lock = threading.Lock()

    def play(self, cue_id: str) -> bool:
        with self._lock:
            try:
                asset = self._asset(cue_id)
            except CueAssetError as error:
                self._logger.warning("Cue unavailable: %s", error)
                return False

            try:
                sd.stop()
                sd.play(
                    asset.samples,
                    samplerate=asset.sample_rate_hz,
                    device=self._output_device_index,
                    blocking=False,
                )
            except Exception as error:
                self._logger.warning("Cue playback failed: cue=%s error=%s", cue_id, error)
                return False

            self._logger.debug(
                "Playing cue %s (%.2fs)",
                cue_id,
                asset.duration_seconds,
            )
            return True

    def stop(self) -> None:
        with self._lock:
            try:
                sd.stop()
            except Exception as error:
                self._logger.debug("Cue stop failed: %s", error)

    def _asset(self, cue_id: str) -> CueAsset:
        cached = self._assets.get(cue_id)
        if cached is not None:
            return cached
        asset = load_cue_asset(cue_path(self._sounds_dir, cue_id))
        self._assets[cue_id] = asset
        return asset
