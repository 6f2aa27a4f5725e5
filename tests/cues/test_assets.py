import struct
import tempfile
import unittest
import wave
from pathlib import Path

from app_config_schema import CueSettings
from cues import (
    CueAssetError,
    CueConfig,
    CueConfigurationError,
    cue_path,
    load_cue_asset,
)


def _write_wav(path: Path, samples: list[int], *, channels: int = 1, rate: int = 8000) -> None:
    with wave.open(str(path), "wb") as wav:
        wav.setnchannels(channels)
        wav.setsampwidth(2)
        wav.setframerate(rate)
        wav.writeframes(struct.pack(f"<{len(samples)}h", *samples))


class CueAssetTests(unittest.TestCase):
    def test_load_cue_asset_decodes_pcm16_to_float_frames(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "tick.wav"
            _write_wav(path, [0, 16384, -16384, 32767, 0, -32768], channels=2, rate=4)

            asset = load_cue_asset(path)

            self.assertEqual((3, 2), asset.samples.shape)
            self.assertEqual(4, asset.sample_rate_hz)
            self.assertAlmostEqual(0.75, asset.duration_seconds)
            self.assertAlmostEqual(0.5, float(asset.samples[0, 1]))
            self.assertAlmostEqual(-1.0, float(asset.samples[2, 1]))

    def test_load_cue_asset_rejects_missing_and_empty_files(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            with self.assertRaises(CueAssetError):
                load_cue_asset(root / "missing.wav")

            empty = root / "empty.wav"
            _write_wav(empty, [])
            with self.assertRaises(CueAssetError):
                load_cue_asset(empty)

            garbage = root / "garbage.wav"
            garbage.write_bytes(b"not a wav file")
            with self.assertRaises(CueAssetError):
                load_cue_asset(garbage)

    def test_cue_path_rejects_path_components(self) -> None:
        self.assertEqual(Path("sounds") / "end.wav", cue_path("sounds", "end"))
        for cue_id in ("../end", "nested/end", ""):
            with self.subTest(cue_id=cue_id):
                with self.assertRaises(CueAssetError):
                    cue_path("sounds", cue_id)


class CueConfigTests(unittest.TestCase):
    def test_from_settings_requires_existing_directory(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config = CueConfig.from_settings(
                CueSettings(sounds_dir=temp_dir, output_device=3)
            )
            self.assertEqual(temp_dir, config.sounds_dir)
            self.assertEqual(3, config.output_device_index)

            with self.assertRaises(CueConfigurationError):
                CueConfig.from_settings(
                    CueSettings(sounds_dir=str(Path(temp_dir) / "missing"))
                )

        with self.assertRaises(CueConfigurationError):
            CueConfig.from_settings(CueSettings(sounds_dir=""))


if __name__ == "__main__":
    unittest.main()
