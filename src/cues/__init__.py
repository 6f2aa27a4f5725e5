"""Sound cue assets and playback.

``SoundDeviceCuePlayer`` lives in ``cues.output`` and is imported from there
so that loading assets does not require a PortAudio installation.
"""

from .assets import CueAsset, CueAssetError, cue_path, load_cue_asset
from .config import CueConfig, CueConfigurationError

__all__ = [
    "CueAsset",
    "CueAssetError",
    "CueConfig",
    "CueConfigurationError",
    "cue_path",
    "load_cue_asset",
]
