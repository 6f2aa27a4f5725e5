"""Sound cue contract consumed by the engine."""

from __future__ import annotations

import logging
from typing import Optional, Protocol


class CuePlayer(Protocol):
    def play(self, cue_id: str) -> bool:
        """Start playing ``cue_id``; return whether playback started."""
        ...


def play_cue(
    player: Optional[CuePlayer],
    cue_id: Optional[str],
    logger: logging.Logger,
) -> bool:
    """Fire-and-forget playback that never raises into the caller."""
    if player is None or not cue_id:
        return False
    try:
        started = bool(player.play(cue_id))
    except Exception as error:
        logger.warning("Cue playback failed: cue=%s error=%s", cue_id, error)
        return False
    if not started:
        logger.debug("Cue not played: cue=%s", cue_id)
    return started
