"""Wall-clock sources for the session engine."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        """Return the current instant as a timezone-aware UTC datetime."""
        ...


class SystemClock:
    """Wall clock backed by the operating system.

    Deadlines outlive the process and must include time spent in system
    sleep, so this reads wall time rather than ``time.monotonic``.
    """

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
