"""Clock abstraction for history and event timestamps.

WallClock: real wall-clock time (default)
SimClock: deterministic, manually advanced time (tests, replays)

Factories never call datetime.now() directly. They stamp history
entries and domain events through their configured clock.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Protocol


class IClock(Protocol):
    """Clock interface used by all time-stamping code."""

    def now(self) -> datetime:
        """Current time as timezone-aware UTC datetime."""
        ...


class WallClock:
    """Real wall-clock time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class SimClock:
    """Simulated clock.

    Time only moves when ``set_time``/``advance`` is called, which makes
    history and event timestamps reproducible.
    """

    def __init__(self, start: datetime | None = None) -> None:
        self._time = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._time

    def set_time(self, t: datetime) -> None:
        """Move to ``t``. Must be monotonically increasing."""
        if t < self._time:
            raise ValueError(
                f"SimClock cannot go backwards: {t} < {self._time}"
            )
        self._time = t

    def advance(self, seconds: float) -> None:
        self.set_time(self._time + timedelta(seconds=seconds))


DEFAULT_CLOCK: IClock = WallClock()
