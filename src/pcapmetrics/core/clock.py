# src/pcapmetrics/core/clock.py
"""Clock abstraction for the wall-clock fallback timestamp.

Records whose timestamp is missing or unparsable are stamped with the time
the decode started. Production code uses SystemClock (the default).
Tests inject MockClock to pin that time.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    """Source of the current wall-clock time."""

    def now(self) -> datetime:
        """Return the current time as a timezone-aware datetime."""
        ...


class SystemClock:
    """Production clock backed by datetime.now(UTC)."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class MockClock:
    """Controllable clock for deterministic testing.

    Example:
        clock = MockClock(datetime(2024, 1, 1, tzinfo=UTC))
        decoder = RecordDecoder(schema, clock=clock)
        clock.advance(timedelta(seconds=5))
    """

    def __init__(self, start: datetime | None = None) -> None:
        """Initialize mock clock at a given time.

        Args:
            start: Initial time (default 2000-01-01 UTC). Must be timezone-aware.

        Raises:
            ValueError: If start is naive.
        """
        if start is None:
            start = datetime(2000, 1, 1, tzinfo=UTC)
        if start.tzinfo is None:
            raise ValueError("MockClock requires a timezone-aware datetime")
        self._current = start

    def now(self) -> datetime:
        return self._current

    def advance(self, delta: timedelta) -> None:
        """Advance mock time.

        Raises:
            ValueError: If delta is negative.
        """
        if delta < timedelta(0):
            raise ValueError(f"Cannot advance time by negative amount: {delta}")
        self._current += delta


# Default clock for production use
DEFAULT_CLOCK: Clock = SystemClock()
