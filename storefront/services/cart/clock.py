"""
Cart Clock

Source of cart timestamps. ``updated_at`` must strictly increase on every
write so callers can use it as a "did anything change" signal, even when two
writes land in the same millisecond.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

TimeSource = Callable[[], datetime]

ONE_MILLISECOND = timedelta(milliseconds=1)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MonotonicClock:
    """
    Millisecond-resolution clock with a strictly increasing ``next_after``.

    Args:
        time_source: Callable returning the current time. Tests inject a
            fixed or stepping source to control ordering deterministically.

    Example:
        >>> clock = MonotonicClock(lambda: datetime(2026, 1, 1, tzinfo=timezone.utc))
        >>> first = clock.next_after(None)
        >>> clock.next_after(first) - first
        datetime.timedelta(microseconds=1000)
    """

    def __init__(self, time_source: TimeSource = utc_now):
        self._time_source = time_source

    def now(self) -> datetime:
        current = self._time_source()
        return current.replace(microsecond=current.microsecond - current.microsecond % 1000)

    def next_after(self, previous: Optional[datetime]) -> datetime:
        """Current time, or ``previous + 1ms`` when the clock has not moved past it."""
        current = self.now()
        if previous is not None and current <= previous:
            return previous + ONE_MILLISECOND
        return current
