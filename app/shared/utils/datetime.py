"""
UTC datetime utilities and the injectable clock.

All datetime values in the system are timezone-aware UTC. Expiry math
(token expires_at, refresh decisions) goes through a Clock so tests can
pin "now".
"""

from datetime import UTC, datetime, timedelta
from typing import Protocol


def utc_now() -> datetime:
    """Return the current UTC datetime with timezone info."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Ensure a datetime is UTC-aware.

    - If None, returns None
    - If naive, assumes UTC and attaches timezone
    - If aware, converts to UTC

    Use at repository/persistence boundaries to normalize datetimes.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


class Clock(Protocol):
    """Time source for expiry decisions."""

    def now(self) -> datetime:
        """Return the current timezone-aware UTC datetime."""
        ...


class SystemClock:
    """Clock backed by the system wall clock."""

    def now(self) -> datetime:
        return utc_now()


class FixedClock:
    """Clock frozen at a given instant; advance() moves it forward.

    Used by tests and by scripts that replay recorded provider responses.
    """

    def __init__(self, at: datetime) -> None:
        self._at = ensure_utc(at) or utc_now()

    def now(self) -> datetime:
        return self._at

    def advance(self, seconds: float) -> None:
        self._at = self._at + timedelta(seconds=seconds)


def expires_at_from(clock: Clock, expires_in: int | float) -> datetime:
    """Return clock.now() + expires_in seconds (absolute expiry for a token response)."""
    return clock.now() + timedelta(seconds=float(expires_in))
