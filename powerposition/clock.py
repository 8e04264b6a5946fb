"""
Clock sources for the extract.

The extract needs "now" in two frames: UTC and the local calendar the
report is expressed in (Europe/London by default). Components receive a
clock explicitly so tests can pin time with :class:`FixedClock`.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_TIMEZONE = 'Europe/London'


def load_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError as exc:
        raise ValueError(f'TIMEZONE {name!r} is not recognised by zoneinfo') from exc


class SystemClock:
    """Wall clock backed by the system time and the zoneinfo database."""

    def __init__(self, tz: ZoneInfo | str = DEFAULT_TIMEZONE) -> None:
        self.timezone = load_timezone(tz) if isinstance(tz, str) else tz

    def utc_now(self) -> datetime:
        return datetime.now(timezone.utc)

    def local_now(self) -> datetime:
        return self.to_local(self.utc_now())

    def to_local(self, instant: datetime) -> datetime:
        """
        Convert an instant to the local calendar.

        Naive datetimes are interpreted as UTC. The conversion applies the
        seasonal offset, so 12:00 UTC is 12:00 in a London winter and 13:00
        in a London summer.
        """
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        return instant.astimezone(self.timezone)


class FixedClock(SystemClock):
    """Clock frozen at a given instant; ``advance`` moves it forward."""

    def __init__(self, instant: datetime, tz: ZoneInfo | str = DEFAULT_TIMEZONE) -> None:
        super().__init__(tz)
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self._instant = instant.astimezone(timezone.utc)

    def utc_now(self) -> datetime:
        return self._instant

    def advance(self, delta: timedelta) -> None:
        self._instant = self._instant + delta


__all__ = ['DEFAULT_TIMEZONE', 'FixedClock', 'SystemClock', 'load_timezone']
