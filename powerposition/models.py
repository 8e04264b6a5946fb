"""Trade and position models shared by the extract pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any


def parse_period_number(value: Any) -> int:
    """Return ``value`` as a period number; fractional or non-numeric values raise ValueError."""
    if isinstance(value, bool):
        raise ValueError(f'Period number {value!r} is not a whole number')
    if isinstance(value, int):
        return value
    try:
        number = float(value)
    except TypeError as exc:
        raise ValueError(f'Period number {value!r} is not a whole number') from exc
    if not number.is_integer():
        raise ValueError(f'Period number {value!r} is not a whole number')
    return int(number)


@dataclass(frozen=True)
class PowerPeriod:
    """One sub-daily traded interval. ``period`` is 1-based (1..24)."""

    period: int
    volume: float


@dataclass(frozen=True)
class PowerTrade:
    """
    A day's traded volumes, split into periods.

    This is the internal representation; trade source adapters map their
    client's payloads onto it so nothing downstream depends on the client.
    """

    date: date
    periods: tuple[PowerPeriod, ...] = field(default_factory=tuple)

    @classmethod
    def uniform(cls, trade_date: date, volume: float, periods: int = 24) -> PowerTrade:
        """Build a trade with the same volume in periods ``1..periods``."""
        return cls(
            date=trade_date,
            periods=tuple(PowerPeriod(period=index, volume=volume) for index in range(1, periods + 1)),
        )


@dataclass(frozen=True)
class AggregatedPosition:
    """One hourly bucket of the position curve."""

    hour: int
    volume: float

    @property
    def local_time(self) -> str:
        return f'{self.hour:02d}:00'


__all__ = ['AggregatedPosition', 'PowerPeriod', 'PowerTrade', 'parse_period_number']
