"""
Simulated power trading client.

Stands in for the trading system's client library when running locally or
in tests: it returns a random set of trades for the requested day and fails
now and then, which is enough to exercise retry and aggregation end to end.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from ..clock import DEFAULT_TIMEZONE, load_timezone


@dataclass(frozen=True)
class SimulatedPeriod:
    period: int
    volume: float


@dataclass(frozen=True)
class SimulatedTrade:
    date: date
    periods: tuple[SimulatedPeriod, ...] = field(default_factory=tuple)


def trading_day_hours(trade_date: date, tz: ZoneInfo) -> int:
    """
    Length in hours of the trading day for ``trade_date``.

    The trading day runs from 23:00 the previous local day to 23:00 on
    ``trade_date``, so it is 23 or 25 hours long across a clock change.
    """
    start = datetime.combine(trade_date - timedelta(days=1), time(23), tzinfo=tz)
    end = datetime.combine(trade_date, time(23), tzinfo=tz)
    elapsed = end.astimezone(timezone.utc) - start.astimezone(timezone.utc)
    return round(elapsed.total_seconds() / 3600)


class SimulatedPowerService:
    """
    Random trade generator with injected failures.

    Args:
        failure_rate: Probability that a call raises instead of returning.
        min_trades: Fewest trades returned per call.
        max_trades: Most trades returned per call.
        max_volume: Absolute bound on a period's volume.
        timezone_name: Local calendar used to size the trading day.
        seed: Seed for deterministic sequences.
    """

    def __init__(
        self,
        failure_rate: float = 0.1,
        min_trades: int = 1,
        max_trades: int = 5,
        max_volume: float = 500.0,
        timezone_name: str = DEFAULT_TIMEZONE,
        seed: int | None = None,
    ) -> None:
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError('failure_rate must be between 0 and 1')
        if min_trades < 0 or max_trades < min_trades:
            raise ValueError('trade count bounds are invalid')
        self.failure_rate = failure_rate
        self.min_trades = min_trades
        self.max_trades = max_trades
        self.max_volume = max_volume
        self.timezone = load_timezone(timezone_name)
        self._rng = random.Random(seed)
        self.calls = 0

    def get_trades(self, trade_date: date) -> list[SimulatedTrade]:
        self.calls += 1
        if self._rng.random() < self.failure_rate:
            raise ConnectionError('Error retrieving power volumes')

        period_count = trading_day_hours(trade_date, self.timezone)
        trade_count = self._rng.randint(self.min_trades, self.max_trades)
        return [self._generate_trade(trade_date, period_count) for _ in range(trade_count)]

    def _generate_trade(self, trade_date: date, period_count: int) -> SimulatedTrade:
        periods = tuple(
            SimulatedPeriod(
                period=index,
                volume=round(self._rng.uniform(-self.max_volume, self.max_volume), 2),
            )
            for index in range(1, period_count + 1)
        )
        return SimulatedTrade(date=trade_date, periods=periods)


__all__ = ['SimulatedPeriod', 'SimulatedPowerService', 'SimulatedTrade', 'trading_day_hours']
