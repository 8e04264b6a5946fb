"""
Hourly aggregation of power trades.

Trade periods are numbered 1..24 and start at 23:00 local time on the day
before the trade date, so period 1 is the 23:00 hour, period 2 is 00:00 and
period 24 is 22:00. Volumes are summed per local hour and returned in day
order, 23:00 first.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .models import AggregatedPosition, PowerTrade

MIN_PERIOD = 1
MAX_PERIOD = 24

logger = logging.getLogger(__name__)


def period_to_hour(period: int) -> int:
    """Map a 1-based trade period to its local clock hour."""
    return (22 + period) % 24


def hour_sort_key(hour: int) -> int:
    """Rank hours so 23 sorts first and 0..22 follow in order."""
    return hour - 23 if hour >= 23 else hour + 1


class TradeAggregator:
    """Sums period volumes across trades into hourly positions."""

    def aggregate(self, trades: Iterable[PowerTrade] | None) -> list[AggregatedPosition]:
        trade_list = list(trades) if trades is not None else []
        if not trade_list:
            logger.warning('No trades provided for aggregation')
            return []

        logger.debug(f'Aggregating {len(trade_list)} trades')

        volume_by_hour: dict[int, float] = {}
        for trade in trade_list:
            if trade.periods is None:
                logger.warning(f'Trade for date {trade.date} has no periods')
                continue

            for period in trade.periods:
                if not MIN_PERIOD <= period.period <= MAX_PERIOD:
                    logger.warning(
                        f'Invalid period number {period.period} in trade for date {trade.date}',
                        extra={'period': period.period, 'trade_date': str(trade.date)},
                    )
                    continue

                hour = period_to_hour(period.period)
                volume_by_hour[hour] = volume_by_hour.get(hour, 0.0) + period.volume

        positions = [
            AggregatedPosition(hour=hour, volume=volume)
            for hour, volume in sorted(volume_by_hour.items(), key=lambda item: hour_sort_key(item[0]))
        ]

        logger.debug(f'Aggregation complete. Generated {len(positions)} hourly positions')
        return positions


__all__ = ['TradeAggregator', 'hour_sort_key', 'period_to_hour']
