"""
Adapter between an external power trading client and the internal models.

The external client is anything with ``get_trades(date)`` returning trade
objects that expose ``date`` and ``periods`` (each period exposing
``period`` and ``volume``). The adapter copies them into
:class:`~powerposition.models.PowerTrade` so nothing downstream depends on
the client's types, and turns any client failure into
:class:`~powerposition.errors.TradeSourceError`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date, datetime
from typing import Any, Protocol

from ..errors import TradeSourceError
from ..models import PowerPeriod, PowerTrade, parse_period_number

logger = logging.getLogger(__name__)


class ExternalPowerClient(Protocol):
    def get_trades(self, trade_date: date) -> Iterable[Any]:
        ...


def _to_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


class PowerServiceAdapter:
    """Trade source backed by an external power trading client."""

    def __init__(self, client: ExternalPowerClient) -> None:
        if client is None:
            raise ValueError('client is required')
        self._client = client

    def get_trades(self, trade_date: date) -> list[PowerTrade]:
        logger.debug(f'Fetching trades for date: {trade_date}')

        try:
            trades = [self._map_trade(trade) for trade in self._client.get_trades(trade_date)]
        except Exception as exc:
            logger.error(f'Error fetching trades for date {trade_date}: {exc}')
            raise TradeSourceError(f'Failed to fetch trades for {trade_date:%Y-%m-%d}') from exc

        logger.debug(f'Retrieved {len(trades)} trades from power service')
        return trades

    @staticmethod
    def _map_trade(external_trade: Any) -> PowerTrade:
        trade_date = _to_date(external_trade.date)
        periods: list[PowerPeriod] = []
        for period in external_trade.periods or ():
            try:
                number = parse_period_number(period.period)
            except ValueError:
                logger.warning(
                    f'Invalid period number {period.period!r} in trade for date {trade_date}',
                    extra={'period': period.period, 'trade_date': str(trade_date)},
                )
                continue
            periods.append(PowerPeriod(period=number, volume=float(period.volume)))
        return PowerTrade(date=trade_date, periods=tuple(periods))


__all__ = ['ExternalPowerClient', 'PowerServiceAdapter']
