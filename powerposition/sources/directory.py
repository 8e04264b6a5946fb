"""Trade source reading daily JSON exports from a local directory."""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path

from ..errors import TradeSourceError
from ..models import PowerPeriod, PowerTrade, parse_period_number

logger = logging.getLogger(__name__)


class DirectoryTradeSource:
    """
    Reads ``<root>/trades_<YYYYMMDD>.json`` for the requested date.

    Each file holds a JSON list of trades::

        [{"date": "2024-06-15", "periods": [{"period": 1, "volume": 100.0}, ...]}]

    A missing file means no trades were exported for that day.
    """

    def __init__(self, root: str | Path, filename_template: str = 'trades_{date:%Y%m%d}.json') -> None:
        self.root = Path(root).expanduser()
        self.filename_template = filename_template

    def path_for(self, trade_date: date) -> Path:
        return self.root / self.filename_template.format(date=trade_date)

    def get_trades(self, trade_date: date) -> list[PowerTrade]:
        path = self.path_for(trade_date)
        if not path.exists():
            logger.info(f'No trade export found at {path}')
            return []

        try:
            payload = json.loads(path.read_text(encoding='utf-8'))
            trades = [self._parse_trade(item, trade_date) for item in payload]
        except OSError as exc:
            raise TradeSourceError(f'Failed to read trade export {path}') from exc
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise TradeSourceError(f'Malformed trade export {path}: {exc}') from exc

        logger.debug(f'Loaded {len(trades)} trades from {path}')
        return trades

    @staticmethod
    def _parse_trade(item: dict, default_date: date) -> PowerTrade:
        raw_date = item.get('date')
        trade_date = date.fromisoformat(str(raw_date)[:10]) if raw_date else default_date
        periods: list[PowerPeriod] = []
        for raw in item.get('periods') or ():
            raw_period = raw['period']
            try:
                number = parse_period_number(raw_period)
            except ValueError:
                logger.warning(
                    f'Invalid period number {raw_period!r} in trade for date {trade_date}',
                    extra={'period': raw_period, 'trade_date': str(trade_date)},
                )
                continue
            periods.append(PowerPeriod(period=number, volume=float(raw['volume'])))
        return PowerTrade(date=trade_date, periods=tuple(periods))


__all__ = ['DirectoryTradeSource']
