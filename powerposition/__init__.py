"""
Power Position Service

Extracts the day-ahead power position on a schedule:
- Fetches the current local day's trades from the trading system
- Aggregates period volumes into local-time hourly positions
- Writes PowerPosition_<YYYYMMDD>_<HHmm>.csv with bounded retry
"""

from __future__ import annotations

from .aggregation import TradeAggregator
from .clock import FixedClock, SystemClock
from .config import PowerPositionSettings
from .errors import (
    ConfigurationError,
    EmptyReportError,
    PowerPositionError,
    ReportError,
    TradeSourceError,
)
from .extraction import ExtractResult, ExtractStatus, PowerPositionExtractor
from .models import AggregatedPosition, PowerPeriod, PowerTrade
from .reporting import CsvReportWriter
from .worker import PowerPositionWorker

__version__ = '1.0.0'
__all__ = [
    'AggregatedPosition',
    'ConfigurationError',
    'CsvReportWriter',
    'EmptyReportError',
    'ExtractResult',
    'ExtractStatus',
    'FixedClock',
    'PowerPeriod',
    'PowerPositionError',
    'PowerPositionExtractor',
    'PowerPositionSettings',
    'PowerPositionWorker',
    'PowerTrade',
    'ReportError',
    'SystemClock',
    'TradeAggregator',
    'TradeSourceError',
]
