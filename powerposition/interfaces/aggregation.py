"""Trade aggregator protocol interface."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from ..models import AggregatedPosition, PowerTrade


class TradeAggregatorProtocol(Protocol):
    def aggregate(self, trades: Iterable[PowerTrade] | None) -> list[AggregatedPosition]:
        """Reduce trades to ordered hourly positions."""
        ...
