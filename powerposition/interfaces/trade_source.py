"""Trade source protocol interface."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from typing import Protocol

from ..models import PowerTrade


class TradeSourceProtocol(Protocol):
    """Protocol defining the trade source interface.

    Implementations return the trades recorded for a calendar date or raise.
    Retries inside the source, if any, are the source's own business.
    """

    def get_trades(self, trade_date: date) -> Sequence[PowerTrade]:
        """Return the trades for ``trade_date``."""
        ...
