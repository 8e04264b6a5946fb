"""Protocol interfaces for the power position components.

Each collaborator of the extractor is described by the operations it must
offer, so production and test implementations can be swapped at
construction time without sharing a base class.
"""

from .aggregation import TradeAggregatorProtocol
from .clock import ClockProtocol
from .reporting import ReportWriterProtocol
from .trade_source import TradeSourceProtocol

__all__ = [
    'ClockProtocol',
    'ReportWriterProtocol',
    'TradeAggregatorProtocol',
    'TradeSourceProtocol',
]
