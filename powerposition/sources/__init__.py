"""Trade sources feeding the extract."""

from .adapter import PowerServiceAdapter
from .directory import DirectoryTradeSource
from .simulated import SimulatedPowerService

__all__ = ['DirectoryTradeSource', 'PowerServiceAdapter', 'SimulatedPowerService']
