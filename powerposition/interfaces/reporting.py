"""Report writer protocol interface."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Protocol

from ..models import AggregatedPosition


class ReportWriterProtocol(Protocol):
    """Protocol for persisting an hourly position curve."""

    def write(self, positions: Sequence[AggregatedPosition], extract_time: datetime) -> Path:
        """Persist ``positions`` and return the path written."""
        ...
