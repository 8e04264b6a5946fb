"""Clock protocol interface."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class ClockProtocol(Protocol):
    """Supplies the current instant in UTC and in the local calendar."""

    def utc_now(self) -> datetime:
        """Current timezone-aware UTC instant."""
        ...

    def local_now(self) -> datetime:
        """Current timezone-aware instant in the local calendar."""
        ...

    def to_local(self, instant: datetime) -> datetime:
        """Convert an instant to the local calendar."""
        ...
