"""Exception hierarchy for the power position extract."""

from __future__ import annotations


class PowerPositionError(Exception):
    """Base class for errors raised by the extract pipeline."""


class TradeSourceError(PowerPositionError):
    """The trade source failed to return trades for a date."""


class ReportError(PowerPositionError):
    """The report could not be produced."""


class EmptyReportError(ReportError):
    """A report was requested for an empty sequence of positions."""


class ConfigurationError(PowerPositionError, ValueError):
    """Settings are missing or invalid."""


def is_retryable(exc: BaseException) -> bool:
    """
    Decide whether a failed attempt is worth repeating.

    Configuration faults and empty-report requests recur identically on the
    next attempt. Everything else (trade source errors, I/O errors, and
    unexpected collaborator errors) is treated as transient.
    """
    return not isinstance(exc, (ConfigurationError, EmptyReportError))


__all__ = [
    'ConfigurationError',
    'EmptyReportError',
    'PowerPositionError',
    'ReportError',
    'TradeSourceError',
    'is_retryable',
]
