"""
Extract orchestration: fetch trades, aggregate, write the report, with
bounded retry.

One call to :meth:`PowerPositionExtractor.run` is a *run*. The local start
time is resolved once and shared by every attempt of the run, so a retry
sequence that crosses midnight still queries the day it started on and the
report is named after the scheduled time.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

from .config import PowerPositionSettings
from .errors import is_retryable
from .interfaces import (
    ClockProtocol,
    ReportWriterProtocol,
    TradeAggregatorProtocol,
    TradeSourceProtocol,
)
from .models import AggregatedPosition, PowerTrade

logger = logging.getLogger(__name__)


class ExtractStatus(str, Enum):
    """Outcome of an extract run."""

    SUCCEEDED = 'succeeded'
    FAILED = 'failed'
    CANCELLED = 'cancelled'


@dataclass(frozen=True)
class ExtractResult:
    status: ExtractStatus
    extract_time: datetime
    attempts: int
    report_path: Path | None = None
    reason: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is ExtractStatus.SUCCEEDED

    def __bool__(self) -> bool:
        return self.succeeded


@dataclass(frozen=True)
class AttemptOutcome:
    """Result of a single attempt inside a run."""

    report_path: Path | None = None
    error: Exception | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def retryable(self) -> bool:
        return self.error is not None and is_retryable(self.error)


class PowerPositionExtractor:
    """
    Runs the fetch → aggregate → write pipeline with retry.

    Usage:
        extractor = PowerPositionExtractor(source, TradeAggregator(), writer, SystemClock(), settings)
        result = extractor.run(stop_event)
        if not result:
            ...  # result.reason explains the failure
    """

    def __init__(
        self,
        trade_source: TradeSourceProtocol,
        aggregator: TradeAggregatorProtocol,
        report_writer: ReportWriterProtocol,
        clock: ClockProtocol,
        settings: PowerPositionSettings,
    ) -> None:
        for name, value in (
            ('trade_source', trade_source),
            ('aggregator', aggregator),
            ('report_writer', report_writer),
            ('clock', clock),
            ('settings', settings),
        ):
            if value is None:
                raise ValueError(f'{name} is required')

        self.trade_source = trade_source
        self.aggregator = aggregator
        self.report_writer = report_writer
        self.clock = clock
        self.settings = settings

    def run(self, stop_event: threading.Event | None = None) -> ExtractResult:
        """
        Execute one extract run.

        Never raises: every failure is reported through the returned
        :class:`ExtractResult`.
        """
        stop_event = stop_event or threading.Event()
        extract_time = self.clock.local_now()
        max_attempts = max(1, self.settings.max_retry_attempts)
        delay_seconds = max(0.0, self.settings.retry_delay.total_seconds())

        logger.info(
            f'Starting power position extract at {extract_time:%Y-%m-%d %H:%M:%S} (local time)',
            extra={'extract_time': extract_time.isoformat()},
        )

        attempts = 0
        while attempts < max_attempts:
            if stop_event.is_set():
                logger.warning('Extract cancelled', extra={'attempts': attempts})
                return ExtractResult(ExtractStatus.CANCELLED, extract_time, attempts, reason='cancelled')

            attempts += 1
            outcome = self._attempt(extract_time)

            if outcome.succeeded:
                logger.info(
                    f'Power position extract completed successfully on attempt {attempts}',
                    extra={'attempt': attempts, 'report_path': str(outcome.report_path)},
                )
                return ExtractResult(ExtractStatus.SUCCEEDED, extract_time, attempts, report_path=outcome.report_path)

            reason = f'{type(outcome.error).__name__}: {outcome.error}'

            if not outcome.retryable and self.settings.fail_fast_on_configuration_error:
                logger.error(
                    f'Extract attempt {attempts} failed with a non-retryable error',
                    exc_info=outcome.error,
                    extra={'attempt': attempts, 'error': reason},
                )
                return ExtractResult(ExtractStatus.FAILED, extract_time, attempts, reason=reason)

            if attempts >= max_attempts:
                logger.error(
                    f'Extract failed after {max_attempts} attempts',
                    exc_info=outcome.error,
                    extra={'attempts': attempts, 'error': reason},
                )
                return ExtractResult(ExtractStatus.FAILED, extract_time, attempts, reason=reason)

            logger.warning(
                f'Extract attempt {attempts} of {max_attempts} failed. Retrying in {delay_seconds:g} seconds...',
                exc_info=outcome.error,
                extra={'attempt': attempts, 'max_attempts': max_attempts, 'error': reason},
            )
            if stop_event.wait(delay_seconds):
                logger.warning('Extract cancelled during retry delay', extra={'attempts': attempts})
                return ExtractResult(ExtractStatus.CANCELLED, extract_time, attempts, reason='cancelled')

        # max_attempts >= 1, so the loop always returns
        return ExtractResult(ExtractStatus.FAILED, extract_time, attempts, reason='no attempts made')

    def _attempt(self, extract_time: datetime) -> AttemptOutcome:
        try:
            trades = self._fetch_trades(extract_time)
            positions = self._aggregate(trades)
            report_path = self._write_report(positions, extract_time)
        except Exception as exc:
            return AttemptOutcome(error=exc)
        return AttemptOutcome(report_path=report_path)

    def _fetch_trades(self, extract_time: datetime) -> list[PowerTrade]:
        trade_date = extract_time.date()
        logger.debug(f'Fetching trades for date: {trade_date}')

        trades = list(self.trade_source.get_trades(trade_date))
        logger.debug(f'Retrieved {len(trades)} trades')
        if not trades:
            logger.warning(f'No trades returned for date {trade_date}')
        return trades

    def _aggregate(self, trades: list[PowerTrade]) -> list[AggregatedPosition]:
        logger.debug('Aggregating trades')
        positions = list(self.aggregator.aggregate(trades))
        logger.debug(f'Aggregated into {len(positions)} hourly positions')
        return positions

    def _write_report(self, positions: list[AggregatedPosition], extract_time: datetime) -> Path:
        logger.debug('Writing CSV report')
        report_path = self.report_writer.write(positions, extract_time)
        logger.info(f'Extract complete. Report saved to: {report_path}')
        return report_path


__all__ = ['AttemptOutcome', 'ExtractResult', 'ExtractStatus', 'PowerPositionExtractor']
