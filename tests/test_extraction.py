"""
Tests for the extract orchestration.

Coverage for:
- Happy path call order and result
- Local date resolution and pinning across retries
- Retry exhaustion, recovery on a later attempt
- Cancellation before the first attempt and during the retry delay
- Non-retryable faults (fail fast vs. consuming attempts)
"""

from __future__ import annotations

import threading
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from powerposition.aggregation import TradeAggregator
from powerposition.clock import FixedClock
from powerposition.config import PowerPositionSettings
from powerposition.errors import ConfigurationError, TradeSourceError
from powerposition.extraction import ExtractStatus, PowerPositionExtractor
from powerposition.models import AggregatedPosition, PowerTrade
from powerposition.reporting import CsvReportWriter

# 09:30 UTC in June is 10:30 in London
START_UTC = datetime(2024, 6, 15, 9, 30, tzinfo=timezone.utc)


class ScriptedTradeSource:
    """Trade source returning or raising according to a script, one entry per call."""

    def __init__(self, *script):
        self.script = list(script)
        self.calls: list[date] = []

    def get_trades(self, trade_date):
        self.calls.append(trade_date)
        outcome = self.script[min(len(self.calls), len(self.script)) - 1]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class AdvancingTradeSource(ScriptedTradeSource):
    """Moves the clock forward on every call, then fails."""

    def __init__(self, clock, step):
        super().__init__(TradeSourceError('unavailable'))
        self.clock = clock
        self.step = step

    def get_trades(self, trade_date):
        self.clock.advance(self.step)
        return super().get_trades(trade_date)


@pytest.fixture
def clock():
    return FixedClock(START_UTC)


@pytest.fixture
def settings(tmp_path):
    return PowerPositionSettings(output_dir=str(tmp_path), max_retry_attempts=3, retry_delay_seconds=0)


def _trades():
    return [PowerTrade.uniform(date(2024, 6, 15), 100)]


def _extractor(source, settings, clock, writer=None, aggregator=None):
    return PowerPositionExtractor(
        trade_source=source,
        aggregator=aggregator or TradeAggregator(),
        report_writer=writer or CsvReportWriter(settings.output_dir),
        clock=clock,
        settings=settings,
    )


# ==================== Happy path ====================


def test_successful_run_writes_report(settings, clock, tmp_path):
    source = ScriptedTradeSource(_trades())

    result = _extractor(source, settings, clock).run()

    assert result.succeeded
    assert bool(result) is True
    assert result.status is ExtractStatus.SUCCEEDED
    assert result.attempts == 1
    assert result.report_path == (tmp_path / 'PowerPosition_20240615_1030.csv').resolve()
    assert result.report_path.read_text(encoding='utf-8').splitlines()[1] == '23:00,100'


def test_queries_local_date(settings):
    # 23:30 UTC on 30 June is 00:30 on 1 July in London
    clock = FixedClock(datetime(2024, 6, 30, 23, 30, tzinfo=timezone.utc))
    source = ScriptedTradeSource(_trades())

    result = _extractor(source, settings, clock).run()

    assert source.calls == [date(2024, 7, 1)]
    assert result.extract_time.hour == 0
    assert result.report_path.name == 'PowerPosition_20240701_0030.csv'


def test_calls_collaborators_in_order(settings, clock):
    calls = []
    source = MagicMock()
    source.get_trades.side_effect = lambda d: calls.append('source') or _trades()
    aggregator = MagicMock()
    aggregator.aggregate.side_effect = lambda t: calls.append('aggregator') or [AggregatedPosition(23, 1)]
    writer = MagicMock()
    writer.write.side_effect = lambda p, ts: calls.append('writer') or Path('/tmp/report.csv')

    result = _extractor(source, settings, clock, writer=writer, aggregator=aggregator).run()

    assert result.succeeded
    assert calls == ['source', 'aggregator', 'writer']
    writer.write.assert_called_once_with([AggregatedPosition(23, 1)], clock.local_now())


def test_missing_collaborator_rejected(settings, clock):
    with pytest.raises(ValueError):
        PowerPositionExtractor(None, TradeAggregator(), MagicMock(), clock, settings)


# ==================== Retry ====================


def test_retries_until_max_attempts_then_fails(settings, clock, tmp_path):
    source = ScriptedTradeSource(TradeSourceError('service error'))

    result = _extractor(source, settings, clock).run()

    assert not result
    assert result.status is ExtractStatus.FAILED
    assert result.attempts == 3
    assert len(source.calls) == 3
    assert 'service error' in result.reason
    assert list(tmp_path.iterdir()) == []


def test_recovers_on_later_attempt(settings, clock):
    source = ScriptedTradeSource(TradeSourceError('first'), ConnectionError('second'), _trades())

    result = _extractor(source, settings, clock).run()

    assert result.succeeded
    assert result.attempts == 3


def test_single_attempt_setting(tmp_path, clock):
    settings = PowerPositionSettings(output_dir=str(tmp_path), max_retry_attempts=1, retry_delay_seconds=0)
    source = ScriptedTradeSource(TradeSourceError('down'))

    result = _extractor(source, settings, clock).run()

    assert result.status is ExtractStatus.FAILED
    assert len(source.calls) == 1


def test_write_failure_is_retried(settings, clock):
    writer = MagicMock()
    writer.write.side_effect = [OSError('disk full'), Path('/tmp/report.csv')]

    result = _extractor(ScriptedTradeSource(_trades()), settings, clock, writer=writer).run()

    assert result.succeeded
    assert result.attempts == 2
    assert writer.write.call_count == 2


def test_date_and_timestamp_pinned_across_retries(settings, clock):
    source = AdvancingTradeSource(clock, timedelta(hours=10))
    writer = MagicMock()

    result = _extractor(source, settings, clock, writer=writer).run()

    assert result.status is ExtractStatus.FAILED
    assert source.calls == [date(2024, 6, 15)] * 3
    assert result.extract_time == datetime(2024, 6, 15, 10, 30, tzinfo=clock.timezone)
    writer.write.assert_not_called()


def test_waits_retry_delay_between_attempts(tmp_path, clock):
    settings = PowerPositionSettings(output_dir=str(tmp_path), max_retry_attempts=3, retry_delay_seconds=7)
    stop_event = MagicMock()
    stop_event.is_set.return_value = False
    stop_event.wait.return_value = False

    _extractor(ScriptedTradeSource(TradeSourceError('x')), settings, clock).run(stop_event)

    assert [call.args[0] for call in stop_event.wait.call_args_list] == [7.0, 7.0]


# ==================== Cancellation ====================


def test_cancelled_before_start_does_nothing(settings, clock):
    source = ScriptedTradeSource(_trades())
    writer = MagicMock()
    stop_event = threading.Event()
    stop_event.set()

    result = _extractor(source, settings, clock, writer=writer).run(stop_event)

    assert not result
    assert result.status is ExtractStatus.CANCELLED
    assert result.attempts == 0
    assert source.calls == []
    writer.write.assert_not_called()


def test_cancelled_during_retry_delay(tmp_path, clock):
    settings = PowerPositionSettings(output_dir=str(tmp_path), max_retry_attempts=5, retry_delay_seconds=30)
    stop_event = threading.Event()

    class CancellingSource(ScriptedTradeSource):
        def get_trades(self, trade_date):
            stop_event.set()
            return super().get_trades(trade_date)

    source = CancellingSource(TradeSourceError('down'))

    result = _extractor(source, settings, clock).run(stop_event)

    assert result.status is ExtractStatus.CANCELLED
    assert result.attempts == 1
    assert len(source.calls) == 1


# ==================== Non-retryable faults ====================


def test_empty_trades_fail_fast(settings, clock, tmp_path):
    source = ScriptedTradeSource([])

    result = _extractor(source, settings, clock).run()

    assert result.status is ExtractStatus.FAILED
    assert result.attempts == 1
    assert 'EmptyReportError' in result.reason
    assert list(tmp_path.iterdir()) == []


def test_configuration_fault_fails_fast(settings, clock):
    source = ScriptedTradeSource(_trades())

    result = _extractor(source, settings, clock, writer=CsvReportWriter('  ')).run()

    assert result.status is ExtractStatus.FAILED
    assert result.attempts == 1
    assert 'ConfigurationError' in result.reason


def test_non_retryable_fault_consumes_attempts_when_fail_fast_disabled(tmp_path, clock):
    settings = PowerPositionSettings(
        output_dir=str(tmp_path),
        max_retry_attempts=3,
        retry_delay_seconds=0,
        fail_fast_on_configuration_error=False,
    )
    writer = MagicMock()
    writer.write.side_effect = ConfigurationError('CSV output path is not configured')
    source = ScriptedTradeSource(_trades())

    result = _extractor(source, settings, clock, writer=writer).run()

    assert result.status is ExtractStatus.FAILED
    assert result.attempts == 3
    assert len(source.calls) == 3


def test_unexpected_collaborator_error_does_not_escape(settings, clock):
    aggregator = MagicMock()
    aggregator.aggregate.side_effect = RuntimeError('boom')

    result = _extractor(ScriptedTradeSource(_trades()), settings, clock, aggregator=aggregator).run()

    assert result.status is ExtractStatus.FAILED
    assert result.attempts == 3
