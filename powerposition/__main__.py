"""
Entry point for running the Power Position Service as a module.

Usage:
    python -m powerposition                     # Run the scheduled service
    python -m powerposition --once              # Run a single extract and exit
    python -m powerposition --output-dir out    # Override the report directory
    python -m powerposition --help              # Show all options
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
from collections.abc import Callable, Sequence
from dataclasses import replace
from typing import Any, TypeVar

from .errors import ConfigurationError
from .factory import ServiceFactory
from .logging import configure_logging, shutdown_logging
from .runtime_settings import TRADE_SOURCES, RuntimeSettings, load_runtime_settings

logger = logging.getLogger('powerposition.service')

T = TypeVar('T')

# Set by the signal handlers; the worker and extractor wait on it.
_stop_event = threading.Event()


def _signal_handler(signum: int, frame) -> None:
    """Handle SIGINT (CTRL+C) and SIGTERM by asking the worker to stop."""
    signal_name = 'SIGINT' if signum == signal.SIGINT else 'SIGTERM'
    logger.info(f'{signal_name} received - initiating clean shutdown...')
    _stop_event.set()


def run_off_main_thread(target: Callable[[], T]) -> T:
    """
    Run ``target`` on a helper thread and return its result.

    The main thread only joins the helper, so the signal handlers are the
    only code on it that touches the stop event. An exception raised by
    ``target`` is re-raised here.
    """
    outcome: dict[str, Any] = {}

    def _runner() -> None:
        try:
            outcome['result'] = target()
        except Exception as exc:
            outcome['error'] = exc

    thread = threading.Thread(target=_runner, name='PowerPositionService', daemon=True)
    thread.start()
    while thread.is_alive():
        thread.join(0.5)

    if 'error' in outcome:
        raise outcome['error']
    return outcome['result']


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='powerposition',
        description='Extract intra-day power positions to CSV on a fixed schedule.',
    )
    parser.add_argument('--output-dir', help='Directory receiving the CSV reports')
    parser.add_argument('--interval-minutes', type=int, help='Minutes between extracts (1-1440)')
    parser.add_argument('--max-retries', type=int, help='Attempts per extract before giving up')
    parser.add_argument('--retry-delay', type=int, help='Seconds to wait between attempts')
    parser.add_argument('--source', choices=TRADE_SOURCES, help='Trade source to read from')
    parser.add_argument('--trades-dir', help='Directory of daily trade exports (directory source)')
    parser.add_argument('--log-level', help='DEBUG, INFO, WARNING, ERROR or CRITICAL')
    parser.add_argument('--log-dir', help='Directory for the rotating log file')
    parser.add_argument('--structured-logs', action='store_true', help='Emit JSON log records')
    parser.add_argument('--once', action='store_true', help='Run a single extract and exit')
    return parser


def apply_overrides(runtime: RuntimeSettings, args: argparse.Namespace) -> RuntimeSettings:
    """Layer command-line options over settings loaded from the environment."""
    extract = runtime.extract
    if args.output_dir is not None:
        extract = replace(extract, output_dir=args.output_dir)
    if args.interval_minutes is not None:
        extract = replace(extract, extract_interval_minutes=args.interval_minutes)
    if args.max_retries is not None:
        extract = replace(extract, max_retry_attempts=args.max_retries)
    if args.retry_delay is not None:
        extract = replace(extract, retry_delay_seconds=args.retry_delay)

    trade_source = runtime.trade_source
    if args.source is not None:
        trade_source = replace(trade_source, kind=args.source)
    if args.trades_dir is not None:
        trade_source = replace(trade_source, directory=args.trades_dir)

    return replace(
        runtime,
        extract=extract,
        trade_source=trade_source,
        log_level=(args.log_level or runtime.log_level).upper(),
        log_dir=args.log_dir if args.log_dir is not None else runtime.log_dir,
        structured_logs=runtime.structured_logs or args.structured_logs,
    )


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        runtime = apply_overrides(load_runtime_settings(), args)
    except ValueError as exc:
        print(f'Invalid configuration: {exc}', file=sys.stderr)
        return 2

    configure_logging(
        level=runtime.log_level,
        log_dir=runtime.log_dir,
        structured=runtime.structured_logs,
        tz=runtime.timezone,
    )

    try:
        settings = runtime.extract.ensure_valid()
    except ConfigurationError as exc:
        logger.error(str(exc))
        return 2

    logger.info(
        f'Configuration loaded - Extract interval: {settings.extract_interval_minutes} minutes, '
        f'Output path: {settings.output_dir}',
        extra={
            'interval_minutes': settings.extract_interval_minutes,
            'output_dir': settings.output_dir,
            'max_retry_attempts': settings.max_retry_attempts,
            'retry_delay_seconds': settings.retry_delay_seconds,
            'trade_source': runtime.trade_source.kind,
            'timezone': runtime.timezone_name,
        },
    )

    previous_handlers = {
        signum: signal.signal(signum, _signal_handler) for signum in (signal.SIGINT, signal.SIGTERM)
    }

    try:
        factory = ServiceFactory(runtime)
        if args.once:
            extractor = factory.create_extractor()
            result = run_off_main_thread(lambda: extractor.run(_stop_event))
            return 0 if result.succeeded else 1

        logger.info('Starting Power Position Service')
        run_off_main_thread(factory.create_worker(_stop_event).run)
    except Exception:
        logger.critical('Service terminated unexpectedly', exc_info=True)
        return 1
    finally:
        for signum, handler in previous_handlers.items():
            signal.signal(signum, handler)
        shutdown_logging()

    return 0


if __name__ == '__main__':
    sys.exit(main())
