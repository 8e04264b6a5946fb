"""Scheduled worker driving the extractor on a fixed interval."""

from __future__ import annotations

import logging
import threading
import time

from .config import PowerPositionSettings
from .extraction import ExtractResult, ExtractStatus, PowerPositionExtractor

logger = logging.getLogger(__name__)


class PowerPositionWorker:
    """
    Runs an extract immediately, then once per interval until stopped.

    A failed extract is logged and the schedule carries on. Exceptions raised
    by the loop itself are logged as critical and re-raised to the host.

    Usage:
        worker = PowerPositionWorker(extractor, settings)
        worker.start()      # background thread
        ...
        worker.stop()
        worker.join()
    """

    def __init__(
        self,
        extractor: PowerPositionExtractor,
        settings: PowerPositionSettings,
        stop_event: threading.Event | None = None,
    ) -> None:
        self.extractor = extractor
        self.settings = settings
        self.stop_event = stop_event or threading.Event()
        self.runs = 0
        self.failures = 0
        self.last_result: ExtractResult | None = None
        self._thread: threading.Thread | None = None

    @property
    def interval_seconds(self) -> float:
        return self.settings.extract_interval.total_seconds()

    def run(self) -> None:
        """Run the schedule on the calling thread until the stop event is set."""
        logger.info(
            f'Power Position Worker starting. Extract interval: {self.settings.extract_interval_minutes} minutes',
            extra={'interval_minutes': self.settings.extract_interval_minutes},
        )

        try:
            logger.info('Running initial extract on service start')
            self._run_extract_with_logging()

            while not self.stop_event.wait(self.interval_seconds):
                self._run_extract_with_logging()
        except Exception:
            logger.critical('Fatal error in Power Position Worker', exc_info=True)
            raise

        logger.info('Power Position Worker stopped')

    def start(self) -> threading.Thread:
        """Run the schedule in a background thread."""
        if self._thread is not None and self._thread.is_alive():
            logger.warning('Power Position Worker already running')
            return self._thread

        self._thread = threading.Thread(target=self.run, name='PowerPositionWorker', daemon=True)
        self._thread.start()
        return self._thread

    def stop(self) -> None:
        logger.info('Power Position Worker is stopping...')
        self.stop_event.set()

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def _run_extract_with_logging(self) -> None:
        started = time.monotonic()
        logger.info('Starting scheduled extract')

        # The extractor contains its own failures; anything it raises is a defect
        # and propagates to run(), which records it and stops the worker.
        result = self.extractor.run(self.stop_event)
        self.runs += 1
        self.last_result = result
        duration_ms = (time.monotonic() - started) * 1000

        if result.succeeded:
            logger.info(
                f'Extract completed successfully. Duration: {duration_ms:.0f}ms',
                extra={'duration_ms': duration_ms, 'report_path': str(result.report_path)},
            )
        elif result.status is ExtractStatus.CANCELLED:
            logger.info('Extract interrupted by shutdown', extra={'attempts': result.attempts})
        else:
            self.failures += 1
            logger.error(
                f'Extract failed after {result.attempts} attempt(s): {result.reason}. Duration: {duration_ms:.0f}ms. '
                f'Next extract scheduled in {self.settings.extract_interval_minutes} minutes.',
                extra={'duration_ms': duration_ms, 'attempts': result.attempts, 'reason': result.reason},
            )


__all__ = ['PowerPositionWorker']
