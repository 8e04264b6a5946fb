"""Factory wiring the extract components together."""

from __future__ import annotations

import threading

from .aggregation import TradeAggregator
from .clock import SystemClock
from .config import PowerPositionSettings
from .errors import ConfigurationError
from .extraction import PowerPositionExtractor
from .interfaces import ClockProtocol, TradeSourceProtocol
from .reporting import CsvReportWriter
from .runtime_settings import RuntimeSettings, TradeSourceSettings
from .sources import DirectoryTradeSource, PowerServiceAdapter, SimulatedPowerService
from .worker import PowerPositionWorker


def create_trade_source(settings: TradeSourceSettings, timezone_name: str) -> TradeSourceProtocol:
    if settings.kind == 'directory':
        if not settings.directory:
            raise ConfigurationError('TRADE_SOURCE_DIR must be set for the directory trade source')
        return DirectoryTradeSource(settings.directory)
    if settings.kind == 'simulated':
        client = SimulatedPowerService(
            failure_rate=settings.failure_rate,
            timezone_name=timezone_name,
            seed=settings.seed,
        )
        return PowerServiceAdapter(client)
    raise ConfigurationError(f'Unknown trade source {settings.kind!r}')


class ServiceFactory:
    """Builds a fully wired extractor and worker from runtime settings.

    Collaborators can be overridden, which is how tests substitute a fixed
    clock or a scripted trade source.

    Example:
        factory = ServiceFactory(load_runtime_settings())
        worker = factory.create_worker(stop_event)
        worker.run()
    """

    def __init__(
        self,
        runtime: RuntimeSettings,
        clock: ClockProtocol | None = None,
        trade_source: TradeSourceProtocol | None = None,
    ) -> None:
        self.runtime = runtime
        self.clock = clock or SystemClock(runtime.timezone)
        self._trade_source = trade_source

    @property
    def settings(self) -> PowerPositionSettings:
        return self.runtime.extract

    def create_trade_source(self) -> TradeSourceProtocol:
        if self._trade_source is None:
            self._trade_source = create_trade_source(self.runtime.trade_source, self.runtime.timezone_name)
        return self._trade_source

    def create_extractor(self) -> PowerPositionExtractor:
        return PowerPositionExtractor(
            trade_source=self.create_trade_source(),
            aggregator=TradeAggregator(),
            report_writer=CsvReportWriter(self.settings.output_dir),
            clock=self.clock,
            settings=self.settings,
        )

    def create_worker(self, stop_event: threading.Event | None = None) -> PowerPositionWorker:
        return PowerPositionWorker(self.create_extractor(), self.settings, stop_event=stop_event)


__all__ = ['ServiceFactory', 'create_trade_source']
