"""CSV report output for aggregated power positions."""

from __future__ import annotations

import contextlib
import csv
import io
import logging
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from .errors import ConfigurationError, EmptyReportError
from .models import AggregatedPosition

HEADER = ('Local Time', 'Volume')
FILENAME_TEMPLATE = 'PowerPosition_{timestamp:%Y%m%d}_{timestamp:%H%M}.csv'

logger = logging.getLogger(__name__)


def format_volume(volume: float) -> str:
    """Render a volume without a unit: ``150`` for integral sums, ``150.5`` otherwise."""
    if float(volume).is_integer():
        return str(int(volume))
    return repr(float(volume))


def _atomic_write_text(content: str, filepath: Path) -> None:
    """
    Write ``content`` to a temporary sibling and rename it over ``filepath``.

    Readers of ``filepath`` see either the previous file or the complete new
    one, never a partial write.
    """
    temp_path = filepath.with_name(filepath.name + '.tmp')
    try:
        with temp_path.open('w', encoding='utf-8', newline='') as handle:
            handle.write(content)
        temp_path.replace(filepath)
    finally:
        if temp_path.exists():
            with contextlib.suppress(OSError):
                temp_path.unlink()


class CsvReportWriter:
    """
    Writes hourly positions to ``PowerPosition_<YYYYMMDD>_<HHmm>.csv``.

    Args:
        output_dir: Directory receiving the reports. Created on first write.
    """

    def __init__(self, output_dir: str | Path | None) -> None:
        self.output_dir = output_dir

    @staticmethod
    def filename_for(extract_time: datetime) -> str:
        return FILENAME_TEMPLATE.format(timestamp=extract_time)

    @staticmethod
    def render(positions: Sequence[AggregatedPosition]) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator='\n')
        writer.writerow(HEADER)
        for position in positions:
            writer.writerow([position.local_time, format_volume(position.volume)])
        return buffer.getvalue()

    def write(self, positions: Sequence[AggregatedPosition], extract_time: datetime) -> Path:
        """
        Persist ``positions`` as a CSV report named after ``extract_time``.

        Returns:
            Absolute path of the written report.

        Raises:
            EmptyReportError: ``positions`` is empty.
            ConfigurationError: No output directory is configured.
            OSError: The directory or file could not be written.
        """
        position_list = list(positions or [])
        if not position_list:
            logger.warning('No positions to write to CSV')
            raise EmptyReportError('Cannot write empty report')

        directory = self._ensure_output_directory()
        filepath = (directory / self.filename_for(extract_time)).resolve()

        logger.info(f'Writing power position report to {filepath}')
        try:
            _atomic_write_text(self.render(position_list), filepath)
        except OSError:
            logger.exception(f'Failed to write CSV report to {filepath}')
            raise

        logger.info(
            f'Successfully wrote {len(position_list)} positions to {filepath}',
            extra={'report_path': str(filepath), 'positions': len(position_list)},
        )
        return filepath

    def _ensure_output_directory(self) -> Path:
        if self.output_dir is None or not str(self.output_dir).strip():
            raise ConfigurationError('CSV output path is not configured')

        directory = Path(self.output_dir).expanduser()
        if not directory.exists():
            logger.info(f'Creating output directory: {directory}')
        directory.mkdir(parents=True, exist_ok=True)
        return directory


__all__ = ['CsvReportWriter', 'HEADER', 'format_volume']
