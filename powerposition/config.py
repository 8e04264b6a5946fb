"""
Configuration dataclasses for the power position extract.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from .errors import ConfigurationError

MIN_INTERVAL_MINUTES = 1
MAX_INTERVAL_MINUTES = 1440  # 24 hours


@dataclass(frozen=True)
class PowerPositionSettings:
    """
    Settings consumed by the extractor, report writer and worker.

    Attributes:
        output_dir: Directory where CSV reports are written.
        extract_interval_minutes: Minutes between scheduled extracts.
        max_retry_attempts: Attempts per extract before it is reported failed.
        retry_delay_seconds: Pause between attempts.
        fail_fast_on_configuration_error: Stop retrying as soon as an attempt
            fails with a fault that will recur (blank output path, empty
            report). When False, such faults consume attempts like any other.
    """

    output_dir: str = ''
    extract_interval_minutes: int = 60
    max_retry_attempts: int = 3
    retry_delay_seconds: float = 10
    fail_fast_on_configuration_error: bool = True

    @property
    def extract_interval(self) -> timedelta:
        return timedelta(minutes=self.extract_interval_minutes)

    @property
    def retry_delay(self) -> timedelta:
        return timedelta(seconds=self.retry_delay_seconds)

    def validate(self) -> list[str]:
        """Return every validation error; an empty list means the settings are usable."""
        errors: list[str] = []

        if not self.output_dir or not self.output_dir.strip():
            errors.append('output_dir must be configured')

        if self.extract_interval_minutes < MIN_INTERVAL_MINUTES:
            errors.append('extract_interval_minutes must be at least 1 minute')

        if self.extract_interval_minutes > MAX_INTERVAL_MINUTES:
            errors.append('extract_interval_minutes cannot exceed 1440 minutes (24 hours)')

        if self.max_retry_attempts < 1:
            errors.append('max_retry_attempts must be at least 1')

        if self.retry_delay_seconds < 1:
            errors.append('retry_delay_seconds must be at least 1')

        return errors

    def ensure_valid(self) -> PowerPositionSettings:
        errors = self.validate()
        if errors:
            raise ConfigurationError('Invalid settings: ' + '; '.join(errors))
        return self


__all__ = ['MAX_INTERVAL_MINUTES', 'MIN_INTERVAL_MINUTES', 'PowerPositionSettings']
