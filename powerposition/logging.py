"""
Logging configuration for the service.

Console output is either coloured text or one JSON object per line; a
daily rotating file keeps the last 30 days of logs.
"""

from __future__ import annotations

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone, tzinfo
from pathlib import Path

from colorama import Fore, Style
from colorama import just_fix_windows_console

LOGGER_NAME = 'powerposition'
LOG_FILENAME = 'PowerPositionService.log'
LOG_FORMAT = '%(asctime)s [%(levelname)-8s] %(name)s - %(message)s'
RETAINED_LOG_FILES = 30

_LEVELS = {
    'CRITICAL': logging.CRITICAL,
    'ERROR': logging.ERROR,
    'WARNING': logging.WARNING,
    'INFO': logging.INFO,
    'DEBUG': logging.DEBUG,
}


# Attributes every LogRecord carries; anything else on a record came from ``extra=``.
_RECORD_ATTRIBUTES = frozenset(logging.makeLogRecord({}).__dict__) | {'message', 'asctime'}


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, with ``extra=`` fields as top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            'timestamp': datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        payload.update(
            (key, value) for key, value in vars(record).items() if key not in _RECORD_ATTRIBUTES
        )
        if record.exc_info:
            payload['exception'] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class TimezoneFormatter(logging.Formatter):
    """Text formatter stamping records in a given timezone (UTC by default)."""

    def __init__(self, fmt: str | None = None, datefmt: str | None = None, tz: tzinfo | None = None) -> None:
        super().__init__(fmt, datefmt)
        self.tz = tz or timezone.utc

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        dt = datetime.fromtimestamp(record.created, self.tz)
        if datefmt:
            return dt.strftime(datefmt)
        return dt.isoformat(timespec='milliseconds')


class ColoredFormatter(TimezoneFormatter):
    LEVEL_COLORS = {
        logging.DEBUG: Fore.CYAN,
        logging.INFO: Fore.GREEN,
        logging.WARNING: Fore.YELLOW,
        logging.ERROR: Fore.RED,
        logging.CRITICAL: Fore.MAGENTA + Style.BRIGHT,
    }

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        color = self.LEVEL_COLORS.get(record.levelno)
        if color is None:
            return formatted
        return f'{color}{formatted}{Style.RESET_ALL}'


def resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    return _LEVELS.get(level.upper(), logging.INFO)


def configure_logging(
    level: str | int = 'INFO',
    log_dir: str | Path | None = None,
    structured: bool = False,
    tz: tzinfo | None = None,
    console: bool = True,
) -> logging.Logger:
    """
    Configure the service's logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL) or number.
        log_dir: Directory for the daily rotating log file; None disables it.
        structured: Emit JSON records on the console instead of coloured text.
        tz: Timezone used for text timestamps.
        console: Attach a console handler.

    Returns:
        The configured ``powerposition`` logger.
    """
    level_value = resolve_level(level)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level_value)

    # Remove existing handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if console:
        just_fix_windows_console()
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level_value)
        if structured:
            console_handler.setFormatter(StructuredFormatter())
        else:
            console_handler.setFormatter(ColoredFormatter(LOG_FORMAT, tz=tz))
        logger.addHandler(console_handler)

    if log_dir is not None:
        directory = Path(log_dir).expanduser()
        directory.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.TimedRotatingFileHandler(
            directory / LOG_FILENAME,
            when='midnight',
            backupCount=RETAINED_LOG_FILES,
            encoding='utf-8',
        )
        file_handler.setLevel(level_value)
        file_handler.setFormatter(StructuredFormatter() if structured else TimezoneFormatter(LOG_FORMAT, tz=tz))
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def shutdown_logging() -> None:
    """Flush and close the handlers installed by :func:`configure_logging`."""
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.flush()
        handler.close()
        logger.removeHandler(handler)


__all__ = [
    'ColoredFormatter',
    'StructuredFormatter',
    'TimezoneFormatter',
    'configure_logging',
    'resolve_level',
    'shutdown_logging',
]
