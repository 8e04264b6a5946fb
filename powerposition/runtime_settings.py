"""
Runtime settings helpers for environment-driven configuration.

Motivation:
- Build :class:`PowerPositionSettings` from environment variables
- Fail fast when variables are malformed
- Surface timezone, log and trade source knobs alongside the extract settings
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from zoneinfo import ZoneInfo

from .clock import DEFAULT_TIMEZONE, load_timezone
from .config import PowerPositionSettings

TRADE_SOURCES = ('simulated', 'directory')

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}
_FALSE_VALUES = {'0', 'false', 'no', 'off'}
_INLINE_COMMENT = re.compile(r'\s#')


@dataclass(frozen=True)
class TradeSourceSettings:
    """Which trade source to use and where it reads from."""

    kind: str = 'simulated'
    directory: str | None = None
    failure_rate: float = 0.1
    seed: int | None = None


@dataclass(frozen=True)
class RuntimeSettings:
    """Top-level runtime settings consumed by the service launcher."""

    extract: PowerPositionSettings
    trade_source: TradeSourceSettings
    log_level: str
    log_dir: str | None
    structured_logs: bool
    timezone_name: str
    timezone: ZoneInfo


def load_runtime_settings(env: Mapping[str, str] | None = None) -> RuntimeSettings:
    """
    Parse runtime settings from environment variables.

    Args:
        env: Optional mapping for testability. Defaults to os.environ merged
            with a ``.env`` file in the working directory.
    """
    source = _with_dotenv_defaults(os.environ) if env is None else env

    extract = PowerPositionSettings(
        output_dir=_text(source.get('POWER_POSITION_OUTPUT_DIR')) or '',
        extract_interval_minutes=_parse_int(
            source.get('POWER_POSITION_INTERVAL_MINUTES'), 'POWER_POSITION_INTERVAL_MINUTES', 60
        ),
        max_retry_attempts=_parse_int(
            source.get('POWER_POSITION_MAX_RETRY_ATTEMPTS'), 'POWER_POSITION_MAX_RETRY_ATTEMPTS', 3
        ),
        retry_delay_seconds=_parse_int(
            source.get('POWER_POSITION_RETRY_DELAY_SECONDS'), 'POWER_POSITION_RETRY_DELAY_SECONDS', 10
        ),
        fail_fast_on_configuration_error=_parse_bool(
            source.get('POWER_POSITION_FAIL_FAST'), 'POWER_POSITION_FAIL_FAST', True
        ),
    )

    kind = (_text(source.get('TRADE_SOURCE')) or 'simulated').lower()
    if kind not in TRADE_SOURCES:
        raise ValueError(f'TRADE_SOURCE must be one of {", ".join(TRADE_SOURCES)}, got {kind!r}')
    trade_source = TradeSourceSettings(
        kind=kind,
        directory=_text(source.get('TRADE_SOURCE_DIR')),
        failure_rate=_parse_float(source.get('TRADE_SOURCE_FAILURE_RATE'), 'TRADE_SOURCE_FAILURE_RATE', 0.1),
        seed=_parse_optional_int(source.get('TRADE_SOURCE_SEED'), 'TRADE_SOURCE_SEED'),
    )

    tz_name = _text(source.get('TIMEZONE', DEFAULT_TIMEZONE)) or DEFAULT_TIMEZONE
    timezone = load_timezone(tz_name)

    log_level = (_text(source.get('LOG_LEVEL', 'INFO')) or 'INFO').upper()
    log_dir = _text(source.get('LOG_DIR', 'logs'))
    structured_logs = _parse_bool(source.get('LOG_STRUCTURED'), 'LOG_STRUCTURED', False)

    return RuntimeSettings(
        extract=extract,
        trade_source=trade_source,
        log_level=log_level,
        log_dir=log_dir,
        structured_logs=structured_logs,
        timezone_name=tz_name,
        timezone=timezone,
    )


def _with_dotenv_defaults(env: Mapping[str, str], path: Path = Path('.env')) -> dict[str, str]:
    """Overlay ``env`` on the entries of a ``.env`` file; real variables win."""
    merged = _read_dotenv(path)
    merged.update(env)
    return merged


def _read_dotenv(path: Path) -> dict[str, str]:
    """Parse ``KEY=value`` lines, allowing ``export``, quotes and trailing ``# comments``."""
    try:
        lines = path.read_text(encoding='utf-8').splitlines()
    except FileNotFoundError:
        return {}
    except OSError as exc:
        raise ValueError(f'Unable to read {path}: {exc}') from exc

    entries: dict[str, str] = {}
    for line in lines:
        line = line.strip()
        if line.startswith('#'):
            continue
        if line.startswith('export '):
            line = line[len('export ') :]
        key, sep, value = line.partition('=')
        key = key.strip()
        if sep and key:
            entries[key] = _dotenv_value(value.strip())
    return entries


def _dotenv_value(value: str) -> str:
    if value[:1] in ('"', "'"):
        closed = len(value) >= 2 and value.endswith(value[0])
        return value[1:-1] if closed else value[1:]
    comment = _INLINE_COMMENT.search(value)
    return value[: comment.start()].rstrip() if comment else value


def _text(value: str | None) -> str | None:
    """Strip ``value``; blank strings count as unset."""
    if value is None:
        return None
    return value.strip() or None


def _parse_int(raw: str | None, key: str, default: int) -> int:
    cleaned = _text(raw)
    if cleaned is None:
        return default
    try:
        return int(cleaned)
    except (TypeError, ValueError):
        raise ValueError(f'{key} must be an integer, got {raw!r}') from None


def _parse_optional_int(raw: str | None, key: str) -> int | None:
    cleaned = _text(raw)
    if cleaned is None:
        return None
    return _parse_int(cleaned, key, 0)


def _parse_float(raw: str | None, key: str, default: float) -> float:
    cleaned = _text(raw)
    if cleaned is None:
        return default
    try:
        return float(cleaned)
    except (TypeError, ValueError):
        raise ValueError(f'{key} must be a number, got {raw!r}') from None


def _parse_bool(raw: str | None, key: str, default: bool) -> bool:
    cleaned = _text(raw)
    if cleaned is None:
        return default
    lowered = cleaned.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f'{key} must be a boolean, got {raw!r}')
