"""
Logging setup for Supply Radar.

``configure_logging(config)`` is called exactly once by the CLI, before the
server starts or a snapshot is built. Library modules only ever ask for
``logging.getLogger(__name__)``.

Feed failures are logged with ``extra={"feed": ..., "status": ...}``. Both
formatters surface those fields:

  text  ``2026-02-24T15:00:00Z WARNING supply_radar.ingestion.resilient: Feed timed out [feed=news:gdelt]``
  json  ``{"ts": "2026-02-24T15:00:00Z", "level": "WARNING", "logger": "...", "msg": "...", "feed": "news:gdelt"}``
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, TextIO

if TYPE_CHECKING:
    from supply_radar.config import LoggingConfig

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")

_STANDARD_RECORD_KEYS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None))
) | {"message", "asctime"}


def _record_extras(record: logging.LogRecord) -> dict[str, Any]:
    """Fields attached through ``extra=`` on the logging call."""
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _STANDARD_RECORD_KEYS and not key.startswith("_")
    }


def _utc_stamp(record: logging.LogRecord) -> str:
    return datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(TIMESTAMP_FORMAT)


class _TextFormatter(logging.Formatter):
    """Human-readable lines with any extras appended as ``[key=value ...]``."""

    def __init__(self) -> None:
        super().__init__(TEXT_FORMAT)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        return _utc_stamp(record)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = _record_extras(record)
        if not extras:
            return line
        tail = " ".join(f"{key}={value}" for key, value in extras.items())
        head, sep, trace = line.partition("\n")
        return f"{head} [{tail}]{sep}{trace}"


class _JsonFormatter(logging.Formatter):
    """One JSON object per line: ``ts``, ``level``, ``logger``, ``msg``, then extras."""

    def format(self, record: logging.LogRecord) -> str:
        document: dict[str, Any] = {
            "ts": _utc_stamp(record),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        document.update(_record_extras(record))
        if record.exc_info:
            document["exc"] = self.formatException(record.exc_info)
        return json.dumps(document, default=str)


def _handlers_for(
    config: "LoggingConfig", formatter: logging.Formatter, stream: TextIO
) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(stream)]
    if config.log_file:
        path = Path(config.log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure_logging(config: "LoggingConfig", stream: Optional[TextIO] = None) -> None:
    """Install a console (and optionally file) handler on the root logger.

    The console handler writes to ``stream``, stdout by default. Commands
    that print a document on stdout pass ``sys.stderr`` instead.

    An unknown ``config.level`` name falls back to INFO. HTTP client and
    access-log chatter is held at WARNING regardless of the root level.
    """
    level = logging.getLevelName(config.level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    formatter = _JsonFormatter() if config.json_format else _TextFormatter()
    handlers = _handlers_for(config, formatter, stream or sys.stdout)
    logging.basicConfig(level=level, handlers=handlers, force=True)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
