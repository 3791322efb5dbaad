"""
Tests for supply_radar/utils/logging.py.

Covers:
  - _JsonFormatter: required keys, extra fields, exception text
  - _TextFormatter: extras appended in brackets, UTC stamp
  - configure_logging(): root level, optional file handler, quiet HTTP loggers,
    console stream override
"""

from __future__ import annotations

import io
import json
import logging
import sys

import pytest

from supply_radar.config import LoggingConfig
from supply_radar.utils.logging import _JsonFormatter, _TextFormatter, configure_logging


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


def _record(msg: str = "Feed [%s] failed", args=("news:gdelt",), **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="supply_radar.ingestion.resilient", level=logging.WARNING,
        pathname=__file__, lineno=1, msg=msg, args=args, exc_info=None,
    )
    for key, val in extra.items():
        setattr(record, key, val)
    return record


class TestJsonFormatter:
    def test_required_keys(self):
        payload = json.loads(_JsonFormatter().format(_record()))
        assert payload["level"] == "WARNING"
        assert payload["logger"] == "supply_radar.ingestion.resilient"
        assert payload["msg"] == "Feed [news:gdelt] failed"
        assert payload["ts"].endswith("Z")

    def test_extra_fields_included(self):
        payload = json.loads(_JsonFormatter().format(_record(feed="news:gdelt")))
        assert payload["feed"] == "news:gdelt"

    def test_exception_text(self):
        try:
            raise ValueError("bad payload")
        except ValueError:
            record = _record()
            record.exc_info = sys.exc_info()
        payload = json.loads(_JsonFormatter().format(record))
        assert "ValueError: bad payload" in payload["exc"]


class TestTextFormatter:
    def test_extras_in_brackets(self):
        line = _TextFormatter().format(_record(feed="news:gdelt"))
        assert line.endswith("Feed [news:gdelt] failed [feed=news:gdelt]")
        assert " WARNING supply_radar.ingestion.resilient: " in line

    def test_no_extras_no_brackets(self):
        line = _TextFormatter().format(_record())
        assert line.endswith("Feed [news:gdelt] failed")
        assert line[:20].endswith("Z")


class TestConfigureLogging:
    def test_sets_root_level(self):
        configure_logging(LoggingConfig(level="DEBUG"))
        assert logging.getLogger().level == logging.DEBUG

    def test_http_loggers_quieted(self):
        configure_logging(LoggingConfig(level="DEBUG"))
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING

    def test_file_handler_writes_json(self, tmp_path):
        log_file = tmp_path / "logs" / "radar.log"
        configure_logging(LoggingConfig(level="INFO", log_file=str(log_file), json_format=True))
        logging.getLogger("supply_radar.test").info("snapshot built")
        for handler in logging.getLogger().handlers:
            handler.flush()
        line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
        assert json.loads(line)["msg"] == "snapshot built"

    def test_console_stream_override(self):
        buffer = io.StringIO()
        configure_logging(LoggingConfig(level="INFO"), stream=buffer)
        logging.getLogger("supply_radar.test").warning("feed down")
        assert "feed down" in buffer.getvalue()
