"""Tests for log level resolution and formatter selection."""

import argparse
import logging

import pytest

from logging_config import (
    DetailedErrorFormatter,
    add_log_level_argument,
    configure_logging,
    get_log_level,
)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def make_record(level):
    return logging.LogRecord("report", level, "report.py", 42, "message", None, None, func="refresh")


class TestGetLogLevel:

    def test_cli_takes_precedence(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        assert get_log_level("debug") == logging.DEBUG

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "warning")
        assert get_log_level() == logging.WARNING

    def test_default(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        assert get_log_level() == logging.INFO

    def test_invalid(self):
        with pytest.raises(ValueError, match="Invalid log level"):
            get_log_level("verbose")


class TestDetailedErrorFormatter:

    def test_errors_include_location(self):
        text = DetailedErrorFormatter().format(make_record(logging.ERROR))
        assert "refresh:42" in text

    def test_info_is_concise(self):
        text = DetailedErrorFormatter().format(make_record(logging.INFO))
        assert "refresh:42" not in text
        assert text.endswith("INFO - report - message")


class TestConfigureLogging:

    def test_console_and_file_handlers(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "report.log"

        root = configure_logging(log_file=str(log_file), log_level="DEBUG")

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 2
        assert logging.getLogger("urllib3").level == logging.WARNING

    def test_custom_format(self, restore_root_logger):
        root = configure_logging(log_level="INFO", log_format="%(message)s")
        assert not isinstance(root.handlers[0].formatter, DetailedErrorFormatter)


class TestAddLogLevelArgument:

    def test_parses_level(self):
        parser = argparse.ArgumentParser()
        add_log_level_argument(parser)

        assert parser.parse_args(["--log-level", "warning"]).log_level == "WARNING"
        assert parser.parse_args([]).log_level is None

    def test_rejects_unknown_level(self):
        parser = argparse.ArgumentParser()
        add_log_level_argument(parser)

        with pytest.raises(SystemExit):
            parser.parse_args(["--log-level", "TRACE"])
