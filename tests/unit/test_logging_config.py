"""
Unit tests for sequtils.utils.logging

Covers JSON and console formatting, ContextLogger, setup_logging and
environment-based configuration.
"""

import json
import logging
import logging.handlers
import os
import tempfile
from unittest.mock import patch

import pytest

from sequtils.exceptions import ConfigurationError
from sequtils.utils.logging import (
    ConsoleFormatter,
    ContextLogger,
    JSONFormatter,
    configure_from_env,
    get_logger,
    setup_logging,
    shutdown_logging,
)


def make_record(msg="Test message", level=logging.INFO, **extra):
    record = logging.LogRecord(
        name="test_logger",
        level=level,
        pathname="/path/to/test.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Test JSONFormatter class"""

    def test_init_with_defaults(self):
        formatter = JSONFormatter()

        assert formatter.include_timestamp is True
        assert formatter.include_hostname is True
        assert formatter.app_name == "sequtils"
        assert formatter.hostname is not None

    def test_init_without_hostname(self):
        formatter = JSONFormatter(include_hostname=False, app_name="test-app")

        assert formatter.hostname is None
        assert formatter.app_name == "test-app"

    def test_format_basic_log_record(self):
        data = json.loads(JSONFormatter().format(make_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "test_logger"
        assert data["message"] == "Test message"
        assert data["app"] == "sequtils"
        assert "timestamp" in data
        assert "hostname" in data
        assert data["source"]["file"] == "/path/to/test.py"
        assert data["source"]["line"] == 42
        assert "thread_name" in data["process"]

    def test_format_without_timestamp(self):
        data = json.loads(JSONFormatter(include_timestamp=False).format(make_record()))

        assert "timestamp" not in data

    def test_format_with_exception_info(self):
        record = make_record(level=logging.ERROR)
        try:
            raise ValueError("Test exception")
        except ValueError:
            import sys
            record.exc_info = sys.exc_info()

        data = json.loads(JSONFormatter().format(record))

        assert data["exception"]["type"] == "ValueError"
        assert data["exception"]["message"] == "Test exception"
        assert isinstance(data["exception"]["traceback"], list)

    def test_format_with_extra_context(self):
        record = make_record(operation="for_all", item_count=12)

        data = json.loads(JSONFormatter().format(record))

        assert data["context"] == {"operation": "for_all", "item_count": 12}

    def test_format_excludes_internal_fields(self):
        record = make_record(_private="hidden")

        data = json.loads(JSONFormatter().format(record))

        assert "context" not in data

    def test_non_serializable_context_stringified(self):
        record = make_record(obj=object())

        data = json.loads(JSONFormatter().format(record))

        assert data["context"]["obj"].startswith("<object object")


class TestConsoleFormatter:
    """Test ConsoleFormatter class"""

    def test_init_without_colors(self):
        assert ConsoleFormatter(use_colors=False).use_colors is False

    @patch("sys.stderr.isatty", return_value=True)
    def test_format_with_colors_enabled(self, mock_isatty):
        formatter = ConsoleFormatter(use_colors=True)
        record = make_record(level=logging.ERROR)
        record.levelname = "ERROR"

        result = formatter.format(record)

        assert "\033[31m" in result
        assert ConsoleFormatter.RESET in result
        # The record is left untouched for other handlers
        assert record.levelname == "ERROR"

    def test_format_without_colors(self):
        result = ConsoleFormatter(use_colors=False).format(make_record())

        assert "[INFO]" in result
        assert "test_logger: Test message" in result
        assert "\033[" not in result

    def test_format_includes_thread_name(self):
        record = make_record()
        record.threadName = "sequtils_0"

        result = ConsoleFormatter(use_colors=False).format(record)

        assert "sequtils_0" in result

    def test_format_with_extra_context(self):
        record = make_record(operation="for_all", launched=3)

        result = ConsoleFormatter(use_colors=False).format(record)

        assert result.endswith("[operation=for_all, launched=3]")


class TestSetupLogging:
    """Test setup_logging and shutdown_logging"""

    def teardown_method(self):
        shutdown_logging()

    def test_setup_logging_with_defaults(self):
        root_handlers = list(logging.getLogger().handlers)

        logger = setup_logging()

        assert logger is logging.getLogger("sequtils")
        assert logger.level == logging.INFO
        assert logger.propagate is False
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, ConsoleFormatter)
        assert logging.getLogger().handlers == root_handlers

    def test_setup_logging_with_invalid_level_defaults_to_info(self):
        assert setup_logging(level="INVALID").level == logging.INFO

    def test_setup_logging_with_json_format(self):
        logger = setup_logging(json_format=True)

        assert isinstance(logger.handlers[0].formatter, JSONFormatter)

    def test_setup_logging_with_file(self):
        with tempfile.TemporaryDirectory() as tmp_dir:
            log_file = os.path.join(tmp_dir, "nested", "app.log")

            logger = setup_logging(log_file=log_file, console_output=False)

            assert len(logger.handlers) == 1
            assert isinstance(logger.handlers[0], logging.handlers.RotatingFileHandler)
            assert os.path.isdir(os.path.dirname(log_file))
            shutdown_logging()

    def test_library_records_reach_file_with_context(self):
        with tempfile.TemporaryDirectory() as tmp_dir:
            log_file = os.path.join(tmp_dir, "sequtils.log")
            setup_logging(level="DEBUG", log_file=log_file, console_output=False, json_format=True)

            get_logger("sequtils.parallel.fanout", component="fanout").info(
                "Launched", launched=3
            )
            shutdown_logging()

            with open(log_file, encoding="utf-8") as fh:
                records = [json.loads(line) for line in fh]

        launched = [r for r in records if r["message"] == "Launched"]
        assert launched[0]["logger"] == "sequtils.parallel.fanout"
        assert launched[0]["app"] == "sequtils"
        assert launched[0]["context"] == {"component": "fanout", "launched": 3}

    def test_other_loggers_not_captured(self):
        with tempfile.TemporaryDirectory() as tmp_dir:
            log_file = os.path.join(tmp_dir, "sequtils.log")
            setup_logging(log_file=log_file, console_output=False)

            logging.getLogger("someapp").warning("Not for sequtils")
            shutdown_logging()

            with open(log_file, encoding="utf-8") as fh:
                assert "Not for sequtils" not in fh.read()

    def test_repeated_setup_replaces_handlers(self):
        setup_logging()
        logger = setup_logging(json_format=True)

        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)

    def test_no_outputs_keeps_propagation(self):
        logger = setup_logging(console_output=False)

        assert logger.handlers == []
        assert logger.propagate is True

    def test_shutdown_leaves_foreign_handlers(self):
        logger = logging.getLogger("sequtils")
        foreign = logging.NullHandler()
        logger.addHandler(foreign)
        try:
            setup_logging()

            shutdown_logging()

            assert logger.handlers == [foreign]
            assert logger.propagate is True
            assert logger.level == logging.NOTSET
        finally:
            logger.removeHandler(foreign)

    def test_get_logger_returns_context_logger(self):
        logger = get_logger("sequtils.parallel.query", component="for_all")

        assert isinstance(logger, ContextLogger)
        assert logger.logger.name == "sequtils.parallel.query"
        assert logger.get_context() == {"component": "for_all"}


class TestContextLogger:
    """Test ContextLogger class"""

    @patch("logging.Logger.log")
    def test_info_adds_context(self, mock_log):
        logger = ContextLogger("test", component="fanout")
        logger.logger.setLevel(logging.DEBUG)

        logger.info("Launched", launched=3)

        mock_log.assert_called_once_with(
            logging.INFO,
            "Launched",
            exc_info=None,
            extra={"component": "fanout", "launched": 3},
        )

    @patch("logging.Logger.log")
    def test_error_with_exc_info(self, mock_log):
        logger = ContextLogger("test")
        logger.logger.setLevel(logging.DEBUG)

        logger.error("Failed", exc_info=True)

        assert mock_log.call_args.kwargs["exc_info"] is True

    @patch("logging.Logger.log")
    def test_disabled_level_skipped(self, mock_log):
        logger = ContextLogger("test.disabled")
        logger.logger.setLevel(logging.ERROR)

        logger.debug("Not emitted")

        mock_log.assert_not_called()

    def test_bind_returns_new_logger(self):
        logger = ContextLogger("test", component="fanout")

        bound = logger.bind(operation="x")

        assert bound.get_context() == {"component": "fanout", "operation": "x"}
        assert logger.get_context() == {"component": "fanout"}

    def test_update_context(self):
        logger = ContextLogger("test", a=1)

        logger.update_context(a=2, b=3)

        assert logger.get_context() == {"a": 2, "b": 3}

    def test_get_context_returns_copy(self):
        logger = ContextLogger("test", a=1)

        logger.get_context()["a"] = 99

        assert logger.get_context() == {"a": 1}


class TestConfigureFromEnv:
    """Test configure_from_env function"""

    @patch.dict(os.environ, {
        "SEQUTILS_LOG_LEVEL": "DEBUG",
        "SEQUTILS_LOG_FILE": "/tmp/sequtils.log",
        "SEQUTILS_LOG_JSON": "yes",
        "SEQUTILS_LOG_CONSOLE": "false",
    })
    @patch("sequtils.utils.logging.config.setup_logging")
    def test_configure_from_env_all_vars_set(self, mock_setup):
        configure_from_env()

        mock_setup.assert_called_once_with(
            level="DEBUG",
            log_file="/tmp/sequtils.log",
            console_output=False,
            json_format=True,
        )

    @patch.dict(os.environ, {}, clear=True)
    @patch("sequtils.utils.logging.config.setup_logging")
    def test_configure_from_env_with_defaults(self, mock_setup):
        configure_from_env()

        mock_setup.assert_called_once_with(
            level="INFO",
            log_file=None,
            console_output=True,
            json_format=False,
        )

    @patch.dict(os.environ, {"SEQUTILS_LOG_JSON": "sometimes"})
    def test_configure_from_env_invalid_bool(self):
        with pytest.raises(ConfigurationError, match="SEQUTILS_LOG_JSON"):
            configure_from_env()
