"""Unit tests for logging configuration module.

Tests verify that the logging configuration functions work correctly with different
scenarios including various log levels, formats, and file logging options.
"""

import logging
from unittest.mock import patch

import pytest

from orgdesk.core.logging_config import (
    DETAILED_FORMAT,
    JSON_FORMAT,
    MODULE_LOG_LEVELS,
    SIMPLE_FORMAT,
    _resolve_format,
    get_logger,
    setup_logging,
)


def _console_handler() -> logging.Handler:
    root_logger = logging.getLogger()
    return next(
        h
        for h in root_logger.handlers
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
    )


class TestSetupLoggingLogLevels:
    """Test setup_logging with different log levels."""

    @pytest.mark.parametrize(
        "log_level,expected_level",
        [
            ("DEBUG", logging.DEBUG),
            ("INFO", logging.INFO),
            ("WARNING", logging.WARNING),
            ("ERROR", logging.ERROR),
            ("debug", logging.DEBUG),  # Test lowercase
        ],
    )
    def test_setup_logging_with_different_levels(self, log_level, expected_level):
        setup_logging(log_level=log_level, enable_file=False)

        assert _console_handler().level == expected_level

    def test_root_logger_captures_everything(self):
        setup_logging(log_level="ERROR", enable_file=False)

        assert logging.getLogger().level == logging.DEBUG


class TestSetupLoggingFormats:
    """Test setup_logging with different log formats."""

    @pytest.mark.parametrize(
        "log_format,expected_format",
        [
            ("simple", SIMPLE_FORMAT),
            ("detailed", DETAILED_FORMAT),
            ("json", JSON_FORMAT),
        ],
    )
    def test_setup_logging_with_different_formats(self, log_format, expected_format):
        setup_logging(log_format=log_format, enable_file=False)

        handler = _console_handler()
        assert handler.formatter._fmt == expected_format
        assert handler.formatter.datefmt == "%Y-%m-%d %H:%M:%S"

    def test_unknown_format_falls_back_to_detailed(self):
        assert _resolve_format("fancy") == DETAILED_FORMAT


class TestSetupLoggingFileHandling:
    """Test setup_logging file logging functionality."""

    def test_file_handler_logs_debug(self, tmp_path):
        with patch("orgdesk.core.logging_config.LOG_FILE_DIR", str(tmp_path)):
            with patch("orgdesk.core.logging_config.ENABLE_FILE_LOGGING", True):
                setup_logging(log_level="ERROR", enable_file=True)

                file_handler = next(h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler))

                assert file_handler.level == logging.DEBUG
                assert file_handler.baseFilename == str(tmp_path / "orgdesk.log")

        setup_logging(enable_file=False)

    def test_no_file_handler_when_disabled(self):
        setup_logging(enable_file=False)

        assert not any(isinstance(h, logging.FileHandler) for h in logging.getLogger().handlers)

    def test_repeated_setup_does_not_duplicate_handlers(self):
        setup_logging(enable_file=False)
        setup_logging(enable_file=False)

        assert len(logging.getLogger().handlers) == 1


class TestModuleLogLevels:
    @pytest.mark.parametrize(
        "module_name,expected_level",
        [
            ("orgdesk.permissions", logging.DEBUG),
            ("orgdesk.server.api", logging.DEBUG),
            ("orgdesk.core.database", logging.INFO),
            ("sqlalchemy.engine", logging.WARNING),
            ("httpx", logging.WARNING),
        ],
    )
    def test_module_specific_log_levels(self, module_name, expected_level):
        setup_logging(enable_file=False)

        assert logging.getLogger(module_name).level == expected_level

    def test_all_module_log_levels_configured(self):
        setup_logging(enable_file=False)

        for module_name, level in MODULE_LOG_LEVELS.items():
            assert logging.getLogger(module_name).level == logging.getLevelName(level)


class TestGetLogger:
    def test_get_logger_returns_named_logger(self):
        logger = get_logger("orgdesk.calendar.aggregation")

        assert isinstance(logger, logging.Logger)
        assert logger.name == "orgdesk.calendar.aggregation"

    def test_same_name_returns_same_instance(self):
        assert get_logger("orgdesk.storage") is get_logger("orgdesk.storage")

    def test_child_inherits_module_level(self):
        setup_logging(enable_file=False)

        child = get_logger("orgdesk.permissions.resolver")

        assert child.getEffectiveLevel() == logging.DEBUG
