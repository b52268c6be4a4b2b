"""Tests for sqlseed.utils.logging_config module."""

from __future__ import annotations

import io
import logging
import sys

import pytest

from sqlseed.utils.logging_config import LOG_FORMAT, get_logger, setup_logging


class TestSetupLogging:
    """Tests for setup_logging function."""

    def teardown_method(self) -> None:
        """Reset logging after each test."""
        root = logging.getLogger()
        for handler in root.handlers[:]:
            root.removeHandler(handler)
        root.setLevel(logging.WARNING)

    @pytest.mark.parametrize(
        ("name", "level"),
        [
            ("DEBUG", logging.DEBUG),
            ("INFO", logging.INFO),
            ("WARNING", logging.WARNING),
            ("ERROR", logging.ERROR),
        ],
    )
    def test_sets_level(self, name: str, level: int) -> None:
        setup_logging(name)
        assert logging.getLogger().level == level

    def test_default_level_is_info(self) -> None:
        setup_logging()
        assert logging.getLogger().level == logging.INFO

    def test_level_case_insensitive(self) -> None:
        setup_logging("debug")
        assert logging.getLogger().level == logging.DEBUG

    @pytest.mark.parametrize("name", ["INVALID_LEVEL", "basic_format"])
    def test_invalid_level_defaults_to_info(self, name: str) -> None:
        """Unknown names, including non-level logging attributes, give INFO."""
        setup_logging(name)
        assert logging.getLogger().level == logging.INFO

    def test_stdout_handler_by_default(self) -> None:
        setup_logging("INFO")
        root = logging.getLogger()

        assert len(root.handlers) == 1
        handler = root.handlers[0]
        assert isinstance(handler, logging.StreamHandler)
        assert handler.stream == sys.stdout

    def test_custom_stream(self) -> None:
        """Log lines go to the requested stream."""
        stream = io.StringIO()
        setup_logging("INFO", stream=stream)

        get_logger("sqlseed.test").info("hello")

        assert "sqlseed.test - INFO - hello" in stream.getvalue()

    def test_handler_level_and_format(self) -> None:
        setup_logging("WARNING")
        handler = logging.getLogger().handlers[0]

        assert handler.level == logging.WARNING
        assert handler.formatter is not None
        assert handler.formatter._fmt == LOG_FORMAT

    def test_calling_twice_replaces_handlers(self) -> None:
        root = logging.getLogger()
        root.addHandler(logging.StreamHandler())

        setup_logging("INFO")
        setup_logging("DEBUG")

        assert len(root.handlers) == 1
        assert root.level == logging.DEBUG


class TestGetLogger:
    """Tests for get_logger function."""

    def test_returns_named_logger(self) -> None:
        logger = get_logger("sqlseed.test")
        assert isinstance(logger, logging.Logger)
        assert logger.name == "sqlseed.test"

    def test_same_name_returns_same_logger(self) -> None:
        assert get_logger("same.name") is get_logger("same.name")

    def test_levels_filter_output(self) -> None:
        stream = io.StringIO()
        setup_logging("WARNING", stream=stream)
        try:
            logger = get_logger("sqlseed.filter")
            logger.info("quiet")
            logger.warning("loud")
        finally:
            root = logging.getLogger()
            for handler in root.handlers[:]:
                root.removeHandler(handler)
            root.setLevel(logging.WARNING)

        output = stream.getvalue()
        assert "loud" in output
        assert "quiet" not in output
