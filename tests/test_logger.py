"""Tests for the logging setup module."""

import io
import logging

from crewbooks_ocr.utils.logger import get_logger, setup_logging


class TestSetupLogging:
    """Tests for the setup_logging function."""

    def setup_method(self) -> None:
        self.root = logging.getLogger()
        self.saved_level = self.root.level

    def teardown_method(self) -> None:
        self.root.handlers.clear()
        self.root.setLevel(self.saved_level)

    def test_setup_creates_handler(self) -> None:
        self.root.handlers.clear()
        setup_logging("DEBUG")
        assert len(self.root.handlers) == 1
        assert self.root.level == logging.DEBUG

    def test_setup_idempotent(self) -> None:
        self.root.handlers.clear()
        setup_logging("INFO")
        count = len(self.root.handlers)
        setup_logging("DEBUG")
        assert len(self.root.handlers) == count
        assert self.root.level == logging.INFO

    def test_setup_lowercase_level(self) -> None:
        self.root.handlers.clear()
        setup_logging("warning")
        assert self.root.level == logging.WARNING

    def test_setup_invalid_level_defaults_to_info(self) -> None:
        self.root.handlers.clear()
        setup_logging("NONEXISTENT")
        assert self.root.level == logging.INFO

    def test_writes_formatted_records(self) -> None:
        self.root.handlers.clear()
        stream = io.StringIO()
        setup_logging("INFO", stream=stream)
        get_logger("crewbooks_ocr.test").info("normalized %d fields", 3)
        line = stream.getvalue().strip()
        assert line.endswith("crewbooks_ocr.test - INFO - normalized 3 fields")


class TestGetLogger:
    """Tests for the get_logger function."""

    def test_returns_named_logger(self) -> None:
        logger = get_logger("test.module")
        assert logger.name == "test.module"
        assert isinstance(logger, logging.Logger)

    def test_same_name_returns_same_logger(self) -> None:
        logger1 = get_logger("test.same")
        logger2 = get_logger("test.same")
        assert logger1 is logger2
