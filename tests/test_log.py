"""Tests for logging setup."""

import io
import logging

import pytest

from sigfilt.config import EngineSettings, set_settings
from sigfilt.log import ROOT_LOGGER_NAME, configure_logging, get_logger
from sigfilt.processing import FirFilter
from sigfilt.models import DiscreteSignal


@pytest.fixture
def restore_logger():
    """Remove handlers added by a test."""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    handlers = list(root.handlers)
    level = root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestLogging:
    """Tests for get_logger and configure_logging."""

    def test_get_logger_prefixes_namespace(self) -> None:
        """Loggers live under the sigfilt namespace."""
        assert get_logger("tests").name == "sigfilt.tests"
        assert get_logger("sigfilt.design").name == "sigfilt.design"

    def test_package_has_null_handler(self) -> None:
        """Importing sigfilt installs a NullHandler."""
        root = logging.getLogger(ROOT_LOGGER_NAME)
        assert any(isinstance(h, logging.NullHandler) for h in root.handlers)

    def test_configure_logging_writes_to_stream(self, restore_logger: logging.Logger) -> None:
        """Configured handler formats records from library modules."""
        stream = io.StringIO()
        configure_logging("DEBUG", stream=stream)
        FirFilter([0.5, 0.5]).apply_to(DiscreteSignal(100, [1.0, 2.0]))
        assert "FIR apply_to: direct path" in stream.getvalue()

    def test_configure_logging_is_idempotent(self, restore_logger: logging.Logger) -> None:
        """Calling twice keeps a single stream handler."""
        configure_logging("INFO", stream=io.StringIO())
        root = configure_logging("INFO", stream=io.StringIO())
        streams = [h for h in root.handlers if not isinstance(h, logging.NullHandler)]
        assert len(streams) == 1

    def test_level_defaults_to_settings(self, restore_logger: logging.Logger) -> None:
        """Level comes from the active settings when omitted."""
        set_settings(EngineSettings(log_level="ERROR"))
        root = configure_logging(stream=io.StringIO())
        assert root.level == logging.ERROR
