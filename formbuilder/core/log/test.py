"""Tests for core logging module."""

import logging
from io import StringIO

import pytest

from .lib import get_logger, setup_logging


class TestLogging:
    """Test core logging API."""

    @pytest.mark.unit
    def test_get_logger_namespaced(self) -> None:
        """Area names are placed under the package namespace."""
        logger = get_logger("session")
        assert logger.name == "formbuilder.session"
        assert isinstance(logger, logging.Logger)

    @pytest.mark.unit
    def test_get_logger_default_name(self) -> None:
        """Verify default logger name."""
        assert get_logger().name == "formbuilder"

    @pytest.mark.unit
    def test_get_logger_keeps_module_names(self) -> None:
        """Module __name__ values are not prefixed twice."""
        assert get_logger("formbuilder.view.lib").name == "formbuilder.view.lib"

    @pytest.mark.unit
    def test_setup_logging(self) -> None:
        """Verify logging setup does not alter child logger levels."""
        stream = StringIO()
        setup_logging(level=logging.DEBUG, stream=stream)
        logger = get_logger("test_setup")
        logger.debug("test message")
        assert logger.level == logging.NOTSET
