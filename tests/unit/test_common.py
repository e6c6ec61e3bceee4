"""Tests for shared logging and exception helpers."""

import logging
import os
from unittest.mock import patch

from odin_navigator.common import (
    BoundaryConfigurationError,
    ConfigurationError,
    OdinNavigatorError,
    get_logger,
)


class TestGetLogger:

    def test_explicit_level(self):
        logger = get_logger("odin_test.explicit", "debug")

        assert logger.level == logging.DEBUG

    def test_level_from_env(self):
        with patch.dict(os.environ, {"ODIN_LOG_LEVEL": "WARNING"}):
            logger = get_logger("odin_test.env")

        assert logger.level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self):
        assert get_logger("odin_test.unknown", "chatty").level == logging.INFO

    def test_handler_added_once(self):
        get_logger("odin_test.handlers")
        logger = get_logger("odin_test.handlers")

        assert len(logger.handlers) == 1


class TestExceptions:

    def test_to_dict(self):
        error = OdinNavigatorError("boom", details={"phase": "landing"})

        assert error.to_dict() == {
            "error": "ODIN_ERROR",
            "message": "boom",
            "details": {"phase": "landing"},
        }
        assert str(error) == "boom"

    def test_boundary_error_hierarchy(self):
        error = BoundaryConfigurationError("bad table", source="table.yaml")

        assert isinstance(error, ConfigurationError)
        assert isinstance(error, OdinNavigatorError)
        assert error.code == "BOUNDARY_CONFIG_ERROR"
        assert error.details == {"source": "table.yaml"}
