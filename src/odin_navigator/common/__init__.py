"""Common utilities - logging, config, exceptions."""

from odin_navigator.common.logging.logger import get_logger
from odin_navigator.common.config import Config, get_config, reset_config
from odin_navigator.common.exceptions import (
    OdinNavigatorError,
    ConfigurationError,
    BoundaryConfigurationError,
)

__all__ = [
    # Logging
    "get_logger",
    # Config
    "Config",
    "get_config",
    "reset_config",
    # Exceptions
    "OdinNavigatorError",
    "ConfigurationError",
    "BoundaryConfigurationError",
]
