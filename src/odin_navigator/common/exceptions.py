"""Custom exceptions for ODIN Navigator.

Provides a hierarchy of exceptions for configuration problems.
Governor policy outcomes are plain return values, not exceptions.
"""

from typing import Any, Dict, Optional


class OdinNavigatorError(Exception):
    """Base exception for all ODIN Navigator errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional context about the error
    """

    def __init__(
        self,
        message: str,
        code: str = "ODIN_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for display panels."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(OdinNavigatorError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONFIG_ERROR", details=details)


class BoundaryConfigurationError(ConfigurationError):
    """Raised when a decision boundary table cannot be loaded."""

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        details = details or {}
        if source is not None:
            details["source"] = source
        super().__init__(message, details=details)
        self.code = "BOUNDARY_CONFIG_ERROR"
