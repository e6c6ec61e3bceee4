"""Configuration management - Centralized configuration for ODIN Navigator.

Provides environment-aware configuration with sensible defaults.
All configuration is loaded from environment variables with fallbacks.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from odin_navigator.common.constants import OverrideConstants, PhaseConstants
from odin_navigator.common.exceptions import ConfigurationError


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def _get_project_root() -> Path:
    """Get the project root directory."""
    # settings.py -> config -> common -> odin_navigator -> src -> project_root
    return Path(__file__).resolve().parents[4]


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("true", "yes", "1")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(
            f"{name} must be an integer, got {raw!r}",
            details={"variable": name},
        )


def _env_enum(enum_cls, name: str, default: str):
    raw = os.getenv(name, default)
    try:
        return enum_cls(raw)
    except ValueError:
        allowed = [member.value for member in enum_cls]
        raise ConfigurationError(
            f"{name} must be one of {allowed}, got {raw!r}",
            details={"variable": name, "allowed": allowed},
        )


def _env_path(name: str) -> Optional[Path]:
    raw = os.getenv(name)
    return Path(raw) if raw else None


@dataclass
class Config:
    """Central configuration object for ODIN Navigator.

    All settings can be overridden via environment variables prefixed with ODIN_.

    Example:
        ODIN_ENVIRONMENT=production
        ODIN_LOG_LEVEL=INFO
        ODIN_MISSION_PHASE=orbital
    """

    # Core settings
    environment: Environment = field(
        default_factory=lambda: _env_enum(Environment, "ODIN_ENVIRONMENT", "development")
    )
    debug: bool = field(
        default_factory=lambda: _env_bool("ODIN_DEBUG", "false")
    )
    log_level: LogLevel = field(
        default_factory=lambda: _env_enum(LogLevel, "ODIN_LOG_LEVEL", "INFO")
    )

    # Paths
    project_root: Path = field(default_factory=_get_project_root)
    boundary_file: Optional[Path] = field(
        default_factory=lambda: _env_path("ODIN_BOUNDARY_FILE")
    )

    # Governor settings
    initial_mission_phase: str = field(
        default_factory=lambda: os.getenv(
            "ODIN_MISSION_PHASE", PhaseConstants.DEFAULT_MISSION_PHASE
        )
    )
    urgent_window_seconds: int = field(
        default_factory=lambda: _env_int(
            "ODIN_URGENT_WINDOW_SECONDS", OverrideConstants.URGENT_WINDOW_SECONDS
        )
    )
    override_lookback_hours: int = field(
        default_factory=lambda: _env_int(
            "ODIN_OVERRIDE_LOOKBACK_HOURS",
            OverrideConstants.RECENT_OVERRIDE_LOOKBACK_HOURS,
        )
    )
    restore_phase_thresholds: bool = field(
        default_factory=lambda: _env_bool("ODIN_RESTORE_PHASE_THRESHOLDS", "true")
    )

    # Metrics sink; CloudWatch publishing is off unless a namespace is set
    cloudwatch_namespace: Optional[str] = field(
        default_factory=lambda: os.getenv("ODIN_CLOUDWATCH_NAMESPACE") or None
    )
    aws_region: str = field(
        default_factory=lambda: os.getenv("AWS_DEFAULT_REGION", "us-east-1")
    )
    aws_profile: Optional[str] = field(
        default_factory=lambda: os.getenv("AWS_PROFILE") or None
    )

    def __post_init__(self):
        """Validate configuration after initialization."""
        # Imported here; schemas pulls in pydantic and the config package
        # must stay importable on its own.
        from odin_navigator.autonomy.schemas import MissionPhase

        try:
            MissionPhase(self.initial_mission_phase)
        except ValueError:
            raise ConfigurationError(
                f"ODIN_MISSION_PHASE must be a mission phase, got {self.initial_mission_phase!r}",
                details={"allowed": [phase.value for phase in MissionPhase]},
            )

        if self.urgent_window_seconds < 0:
            raise ConfigurationError("ODIN_URGENT_WINDOW_SECONDS must be >= 0")
        if self.override_lookback_hours <= 0:
            raise ConfigurationError("ODIN_OVERRIDE_LOOKBACK_HOURS must be > 0")

        # Relative table paths are looked up under config/
        if self.boundary_file is not None and not self.boundary_file.is_absolute():
            self.boundary_file = self.config_dir / self.boundary_file

        if self.boundary_file is not None and not self.boundary_file.exists():
            raise ConfigurationError(
                f"Boundary file not found: {self.boundary_file}",
                details={"variable": "ODIN_BOUNDARY_FILE"},
            )

        # Warn about debug in production
        if self.is_production and self.debug:
            import warnings
            warnings.warn(
                "Debug mode is enabled in production environment",
                RuntimeWarning,
                stacklevel=2
            )

    @property
    def config_dir(self) -> Path:
        """Get the config directory path."""
        return self.project_root / "config"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == Environment.PRODUCTION


# Singleton instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance.

    Returns:
        Config: The global configuration singleton.
    """
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None
