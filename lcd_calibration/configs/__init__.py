"""Calibration tool configuration loading and validation."""

from lcd_calibration.configs.loader import (
    CalibrationConfig,
    ConfigError,
    DisplayConfig,
    LoggingConfig,
    SessionConfig,
    TerminalConfig,
    load_config,
)

__all__ = [
    "CalibrationConfig",
    "ConfigError",
    "DisplayConfig",
    "LoggingConfig",
    "SessionConfig",
    "TerminalConfig",
    "load_config",
]
