"""Configuration loader for the calibration tool.

Loads and validates ``calibration.yaml`` into typed, frozen dataclasses.
Panel geometry, pinout, terminal settings and session behaviour all come
from the config; the CLI may override individual values.

Usage::

    from lcd_calibration.configs.loader import load_config
    cfg = load_config()                            # default path
    cfg = load_config("/custom/calibration.yaml")  # explicit path
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from lcd_calibration.geometry.bounds import (
    MAX_FRAME_THICKNESS,
    MIN_FRAME_THICKNESS,
    MIN_USABLE_SIZE,
    ROTATIONS,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "calibration.yaml"

# Pin names become bare keys in the exported record
_PIN_NAME = re.compile(r"[A-Za-z0-9_-]+")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(Exception):
    """Raised when configuration validation fails."""

    pass


# ---------------------------------------------------------------------------
# Dataclasses -- mirror the YAML structure
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DisplayConfig:
    """Panel identity and published geometry.

    ``published_resolution`` is the landscape size printed on the
    datasheet, e.g. ``(160, 128)`` for a 1.8" ST7735.
    """

    driver: str
    manufacturer: str
    model: str
    published_resolution: tuple[int, int]
    default_rotation: int = 1
    default_frame_thickness: int = 2


@dataclass(frozen=True)
class TerminalConfig:
    """Operator terminal transport."""

    port: str
    baudrate: int = 115200
    escape_window_ms: float = 10.0
    line_ending: str = "\r\n"

    @property
    def escape_window_s(self) -> float:
        return self.escape_window_ms / 1000.0


@dataclass(frozen=True)
class SessionConfig:
    """Session behaviour toggles."""

    exit_after_save: bool = True
    show_help_after_command: bool = True


@dataclass(frozen=True)
class LoggingConfig:
    """Log level, optional file and JSON output."""

    level: str = "INFO"
    file: str | None = None
    json: bool = False


@dataclass(frozen=True)
class CalibrationConfig:
    """Root configuration object."""

    display: DisplayConfig
    pinout: dict[str, int] = field(default_factory=dict)
    terminal: TerminalConfig = field(
        default_factory=lambda: TerminalConfig(port="/dev/ttyACM0"),
    )
    session: SessionConfig = field(default_factory=SessionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# ---------------------------------------------------------------------------
# Section parsers
# ---------------------------------------------------------------------------


def _parse_resolution(raw: Any) -> tuple[int, int]:
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        raise ConfigError(
            f"display.published_resolution must be [W, H], got {raw!r}"
        )
    return int(raw[0]), int(raw[1])


def _parse_pinout(raw: Any) -> dict[str, int]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"pinout must be a mapping, got {type(raw).__name__}")
    pins: dict[str, int] = {}
    for name, pin in raw.items():
        if not isinstance(name, str) or not _PIN_NAME.fullmatch(name):
            raise ConfigError(
                f"pinout key {name!r} must match [A-Za-z0-9_-]+"
            )
        if isinstance(pin, bool) or not isinstance(pin, int):
            raise ConfigError(f"pinout.{name} must be an integer, got {pin!r}")
        pins[name] = pin
    return pins


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _validate_config(cfg: CalibrationConfig) -> None:
    """Validate value ranges.

    Raises
    ------
    ConfigError
        On any invalid value.
    """
    w, h = cfg.display.published_resolution
    if w < MIN_USABLE_SIZE or h < MIN_USABLE_SIZE:
        raise ConfigError(
            f"published_resolution must be at least "
            f"{MIN_USABLE_SIZE}x{MIN_USABLE_SIZE}, got {w}x{h}"
        )
    if cfg.display.default_rotation not in ROTATIONS:
        raise ConfigError(
            f"default_rotation must be 0-3, got {cfg.display.default_rotation}"
        )
    t = cfg.display.default_frame_thickness
    if not MIN_FRAME_THICKNESS <= t <= MAX_FRAME_THICKNESS:
        raise ConfigError(
            f"default_frame_thickness must be {MIN_FRAME_THICKNESS}-"
            f"{MAX_FRAME_THICKNESS}, got {t}"
        )

    for name, pin in cfg.pinout.items():
        if pin < 0:
            raise ConfigError(f"pinout.{name} must be >= 0, got {pin}")

    if cfg.terminal.baudrate <= 0:
        raise ConfigError(f"baudrate must be > 0, got {cfg.terminal.baudrate}")
    if cfg.terminal.escape_window_ms <= 0:
        raise ConfigError(
            f"escape_window_ms must be > 0, got {cfg.terminal.escape_window_ms}"
        )

    level = cfg.logging.level.upper()
    if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ConfigError(f"Unknown logging level '{cfg.logging.level}'")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(path: str | Path | None = None) -> CalibrationConfig:
    """Load and validate the calibration tool configuration from YAML.

    Parameters
    ----------
    path : str | Path | None
        Path to ``calibration.yaml``.  ``None`` loads the default shipped
        alongside this module.

    Returns
    -------
    CalibrationConfig
        Fully validated, frozen configuration object.

    Raises
    ------
    ConfigError
        If any field is missing or fails validation.
    FileNotFoundError
        If *path* does not exist.
    """
    path = DEFAULT_CONFIG_PATH if path is None else Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    logger.info("Loading configuration from %s", path)

    try:
        with open(path, "r", encoding="utf-8") as f:
            data: dict[str, Any] | None = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if data is None:
        raise ConfigError(f"Empty configuration file: {path}")

    try:
        # -- display --------------------------------------------------------
        disp = data["display"]
        display = DisplayConfig(
            driver=str(disp.get("driver", "ST7735")),
            manufacturer=str(disp.get("manufacturer", "Unknown")),
            model=str(disp.get("model", "Generic ST7735")),
            published_resolution=_parse_resolution(disp["published_resolution"]),
            default_rotation=int(disp.get("default_rotation", 1)),
            default_frame_thickness=int(disp.get("default_frame_thickness", 2)),
        )

        # -- pinout ---------------------------------------------------------
        pinout = _parse_pinout(data.get("pinout"))

        # -- terminal -------------------------------------------------------
        term = data.get("terminal", {})
        terminal = TerminalConfig(
            port=str(term.get("port", "/dev/ttyACM0")),
            baudrate=int(term.get("baudrate", 115200)),
            escape_window_ms=float(term.get("escape_window_ms", 10.0)),
            line_ending=str(term.get("line_ending", "\r\n")),
        )

        # -- session --------------------------------------------------------
        sess = data.get("session", {})
        session = SessionConfig(
            exit_after_save=bool(sess.get("exit_after_save", True)),
            show_help_after_command=bool(
                sess.get("show_help_after_command", True)
            ),
        )

        # -- logging --------------------------------------------------------
        log = data.get("logging", {})
        log_file = log.get("file")
        logging_cfg = LoggingConfig(
            level=str(log.get("level", "INFO")),
            file=str(log_file) if log_file else None,
            json=bool(log.get("json", False)),
        )

        config = CalibrationConfig(
            display=display,
            pinout=pinout,
            terminal=terminal,
            session=session,
            logging=logging_cfg,
        )

        _validate_config(config)
        logger.info("Configuration loaded successfully")
        return config

    except KeyError as exc:
        raise ConfigError(
            f"Missing required configuration key: {exc}"
        ) from exc
    except (TypeError, ValueError, AttributeError) as exc:
        raise ConfigError(
            f"Invalid configuration value: {exc}"
        ) from exc
