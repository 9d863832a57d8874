#!/usr/bin/env python3
"""Interactive display calibration entry point.

Usage::

    lcd-calibrate                                 # serial port from config
    lcd-calibrate --port /dev/ttyACM1 --baud 115200
    lcd-calibrate --console --name DueLCD01       # local TTY, skip the menu
    lcd-calibrate --escape-window-ms 40           # slow terminal emulator
    lcd-calibrate --log-level DEBUG --log-file logs/cal.log --json-logs

Exit status is 0 when the session ends normally (saved, exited, or input
closed) and 1 when it cannot start or the transport fails.
"""

from __future__ import annotations

import argparse
import logging
import sys

from lcd_calibration.configs.loader import CalibrationConfig, ConfigError, load_config
from lcd_calibration.events.decoder import InputDecoder
from lcd_calibration.hardware.canvas import FrameBufferCanvas
from lcd_calibration.hardware.terminal import (
    ConsoleTerminal,
    SerialTerminal,
    Terminal,
    TerminalClosed,
    TerminalError,
)
from lcd_calibration.session.bootstrap import start_session
from lcd_calibration.session.machine import CalibrationMachine
from lcd_calibration.session.state import IdentityRequired, SessionAborted
from lcd_calibration.utils.logging_config import (
    LOG_LEVELS,
    install_excepthook,
    push_context,
    setup_logging,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lcd-calibrate",
        description="Interactive usable-area calibration for raster displays",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", "-c", type=str, help="Config file path")
    parser.add_argument("--port", "-p", type=str,
                        help="Serial port (default: terminal.port from config)")
    parser.add_argument("--baud", "-b", type=int,
                        help="Baud rate (default: terminal.baudrate)")
    parser.add_argument("--console", action="store_true",
                        help="Use this TTY instead of a serial port")
    parser.add_argument("--name", "-n", type=str,
                        help="Display name (skips the startup menu)")
    parser.add_argument("--escape-window-ms", type=float,
                        help="Wait after ESC before treating it as the "
                        "Escape key (default: terminal.escape_window_ms)")
    parser.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS,
                        help="Log level (default: logging.level from config)")
    parser.add_argument("--log-file", type=str, help="Also log to this file")
    parser.add_argument("--json-logs", action="store_true",
                        help="Emit logs as JSON lines")
    return parser


def open_terminal(
    args: argparse.Namespace, config: CalibrationConfig,
) -> SerialTerminal | ConsoleTerminal:
    term_cfg = config.terminal
    if args.console:
        return ConsoleTerminal(line_ending=term_cfg.line_ending)
    return SerialTerminal(
        args.port or term_cfg.port,
        args.baud or term_cfg.baudrate,
        line_ending=term_cfg.line_ending,
    )


def run_session(
    config: CalibrationConfig,
    terminal: Terminal,
    *,
    device_name: str | None = None,
    escape_window_s: float | None = None,
) -> CalibrationMachine:
    """Bootstrap a session on *terminal* and run it to completion."""
    state = start_session(config, terminal, device_name)
    push_context(display=state.device_name)

    machine = CalibrationMachine(
        state,
        terminal,
        FrameBufferCanvas(state.published_resolution, state.rotation),
        exit_after_save=config.session.exit_after_save,
        show_help_after_command=config.session.show_help_after_command,
    )
    terminal.write_line()
    terminal.write_line("Connected! Ready for calibration.")
    terminal.write_line()
    machine.show_help()

    window = escape_window_s or config.terminal.escape_window_s
    machine.run(InputDecoder(terminal, escape_window_s=window))
    return machine


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except (ConfigError, FileNotFoundError) as exc:
        setup_logging(args.log_level or "INFO")
        logger.error("Configuration error: %s", exc)
        return 1

    setup_logging(
        args.log_level or config.logging.level,
        args.log_file or config.logging.file,
        json=args.json_logs or config.logging.json,
        context={"app": "lcd-calibrate"},
    )
    install_excepthook()

    window_s = (
        args.escape_window_ms / 1000.0
        if args.escape_window_ms is not None else None
    )
    if window_s is not None and window_s <= 0:
        logger.error("--escape-window-ms must be > 0")
        return 1

    try:
        with open_terminal(args, config) as terminal:
            run_session(
                config,
                terminal,
                device_name=args.name,
                escape_window_s=window_s,
            )
    except (IdentityRequired, SessionAborted) as exc:
        logger.error("Session not started: %s", exc)
        return 1
    except TerminalClosed:
        logger.info("Input closed before the session started")
        return 0
    except TerminalError as exc:
        logger.error("Terminal error: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
