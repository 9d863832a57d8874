"""Session bootstrap -- device identity and initial geometry.

The tool cannot read configuration files from the operator's machine, so
the operator names the display being calibrated.  The name either comes
from the command line or from the startup menu::

    1. Calibrate existing display (enter name manually)
    2. Create new display configuration
    3. Exit calibration tool

Initial usable bounds cover the whole nominal surface of the default
rotation; the operator then trims edges in mode 1.
"""

from __future__ import annotations

import logging

from lcd_calibration.configs.loader import CalibrationConfig
from lcd_calibration.geometry.bounds import NominalSurface, UsableBounds
from lcd_calibration.hardware.terminal import Terminal, read_line
from lcd_calibration.session.state import (
    IdentityRequired,
    SessionAborted,
    SessionState,
)

logger = logging.getLogger(__name__)


def _require_name(name: str) -> str:
    name = name.strip()
    if not name:
        raise IdentityRequired(
            "Display name cannot be empty. "
            "Calibration tool cannot proceed without a display name."
        )
    return name


def select_display(terminal: Terminal) -> str:
    """Run the startup menu and return the display name.

    Raises
    ------
    SessionAborted
        Option 3, or anything other than 1-3.
    IdentityRequired
        An empty display name was entered.
    """
    say = terminal.write_line
    say("========== DISPLAY SELECTION ==========")
    say()
    say("This calibration tool requires a display name. The record you")
    say("export is saved as <name>.config on your computer.")
    say()
    say("Available options:")
    say("  1. Calibrate existing display (enter name manually)")
    say("  2. Create new display configuration")
    say("  3. Exit calibration tool")
    say()
    terminal.write("Select option (1-3): ")
    choice = read_line(terminal)

    if choice == "1":
        terminal.write("Enter display name to calibrate (e.g., DueLCD01): ")
        name = _require_name(read_line(terminal))
        say(f"Calibrating display: {name}")
        say(f"Note: Ensure {name}.config exists on your computer")
        say("      or create it after calibration using the exported data.")
    elif choice == "2":
        say()
        say("========== CREATE NEW DISPLAY CONFIG ==========")
        say()
        say("After calibration, copy the generated config to a file named")
        say("<DisplayName>.config in the project root.")
        say()
        terminal.write("Enter display name (e.g., DueLCD03): ")
        name = _require_name(read_line(terminal))
        say(f"Display name set to: {name}")
    elif choice == "3":
        say("Exiting calibration tool.")
        raise SessionAborted("Operator exited at the startup menu")
    else:
        say("Invalid choice. Please restart and select 1, 2, or 3.")
        raise SessionAborted(f"Invalid startup menu choice {choice!r}")

    say()
    say("======================================")
    return name


def start_session(
    config: CalibrationConfig,
    terminal: Terminal,
    device_name: str | None = None,
) -> SessionState:
    """Resolve the device identity and build the initial session state.

    Parameters
    ----------
    config : CalibrationConfig
        Display geometry, default rotation/thickness and pinout.
    terminal : Terminal
        Operator terminal (startup menu and feedback).
    device_name : str | None
        Skip the startup menu and use this name.

    Returns
    -------
    SessionState
        Bounds at the full nominal surface, mode NONE, no unsaved changes.

    Raises
    ------
    IdentityRequired
        Empty device name.
    SessionAborted
        Operator left the startup menu.
    """
    if device_name is None:
        device_name = select_display(terminal)
    name = _require_name(device_name)

    disp = config.display
    nominal = NominalSurface.for_rotation(
        disp.published_resolution, disp.default_rotation,
    )
    state = SessionState(
        device_name=name,
        published_resolution=disp.published_resolution,
        rotation=disp.default_rotation,
        nominal=nominal,
        bounds=UsableBounds.unset(),
        frame_thickness=disp.default_frame_thickness,
        pinout=dict(config.pinout),
        manufacturer=disp.manufacturer,
        model=disp.model,
    )
    # Nothing has been saved yet for this display
    state.last_saved = state.snapshot()
    state.bounds = nominal.full_bounds()

    b = state.bounds
    terminal.write_line("Initial bounds set from published dimensions:")
    terminal.write_line(f"  Origin: ({b.x}, {b.y})")
    terminal.write_line(f"  Size: {b.width} x {b.height}")
    terminal.write_line("  Use arrow keys in Mode 1 to fine-tune edges")
    logger.info(
        "Session started for %s: rotation %d, %dx%d",
        name, state.rotation, nominal.width, nominal.height,
    )
    return state
