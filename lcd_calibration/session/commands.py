"""Legacy text commands.

Lines that are not mode keys, arrows or control bytes are parsed here.
Matching is case-insensitive with surrounding whitespace trimmed::

    rot0 .. rot3        set rotation (resets usable bounds)
    frame               redraw the calibration frame
    clear               clear the screen
    cross               origin-to-centre line and axes
    test                step-by-step self test
    center              usable-centre cross (seeds estimated bounds if unset)
    bounds L,R,T,B      set usable bounds from inclusive edges
    export              print the calibration record
    info                show current settings
    help                show key map and commands
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from lcd_calibration.session.state import MalformedInput

CommandName = Literal[
    "rot", "frame", "clear", "cross", "test", "center",
    "bounds", "export", "info", "help", "unknown",
]

_SIMPLE = ("frame", "clear", "cross", "test", "center", "export", "info", "help")
_ROTATIONS = {f"rot{r}": r for r in range(4)}

BOUNDS_USAGE = "Invalid bounds format. Use: bounds L,R,T,B"


@dataclass(frozen=True, slots=True)
class Command:
    """One parsed legacy command.

    ``rotation`` is set for ``rot``, ``edges`` (left, right, top, bottom)
    for ``bounds``; ``text`` keeps the raw input for ``unknown``.
    """

    name: CommandName
    rotation: int | None = None
    edges: tuple[int, int, int, int] | None = None
    text: str = ""


def _parse_edges(params: str) -> tuple[int, int, int, int]:
    parts = [p.strip() for p in params.split(",")]
    if len(parts) != 4:
        raise MalformedInput(BOUNDS_USAGE)
    try:
        left, right, top, bottom = (int(p) for p in parts)
    except ValueError:
        raise MalformedInput(BOUNDS_USAGE) from None
    return left, right, top, bottom


def parse_command(text: str) -> Command | None:
    """Parse one legacy line.

    Returns
    -------
    Command | None
        ``None`` for blank input; a ``"unknown"`` command for anything
        unrecognised.

    Raises
    ------
    MalformedInput
        ``bounds`` without exactly four comma-separated integers.
    """
    raw = text.strip()
    if not raw:
        return None
    lower = raw.lower()

    if lower in _ROTATIONS:
        return Command("rot", rotation=_ROTATIONS[lower])
    if lower in _SIMPLE:
        return Command(lower)
    if lower == "bounds" or lower.startswith("bounds "):
        return Command("bounds", edges=_parse_edges(raw[len("bounds"):]))
    return Command("unknown", text=raw)


def help_lines(device_name: str) -> list[str]:
    """Key map and command list shown by ``help``."""
    return [
        "========== Arrow Key Calibration Mode ==========",
        "",
        f"Display: {device_name}",
        "",
        "QUICK START:",
        "  Initial bounds loaded from published dimensions",
        "  1. Type 'info' to see current settings",
        "  2. Press '1' then use arrow keys to fine-tune",
        "  3. Press '5' when done to save & export",
        "",
        "MODE SELECTION (Press 1-6):",
        "  1 - Adjust Frame Edges    (arrow keys expand/contract, ESC to exit mode)",
        "  2 - Move Entire Frame     (arrow keys shift position, ESC to exit mode)",
        "  3 - Adjust Thickness      (up/down = 1-5px, ESC to exit mode)",
        "  4 - Rotate Display        (left/right = CCW/CW, ESC to exit mode)",
        "  5 - Save & Exit           (export .config)",
        "  6 - Exit Without Saving",
        "",
        "SPECIAL KEYS:",
        "  ESC    - Exit current mode (1-4) or trigger save sequence (no mode)",
        "  Ctrl-C - Quick save & exit",
        "",
        "LEGACY TEXT COMMANDS:",
        "  rot0-3, frame, clear, cross, test, center",
        "  bounds L,R,T,B, export, info, help",
        "",
        "================================================",
    ]
