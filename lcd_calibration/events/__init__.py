"""
Input events module.

Defines the closed set of operator input events and the decoder that
produces them from a terminal byte stream.
"""

from lcd_calibration.events.events import (
    Arrow,
    Cancel,
    Direction,
    InputEvent,
    LegacyLine,
    ModeSelect,
    PlainEscape,
)
from lcd_calibration.events.decoder import InputDecoder

__all__ = [
    "Arrow",
    "Cancel",
    "Direction",
    "InputDecoder",
    "InputEvent",
    "LegacyLine",
    "ModeSelect",
    "PlainEscape",
]
