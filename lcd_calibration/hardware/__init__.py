"""
Hardware module.

Operator terminal transports (serial, local console, scripted), the
framebuffer canvas, and the calibration drawing routines.
"""

from lcd_calibration.hardware.canvas import Canvas, FrameBufferCanvas
from lcd_calibration.hardware.terminal import (
    ConsoleTerminal,
    ScriptedTerminal,
    SerialTerminal,
    Terminal,
    TerminalClosed,
    TerminalError,
    read_line,
)

__all__ = [
    "Canvas",
    "ConsoleTerminal",
    "FrameBufferCanvas",
    "ScriptedTerminal",
    "SerialTerminal",
    "Terminal",
    "TerminalClosed",
    "TerminalError",
    "read_line",
]
