"""
LCD Calibration Package.

Interactive tool for discovering the usable pixel area of a raster display
panel whose addressable area differs from its published resolution.  An
operator drives the calibration over a byte-oriented terminal; the result
is exported as a TOML calibration record for the multi-display runtime.

Subpackages:
    geometry: Nominal surface, usable bounds and the clamping algorithm
    events: Input events and the terminal byte-stream decoder
    session: Session state, edit operations, mode state machine, bootstrap
    export: Calibration record rendering, parsing and schema
    hardware: Terminal transports, framebuffer canvas, drawing routines
    configs: Tool configuration loading and validation
"""

__all__ = ["geometry", "events", "session", "export", "hardware", "configs"]
