"""
Record export module.

Renders a session's calibration as the versioned TOML record consumed by
the display runtime, and parses such records back.
"""

from lcd_calibration.export.record import (
    BEGIN_MARKER,
    END_MARKER,
    CalibrationRecord,
    RecordFormatError,
    export_record,
    parse_record,
    render_record,
)

__all__ = [
    "BEGIN_MARKER",
    "END_MARKER",
    "CalibrationRecord",
    "RecordFormatError",
    "export_record",
    "parse_record",
    "render_record",
]
