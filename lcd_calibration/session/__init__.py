"""
Calibration session module.

Session state and error taxonomy, edit operations, legacy commands, the
mode state machine (:mod:`.machine`) and session bootstrap
(:mod:`.bootstrap`).  The last two depend on :mod:`lcd_calibration.export`
and are imported from their modules directly.
"""

from lcd_calibration.session.state import (
    BoundsNotSet,
    CalibrationError,
    CalibrationMode,
    ExportPrecondition,
    GuardRejected,
    IdentityRequired,
    MalformedInput,
    SessionAborted,
    SessionAction,
    SessionState,
)
from lcd_calibration.session.operations import EditOutcome

__all__ = [
    "BoundsNotSet",
    "CalibrationError",
    "CalibrationMode",
    "EditOutcome",
    "ExportPrecondition",
    "GuardRejected",
    "IdentityRequired",
    "MalformedInput",
    "SessionAborted",
    "SessionAction",
    "SessionState",
]
