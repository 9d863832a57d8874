"""Calibration session state, modes, and error taxonomy.

A :class:`SessionState` is created once per session (after the device
name is known), mutated only by edit operations and rotation changes, and
read by the record exporter.  It is passed explicitly to every operation;
there is no module-level session.

Modes vs. actions
-----------------
:class:`CalibrationMode` holds only the *persistent* adjustment modes (and
``NONE``).  Save-and-exit and exit-without-saving are one-shot
:class:`SessionAction` values; they are executed immediately and can never
be stored as the current mode.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto

from lcd_calibration.geometry.bounds import (
    MAX_FRAME_THICKNESS,
    MIN_FRAME_THICKNESS,
    NominalSurface,
    UsableBounds,
    validate_rotation,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class CalibrationError(Exception):
    """Base exception for calibration session errors."""

    pass


class GuardRejected(CalibrationError):
    """Operation is valid but currently disallowed; state is unchanged."""

    pass


class MalformedInput(CalibrationError):
    """A legacy text command could not be parsed."""

    pass


class ExportPrecondition(CalibrationError):
    """Export attempted while the usable bounds are unset."""

    pass


BoundsNotSet = ExportPrecondition


class IdentityRequired(CalibrationError):
    """No device name was given; the session cannot start."""

    pass


class SessionAborted(CalibrationError):
    """Operator left the startup menu without starting a session."""

    pass


# ---------------------------------------------------------------------------
# Modes and actions
# ---------------------------------------------------------------------------


class CalibrationMode(Enum):
    """Persistent adjustment mode."""

    NONE = auto()
    EDGE_ADJUST = auto()
    FRAME_MOVE = auto()
    THICKNESS = auto()
    ROTATE = auto()

    @property
    def is_adjustment(self) -> bool:
        return self is not CalibrationMode.NONE


class SessionAction(Enum):
    """One-shot commands selected with keys 5 and 6."""

    SAVE_AND_EXIT = auto()
    EXIT_WITHOUT_SAVING = auto()


MODE_KEYS: dict[int, CalibrationMode | SessionAction] = {
    1: CalibrationMode.EDGE_ADJUST,
    2: CalibrationMode.FRAME_MOVE,
    3: CalibrationMode.THICKNESS,
    4: CalibrationMode.ROTATE,
    5: SessionAction.SAVE_AND_EXIT,
    6: SessionAction.EXIT_WITHOUT_SAVING,
}
"""Digit key -> mode or action."""

MODE_TITLES: dict[CalibrationMode, str] = {
    CalibrationMode.NONE: "None (press 1-6 to select)",
    CalibrationMode.EDGE_ADJUST: "1 - Edge Adjust",
    CalibrationMode.FRAME_MOVE: "2 - Frame Move",
    CalibrationMode.THICKNESS: "3 - Thickness",
    CalibrationMode.ROTATE: "4 - Rotation",
}


# ---------------------------------------------------------------------------
# Data containers
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CalibrationSnapshot:
    """Copy of the calibration fields at the last successful save."""

    rotation: int
    nominal: NominalSurface
    bounds: UsableBounds
    frame_thickness: int


@dataclass
class SessionState:
    """Everything one calibration session owns.

    Parameters
    ----------
    device_name : str
        Display identity, required non-empty.
    published_resolution : tuple[int, int]
        Landscape-published ``(W, H)`` of the panel.
    rotation : int
        Active rotation, 0-3.
    nominal : NominalSurface
        Surface for *rotation*.  Recomputed on every rotation change.
    bounds : UsableBounds
        Calibrated usable area (or the unset sentinel).
    frame_thickness : int
        Calibration-frame line thickness, 1-5 px.
    pinout : dict[str, int]
        Transport pin identity, passed through to the record untouched.
    manufacturer, model : str
        Passed through to the record.
    """

    device_name: str
    published_resolution: tuple[int, int]
    rotation: int
    nominal: NominalSurface
    bounds: UsableBounds
    frame_thickness: int = 2
    pinout: dict[str, int] = field(default_factory=dict)
    manufacturer: str = "Unknown"
    model: str = "Generic ST7735"
    mode: CalibrationMode = CalibrationMode.NONE
    unsaved_changes: bool = False
    ever_saved: bool = False
    last_saved: CalibrationSnapshot | None = None
    active: bool = True

    def __post_init__(self) -> None:
        if not self.device_name.strip():
            raise IdentityRequired("Display name cannot be empty")
        validate_rotation(self.rotation)
        if not MIN_FRAME_THICKNESS <= self.frame_thickness <= MAX_FRAME_THICKNESS:
            raise ValueError(
                f"frame_thickness must be {MIN_FRAME_THICKNESS}-"
                f"{MAX_FRAME_THICKNESS}, got {self.frame_thickness}"
            )

    # -- Change tracking ----------------------------------------------------

    def snapshot(self) -> CalibrationSnapshot:
        return CalibrationSnapshot(
            rotation=self.rotation,
            nominal=self.nominal,
            bounds=self.bounds,
            frame_thickness=self.frame_thickness,
        )

    def mark_modified(self) -> None:
        self.unsaved_changes = True

    def mark_saved(self) -> None:
        """Record a successful save: snapshot and clear the unsaved flag."""
        self.last_saved = self.snapshot()
        self.unsaved_changes = False
        self.ever_saved = True
        logger.info("Calibration saved for %s", self.device_name)

    @property
    def changes_status(self) -> str:
        """``UNSAVED``, ``Saved`` or ``No changes``."""
        if self.unsaved_changes:
            return "UNSAVED"
        if self.ever_saved:
            return "Saved"
        return "No changes"

    # -- Geometry -----------------------------------------------------------

    def set_rotation(self, rotation: int) -> None:
        """Switch rotation; the usable bounds become unset."""
        self.rotation = validate_rotation(rotation)
        self.nominal = NominalSurface.for_rotation(
            self.published_resolution, rotation,
        )
        self.bounds = UsableBounds.unset()

    def end(self) -> None:
        """Terminate the session."""
        self.active = False
