"""
Geometry module.

Nominal surface, usable bounds, and the clamping algorithm that keeps the
bounds valid across every edit.  No dependencies on the rest of the package.
"""

from lcd_calibration.geometry.bounds import (
    MAX_FRAME_THICKNESS,
    MIN_FRAME_THICKNESS,
    MIN_USABLE_SIZE,
    ORIENTATION_LABELS,
    NominalSurface,
    UsableBounds,
    clamp_bounds,
    compute_center,
    orientation_label,
)

__all__ = [
    "MAX_FRAME_THICKNESS",
    "MIN_FRAME_THICKNESS",
    "MIN_USABLE_SIZE",
    "ORIENTATION_LABELS",
    "NominalSurface",
    "UsableBounds",
    "clamp_bounds",
    "compute_center",
    "orientation_label",
]
