"""Usable-bounds geometry -- the rectangle every edit operates on.

All coordinates are integer pixels in the **nominal surface** of the active
rotation (origin at the top-left pixel, +Y down).  The usable bounds are a
sub-rectangle of that surface and must satisfy, after every mutation::

    0 <= x,  0 <= y
    x + width  <= surface.width
    y + height <= surface.height
    width >= MIN_USABLE_SIZE,  height >= MIN_USABLE_SIZE

A zero width or height is not a degenerate rectangle but the *unset*
sentinel: no calibration has been performed for this rotation yet.

Rotation
--------
Published resolutions are given in landscape (``[160, 128]`` for a 1.8"
ST7735).  Rotations 1 and 3 are landscape and use the published size as
is; rotations 0 and 2 are portrait and swap width and height.
"""

from __future__ import annotations

from dataclasses import dataclass

MIN_USABLE_SIZE = 10
"""Smallest usable width / height in pixels."""

MIN_FRAME_THICKNESS = 1
MAX_FRAME_THICKNESS = 5

ROTATIONS = (0, 1, 2, 3)

ORIENTATION_LABELS: dict[int, str] = {
    0: "portrait",
    1: "landscape",
    2: "reverse_portrait",
    3: "reverse_landscape",
}
"""Rotation -> orientation label.  Consumers of the record rely on this."""


# ---------------------------------------------------------------------------
# Rotation helpers
# ---------------------------------------------------------------------------


def validate_rotation(rotation: int) -> int:
    """Return *rotation* unchanged or raise ``ValueError``."""
    if rotation not in ROTATIONS:
        raise ValueError(f"rotation must be 0-3, got {rotation!r}")
    return rotation


def orientation_label(rotation: int) -> str:
    """Map a rotation (0-3) to its orientation label."""
    return ORIENTATION_LABELS[validate_rotation(rotation)]


def is_landscape(rotation: int) -> bool:
    """``True`` for rotations 1 and 3."""
    return validate_rotation(rotation) % 2 == 1


# ---------------------------------------------------------------------------
# Data containers
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class NominalSurface:
    """Addressable pixel space of the display for one rotation.

    Parameters
    ----------
    width, height : int
        Surface size in pixels.  Both must be at least
        ``MIN_USABLE_SIZE`` so that a valid usable area can exist.
    """

    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width < MIN_USABLE_SIZE or self.height < MIN_USABLE_SIZE:
            raise ValueError(
                f"Nominal surface must be at least "
                f"{MIN_USABLE_SIZE}x{MIN_USABLE_SIZE}, "
                f"got {self.width}x{self.height}"
            )

    @classmethod
    def for_rotation(
        cls, published: tuple[int, int], rotation: int,
    ) -> NominalSurface:
        """Build the surface for *rotation* from a landscape-published size."""
        w, h = published
        if is_landscape(rotation):
            return cls(width=w, height=h)
        return cls(width=h, height=w)

    def full_bounds(self) -> UsableBounds:
        """Bounds covering the whole surface."""
        return UsableBounds(0, 0, self.width, self.height)


@dataclass(frozen=True, slots=True)
class UsableBounds:
    """Calibrated sub-rectangle: origin ``(x, y)`` and size.

    Use :meth:`unset` for the sentinel state and :meth:`from_edges` to
    build bounds from inclusive left/right/top/bottom edges.
    """

    x: int
    y: int
    width: int
    height: int

    @classmethod
    def unset(cls) -> UsableBounds:
        """The *unset* sentinel (no calibration for this rotation)."""
        return cls(0, 0, 0, 0)

    @classmethod
    def from_edges(
        cls, left: int, right: int, top: int, bottom: int,
    ) -> UsableBounds:
        """Build bounds from inclusive edges."""
        return cls(
            x=left,
            y=top,
            width=right - left + 1,
            height=bottom - top + 1,
        )

    @property
    def is_unset(self) -> bool:
        return self.width == 0 or self.height == 0

    @property
    def left(self) -> int:
        return self.x

    @property
    def top(self) -> int:
        return self.y

    @property
    def right(self) -> int:
        """Inclusive right edge."""
        return self.x + self.width - 1

    @property
    def bottom(self) -> int:
        """Inclusive bottom edge."""
        return self.y + self.height - 1

    @property
    def center(self) -> tuple[int, int]:
        return compute_center(self)

    def describe(self) -> str:
        """Short ``x,y WxH`` form used in operator feedback."""
        return f"{self.x},{self.y} {self.width}x{self.height}"


# ---------------------------------------------------------------------------
# Algorithms
# ---------------------------------------------------------------------------


def compute_center(bounds: UsableBounds) -> tuple[int, int]:
    """Centre of *bounds* as ``(x + width // 2, y + height // 2)``."""
    return bounds.x + bounds.width // 2, bounds.y + bounds.height // 2


def _clamp_axis(origin: int, size: int, limit: int) -> tuple[int, int]:
    """Clamp one axis; see :func:`clamp_bounds` for the step order."""
    # 1. origin inside the surface
    origin = min(max(origin, 0), limit - 1)

    # 2. size no larger than what remains from the origin
    size = min(size, limit - origin)

    # 3. minimum usable size
    size = max(size, MIN_USABLE_SIZE)

    # 4. the floor raise may have pushed past the edge again
    if origin + size > limit:
        size = limit - origin
        if size < MIN_USABLE_SIZE:
            origin = limit - MIN_USABLE_SIZE
            size = MIN_USABLE_SIZE
    return origin, size


def clamp_bounds(
    nominal: NominalSurface, bounds: UsableBounds,
) -> tuple[UsableBounds, bool]:
    """Force *bounds* back inside *nominal* and above the minimum size.

    Steps, applied per axis in this order:

    1. Clamp the origin to ``[0, dim - 1]``.
    2. Shrink the size to what is left from the (clamped) origin.
    3. Raise the size to ``MIN_USABLE_SIZE``.
    4. Re-shrink if step 3 pushed the rectangle past the surface edge.
       When the origin sits within ``MIN_USABLE_SIZE`` of the edge the
       origin slides back instead, so the minimum size always holds.

    Pure and idempotent: ``clamp(clamp(b)) == clamp(b)``.

    Parameters
    ----------
    nominal : NominalSurface
        Surface for the active rotation.
    bounds : UsableBounds
        Bounds to correct.  Any integers are accepted, including negative
        origins and zero or negative sizes.

    Returns
    -------
    tuple[UsableBounds, bool]
        Clamped bounds and whether any field changed.
    """
    x, width = _clamp_axis(bounds.x, bounds.width, nominal.width)
    y, height = _clamp_axis(bounds.y, bounds.height, nominal.height)
    clamped = UsableBounds(x, y, width, height)
    return clamped, clamped != bounds


def satisfies_invariants(nominal: NominalSurface, bounds: UsableBounds) -> bool:
    """``True`` if *bounds* is a valid (set) usable area of *nominal*."""
    return (
        bounds.x >= 0
        and bounds.y >= 0
        and bounds.x + bounds.width <= nominal.width
        and bounds.y + bounds.height <= nominal.height
        and bounds.width >= MIN_USABLE_SIZE
        and bounds.height >= MIN_USABLE_SIZE
    )
