"""Edit operations -- each mutates a :class:`SessionState` by one step.

Every operation either:
    - applies its change, runs :func:`clamp_bounds`, sets the unsaved flag
      and returns an :class:`EditOutcome`; or
    - raises :class:`GuardRejected` and leaves the state untouched.

Edge semantics
--------------
Top and left edges are *inverted*: expanding the top edge moves it up,
so ``y`` decreases and ``height`` increases by the same amount;
contracting moves it down.  Right and bottom edges move naively:
expanding grows ``width`` / ``height``.  All steps are 1 px.

Arrow mapping in edge mode (top and left edges only)::

    Up    -> expand top        Down  -> contract top
    Left  -> expand left       Right -> contract left
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Literal

from lcd_calibration.events.events import Direction
from lcd_calibration.geometry.bounds import (
    MAX_FRAME_THICKNESS,
    MIN_FRAME_THICKNESS,
    MIN_USABLE_SIZE,
    UsableBounds,
    clamp_bounds,
)
from lcd_calibration.session.state import GuardRejected, SessionState

logger = logging.getLogger(__name__)

Edge = Literal["top", "bottom", "left", "right"]
EdgeAction = Literal["expand", "contract"]

STEP_PX = 1

EDGE_ARROWS: dict[Direction, tuple[Edge, EdgeAction]] = {
    "up": ("top", "expand"),
    "down": ("top", "contract"),
    "left": ("left", "expand"),
    "right": ("left", "contract"),
}

_MOVE_DELTAS: dict[Direction, tuple[int, int]] = {
    "up": (0, -STEP_PX),
    "down": (0, STEP_PX),
    "left": (-STEP_PX, 0),
    "right": (STEP_PX, 0),
}


@dataclass(frozen=True, slots=True)
class EditOutcome:
    """Result of an accepted (or silently saturated) edit.

    Parameters
    ----------
    changed : bool
        ``False`` only for saturating operations at their limit.
    clamped : bool
        ``True`` if :func:`clamp_bounds` had to correct the result.
    message : str
        Operator feedback line.
    """

    changed: bool
    clamped: bool = False
    message: str = ""


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _require_bounds(state: SessionState) -> UsableBounds:
    if state.bounds.is_unset:
        raise GuardRejected(
            "Set initial bounds first using 'bounds L,R,T,B'"
        )
    return state.bounds


def _commit(state: SessionState, bounds: UsableBounds) -> bool:
    """Clamp, store and flag *bounds*; return whether clamping fired."""
    clamped, modified = clamp_bounds(state.nominal, bounds)
    if modified:
        logger.warning(
            "Bounds clamped to valid range: %s -> %s",
            bounds.describe(), clamped.describe(),
        )
    state.bounds = clamped
    state.mark_modified()
    return modified


def _expand_or_contract(
    bounds: UsableBounds,
    edge: Edge,
    action: EdgeAction,
    surface_w: int,
    surface_h: int,
) -> UsableBounds:
    b = bounds
    if action == "contract":
        size = b.height if edge in ("top", "bottom") else b.width
        if size - STEP_PX < MIN_USABLE_SIZE:
            raise GuardRejected(
                f"Cannot contract {edge} edge: minimum size is "
                f"{MIN_USABLE_SIZE}px"
            )

    if edge == "top":
        if action == "expand":
            if b.y - STEP_PX < 0:
                raise GuardRejected("Top edge already at the surface edge")
            return replace(b, y=b.y - STEP_PX, height=b.height + STEP_PX)
        return replace(b, y=b.y + STEP_PX, height=b.height - STEP_PX)

    if edge == "left":
        if action == "expand":
            if b.x - STEP_PX < 0:
                raise GuardRejected("Left edge already at the surface edge")
            return replace(b, x=b.x - STEP_PX, width=b.width + STEP_PX)
        return replace(b, x=b.x + STEP_PX, width=b.width - STEP_PX)

    if edge == "bottom":
        if action == "expand":
            if b.y + b.height + STEP_PX > surface_h:
                raise GuardRejected("Bottom edge already at the surface edge")
            return replace(b, height=b.height + STEP_PX)
        return replace(b, height=b.height - STEP_PX)

    if edge == "right":
        if action == "expand":
            if b.x + b.width + STEP_PX > surface_w:
                raise GuardRejected("Right edge already at the surface edge")
            return replace(b, width=b.width + STEP_PX)
        return replace(b, width=b.width - STEP_PX)

    raise ValueError(f"Unknown edge {edge!r}")


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


def adjust_edge(
    state: SessionState, edge: Edge, action: EdgeAction,
) -> EditOutcome:
    """Move one edge of the usable bounds by one pixel.

    Parameters
    ----------
    state : SessionState
        Session to mutate.
    edge : ``"top"`` | ``"bottom"`` | ``"left"`` | ``"right"``
        Edge to move.
    action : ``"expand"`` | ``"contract"``
        Grow or shrink the usable area across that edge.

    Raises
    ------
    GuardRejected
        Bounds unset, contraction below ``MIN_USABLE_SIZE``, or the edge
        is already at the surface boundary.
    """
    if action not in ("expand", "contract"):
        raise ValueError(f"action must be 'expand' or 'contract', got {action!r}")
    bounds = _require_bounds(state)
    new = _expand_or_contract(
        bounds, edge, action, state.nominal.width, state.nominal.height,
    )
    clamped = _commit(state, new)
    return EditOutcome(
        changed=True,
        clamped=clamped,
        message=f"Edge adjusted. Usable: {state.bounds.describe()}",
    )


def adjust_edge_by_arrow(state: SessionState, direction: Direction) -> EditOutcome:
    """Edge-mode arrow handler; see the module docstring for the mapping."""
    edge, action = EDGE_ARROWS[direction]
    return adjust_edge(state, edge, action)


def move_frame(state: SessionState, direction: Direction) -> EditOutcome:
    """Translate the usable bounds by one pixel without resizing.

    Raises
    ------
    GuardRejected
        Bounds unset or the frame already touches the surface edge in
        *direction*.
    """
    b = _require_bounds(state)
    dx, dy = _MOVE_DELTAS[direction]
    nx, ny = b.x + dx, b.y + dy
    if (
        nx < 0
        or ny < 0
        or nx + b.width > state.nominal.width
        or ny + b.height > state.nominal.height
    ):
        raise GuardRejected(f"Frame already at the {direction} surface edge")
    clamped = _commit(state, replace(b, x=nx, y=ny))
    return EditOutcome(
        changed=True,
        clamped=clamped,
        message=f"Frame moved. Origin: ({state.bounds.x},{state.bounds.y})",
    )


def adjust_thickness(state: SessionState, direction: Direction) -> EditOutcome:
    """Up thickens, down thins the frame; saturates silently at 1 and 5.

    Raises
    ------
    GuardRejected
        Bounds unset, or a left/right arrow was used.
    """
    _require_bounds(state)
    if direction not in ("up", "down"):
        raise GuardRejected("Use up/down to change thickness")
    delta = 1 if direction == "up" else -1
    new = state.frame_thickness + delta
    if not MIN_FRAME_THICKNESS <= new <= MAX_FRAME_THICKNESS:
        return EditOutcome(
            changed=False, message=f"Thickness: {state.frame_thickness}",
        )
    state.frame_thickness = new
    state.mark_modified()
    return EditOutcome(changed=True, message=f"Thickness: {new}")


def rotate(state: SessionState, direction: Direction) -> EditOutcome:
    """Rotate the display: left = counter-clockwise, right = clockwise.

    Always allowed, even with unset bounds.  The nominal surface is
    recomputed and the usable bounds are reset to unset, since a
    calibration only holds for the orientation it was made in.

    Raises
    ------
    GuardRejected
        An up/down arrow was used.
    """
    if direction == "left":
        rotation = (state.rotation + 3) % 4
    elif direction == "right":
        rotation = (state.rotation + 1) % 4
    else:
        raise GuardRejected("Use left/right to rotate (CCW/CW)")
    state.set_rotation(rotation)
    state.mark_modified()
    logger.info(
        "Rotation -> %d (%dx%d), bounds reset",
        rotation, state.nominal.width, state.nominal.height,
    )
    return EditOutcome(
        changed=True,
        message=(
            f"Rotation: {rotation} "
            f"({state.nominal.width} x {state.nominal.height}); "
            f"usable bounds reset"
        ),
    )


def seed_estimated_bounds(state: SessionState) -> EditOutcome:
    """Fill unset bounds with typical ST7735 offsets: ``(1, 2, W-2, H-3)``."""
    n = state.nominal
    clamped = _commit(state, UsableBounds(1, 2, n.width - 2, n.height - 3))
    return EditOutcome(
        changed=True,
        clamped=clamped,
        message=f"Using estimated bounds: {state.bounds.describe()}",
    )


def set_bounds_from_edges(
    state: SessionState, left: int, right: int, top: int, bottom: int,
) -> EditOutcome:
    """Replace the bounds from inclusive edges (legacy ``bounds`` command)."""
    clamped = _commit(state, UsableBounds.from_edges(left, right, top, bottom))
    b = state.bounds
    cx, cy = b.center
    return EditOutcome(
        changed=True,
        clamped=clamped,
        message=(
            f"Usable bounds set: left={b.left} right={b.right} "
            f"top={b.top} bottom={b.bottom} "
            f"({b.width}x{b.height}, center ({cx}, {cy}))"
        ),
    )
