"""Calibration drawing routines.

Each routine draws on a :class:`Canvas` and reports what it drew through
*say* (one operator line per call).  Routines that pause between steps
take a *wait* callback; the session passes one that blocks on the next
keypress, tests pass a no-op.

None of these mutate calibration state.  Bounds passed in are assumed to
be clamped already.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from lcd_calibration.geometry.bounds import UsableBounds
from lcd_calibration.hardware.canvas import (
    BLUE,
    GREEN,
    RED,
    WHITE,
    YELLOW,
    Canvas,
)

logger = logging.getLogger(__name__)

Say = Callable[[str], None]
Wait = Callable[[], None]

CENTER_CROSS_ARM = 5

_INSET_STEPS = (
    (1, RED, "red"),
    (2, GREEN, "green"),
    (3, BLUE, "blue"),
)


def _silent(_: str) -> None:
    pass


def _no_wait() -> None:
    pass


# ---------------------------------------------------------------------------
# Frames
# ---------------------------------------------------------------------------


def draw_usable_frame(
    canvas: Canvas,
    bounds: UsableBounds,
    thickness: int,
    say: Say = _silent,
) -> int:
    """Draw the calibration frame at *bounds*, *thickness* pixels thick.

    Thickness is limited to half the smaller dimension so nested
    rectangles never cross.  Returns the thickness actually drawn.
    """
    drawn = min(thickness, bounds.width // 2, bounds.height // 2)
    for i in range(drawn):
        canvas.draw_rect(
            bounds.x + i,
            bounds.y + i,
            bounds.width - 2 * i,
            bounds.height - 2 * i,
            WHITE,
        )
    say(f"Frame drawn at usable bounds with thickness {drawn}")
    return drawn


def draw_inset_frames(
    canvas: Canvas,
    say: Say = _silent,
    wait: Wait = _no_wait,
) -> None:
    """Nominal frame, then 1/2/3 px insets in red, green, blue.

    Used when no usable bounds exist yet: the operator reads off which
    frames are fully visible.
    """
    w, h = canvas.width(), canvas.height()
    say("Frame test - stepping through insets. "
        "Press any key to continue between steps...")
    canvas.clear()
    canvas.draw_rect(0, 0, w, h, WHITE)
    say(f"Step 1: White frame at nominal bounds (0,0) to ({w - 1},{h - 1})")
    for step, (inset, color, name) in enumerate(_INSET_STEPS, start=2):
        say("Press any key to continue...")
        wait()
        canvas.draw_rect(inset, inset, w - 2 * inset, h - 2 * inset, color)
        say(f"Step {step}: Added {name} frame with {inset}-pixel inset")
    say("Examine which frames are fully visible to determine usable bounds.")


def redraw(
    canvas: Canvas,
    bounds: UsableBounds,
    thickness: int,
    say: Say = _silent,
    wait: Wait = _no_wait,
) -> None:
    """Clear and draw the frame for the current bounds (or the insets)."""
    canvas.clear()
    if bounds.is_unset:
        draw_inset_frames(canvas, say, wait)
    else:
        draw_usable_frame(canvas, bounds, thickness, say)


# ---------------------------------------------------------------------------
# Markers
# ---------------------------------------------------------------------------


def draw_origin_cross(canvas: Canvas, say: Say = _silent) -> tuple[int, int]:
    """Axes, origin marker and a line from the origin to the nominal centre.

    Returns the nominal centre.
    """
    canvas.clear()
    w, h = canvas.width(), canvas.height()
    cx, cy = w // 2, h // 2

    # Doubled line, single-pixel Bresenham lines show gaps on some panels
    canvas.draw_line(0, 0, cx, cy, YELLOW)
    if cx > 0 and cy > 0:
        canvas.draw_line(1, 0, cx, cy - 1, YELLOW)

    canvas.draw_line(0, 0, w - 1, 0, BLUE)
    canvas.draw_line(0, 0, 0, h - 1, BLUE)

    for x, y in ((0, 0), (1, 0), (0, 1)):
        canvas.draw_pixel(x, y, WHITE)
    for x, y in ((cx, cy), (cx - 1, cy), (cx + 1, cy), (cx, cy - 1), (cx, cy + 1)):
        canvas.draw_pixel(x, y, RED)

    say("Origin-to-center test:")
    say("  Origin (0,0): White pixels")
    say("  Blue lines: X and Y axes from origin")
    say("  Yellow line: Origin to nominal center")
    say(f"  Red cross: Nominal center at ({cx},{cy})")
    say("Check if origin and axes are visible.")
    return cx, cy


def draw_usable_center(
    canvas: Canvas, bounds: UsableBounds, say: Say = _silent,
) -> tuple[int, int]:
    """Red cross at the usable centre plus a green usable-area outline."""
    canvas.clear()
    cx, cy = bounds.center
    arm = CENTER_CROSS_ARM
    canvas.draw_line(cx - arm, cy, cx + arm, cy, RED)
    canvas.draw_line(cx, cy - arm, cx, cy + arm, RED)
    canvas.draw_rect(bounds.x, bounds.y, bounds.width, bounds.height, GREEN)
    say(f"Red cross drawn at usable center: ({cx},{cy})")
    say("Green rectangle shows usable area boundary.")
    return cx, cy


# ---------------------------------------------------------------------------
# Self test
# ---------------------------------------------------------------------------


def run_self_test(
    canvas: Canvas,
    rotation: int,
    bounds: UsableBounds,
    thickness: int,
    say: Say = _silent,
    wait: Wait = _no_wait,
    info: Callable[[], None] | None = None,
) -> None:
    """Step through info, clear, all four rotations, frame and centre.

    Rotations are cycled on the canvas only; *rotation* is restored before
    the frame step so the session geometry still matches the screen.
    """
    logger.info("Self test started")
    say("Running complete calibration test...")
    say("Press any key between each step to continue.")
    say("")

    say("=== STEP 1: Display Information ===")
    if info is not None:
        info()
    say("Press any key to continue...")
    wait()

    say("=== STEP 2: Clear Screen Test ===")
    canvas.clear()
    say("Press any key to continue...")
    wait()

    say("=== STEP 3: Rotation Test ===")
    for rot in range(4):
        canvas.set_rotation(rot)
        canvas.clear()
        canvas.draw_rect(0, 0, canvas.width(), canvas.height(), WHITE)
        say(f"Testing rotation {rot}: {canvas.width()} x {canvas.height()}")
        say("Press any key to continue to next rotation...")
        wait()
    canvas.set_rotation(rotation)

    say("=== STEP 4: Frame Boundary Test ===")
    redraw(canvas, bounds, thickness, say, wait)

    say("=== STEP 5: Usable Center Test ===")
    if bounds.is_unset:
        say("Usable area not defined; skipping center test.")
    else:
        draw_usable_center(canvas, bounds, say)

    say("")
    say("=== CALIBRATION TEST COMPLETE ===")
    say("Based on your observations, you can determine:")
    say("  1. Which rotation works best for your setup")
    say("  2. The actual usable origin coordinates")
    say("  3. The actual usable display dimensions")
    say("Use individual commands for fine-tuning.")
    logger.info("Self test finished")
