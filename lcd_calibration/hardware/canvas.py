"""Raster canvas capability and an in-memory framebuffer implementation.

The session only needs a handful of primitives from the panel driver
(clear, pixel, line, rectangle outline, rotation-aware size).  Those are
captured by the :class:`Canvas` protocol.

:class:`FrameBufferCanvas` implements it on a ``numpy`` RGB565 array in
*panel* orientation (the rotation-0 raster).  Drawing happens in rotated
coordinates and is mapped back to the panel, exactly like the driver's
``setRotation`` does, so tests can check what the operator would see.
Out-of-range pixels are clipped silently.
"""

from __future__ import annotations

from typing import Protocol

import numpy as np

# RGB565 colours (ST77XX palette)
BLACK = 0x0000
WHITE = 0xFFFF
RED = 0xF800
GREEN = 0x07E0
BLUE = 0x001F
YELLOW = 0xFFE0


def rgb565(r: int, g: int, b: int) -> int:
    """Pack 8-bit RGB into RGB565."""
    return ((r & 0xF8) << 8) | ((g & 0xFC) << 3) | (b >> 3)


class Canvas(Protocol):
    """Drawing capability consumed by :mod:`hardware.renderer`."""

    def set_rotation(self, rotation: int) -> None: ...

    def width(self) -> int: ...

    def height(self) -> int: ...

    def clear(self) -> None: ...

    def draw_pixel(self, x: int, y: int, color: int) -> None: ...

    def draw_line(self, x0: int, y0: int, x1: int, y1: int, color: int) -> None: ...

    def draw_rect(self, x: int, y: int, w: int, h: int, color: int) -> None: ...


class FrameBufferCanvas:
    """RGB565 framebuffer with driver-style rotation.

    Parameters
    ----------
    published : tuple[int, int]
        Landscape-published ``(W, H)``; the panel raster is ``H`` wide and
        ``W`` tall (rotation 0 is portrait).
    rotation : int
        Initial rotation, 0-3.
    """

    def __init__(self, published: tuple[int, int], rotation: int = 0) -> None:
        pw, ph = published
        # Native raster is portrait: rows = long side
        self._native_w = ph
        self._native_h = pw
        self.pixels = np.zeros((self._native_h, self._native_w), dtype=np.uint16)
        self._rotation = 0
        self.set_rotation(rotation)

    @property
    def rotation(self) -> int:
        return self._rotation

    def set_rotation(self, rotation: int) -> None:
        if rotation not in (0, 1, 2, 3):
            raise ValueError(f"rotation must be 0-3, got {rotation!r}")
        self._rotation = rotation

    def width(self) -> int:
        return self._native_h if self._rotation % 2 else self._native_w

    def height(self) -> int:
        return self._native_w if self._rotation % 2 else self._native_h

    def _to_native(self, x: int, y: int) -> tuple[int, int]:
        """Rotated (x, y) -> native (column, row)."""
        nw, nh = self._native_w, self._native_h
        r = self._rotation
        if r == 0:
            return x, y
        if r == 1:
            return nw - 1 - y, x
        if r == 2:
            return nw - 1 - x, nh - 1 - y
        return y, nh - 1 - x

    def clear(self) -> None:
        self.pixels.fill(BLACK)

    def draw_pixel(self, x: int, y: int, color: int) -> None:
        if not (0 <= x < self.width() and 0 <= y < self.height()):
            return
        col, row = self._to_native(x, y)
        self.pixels[row, col] = color

    def get_pixel(self, x: int, y: int) -> int:
        """Colour at rotated ``(x, y)``.

        Raises
        ------
        IndexError
            If ``(x, y)`` is outside the rotated surface.
        """
        if not (0 <= x < self.width() and 0 <= y < self.height()):
            raise IndexError(
                f"pixel ({x}, {y}) outside {self.width()}x{self.height()}"
            )
        col, row = self._to_native(x, y)
        return int(self.pixels[row, col])

    def draw_line(self, x0: int, y0: int, x1: int, y1: int, color: int) -> None:
        """Bresenham line, endpoints inclusive."""
        dx = abs(x1 - x0)
        dy = -abs(y1 - y0)
        sx = 1 if x0 < x1 else -1
        sy = 1 if y0 < y1 else -1
        err = dx + dy
        while True:
            self.draw_pixel(x0, y0, color)
            if x0 == x1 and y0 == y1:
                break
            e2 = 2 * err
            if e2 >= dy:
                err += dy
                x0 += sx
            if e2 <= dx:
                err += dx
                y0 += sy

    def draw_rect(self, x: int, y: int, w: int, h: int, color: int) -> None:
        """One-pixel rectangle outline."""
        if w <= 0 or h <= 0:
            return
        x1, y1 = x + w - 1, y + h - 1
        self.draw_line(x, y, x1, y, color)
        self.draw_line(x, y1, x1, y1, color)
        self.draw_line(x, y, x, y1, color)
        self.draw_line(x1, y, x1, y1, color)

    def lit_bbox(self) -> tuple[int, int, int, int] | None:
        """Bounding box ``(x0, y0, x1, y1)`` of non-black pixels, rotated
        coordinates, or ``None`` if the screen is black."""
        view = np.rot90(self.pixels, k=self._rotation) if self._rotation else self.pixels
        rows, cols = np.nonzero(view)
        if rows.size == 0:
            return None
        return int(cols.min()), int(rows.min()), int(cols.max()), int(rows.max())
