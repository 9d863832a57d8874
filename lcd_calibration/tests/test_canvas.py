"""Tests for the framebuffer canvas and the calibration drawing routines."""

from __future__ import annotations

import pytest

from lcd_calibration.geometry.bounds import UsableBounds
from lcd_calibration.hardware import renderer
from lcd_calibration.hardware.canvas import (
    BLACK,
    BLUE,
    GREEN,
    RED,
    WHITE,
    YELLOW,
    FrameBufferCanvas,
    rgb565,
)


class Recorder:
    """Collects *say* lines and counts *wait* calls."""

    def __init__(self) -> None:
        self.lines: list[str] = []
        self.waits = 0

    def say(self, text: str) -> None:
        self.lines.append(text)

    def wait(self) -> None:
        self.waits += 1

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


@pytest.fixture()
def rec() -> Recorder:
    return Recorder()


# ---------------------------------------------------------------------------
# Canvas
# ---------------------------------------------------------------------------


class TestFrameBufferCanvas:
    @pytest.mark.parametrize(
        "rotation, size", [(0, (128, 160)), (1, (160, 128)), (2, (128, 160)), (3, (160, 128))],
    )
    def test_size_per_rotation(self, rotation: int, size: tuple[int, int]) -> None:
        c = FrameBufferCanvas((160, 128), rotation)
        assert (c.width(), c.height()) == size

    def test_native_raster_is_portrait(self) -> None:
        c = FrameBufferCanvas((160, 128))
        assert c.pixels.shape == (160, 128)

    def test_invalid_rotation(self) -> None:
        with pytest.raises(ValueError, match="0-3"):
            FrameBufferCanvas((160, 128), 4)

    @pytest.mark.parametrize("rotation", range(4))
    def test_pixel_roundtrip_in_each_rotation(self, rotation: int) -> None:
        c = FrameBufferCanvas((160, 128), rotation)
        c.draw_pixel(3, 7, RED)
        assert c.get_pixel(3, 7) == RED
        assert c.lit_bbox() == (3, 7, 3, 7)
        assert int((c.pixels != BLACK).sum()) == 1

    def test_rotations_share_the_raster(self) -> None:
        c = FrameBufferCanvas((160, 128), 1)
        c.draw_pixel(0, 0, GREEN)
        c.set_rotation(3)
        # Landscape origin is the opposite corner after a half turn
        assert c.get_pixel(159, 127) == GREEN

    def test_clipping(self) -> None:
        c = FrameBufferCanvas((160, 128), 1)
        c.draw_pixel(-1, 0, WHITE)
        c.draw_pixel(160, 0, WHITE)
        c.draw_pixel(0, 128, WHITE)
        assert c.lit_bbox() is None

    def test_line_clipped_at_edge(self) -> None:
        c = FrameBufferCanvas((160, 128), 1)
        c.draw_line(-10, 5, 200, 5, WHITE)
        assert c.lit_bbox() == (0, 5, 159, 5)

    def test_diagonal_line_endpoints(self) -> None:
        c = FrameBufferCanvas((160, 128), 1)
        c.draw_line(0, 0, 80, 64, YELLOW)
        assert c.get_pixel(0, 0) == YELLOW
        assert c.get_pixel(80, 64) == YELLOW
        assert c.lit_bbox() == (0, 0, 80, 64)

    def test_rect_outline(self) -> None:
        c = FrameBufferCanvas((160, 128), 1)
        c.draw_rect(10, 20, 30, 40, WHITE)
        assert c.lit_bbox() == (10, 20, 39, 59)
        assert c.get_pixel(25, 40) == BLACK

    def test_degenerate_rect_ignored(self) -> None:
        c = FrameBufferCanvas((160, 128), 1)
        c.draw_rect(10, 10, 0, 5, WHITE)
        assert c.lit_bbox() is None

    def test_clear(self) -> None:
        c = FrameBufferCanvas((160, 128), 1)
        c.draw_rect(0, 0, 160, 128, WHITE)
        c.clear()
        assert c.lit_bbox() is None

    @pytest.mark.parametrize(
        "rotation, x, y",
        [(1, -1, 0), (1, 0, -1), (1, 160, 0), (1, 0, 128), (0, 128, 0), (0, 0, 160)],
    )
    def test_get_pixel_out_of_range(self, rotation: int, x: int, y: int) -> None:
        c = FrameBufferCanvas((160, 128), rotation)
        c.draw_rect(0, 0, c.width(), c.height(), WHITE)
        with pytest.raises(IndexError, match="outside"):
            c.get_pixel(x, y)

    def test_rgb565(self) -> None:
        assert rgb565(255, 0, 0) == RED
        assert rgb565(0, 255, 0) == GREEN
        assert rgb565(0, 0, 255) == BLUE
        assert rgb565(255, 255, 255) == WHITE


# ---------------------------------------------------------------------------
# Renderer
# ---------------------------------------------------------------------------


class TestUsableFrame:
    def test_thickness(self, rec: Recorder) -> None:
        c = FrameBufferCanvas((160, 128), 1)
        drawn = renderer.draw_usable_frame(c, UsableBounds(1, 2, 158, 126), 3, rec.say)
        assert drawn == 3
        assert c.lit_bbox() == (1, 2, 158, 127)
        for i in range(3):
            assert c.get_pixel(1 + i, 60) == WHITE
        assert c.get_pixel(4, 60) == BLACK
        assert "thickness 3" in rec.text

    def test_thickness_limited_by_size(self) -> None:
        c = FrameBufferCanvas((160, 128), 1)
        assert renderer.draw_usable_frame(c, UsableBounds(0, 0, 10, 4), 5) == 2


class TestInsetFrames:
    def test_steps_and_waits(self, rec: Recorder) -> None:
        c = FrameBufferCanvas((160, 128), 1)
        renderer.redraw(c, UsableBounds.unset(), 2, rec.say, rec.wait)
        assert rec.waits == 3
        assert c.get_pixel(0, 0) == WHITE
        assert c.get_pixel(1, 1) == RED
        assert c.get_pixel(2, 2) == GREEN
        assert c.get_pixel(3, 3) == BLUE
        assert c.get_pixel(156, 124) == BLUE
        assert "(159,127)" in rec.text

    def test_redraw_with_bounds_never_waits(self, rec: Recorder) -> None:
        c = FrameBufferCanvas((160, 128), 1)
        renderer.redraw(c, UsableBounds(0, 0, 160, 128), 1, rec.say, rec.wait)
        assert rec.waits == 0
        assert c.lit_bbox() == (0, 0, 159, 127)


class TestMarkers:
    def test_origin_cross(self, rec: Recorder) -> None:
        c = FrameBufferCanvas((160, 128), 1)
        assert renderer.draw_origin_cross(c, rec.say) == (80, 64)
        assert c.get_pixel(0, 0) == WHITE
        assert c.get_pixel(1, 0) == WHITE
        assert c.get_pixel(0, 100) == BLUE
        assert c.get_pixel(80, 64) == RED
        assert c.get_pixel(40, 32) == YELLOW
        assert "(80,64)" in rec.text

    def test_usable_center(self, rec: Recorder) -> None:
        c = FrameBufferCanvas((160, 128), 1)
        bounds = UsableBounds(1, 2, 159, 126)
        assert renderer.draw_usable_center(c, bounds, rec.say) == (80, 65)
        assert c.get_pixel(80, 65) == RED
        assert c.get_pixel(85, 65) == RED
        assert c.get_pixel(86, 65) == BLACK
        assert c.lit_bbox() == (1, 2, 159, 127)
        assert c.get_pixel(1, 2) == GREEN


class TestSelfTest:
    def test_restores_rotation(self, rec: Recorder) -> None:
        c = FrameBufferCanvas((160, 128), 1)
        infos: list[bool] = []
        renderer.run_self_test(
            c, 1, UsableBounds(1, 2, 158, 126), 2, rec.say, rec.wait,
            info=lambda: infos.append(True),
        )
        assert c.rotation == 1
        assert rec.waits == 6
        assert infos == [True]
        assert c.get_pixel(79, 65) == RED
        assert "128 x 160" in rec.text
        assert "CALIBRATION TEST COMPLETE" in rec.text

    def test_unset_bounds_adds_inset_steps(self, rec: Recorder) -> None:
        c = FrameBufferCanvas((160, 128), 0)
        renderer.run_self_test(c, 0, UsableBounds.unset(), 2, rec.say, rec.wait)
        assert rec.waits == 9
        assert c.rotation == 0
        assert "skipping center" in rec.text
