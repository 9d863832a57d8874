"""Shared fixtures: default config, scripted terminal, 160x128 session."""

from __future__ import annotations

import pytest

from lcd_calibration.configs.loader import CalibrationConfig, load_config
from lcd_calibration.geometry.bounds import NominalSurface, UsableBounds
from lcd_calibration.hardware.canvas import FrameBufferCanvas
from lcd_calibration.hardware.terminal import ScriptedTerminal
from lcd_calibration.session.machine import CalibrationMachine
from lcd_calibration.session.state import SessionState

PUBLISHED = (160, 128)


def make_state(
    rotation: int = 1,
    bounds: UsableBounds | None = None,
    thickness: int = 2,
) -> SessionState:
    """Landscape 160x128 session; bounds default to the full surface."""
    nominal = NominalSurface.for_rotation(PUBLISHED, rotation)
    return SessionState(
        device_name="TestLCD",
        published_resolution=PUBLISHED,
        rotation=rotation,
        nominal=nominal,
        bounds=bounds if bounds is not None else nominal.full_bounds(),
        frame_thickness=thickness,
        pinout={"rst": 8, "dc": 10, "cs": 7, "bl": 9},
    )


@pytest.fixture()
def config() -> CalibrationConfig:
    """Default calibration.yaml shipped with the package."""
    return load_config()


@pytest.fixture()
def terminal() -> ScriptedTerminal:
    return ScriptedTerminal()


@pytest.fixture()
def state() -> SessionState:
    return make_state()


@pytest.fixture()
def canvas() -> FrameBufferCanvas:
    return FrameBufferCanvas(PUBLISHED, rotation=1)


@pytest.fixture()
def machine(
    state: SessionState,
    terminal: ScriptedTerminal,
    canvas: FrameBufferCanvas,
) -> CalibrationMachine:
    return CalibrationMachine(
        state, terminal, canvas, show_help_after_command=False,
    )
