"""Calibration record schema (version 1).

The record is a TOML document with three tables.  Field names, the
orientation labels and the inclusive-edge convention are a contract with
the display runtime; any change requires a ``schema_version`` bump.

    schema_version = 1
    [device]       name, manufacturer, model, published_resolution
    [pinout]       opaque name -> pin integer mapping
    [calibration]  orientation, left, right, top, bottom, center

Edges are 0-indexed and inclusive: ``right = x + width - 1``.
"""

from typing import Dict, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

from lcd_calibration.geometry.bounds import ORIENTATION_LABELS

SCHEMA_VERSION = 1


class DeviceSection(BaseModel):
    """``[device]`` table."""
    name: str = Field(..., min_length=1, description="Display identity")
    manufacturer: str = Field("Unknown")
    model: str = Field("Generic ST7735")
    published_resolution: Tuple[int, int] = Field(
        ..., description="Published (W, H) in pixels"
    )

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Device name must not be blank")
        return v

    @field_validator('published_resolution')
    @classmethod
    def validate_resolution(cls, v: Tuple[int, int]) -> Tuple[int, int]:
        if v[0] <= 0 or v[1] <= 0:
            raise ValueError(f"published_resolution must be positive, got {list(v)}")
        return v


class CalibrationSection(BaseModel):
    """``[calibration]`` table (inclusive edges)."""
    orientation: str
    left: int = Field(..., ge=0)
    right: int = Field(..., ge=0)
    top: int = Field(..., ge=0)
    bottom: int = Field(..., ge=0)
    center: Tuple[int, int]

    @field_validator('orientation')
    @classmethod
    def validate_orientation(cls, v: str) -> str:
        labels = tuple(ORIENTATION_LABELS.values())
        if v not in labels:
            raise ValueError(f"orientation must be one of {labels}, got '{v}'")
        return v

    @model_validator(mode='after')
    def validate_edges(self) -> 'CalibrationSection':
        if self.left > self.right:
            raise ValueError(f"left ({self.left}) > right ({self.right})")
        if self.top > self.bottom:
            raise ValueError(f"top ({self.top}) > bottom ({self.bottom})")
        return self


class CalibrationRecordV1(BaseModel):
    """Complete record document, version 1."""
    schema_version: int = Field(SCHEMA_VERSION)
    device: DeviceSection
    pinout: Dict[str, int] = Field(default_factory=dict)
    calibration: CalibrationSection

    @field_validator('schema_version')
    @classmethod
    def validate_version(cls, v: int) -> int:
        if v != SCHEMA_VERSION:
            raise ValueError(
                f"Unsupported schema_version {v} (expected {SCHEMA_VERSION})"
            )
        return v
