"""Calibration record -- export, rendering and parsing.

:func:`export_record` turns a session into a :class:`CalibrationRecord`
(pure: identical state -> identical record).  :func:`render_record` writes
it as TOML between ``BEGIN``/``END`` marker lines for manual copy-out;
:func:`parse_record` reads such text back and validates it against
:mod:`export.schema`.

Usage::

    record = export_record(state)          # raises ExportPrecondition
    text = render_record(record)
    assert parse_record(text) == record
"""

from __future__ import annotations

import logging
import re
import tomllib
from dataclasses import dataclass, field

from pydantic import ValidationError

from lcd_calibration.export.schema import SCHEMA_VERSION, CalibrationRecordV1
from lcd_calibration.geometry.bounds import orientation_label
from lcd_calibration.session.state import ExportPrecondition, SessionState

logger = logging.getLogger(__name__)

BEGIN_MARKER = "========== BEGIN CONFIG FILE =========="
END_MARKER = "=========== END CONFIG FILE ==========="


class RecordFormatError(Exception):
    """Record text is missing its markers, is not TOML, or fails the schema."""

    pass


# ---------------------------------------------------------------------------
# Data container
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CalibrationRecord:
    """One exported calibration.

    Parameters
    ----------
    name : str
        Device identity.
    published_resolution : tuple[int, int]
        Nominal published ``(W, H)``.
    orientation : str
        Label derived from the rotation.
    left, right, top, bottom : int
        Inclusive usable edges in nominal-surface pixels.
    center : tuple[int, int]
        Usable-area centre.
    pinout : dict[str, int]
        Opaque pin identity.
    """

    name: str
    published_resolution: tuple[int, int]
    orientation: str
    left: int
    right: int
    top: int
    bottom: int
    center: tuple[int, int]
    pinout: dict[str, int] = field(default_factory=dict)
    manufacturer: str = "Unknown"
    model: str = "Generic ST7735"
    schema_version: int = SCHEMA_VERSION

    @property
    def usable_width(self) -> int:
        return self.right - self.left + 1

    @property
    def usable_height(self) -> int:
        return self.bottom - self.top + 1


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


def export_record(state: SessionState) -> CalibrationRecord:
    """Build the record for the current session state.

    Raises
    ------
    ExportPrecondition
        If the usable bounds are unset.
    """
    b = state.bounds
    if b.is_unset:
        raise ExportPrecondition(
            "Usable bounds not set. Use 'bounds' command first "
            "(example: bounds 1,158,2,127)"
        )
    return CalibrationRecord(
        name=state.device_name,
        published_resolution=tuple(state.published_resolution),
        orientation=orientation_label(state.rotation),
        left=b.left,
        right=b.right,
        top=b.top,
        bottom=b.bottom,
        center=b.center,
        pinout=dict(state.pinout),
        manufacturer=state.manufacturer,
        model=state.model,
    )


_BARE_KEY = re.compile(r"[A-Za-z0-9_-]+")


def _toml_str(value: str) -> str:
    out = []
    for ch in value:
        if ch in ('"', "\\"):
            out.append("\\" + ch)
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            # TOML basic strings reject raw control characters
            out.append(f"\\u{ord(ch):04X}")
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'


def _toml_key(key: str) -> str:
    return key if _BARE_KEY.fullmatch(key) else _toml_str(key)


def _comment_text(value: str) -> str:
    return "".join("?" if ord(ch) < 0x20 or ord(ch) == 0x7F else ch for ch in value)


def render_record(record: CalibrationRecord) -> str:
    """Render *record* as TOML between the BEGIN/END marker lines."""
    w, h = record.published_resolution
    cx, cy = record.center
    lines = [
        BEGIN_MARKER,
        f"# ST7735 Display Configuration - {_comment_text(record.name)}",
        "# Format: TOML v1.0.0",
        f"schema_version = {record.schema_version}",
        "",
        "[device]",
        f"name = {_toml_str(record.name)}",
        f"manufacturer = {_toml_str(record.manufacturer)}",
        f"model = {_toml_str(record.model)}",
        f"published_resolution = [{w}, {h}]",
        "",
        "[pinout]",
    ]
    lines += [f"{_toml_key(pin)} = {value}" for pin, value in record.pinout.items()]
    lines += [
        "",
        "[calibration]",
        f"orientation = {_toml_str(record.orientation)}",
        "# Usable area bounds (0-indexed, inclusive)",
        f"left = {record.left}",
        f"right = {record.right}",
        f"top = {record.top}",
        f"bottom = {record.bottom}",
        "# Calculated center point",
        f"center = [{cx}, {cy}]",
        END_MARKER,
    ]
    return "\n".join(lines) + "\n"


def save_instructions(record: CalibrationRecord) -> list[str]:
    """Operator instructions printed after the record block."""
    return [
        "SAVE INSTRUCTIONS:",
        "1. Copy the text between BEGIN/END markers",
        f"2. Save as: {record.name}.config",
        "3. Place in project root directory",
        f"4. Check it with: lcd-check-record {record.name}.config",
    ]


# ---------------------------------------------------------------------------
# Parse
# ---------------------------------------------------------------------------


def _extract_block(text: str) -> str:
    lines = text.splitlines()
    try:
        start = next(i for i, ln in enumerate(lines) if ln.strip() == BEGIN_MARKER)
        end = next(
            i for i, ln in enumerate(lines)
            if i > start and ln.strip() == END_MARKER
        )
    except StopIteration:
        # Bare TOML (markers stripped when the operator saved the file)
        if any(ln.strip() in (BEGIN_MARKER, END_MARKER) for ln in lines):
            raise RecordFormatError("Unbalanced BEGIN/END markers") from None
        return text
    return "\n".join(lines[start + 1:end])


def parse_record(text: str) -> CalibrationRecord:
    """Parse and validate record text (with or without the markers).

    Raises
    ------
    RecordFormatError
        On unbalanced markers, invalid TOML, or a schema violation.
    """
    block = _extract_block(text)
    try:
        raw = tomllib.loads(block)
    except tomllib.TOMLDecodeError as exc:
        raise RecordFormatError(f"Invalid TOML in record: {exc}") from exc

    raw.setdefault("schema_version", SCHEMA_VERSION)
    try:
        doc = CalibrationRecordV1.model_validate(raw)
    except ValidationError as exc:
        raise RecordFormatError(f"Record failed validation: {exc}") from exc

    dev, cal = doc.device, doc.calibration
    logger.debug("Parsed calibration record for %s", dev.name)
    return CalibrationRecord(
        name=dev.name,
        published_resolution=tuple(dev.published_resolution),
        orientation=cal.orientation,
        left=cal.left,
        right=cal.right,
        top=cal.top,
        bottom=cal.bottom,
        center=tuple(cal.center),
        pinout=dict(doc.pinout),
        manufacturer=dev.manufacturer,
        model=dev.model,
        schema_version=doc.schema_version,
    )
