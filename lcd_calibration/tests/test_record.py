"""Tests for calibration record export, rendering and parsing."""

from __future__ import annotations

import tomllib

import pytest

from conftest import make_state
from lcd_calibration.export.record import (
    BEGIN_MARKER,
    END_MARKER,
    CalibrationRecord,
    RecordFormatError,
    export_record,
    parse_record,
    render_record,
    save_instructions,
)
from lcd_calibration.geometry.bounds import UsableBounds
from lcd_calibration.session.state import BoundsNotSet, ExportPrecondition


@pytest.fixture()
def record() -> CalibrationRecord:
    return export_record(make_state(bounds=UsableBounds(1, 2, 158, 126)))


def _body(text: str) -> str:
    lines = text.splitlines()
    return "\n".join(lines[lines.index(BEGIN_MARKER) + 1:lines.index(END_MARKER)])


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


class TestExport:
    def test_fields(self, record: CalibrationRecord) -> None:
        assert record.name == "TestLCD"
        assert record.published_resolution == (160, 128)
        assert record.orientation == "landscape"
        assert (record.left, record.right, record.top, record.bottom) == (1, 158, 2, 127)
        assert record.center == (80, 65)
        assert record.pinout == {"rst": 8, "dc": 10, "cs": 7, "bl": 9}
        assert (record.usable_width, record.usable_height) == (158, 126)

    def test_deterministic(self) -> None:
        state = make_state()
        assert export_record(state) == export_record(state)
        assert render_record(export_record(state)) == render_record(export_record(state))

    def test_does_not_touch_state(self) -> None:
        state = make_state()
        state.mark_modified()
        export_record(state)
        assert state.unsaved_changes
        assert not state.ever_saved

    def test_unset_bounds(self) -> None:
        state = make_state(bounds=UsableBounds.unset())
        with pytest.raises(ExportPrecondition, match="bounds 1,158,2,127"):
            export_record(state)
        assert BoundsNotSet is ExportPrecondition

    @pytest.mark.parametrize(
        "rotation, label",
        [(0, "portrait"), (1, "landscape"), (2, "reverse_portrait"), (3, "reverse_landscape")],
    )
    def test_orientation_label(self, rotation: int, label: str) -> None:
        state = make_state(rotation=rotation)
        record = export_record(state)
        assert record.orientation == label
        # Published resolution is always the landscape figure
        assert record.published_resolution == (160, 128)


# ---------------------------------------------------------------------------
# Render
# ---------------------------------------------------------------------------


class TestRender:
    def test_markers_wrap_document(self, record: CalibrationRecord) -> None:
        lines = render_record(record).splitlines()
        assert lines[0] == BEGIN_MARKER
        assert lines[-1] == END_MARKER

    def test_body_is_valid_toml(self, record: CalibrationRecord) -> None:
        doc = tomllib.loads(_body(render_record(record)))
        assert doc["schema_version"] == 1
        assert doc["device"]["name"] == "TestLCD"
        assert doc["device"]["published_resolution"] == [160, 128]
        assert doc["pinout"] == {"rst": 8, "dc": 10, "cs": 7, "bl": 9}
        cal = doc["calibration"]
        assert (cal["left"], cal["right"], cal["top"], cal["bottom"]) == (1, 158, 2, 127)
        assert cal["center"] == [80, 65]
        assert cal["orientation"] == "landscape"

    def test_quotes_escaped(self) -> None:
        state = make_state()
        state.device_name = 'Panel "A"\\1'
        doc = tomllib.loads(_body(render_record(export_record(state))))
        assert doc["device"]["name"] == 'Panel "A"\\1'

    def test_empty_pinout(self) -> None:
        state = make_state()
        state.pinout = {}
        doc = tomllib.loads(_body(render_record(export_record(state))))
        assert doc["pinout"] == {}

    def test_pin_names_that_are_not_bare_keys(self) -> None:
        state = make_state()
        state.pinout = {"reset pin": 8, "dc": 10, "cs.0": 7}
        record = export_record(state)
        text = render_record(record)
        assert 'dc = 10' in text
        assert '"reset pin" = 8' in text
        assert parse_record(text).pinout == {"reset pin": 8, "dc": 10, "cs.0": 7}

    @pytest.mark.parametrize("name", ["Due\x01LCD", "Due\x7fLCD", "Due\tLCD", "Due\nLCD"])
    def test_control_characters_in_name(self, name: str) -> None:
        state = make_state()
        state.device_name = name
        record = export_record(state)
        text = render_record(record)
        assert text.count("\n") == render_record(export_record(make_state())).count("\n")
        assert parse_record(text).name == name

    def test_save_instructions_name_file(self, record: CalibrationRecord) -> None:
        lines = save_instructions(record)
        assert any("TestLCD.config" in ln for ln in lines)


# ---------------------------------------------------------------------------
# Parse
# ---------------------------------------------------------------------------


class TestParse:
    def test_rendered_text_parses_back(self, record: CalibrationRecord) -> None:
        assert parse_record(render_record(record)) == record

    def test_surrounding_text_ignored(self, record: CalibrationRecord) -> None:
        text = "Connected!\n" + render_record(record) + "\nSAVE INSTRUCTIONS:\n"
        assert parse_record(text) == record

    def test_bare_toml(self, record: CalibrationRecord) -> None:
        assert parse_record(_body(render_record(record))) == record

    def test_missing_schema_version_defaults(self, record: CalibrationRecord) -> None:
        body = "\n".join(
            ln for ln in _body(render_record(record)).splitlines()
            if not ln.startswith("schema_version")
        )
        assert parse_record(body).schema_version == 1

    def test_unbalanced_markers(self, record: CalibrationRecord) -> None:
        text = render_record(record).replace(END_MARKER, "")
        with pytest.raises(RecordFormatError, match="Unbalanced"):
            parse_record(text)

    def test_invalid_toml(self) -> None:
        with pytest.raises(RecordFormatError, match="Invalid TOML"):
            parse_record("[device\nname = ")

    @pytest.mark.parametrize(
        "old, new",
        [
            ('orientation = "landscape"', 'orientation = "sideways"'),
            ("left = 1", "left = 200"),
            ("top = 2", "top = -1"),
            ('name = "TestLCD"', 'name = "  "'),
            ("schema_version = 1", "schema_version = 2"),
        ],
    )
    def test_schema_violations(self, record: CalibrationRecord, old: str, new: str) -> None:
        text = render_record(record).replace(old, new)
        with pytest.raises(RecordFormatError, match="validation"):
            parse_record(text)

    def test_missing_calibration_table(self) -> None:
        text = '[device]\nname = "X"\npublished_resolution = [160, 128]\n'
        with pytest.raises(RecordFormatError):
            parse_record(text)
