"""Tests for the input events and the terminal byte-stream decoder.

The ScriptedTerminal's virtual clock makes the escape-disambiguation
window testable: bytes are queued with explicit gaps and the decoder's
lookahead sleep advances the clock.
"""

from __future__ import annotations

import pytest

from lcd_calibration.events.decoder import DEFAULT_ESCAPE_WINDOW_S, InputDecoder
from lcd_calibration.events.events import (
    Arrow,
    Cancel,
    LegacyLine,
    ModeSelect,
    PlainEscape,
)
from lcd_calibration.hardware.terminal import (
    ScriptedTerminal,
    TerminalClosed,
    read_line,
)


def decode_all(data: bytes, window: float = DEFAULT_ESCAPE_WINDOW_S) -> list:
    return list(InputDecoder(ScriptedTerminal(data), window).events())


# ---------------------------------------------------------------------------
# Event dataclasses
# ---------------------------------------------------------------------------


class TestEvents:
    def test_mode_select_range(self) -> None:
        assert ModeSelect(1).number == 1
        with pytest.raises(ValueError, match="1-6"):
            ModeSelect(7)
        with pytest.raises(ValueError, match="1-6"):
            ModeSelect(0)

    def test_arrow_direction(self) -> None:
        with pytest.raises(ValueError, match="direction"):
            Arrow("sideways")  # type: ignore[arg-type]

    def test_equality_and_immutability(self) -> None:
        assert PlainEscape() == PlainEscape()
        assert Arrow("up") != Arrow("down")
        with pytest.raises(AttributeError):
            ModeSelect(1).number = 2  # type: ignore[misc]


# ---------------------------------------------------------------------------
# Single-byte events
# ---------------------------------------------------------------------------


class TestSimpleBytes:
    @pytest.mark.parametrize("digit", range(1, 7))
    def test_mode_digits(self, digit: int) -> None:
        assert decode_all(str(digit).encode()) == [ModeSelect(digit)]

    def test_ctrl_c_is_cancel(self) -> None:
        assert decode_all(b"\x03") == [Cancel()]

    def test_bare_line_breaks_ignored(self) -> None:
        assert decode_all(b"\r\n\r") == []

    def test_other_digits_are_text(self) -> None:
        assert decode_all(b"7\r") == [LegacyLine("7")]


# ---------------------------------------------------------------------------
# Escape family
# ---------------------------------------------------------------------------


class TestEscape:
    @pytest.mark.parametrize(
        "code, direction",
        [(b"A", "up"), (b"B", "down"), (b"C", "right"), (b"D", "left")],
    )
    def test_arrow_keys(self, code: bytes, direction: str) -> None:
        assert decode_all(b"\x1b[" + code) == [Arrow(direction)]

    def test_lone_escape(self) -> None:
        assert decode_all(b"\x1b") == [PlainEscape()]

    def test_escape_then_other_byte(self) -> None:
        assert decode_all(b"\x1bx\n") == [PlainEscape(), LegacyLine("x")]

    def test_two_escapes(self) -> None:
        assert decode_all(b"\x1b\x1b") == [PlainEscape(), PlainEscape()]

    def test_unknown_final_byte_dropped(self) -> None:
        assert decode_all(b"\x1b[Z1") == [ModeSelect(1)]

    def test_incomplete_sequence_dropped(self) -> None:
        term = ScriptedTerminal(b"\x1b[")
        decoder = InputDecoder(term)
        assert decoder.next_event() is None
        with pytest.raises(TerminalClosed):
            decoder.next_event()

    def test_sequence_within_window(self) -> None:
        term = ScriptedTerminal()
        term.feed(b"\x1b").feed(b"[A", delay=DEFAULT_ESCAPE_WINDOW_S / 2)
        assert list(InputDecoder(term).events()) == [Arrow("up")]

    def test_slow_sequence_splits(self) -> None:
        """A split arrow key decodes as Escape plus stray text."""
        term = ScriptedTerminal()
        term.feed(b"\x1b").feed(b"[A", delay=0.05)
        assert list(InputDecoder(term).events()) == [
            PlainEscape(), LegacyLine("[A"),
        ]

    def test_wider_window_tolerates_slow_link(self) -> None:
        term = ScriptedTerminal()
        term.feed(b"\x1b").feed(b"[A", delay=0.05)
        assert list(InputDecoder(term, escape_window_s=0.1).events()) == [
            Arrow("up"),
        ]

    def test_window_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="> 0"):
            InputDecoder(ScriptedTerminal(), escape_window_s=0)

    def test_lookahead_advances_clock(self) -> None:
        term = ScriptedTerminal(b"\x1b")
        InputDecoder(term, escape_window_s=0.02).next_event()
        assert term.now == pytest.approx(0.02)


# ---------------------------------------------------------------------------
# Legacy lines
# ---------------------------------------------------------------------------


class TestLegacyLines:
    def test_line_until_break(self) -> None:
        assert decode_all(b"bounds 1,158,2,127\r\n") == [
            LegacyLine("bounds 1,158,2,127"),
        ]

    def test_unterminated_line_at_end_of_input(self) -> None:
        assert decode_all(b"info") == [LegacyLine("info")]

    def test_ctrl_c_mid_line_cancels(self) -> None:
        assert decode_all(b"bou\x03") == [Cancel()]

    def test_ctrl_c_discards_partial_line(self) -> None:
        assert decode_all(b"bou\x031info\r") == [
            Cancel(), ModeSelect(1), LegacyLine("info"),
        ]

    def test_mixed_stream(self) -> None:
        events = decode_all(b"1\x1b[C\x1b[Bexport\r\n\x03")
        assert events == [
            ModeSelect(1),
            Arrow("right"),
            Arrow("down"),
            LegacyLine("export"),
            Cancel(),
        ]


# ---------------------------------------------------------------------------
# Scripted terminal and line input
# ---------------------------------------------------------------------------


class TestScriptedTerminal:
    def test_available_respects_arrival_time(self) -> None:
        term = ScriptedTerminal()
        term.feed(b"a").feed(b"b", delay=1.0)
        assert term.available() == 1
        assert term.read() == ord("a")
        assert term.peek() is None
        term.sleep(1.0)
        assert term.peek() == ord("b")

    def test_read_jumps_clock(self) -> None:
        term = ScriptedTerminal()
        term.feed(b"x", delay=2.5)
        assert term.read() == ord("x")
        assert term.now == pytest.approx(2.5)
        assert term.exhausted

    def test_gap_between_bytes(self) -> None:
        term = ScriptedTerminal()
        term.feed(b"abc", gap=0.5)
        term.sleep(0.6)
        assert term.available() == 2

    def test_output_capture(self) -> None:
        term = ScriptedTerminal(line_ending="\n")
        term.write("a")
        term.write_line("b")
        assert term.output == "ab\n"
        term.clear_output()
        assert term.output == ""


class TestReadLine:
    def test_backspace_and_echo(self) -> None:
        term = ScriptedTerminal(b"abc\x08d\r\n")
        assert read_line(term) == "abd"
        assert term.output.startswith("abc\b \bd")
        assert term.exhausted

    def test_delete_on_empty_line(self) -> None:
        assert read_line(ScriptedTerminal(b"\x7fok\n")) == "ok"

    def test_empty_line(self) -> None:
        assert read_line(ScriptedTerminal(b"\r")) == ""

    def test_strips_and_skips_control(self) -> None:
        assert read_line(ScriptedTerminal(b"  Due\x01LCD  \r"), echo=False) == "DueLCD"

    def test_closed_mid_line(self) -> None:
        with pytest.raises(TerminalClosed):
            read_line(ScriptedTerminal(b"abc"))
