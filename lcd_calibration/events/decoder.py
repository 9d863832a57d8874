"""Terminal byte-stream decoder.

Turns the operator's raw byte stream into :mod:`events` -- one event per
semantic unit (key or legacy text line).

Escape disambiguation
---------------------
An ESC byte may be a plain Escape key press or the start of an arrow-key
sequence ``ESC [ A``.  After ESC the decoder waits a short, configurable
window and then looks at what has arrived:

- ``[`` followed by ``A``/``B``/``C``/``D`` -> one :class:`Arrow`.
- ``[`` followed by anything else -> the sequence is dropped.
- nothing, or any other byte -> :class:`PlainEscape`.

This is a timing heuristic.  On a slow link an arrow key whose bytes are
spread over more than the window decodes as ``PlainEscape`` followed by
``[A...`` as legacy text; callers must tolerate that noise.

Ctrl-C always yields :class:`Cancel`, even in the middle of a legacy line;
the partial line is discarded.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from lcd_calibration.events.events import (
    ARROW_CODES,
    CSI_INTRODUCER,
    CTRL_C,
    ESC,
    Arrow,
    Cancel,
    InputEvent,
    LegacyLine,
    ModeSelect,
    PlainEscape,
)
from lcd_calibration.hardware.terminal import Terminal, TerminalClosed

logger = logging.getLogger(__name__)

DEFAULT_ESCAPE_WINDOW_S = 0.010
"""Lookahead after a lone ESC before it is reported as PlainEscape."""

_LINE_BREAKS = (ord("\n"), ord("\r"))


class InputDecoder:
    """Decode a :class:`Terminal` byte stream into input events.

    Parameters
    ----------
    terminal : Terminal
        Byte source.  Its ``sleep()`` implements the lookahead wait.
    escape_window_s : float
        Seconds to wait after ESC for the rest of an arrow sequence.
    """

    def __init__(
        self,
        terminal: Terminal,
        escape_window_s: float = DEFAULT_ESCAPE_WINDOW_S,
    ) -> None:
        if escape_window_s <= 0:
            raise ValueError(
                f"escape_window_s must be > 0, got {escape_window_s}"
            )
        self._term = terminal
        self.escape_window_s = escape_window_s

    def next_event(self) -> InputEvent | None:
        """Consume one semantic unit of input.

        Returns
        -------
        InputEvent | None
            The decoded event, or ``None`` when the unit produces no event
            (bare line break, unrecognised escape sequence).

        Raises
        ------
        TerminalClosed
            When the terminal has no more input.
        """
        byte = self._term.read()

        if byte == CTRL_C:
            return Cancel()

        if byte == ESC:
            return self._decode_escape()

        if ord("1") <= byte <= ord("6"):
            return ModeSelect(byte - ord("0"))

        if byte in _LINE_BREAKS:
            return None

        return self._read_rest_of_line(byte)

    def events(self) -> Iterator[InputEvent]:
        """Yield events until the terminal closes."""
        while True:
            try:
                event = self.next_event()
            except TerminalClosed:
                logger.info("Input closed")
                return
            if event is not None:
                yield event

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _decode_escape(self) -> InputEvent | None:
        self._term.sleep(self.escape_window_s)
        if not self._term.available() or self._term.peek() != CSI_INTRODUCER:
            return PlainEscape()

        self._term.read()  # '['
        if not self._term.available():
            logger.debug("Incomplete escape sequence dropped")
            return None

        code = self._term.read()
        direction = ARROW_CODES.get(code)
        if direction is None:
            logger.debug("Unrecognised escape sequence ESC [ %r dropped", chr(code))
            return None
        return Arrow(direction)

    def _read_rest_of_line(self, first: int) -> InputEvent:
        buf = bytearray([first])
        while True:
            try:
                byte = self._term.read()
            except TerminalClosed:
                break
            if byte == CTRL_C:
                logger.debug("Ctrl-C discards partial line %r", bytes(buf))
                return Cancel()
            if byte in _LINE_BREAKS:
                break
            buf.append(byte)
        return LegacyLine(buf.decode("ascii", errors="replace"))
