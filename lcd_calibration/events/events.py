"""Input events -- the vocabulary between raw terminal bytes and the session.

Every decoded keystroke (or legacy text line) becomes exactly one immutable
event.  The state machine dispatches on event type only; it never sees raw
bytes.

Byte mapping
------------
``'1'`` .. ``'6'``        -> :class:`ModeSelect`
``ESC [ A/B/C/D``         -> :class:`Arrow` (up / down / right / left)
``ESC`` (alone)           -> :class:`PlainEscape`
``0x03`` (Ctrl-C)         -> :class:`Cancel`
anything else + newline   -> :class:`LegacyLine`
"""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass
from typing import Literal

Direction = Literal["up", "down", "left", "right"]

DIRECTIONS: tuple[Direction, ...] = ("up", "down", "left", "right")

# Control bytes
ESC = 0x1B
CTRL_C = 0x03
CSI_INTRODUCER = ord("[")

ARROW_CODES: dict[int, Direction] = {
    ord("A"): "up",
    ord("B"): "down",
    ord("C"): "right",
    ord("D"): "left",
}
"""Final byte of an ``ESC [`` sequence -> arrow direction."""


# ---------------------------------------------------------------------------
# Base class
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class InputEvent(ABC):
    """Base class for all decoded input events."""

    pass


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ModeSelect(InputEvent):
    """Digit key selecting a mode or a one-shot action.

    Parameters
    ----------
    number : int
        ``1``-``4`` select an adjustment mode, ``5`` saves and exits,
        ``6`` exits without saving.
    """

    number: int

    def __post_init__(self) -> None:
        if not 1 <= self.number <= 6:
            raise ValueError(
                f"ModeSelect number must be 1-6, got {self.number!r}"
            )


@dataclass(frozen=True, slots=True)
class Arrow(InputEvent):
    """Arrow key."""

    direction: Direction

    def __post_init__(self) -> None:
        if self.direction not in DIRECTIONS:
            raise ValueError(
                f"direction must be one of {DIRECTIONS}, "
                f"got {self.direction!r}"
            )


@dataclass(frozen=True, slots=True)
class PlainEscape(InputEvent):
    """ESC not followed by ``[`` within the lookahead window."""

    pass


@dataclass(frozen=True, slots=True)
class Cancel(InputEvent):
    """Ctrl-C -- save and end the session, regardless of mode."""

    pass


@dataclass(frozen=True, slots=True)
class LegacyLine(InputEvent):
    """A line of text for the legacy command parser.

    Parameters
    ----------
    text : str
        Raw line without its terminator.  Trimming and case folding are
        left to the command parser.
    """

    text: str
