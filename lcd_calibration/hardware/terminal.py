"""Byte-oriented operator terminals.

The calibration session talks to the operator through a :class:`Terminal`:
blocking single-byte reads, a one-byte lookahead (``peek``/``available``)
for escape-sequence disambiguation, and line output.

Implementations:
    - :class:`SerialTerminal` -- pyserial port (USB CDC / UART console).
    - :class:`ConsoleTerminal` -- local TTY in raw mode.
    - :class:`ScriptedTerminal` -- in-memory byte script on a virtual
      clock; deterministic, used by tests and keystroke replays.

``read()`` blocks until a byte arrives and raises :class:`TerminalClosed`
once the input is exhausted (port closed, EOF, script consumed).
"""

from __future__ import annotations

import logging
import os
import select
import sys
import time
from collections import deque
from typing import Any, Protocol

import serial

logger = logging.getLogger(__name__)

BACKSPACE = 0x08
DELETE = 0x7F


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class TerminalError(Exception):
    """Base exception for terminal transport failures."""

    pass


class TerminalClosed(TerminalError):
    """No more input will arrive (port closed, EOF, script exhausted)."""

    pass


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


class Terminal(Protocol):
    """Capability consumed by the decoder and the session."""

    def read(self) -> int:
        """Block until the next byte arrives and return it."""
        ...

    def peek(self) -> int | None:
        """Next byte without consuming it, or ``None`` if nothing is buffered."""
        ...

    def available(self) -> int:
        """Number of bytes that can be read without blocking."""
        ...

    def sleep(self, seconds: float) -> None:
        """Wait *seconds* (the escape lookahead window)."""
        ...

    def write(self, text: str) -> None:
        ...

    def write_line(self, text: str = "") -> None:
        ...


# ---------------------------------------------------------------------------
# Serial transport
# ---------------------------------------------------------------------------


class SerialTerminal:
    """Operator terminal over a serial port.

    Parameters
    ----------
    port : str
        Device path, e.g. ``"/dev/ttyACM0"``.
    baudrate : int
        Line speed.
    line_ending : str
        Appended by :meth:`write_line`.
    serial_port : serial.Serial | None
        Already-open port (skips opening *port*).

    Examples
    --------
    >>> with SerialTerminal("/dev/ttyACM0", 115200) as term:
    ...     term.write_line("Ready")
    """

    def __init__(
        self,
        port: str,
        baudrate: int = 115200,
        *,
        line_ending: str = "\r\n",
        serial_port: Any | None = None,
    ) -> None:
        self.line_ending = line_ending
        self._peeked: int | None = None
        if serial_port is not None:
            self._ser = serial_port
            return
        try:
            logger.info("Opening serial port %s at %d baud", port, baudrate)
            # timeout=None: read() blocks until a byte arrives
            self._ser = serial.Serial(
                port=port,
                baudrate=baudrate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=None,
                write_timeout=1,
            )
        except serial.SerialException as exc:
            raise TerminalError(f"Cannot open {port}: {exc}") from exc

    def __enter__(self) -> SerialTerminal:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        if self._ser.is_open:
            self._ser.close()
            logger.info("Serial port closed")

    def read(self) -> int:
        if self._peeked is not None:
            byte, self._peeked = self._peeked, None
            return byte
        try:
            data = self._ser.read(1)
        except serial.SerialException as exc:
            raise TerminalClosed(f"Serial read failed: {exc}") from exc
        if not data:
            raise TerminalClosed("Serial port returned no data")
        return data[0]

    def peek(self) -> int | None:
        if self._peeked is None and self._ser.in_waiting:
            self._peeked = self._ser.read(1)[0]
        return self._peeked

    def available(self) -> int:
        return self._ser.in_waiting + (1 if self._peeked is not None else 0)

    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)

    def write(self, text: str) -> None:
        try:
            self._ser.write(text.encode("utf-8", errors="replace"))
        except serial.SerialException as exc:
            raise TerminalError(f"Serial write failed: {exc}") from exc

    def write_line(self, text: str = "") -> None:
        self.write(text + self.line_ending)


# ---------------------------------------------------------------------------
# Local console
# ---------------------------------------------------------------------------


class ConsoleTerminal:
    """Local TTY in raw mode, so Ctrl-C and ESC arrive as bytes.

    Must be used as a context manager; the previous terminal settings are
    restored on exit.
    """

    def __init__(self, line_ending: str = "\r\n") -> None:
        self.line_ending = line_ending
        self._fd = sys.stdin.fileno()
        self._saved: list[Any] | None = None
        self._peeked: int | None = None

    def __enter__(self) -> ConsoleTerminal:
        import termios
        import tty

        self._saved = termios.tcgetattr(self._fd)
        tty.setraw(self._fd)
        return self

    def __exit__(self, *exc: object) -> None:
        import termios

        if self._saved is not None:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved)
            self._saved = None

    def _ready(self) -> bool:
        return bool(select.select([self._fd], [], [], 0.0)[0])

    def read(self) -> int:
        if self._peeked is not None:
            byte, self._peeked = self._peeked, None
            return byte
        data = os.read(self._fd, 1)
        if not data:
            raise TerminalClosed("stdin closed")
        return data[0]

    def peek(self) -> int | None:
        if self._peeked is None and self._ready():
            data = os.read(self._fd, 1)
            if data:
                self._peeked = data[0]
        return self._peeked

    def available(self) -> int:
        if self._peeked is not None:
            return 1
        return 1 if self._ready() else 0

    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)

    def write(self, text: str) -> None:
        sys.stdout.write(text)
        sys.stdout.flush()

    def write_line(self, text: str = "") -> None:
        self.write(text + self.line_ending)


# ---------------------------------------------------------------------------
# Scripted (virtual clock)
# ---------------------------------------------------------------------------


class ScriptedTerminal:
    """In-memory terminal fed from a byte script on a virtual clock.

    Each queued byte has an arrival time.  ``available()``/``peek()`` only
    see bytes that have arrived by the current virtual time, ``sleep()``
    advances the clock, and ``read()`` jumps the clock forward to the next
    arrival when nothing has arrived yet.  This makes timing races (an
    escape sequence split by a slow link) reproducible.

    Examples
    --------
    >>> term = ScriptedTerminal()
    >>> term.feed(b"\\x1b").feed(b"[A", delay=0.05)   # slow arrow key
    >>> term.write_line("hello")
    >>> term.output
    'hello\\r\\n'
    """

    def __init__(self, data: bytes | str = b"", line_ending: str = "\r\n") -> None:
        self.line_ending = line_ending
        self._now = 0.0
        self._last_arrival = 0.0
        self._pending: deque[tuple[float, int]] = deque()
        self._out: list[str] = []
        if data:
            self.feed(data)

    @property
    def now(self) -> float:
        """Current virtual time in seconds."""
        return self._now

    @property
    def output(self) -> str:
        """Everything written so far."""
        return "".join(self._out)

    @property
    def exhausted(self) -> bool:
        return not self._pending

    def clear_output(self) -> None:
        self._out.clear()

    def feed(
        self,
        data: bytes | str,
        *,
        delay: float = 0.0,
        gap: float = 0.0,
    ) -> ScriptedTerminal:
        """Queue *data*.

        Parameters
        ----------
        data : bytes | str
            Bytes to queue (``str`` is encoded as latin-1).
        delay : float
            Seconds between the previously queued byte (or now, if
            later) and the first byte of *data*.
        gap : float
            Seconds between consecutive bytes of *data*.

        Returns
        -------
        ScriptedTerminal
            ``self``, for chaining.
        """
        if isinstance(data, str):
            data = data.encode("latin-1")
        t = max(self._last_arrival, self._now) + delay
        for i, byte in enumerate(data):
            arrival = t + i * gap
            self._pending.append((arrival, byte))
            self._last_arrival = arrival
        return self

    def read(self) -> int:
        if not self._pending:
            raise TerminalClosed("Script exhausted")
        arrival, byte = self._pending.popleft()
        if arrival > self._now:
            self._now = arrival
        return byte

    def peek(self) -> int | None:
        if self._pending and self._pending[0][0] <= self._now:
            return self._pending[0][1]
        return None

    def available(self) -> int:
        count = 0
        for arrival, _ in self._pending:
            if arrival > self._now:
                break
            count += 1
        return count

    def sleep(self, seconds: float) -> None:
        self._now += seconds

    def write(self, text: str) -> None:
        self._out.append(text)

    def write_line(self, text: str = "") -> None:
        self.write(text + self.line_ending)


# ---------------------------------------------------------------------------
# Line input
# ---------------------------------------------------------------------------


def read_line(terminal: Terminal, *, echo: bool = True) -> str:
    """Read one operator line (startup prompts).

    Printable ASCII is accumulated (and echoed), backspace / DEL erases
    the last character, CR or LF terminates.  A terminator on an empty
    line returns ``""``; the caller decides whether that is acceptable.
    """
    chars: list[str] = []
    while True:
        byte = terminal.read()
        if byte in (ord("\r"), ord("\n")):
            # swallow the LF of a CRLF pair
            if byte == ord("\r") and terminal.peek() == ord("\n"):
                terminal.read()
            if echo:
                terminal.write_line()
            return "".join(chars).strip()
        if byte in (BACKSPACE, DELETE):
            if chars:
                chars.pop()
                if echo:
                    terminal.write("\b \b")
        elif 32 <= byte <= 126:
            chars.append(chr(byte))
            if echo:
                terminal.write(chr(byte))
