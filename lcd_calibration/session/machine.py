"""Mode state machine -- routes decoded input events to the session.

One :class:`CalibrationMachine` drives one :class:`SessionState`.  Each
event is handled to completion (edit, clamp, redraw, feedback) before
the next one is decoded.

Transitions::

    ModeSelect(1-4)   -> mode = EDGE_ADJUST / FRAME_MOVE / THICKNESS / ROTATE
    ModeSelect(5)     -> save & exit (mode unchanged)
    ModeSelect(6)     -> exit without saving (confirm if unsaved)
    Arrow             -> edit operation for the current mode
    PlainEscape       -> adjustment mode: back to NONE; NONE: save & exit
    Cancel (Ctrl-C)   -> save & exit from any mode
    LegacyLine        -> legacy text command

Guard rejections, malformed commands and export preconditions are
reported to the operator and leave the state untouched.  Anything else
propagates to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from lcd_calibration.events.decoder import InputDecoder
from lcd_calibration.events.events import (
    Arrow,
    Cancel,
    Direction,
    InputEvent,
    LegacyLine,
    ModeSelect,
    PlainEscape,
)
from lcd_calibration.export.record import (
    CalibrationRecord,
    export_record,
    render_record,
    save_instructions,
)
from lcd_calibration.hardware import renderer
from lcd_calibration.hardware.canvas import Canvas, FrameBufferCanvas
from lcd_calibration.hardware.terminal import Terminal, TerminalClosed
from lcd_calibration.session import operations
from lcd_calibration.session.commands import Command, help_lines, parse_command
from lcd_calibration.session.operations import EditOutcome
from lcd_calibration.session.state import (
    MODE_KEYS,
    MODE_TITLES,
    CalibrationMode,
    ExportPrecondition,
    GuardRejected,
    MalformedInput,
    SessionAction,
    SessionState,
)

logger = logging.getLogger(__name__)

ArrowHandler = Callable[[SessionState, Direction], EditOutcome]

ARROW_HANDLERS: dict[CalibrationMode, ArrowHandler] = {
    CalibrationMode.EDGE_ADJUST: operations.adjust_edge_by_arrow,
    CalibrationMode.FRAME_MOVE: operations.move_frame,
    CalibrationMode.THICKNESS: operations.adjust_thickness,
    CalibrationMode.ROTATE: operations.rotate,
}

_CONFIRM_KEYS = (ord("y"), ord("Y"))


class CalibrationMachine:
    """Interactive calibration session driver.

    Parameters
    ----------
    state : SessionState
        Session to drive.  Mutated in place.
    terminal : Terminal
        Operator feedback goes here; confirmation and "press any key"
        prompts also read from it.
    canvas : Canvas | None
        Display to draw on.  Defaults to an in-memory framebuffer.
    exit_after_save : bool
        End the session after a successful save.
    show_help_after_command : bool
        Reprint the help after most legacy commands.
    """

    def __init__(
        self,
        state: SessionState,
        terminal: Terminal,
        canvas: Canvas | None = None,
        *,
        exit_after_save: bool = True,
        show_help_after_command: bool = True,
    ) -> None:
        self.state = state
        self._term = terminal
        self.canvas = canvas if canvas is not None else FrameBufferCanvas(
            state.published_resolution, state.rotation,
        )
        self.canvas.set_rotation(state.rotation)
        self.exit_after_save = exit_after_save
        self.show_help_after_command = show_help_after_command

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def run(self, decoder: InputDecoder) -> None:
        """Handle events until the session ends or the input closes."""
        try:
            for event in decoder.events():
                self.handle(event)
                if not self.state.active:
                    break
        except TerminalClosed:
            logger.info("Input closed while waiting for a key")
        logger.info(
            "Session for %s finished (%s)",
            self.state.device_name, self.state.changes_status,
        )

    def handle(self, event: InputEvent) -> None:
        """Apply one decoded event."""
        logger.debug("Event %r in mode %s", event, self.state.mode.name)
        if isinstance(event, Cancel):
            self.say()
            self.say("Ctrl-C detected - initiating save & exit sequence...")
            self.save_and_exit()
        elif isinstance(event, ModeSelect):
            self._select(event.number)
        elif isinstance(event, Arrow):
            self._arrow(event.direction)
        elif isinstance(event, PlainEscape):
            self._escape()
        elif isinstance(event, LegacyLine):
            self._legacy(event.text)
        else:
            raise TypeError(f"Unhandled event type: {type(event).__name__}")

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def say(self, text: str = "") -> None:
        self._term.write_line(text)

    def show_help(self) -> None:
        for line in help_lines(self.state.device_name):
            self.say(line)
        self.say()

    def show_mode_prompt(self) -> None:
        self.say()
        self.say("========== MODE SELECTION ==========")
        self.say("1. Adjust Frame Edges (arrow keys move frame inward/outward)")
        self.say("2. Move Entire Frame (arrow keys shift whole frame)")
        self.say("3. Adjust Frame Thickness (up/down = thicker/thinner, 1-5px)")
        self.say("4. Rotate Display (left/right = rotate CCW/CW)")
        self.say("5. Save & Exit (save calibration to .config)")
        self.say("6. Exit Without Saving")
        self.say()
        self.say(f"Current Mode: {MODE_TITLES[self.state.mode]}")
        self.say()
        self.say("Press 1-6 to select mode, arrow keys to adjust.")
        self.say("====================================")

    def show_info(self) -> None:
        s = self.state
        self.say("Current Display Information:")
        self.say(f"  Rotation: {s.rotation}")
        self.say(f"  Nominal Width: {s.nominal.width}")
        self.say(f"  Nominal Height: {s.nominal.height}")
        if s.bounds.is_unset:
            self.say("  Usable bounds: Not yet set (use 'bounds' command)")
        else:
            self.say(f"  Usable Origin: ({s.bounds.x}, {s.bounds.y})")
            self.say(f"  Usable Size: {s.bounds.width} x {s.bounds.height}")
        self.say(f"  Frame Thickness: {s.frame_thickness}px")
        self.say(f"  Current Mode: {MODE_TITLES[s.mode]}")
        self.say(f"  Changes Status: {s.changes_status}")
        self.say()

    def _report(self, outcome: EditOutcome) -> None:
        if outcome.clamped:
            self.say(
                "WARNING: Bounds clamped to valid range: "
                f"{self.state.bounds.describe()}"
            )
        if outcome.message:
            self.say(outcome.message)

    def _wait_for_key(self) -> None:
        # The key press (and anything sent with it) is not a command
        self._term.read()
        while self._term.available():
            self._term.read()
        self.say()

    def _redraw(self) -> None:
        """Show the current bounds; never blocks on the operator."""
        self.canvas.set_rotation(self.state.rotation)
        self.canvas.clear()
        if not self.state.bounds.is_unset:
            renderer.draw_usable_frame(
                self.canvas, self.state.bounds, self.state.frame_thickness,
            )

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _select(self, number: int) -> None:
        target = MODE_KEYS[number]
        if target is SessionAction.SAVE_AND_EXIT:
            self.save_and_exit()
        elif target is SessionAction.EXIT_WITHOUT_SAVING:
            self.exit_without_saving()
        else:
            self.state.mode = target
            logger.debug("Mode -> %s", target.name)
            self.show_mode_prompt()

    def _arrow(self, direction: Direction) -> None:
        handler = ARROW_HANDLERS.get(self.state.mode)
        if handler is None:
            self.say(
                "Arrow keys not used in this mode. "
                "Press 1-4 to select adjustment mode."
            )
            return
        try:
            outcome = handler(self.state, direction)
        except GuardRejected as exc:
            self.say(f"ERROR: {exc}")
            return
        if not outcome.changed:
            return
        self._redraw()
        self._report(outcome)

    def _escape(self) -> None:
        if self.state.mode.is_adjustment:
            self.state.mode = CalibrationMode.NONE
            self.say()
            self.say(
                "Exiting mode. Press 1-6 to select a new mode, "
                "or ESC to save & exit."
            )
            return
        self.say()
        self.say("ESC pressed - initiating save & exit sequence...")
        self.save_and_exit()

    # ------------------------------------------------------------------
    # Session-ending actions
    # ------------------------------------------------------------------

    def save_and_exit(self) -> bool:
        """Export the record; on success clear the unsaved flag.

        Returns ``True`` if a record was produced.  Failure leaves the
        flag and the session untouched.
        """
        try:
            record = export_record(self.state)
        except ExportPrecondition as exc:
            self.say(f"ERROR: {exc}")
            self.say("Nothing saved. Returning to calibration.")
            return False

        self._print_record(record)
        self.state.mark_saved()
        self.say()
        if self.exit_after_save:
            self.say("Calibration saved. You can now close this tool.")
            self.state.end()
        else:
            self.say("Calibration saved. Continue calibrating or press 6 to exit.")
        return True

    def exit_without_saving(self) -> bool:
        """End the session, asking first if there are unsaved changes.

        Only ``y``/``Y`` confirms.  Any other key cancels, returns the
        mode to NONE and discards whatever else is buffered.
        """
        if self.state.unsaved_changes:
            self.say()
            self.say("WARNING: You have unsaved changes!")
            self.say(
                "Press 'y' to continue without saving, "
                "ESC to cancel, or any other key to cancel."
            )
            response = self._term.read()
            while self._term.available():
                self._term.read()
            if response not in _CONFIRM_KEYS:
                self.state.mode = CalibrationMode.NONE
                self.say("Exit cancelled. Returning to calibration.")
                return False

        logger.info("Exiting without saving (%s)", self.state.changes_status)
        self.say()
        self.say("Exiting without saving. Goodbye!")
        self.state.end()
        return True

    def _print_record(self, record: CalibrationRecord) -> None:
        self.say()
        for line in render_record(record).splitlines():
            self.say(line)
        self.say()
        for line in save_instructions(record):
            self.say(line)
        self.say()

    # ------------------------------------------------------------------
    # Legacy commands
    # ------------------------------------------------------------------

    def _legacy(self, text: str) -> None:
        try:
            command = parse_command(text)
        except MalformedInput as exc:
            self.say(f"Error: {exc}")
            self.say("Example: bounds 1,158,2,127")
            return
        if command is None:
            return
        logger.debug("Legacy command %s", command.name)
        if self.run_command(command) and self.show_help_after_command:
            self.say()
            self.say("--- Command completed. Available commands: ---")
            self.show_help()

    def run_command(self, command: Command) -> bool:
        """Execute *command*; return whether help should follow."""
        s = self.state
        name = command.name

        if name == "rot":
            s.set_rotation(command.rotation)
            s.mark_modified()
            self._redraw()
            self.say(f"Rotation set to: {s.rotation}")
            self.say(f"Display size: {s.nominal.width} x {s.nominal.height}")
            self.say("Usable bounds reset. Use 'cross' command to see "
                     "origin-to-center line.")
        elif name == "frame":
            self.canvas.set_rotation(s.rotation)
            renderer.redraw(
                self.canvas, s.bounds, s.frame_thickness,
                say=self.say, wait=self._wait_for_key,
            )
        elif name == "clear":
            self.canvas.clear()
            self.say("Screen cleared.")
        elif name == "cross":
            renderer.draw_origin_cross(self.canvas, say=self.say)
        elif name == "test":
            renderer.run_self_test(
                self.canvas, s.rotation, s.bounds, s.frame_thickness,
                say=self.say, wait=self._wait_for_key, info=self.show_info,
            )
            return False
        elif name == "center":
            if s.bounds.is_unset:
                self.say("Usable area not defined. Set it with 'bounds L,R,T,B'.")
                self._report(operations.seed_estimated_bounds(s))
                self.show_info()
            renderer.draw_usable_center(self.canvas, s.bounds, say=self.say)
        elif name == "bounds":
            self._report(operations.set_bounds_from_edges(s, *command.edges))
            self._redraw()
        elif name == "export":
            try:
                record = export_record(s)
            except ExportPrecondition as exc:
                self.say(f"ERROR: {exc}")
                return False
            self._print_record(record)
            return False
        elif name == "info":
            self.show_info()
        elif name == "help":
            self.show_help()
            return False
        else:
            self.say(f"Unknown command: {command.text}")
            self.say("Type 'help' for available commands.")
            return False
        return True
