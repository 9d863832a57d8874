"""Logging configuration for the calibration entrypoints.

Log records go to stderr (and optionally a file); operator feedback goes
through the Terminal and never through logging, so a serial session is
not interleaved with diagnostics.

Public API:
    setup_logging(log_level="INFO", log_file=None, json=False,
                  context={"app": "lcd-calibrate"})
    push_context(display="DueLCD01")
    pop_context(keys=["display"])
    install_excepthook()

Format examples:
    Human: 2026-03-02T09:14:07.512Z | INFO     | app=lcd-calibrate display=DueLCD01 | Session started
    JSON: {"t":"2026-03-02T09:14:07.512+00:00","lvl":"INFO","display":"DueLCD01","msg":"..."}

Context uses contextvars.  Idempotent: repeated setup_logging() calls
replace the handlers they installed instead of duplicating them.
"""

import contextvars
import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional


_context_var: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar(
    'logging_context', default={}
)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Handlers installed by setup_logging(), replaced on the next call
_installed: List[logging.Handler] = []


class ContextFormatter(logging.Formatter):
    """Formatter that appends contextual fields from push_context().

    Parameters
    ----------
    fmt_mode : str
        "human" or "json"
    use_color : bool
        ANSI level colours (only when stderr is a TTY)
    tz : str
        "UTC" or "local"
    """

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
        'RESET': '\033[0m',
    }

    def __init__(
        self,
        fmt_mode: str = "human",
        use_color: bool = True,
        tz: str = "UTC"
    ):
        super().__init__()
        if fmt_mode not in ("human", "json"):
            raise ValueError(f"Unknown format mode: {fmt_mode}. Use 'human' or 'json'.")
        self.fmt_mode = fmt_mode
        self.use_color = use_color and sys.stderr.isatty()
        self.tz = tz

    def format(self, record: logging.LogRecord) -> str:
        context = _context_var.get()
        if self.tz == "UTC":
            ts = datetime.fromtimestamp(record.created, tz=timezone.utc)
        else:
            ts = datetime.fromtimestamp(record.created)

        if self.fmt_mode == "json":
            return self._format_json(record, ts, context)
        return self._format_human(record, ts, context)

    def _format_json(
        self,
        record: logging.LogRecord,
        ts: datetime,
        context: Dict[str, Any]
    ) -> str:
        log_dict = {
            't': ts.isoformat(timespec='milliseconds'),
            'lvl': record.levelname,
            'name': record.name,
            'msg': record.getMessage(),
        }
        log_dict.update(context)
        if record.exc_info:
            log_dict['exc'] = self.formatException(record.exc_info)
        return json.dumps(log_dict, default=str)

    def _format_human(
        self,
        record: logging.LogRecord,
        ts: datetime,
        context: Dict[str, Any]
    ) -> str:
        ts_str = ts.strftime('%Y-%m-%dT%H:%M:%S.%f')[:-3] + 'Z'

        level = f"{record.levelname:8s}"
        if self.use_color:
            level = f"{self.COLORS.get(record.levelname, '')}{level}{self.COLORS['RESET']}"

        parts = [ts_str, '|', level, '|']
        if context:
            parts.append(' '.join(f"{k}={v}" for k, v in context.items()))
            parts.append('|')
        parts.append(record.getMessage())

        line = ' '.join(parts)
        if record.exc_info:
            line += '\n' + self.formatException(record.exc_info)
        return line


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    *,
    json: bool = False,
    color: bool = True,
    to_stderr: bool = True,
    rotate: Optional[Dict[str, Any]] = None,
    tz: str = "UTC",
    quiet_libs: Optional[List[str]] = None,
    context: Optional[Dict[str, Any]] = None,
) -> List[logging.Handler]:
    """Configure the root logger (idempotent).

    Parameters
    ----------
    log_level : str
        "DEBUG", "INFO", "WARNING", "ERROR" or "CRITICAL"
    log_file : str, optional
        Log file path; None for no file logging
    json : bool
        JSON lines instead of the human format (file and stderr)
    color : bool
        ANSI colours on stderr
    to_stderr : bool
        Log to stderr
    rotate : dict, optional
        {"max_bytes": 5_000_000, "backup_count": 3} for a rotating file
    tz : str
        "UTC" (default) or "local"
    quiet_libs : list[str], optional
        Loggers to cap at WARNING (default: ["serial"])
    context : dict, optional
        Initial contextual fields, e.g. {"app": "lcd-calibrate"}

    Returns
    -------
    list[logging.Handler]
        Installed handlers.

    Raises
    ------
    ValueError
        Unknown log level.
    """
    global _installed

    level = getattr(logging, log_level.upper(), None)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")

    root = logging.getLogger()
    for handler in _installed:
        root.removeHandler(handler)
        handler.close()
    root.setLevel(level)

    fmt_mode = "json" if json else "human"
    handlers: List[logging.Handler] = []

    if to_stderr:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(ContextFormatter(fmt_mode, color, tz))
        handlers.append(console)

    if log_file:
        handlers.append(_create_file_handler(log_file, rotate, fmt_mode, tz))

    for handler in handlers:
        root.addHandler(handler)

    if context:
        push_context(**context)

    for lib in quiet_libs if quiet_libs is not None else ["serial"]:
        logging.getLogger(lib).setLevel(logging.WARNING)

    logging.captureWarnings(True)
    _installed = handlers
    return handlers


def _create_file_handler(
    log_file: str,
    rotate: Optional[Dict[str, Any]],
    fmt_mode: str,
    tz: str
) -> logging.Handler:
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    if rotate:
        handler: logging.Handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=rotate.get('max_bytes', 5_000_000),
            backupCount=rotate.get('backup_count', 3),
        )
    else:
        handler = logging.FileHandler(log_path)
    handler.setFormatter(ContextFormatter(fmt_mode, use_color=False, tz=tz))
    return handler


def push_context(**kwargs: Any) -> None:
    """Add contextual fields to all subsequent log records.

    Examples
    --------
    >>> push_context(display="DueLCD01")
    >>> logger.info("Saved")  # → "... | display=DueLCD01 | Saved"
    """
    _context_var.set({**_context_var.get(), **kwargs})


def pop_context(keys: Optional[List[str]] = None) -> None:
    """Remove contextual fields; all of them if *keys* is None."""
    if keys is None:
        _context_var.set({})
        return
    current = dict(_context_var.get())
    for key in keys:
        current.pop(key, None)
    _context_var.set(current)


def get_context() -> Dict[str, Any]:
    """Current contextual fields (a copy)."""
    return dict(_context_var.get())


def install_excepthook() -> None:
    """Log uncaught exceptions (except Ctrl-C) before the interpreter exits."""
    def log_exception(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        logging.getLogger(__name__).critical(
            "Uncaught exception",
            exc_info=(exc_type, exc_value, exc_traceback)
        )

    sys.excepthook = log_exception
