#!/usr/bin/env python3
"""Validate a saved calibration record and print its usable geometry.

Usage::

    lcd-check-record DueLCD01.config
    lcd-check-record captured_session.txt     # BEGIN/END markers are found

Exit status 0 if the record is valid, 1 otherwise.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from lcd_calibration.export.record import RecordFormatError, parse_record
from lcd_calibration.utils.logging_config import LOG_LEVELS, setup_logging

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="lcd-check-record",
        description="Validate an exported display calibration record",
    )
    parser.add_argument("file", type=str, help="Record file (.config)")
    parser.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS,
                        default="WARNING")
    args = parser.parse_args(argv)

    setup_logging(args.log_level, context={"app": "lcd-check-record"})

    path = Path(args.file)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        logger.error("Cannot read %s: %s", path, exc)
        return 1

    try:
        record = parse_record(text)
    except RecordFormatError as exc:
        logger.error("%s: %s", path, exc)
        return 1

    w, h = record.published_resolution
    cx, cy = record.center
    print(f"{path}: OK (schema v{record.schema_version})")
    print(f"  Device:      {record.name} ({record.manufacturer} {record.model})")
    print(f"  Published:   {w} x {h}")
    print(f"  Orientation: {record.orientation}")
    print(f"  Usable:      left={record.left} right={record.right} "
          f"top={record.top} bottom={record.bottom}")
    print(f"  Size:        {record.usable_width} x {record.usable_height}")
    print(f"  Center:      ({cx}, {cy})")
    if record.pinout:
        pins = ", ".join(f"{k}={v}" for k, v in record.pinout.items())
        print(f"  Pinout:      {pins}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
