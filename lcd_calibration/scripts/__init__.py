"""Command-line entry points (``lcd-calibrate``, ``lcd-check-record``)."""
