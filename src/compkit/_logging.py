# ./src/compkit/_logging.py
"""Logging setup for the compkit CLI and MCP server.

Logs go to stderr so stdout stays reserved for JSON envelopes; an optional
file sink captures full debug detail of an install for later inspection.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path


def _level_for(verbosity: int, quiet: bool) -> int:
    if quiet:
        return logging.ERROR
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


def setup_logging(verbosity: int, quiet: bool, log_file: Path | None) -> None:
    """Configure root logging based on CLI verbosity flags."""

    level = _level_for(verbosity, quiet)
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.DEBUG if log_file else level)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(logging.Formatter("compkit: %(message)s"))
    root.addHandler(console)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(module)s | %(message)s"))
        root.addHandler(file_handler)


__all__ = ["setup_logging"]
