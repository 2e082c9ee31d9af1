# ./src/compkit/io.py
"""File I/O helpers for plan snapshots and safe file mutation.

Reads report the file's newline style and BOM so merge strategies can keep a
project's conventions; writes go through a temp-file swap so a crash never
leaves a half-written target behind.
"""

from __future__ import annotations

import json
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import Any

UTF8_BOM = b"\xef\xbb\xbf"


def read_text_preserve(path: Path) -> tuple[str, str, bool]:
    """Return decoded text, dominant newline style, and BOM presence."""

    raw = path.read_bytes()
    has_bom = raw.startswith(UTF8_BOM)
    text = raw.decode("utf-8-sig")
    if "\r\n" in text:
        newline = "\r\n"
    elif "\r" in text:
        newline = "\r"
    else:
        newline = "\n"
    return text, newline, has_bom


def write_text_preserve(path: Path, content: str, bom: bool = False) -> None:
    """Write UTF-8 content, re-adding a BOM when the original had one."""

    payload = content.encode("utf-8")
    if bom:
        payload = UTF8_BOM + payload
    write_atomic_bytes(path, payload)


def write_atomic_bytes(path: Path, data: bytes) -> None:
    """Atomically replace file content with a temp-file swap."""

    tmp_fd, tmp_path = tempfile.mkstemp(prefix=".compkit-", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(tmp_fd, "wb") as stream:
            stream.write(data)
        os.replace(tmp_path, path)
    except BaseException:
        Path(tmp_path).unlink(missing_ok=True)
        raise


def write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    write_atomic_bytes(path, (json.dumps(payload, indent=2) + "\n").encode("utf-8"))


def existing_files(candidates: Iterable[Path]) -> list[Path]:
    """Snapshot which of `candidates` currently exist as files, in input order."""

    return [path for path in candidates if path.is_file()]


__all__ = [
    "existing_files",
    "read_text_preserve",
    "write_atomic_bytes",
    "write_json",
    "write_text_preserve",
]
