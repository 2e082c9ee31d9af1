# ./src/compkit/doctor.py
"""Checksum drift detection for installed component files.

Compares the FNV-1a checksums recorded in a plan against what is on disk now,
so a user (or agent) can tell whether installed stubs were edited or removed
since `apply`.
"""

from __future__ import annotations

from pathlib import Path

from ._types import ChecksumDrift, PlanContract
from .plan import fnv1a_64


def find_drift(plan: PlanContract, root: Path | None = None) -> list[ChecksumDrift]:
    drifts: list[ChecksumDrift] = []
    for file_path, expected in sorted(plan.file_checksums.items(), key=lambda item: item[0].as_posix()):
        target = file_path if root is None or file_path.is_absolute() else root / file_path
        if not target.is_file():
            drifts.append(ChecksumDrift(file_path=file_path, expected=expected, actual=None))
            continue
        actual = fnv1a_64(target.read_bytes().decode("utf-8", errors="replace"))
        if actual != expected:
            drifts.append(ChecksumDrift(file_path=file_path, expected=expected, actual=actual))
    return drifts


__all__ = ["find_drift"]
