# ./tests/conftest.py
"""Pytest session setup for compkit.

Ensures the local `src/` package is importable during test runs, scrubs
`__pycache__` directories before collection, and provides a small target
project fixture for plan/apply tests.
"""

from __future__ import annotations

import shutil
import sys
from pathlib import Path

import pytest


def _scrub_pycache(root: Path) -> None:
    for cache_dir in root.rglob("__pycache__"):
        shutil.rmtree(cache_dir, ignore_errors=True)


PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

_scrub_pycache(PROJECT_ROOT)


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """An empty target project with a `src/` directory."""
    root = tmp_path / "proj"
    (root / "src").mkdir(parents=True)
    return root
