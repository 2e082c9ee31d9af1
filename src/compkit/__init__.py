# ./src/compkit/__init__.py
"""Public compkit package API.

Plans and applies design-system component installs into a target project.
Import `generate_plan`/`apply_plan` for direct use, `build_registry` for the
built-in component catalog, or the `*_payload` helpers for JSON-style
automation flows.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from .api import add_payload, apply_payload, list_payload, plan_payload
from .apply import apply_plan
from .catalog import build_registry
from .layout import DefaultLayout, LibLayout, TemplateAdapter, get_layout
from .plan import generate_plan, load_plan
from .registry import RegistryEntry, RegistryIndex

__all__ = [
    "DefaultLayout",
    "LibLayout",
    "RegistryEntry",
    "RegistryIndex",
    "TemplateAdapter",
    "__version__",
    "add_payload",
    "apply_payload",
    "apply_plan",
    "build_registry",
    "generate_plan",
    "get_layout",
    "list_payload",
    "load_plan",
    "plan_payload",
]

try:
    __version__ = version("compkit")
except PackageNotFoundError:
    __version__ = "0.0.0+dev"
