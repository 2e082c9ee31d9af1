# ./src/compkit/api.py
"""Programmatic integration helpers for agents and automation.

Use this module when embedding compkit into MCP tools, CI wrappers, or code
generators. Loose dictionaries become typed `Options`, and every helper returns
the same JSON-safe `{success, data, errors}` envelope the CLI prints, so no
subprocess parsing is needed.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ._types import JsonEnvelope, Options
from .apply import apply_plan
from .config import merge_options
from .core import add_component, load_registry, plan_component
from .errors import CompkitError, ConflictsDetectedError
from .plan import load_plan
from .report import apply_envelope, conflict_errors, error_row, failure_envelope, success_envelope


def options_from_mapping(payload: Mapping[str, Any], *, base: Options | None = None) -> Options:
    """Create validated Options from arbitrary mapping input."""

    return merge_options(base or Options(), dict(payload))


def _error_envelope(error: CompkitError) -> JsonEnvelope:
    if isinstance(error, ConflictsDetectedError):
        return failure_envelope(conflict_errors(error.plan), error.plan.to_dict())
    return failure_envelope([error_row(error.code, str(error))])


def list_payload(payload: Mapping[str, Any] | None = None) -> JsonEnvelope:
    """List registered components as JSON-safe entries."""

    try:
        registry = load_registry(options_from_mapping(payload or {}))
    except CompkitError as error:
        return _error_envelope(error)
    return success_envelope([entry.to_dict() for entry in registry.list()])


def plan_payload(component: str, payload: Mapping[str, Any] | None = None) -> JsonEnvelope:
    """Generate (never apply) the plan for `component`."""

    try:
        plan = plan_component(component, options_from_mapping(payload or {}))
    except CompkitError as error:
        return _error_envelope(error)
    return success_envelope(plan.to_dict())


def add_payload(component: str, payload: Mapping[str, Any] | None = None) -> JsonEnvelope:
    """Plan and apply `component`, refusing on conflicts unless `force` is set."""

    try:
        result = add_component(component, options_from_mapping(payload or {}))
    except CompkitError as error:
        return _error_envelope(error)
    return apply_envelope(result)


def apply_payload(plan_json: str, payload: Mapping[str, Any] | None = None) -> JsonEnvelope:
    """Apply a plan given as JSON text (raw plan or output envelope)."""

    options = options_from_mapping(payload or {})
    try:
        plan = load_plan(plan_json)
    except CompkitError as error:
        return _error_envelope(error)
    return apply_envelope(apply_plan(plan, root=options.target_dir, write_provenance=options.write_provenance))


__all__ = ["add_payload", "apply_payload", "list_payload", "options_from_mapping", "plan_payload"]
