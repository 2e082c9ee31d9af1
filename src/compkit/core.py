# ./src/compkit/core.py
"""Compkit orchestration engine.

Wires the registry, layout adapter, plan generator, and executor together for
the CLI/API callers. Nothing here is global: each call builds (or receives)
its own registry and layout from the supplied `Options`.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ._types import ApplyResult, ChecksumDrift, Options, PlanContract
from .apply import apply_plan
from .catalog import build_registry
from .doctor import find_drift
from .errors import ComponentNotFoundError, ConflictsDetectedError, PlanParseError, RegistryLoadError
from .io import existing_files
from .layout import TemplateAdapter, get_layout
from .plan import generate_plan, load_plan, target_paths
from .registry import RegistryEntry, RegistryIndex


def load_registry(options: Options) -> RegistryIndex:
    """Return the registry snapshot named in options, or the built-in catalog."""

    if options.registry_file is None:
        return build_registry()

    path = options.registry_file
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise RegistryLoadError(str(path), str(exc)) from exc
    try:
        registry = RegistryIndex.from_json(text)
    except (KeyError, TypeError, ValueError) as exc:
        raise RegistryLoadError(str(path), str(exc)) from exc
    logging.info("Loaded %d component(s) from %s", len(registry), path)
    return registry


def resolve_layout(options: Options) -> TemplateAdapter:
    # Plans stay relative to the project root; `target_dir` is applied at apply time.
    return get_layout(options.layout)


def lookup(registry: RegistryIndex, name: str) -> RegistryEntry:
    entry = registry.get(name)
    if entry is None:
        raise ComponentNotFoundError(name, registry.names())
    return entry


def plan_component(name: str, options: Options, registry: RegistryIndex | None = None) -> PlanContract:
    """Generate the root-relative `add` plan for `name` against `options.target_dir`."""

    registry = registry if registry is not None else load_registry(options)
    entry = lookup(registry, name)
    layout = resolve_layout(options)
    candidates = {options.target_dir / path: path for path in target_paths(entry, layout)}
    on_disk = [candidates[path] for path in existing_files(candidates)]
    plan = generate_plan(entry, layout, on_disk)
    logging.info(
        "Plan for %s: %d mutation(s), %d conflict(s)", plan.component_name, plan.mutation_count(), len(plan.conflicts)
    )
    return plan


def add_component(name: str, options: Options, registry: RegistryIndex | None = None) -> ApplyResult:
    """Plan and apply `name`; conflicts abort before any write unless `options.force`."""

    plan = plan_component(name, options, registry)
    if plan.has_conflicts() and not options.force:
        raise ConflictsDetectedError(plan)
    if plan.has_conflicts():
        logging.warning("Overwriting %d conflicting file(s) (--force)", len(plan.conflicts))
    return apply_plan(plan, root=options.target_dir, write_provenance=options.write_provenance)


def read_plan_file(path: Path) -> PlanContract:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise PlanParseError(f"cannot read {path}: {exc}") from exc
    return load_plan(text)


def apply_plan_file(path: Path, options: Options) -> ApplyResult:
    """Apply a saved plan; relative paths in it resolve against `options.target_dir`."""

    plan = read_plan_file(path)
    return apply_plan(plan, root=options.target_dir, write_provenance=options.write_provenance)


def check_plan_file(path: Path, options: Options) -> tuple[PlanContract, list[ChecksumDrift]]:
    plan = read_plan_file(path)
    return plan, find_drift(plan, root=options.target_dir)


__all__ = [
    "add_component",
    "apply_plan_file",
    "check_plan_file",
    "load_registry",
    "lookup",
    "plan_component",
    "read_plan_file",
    "resolve_layout",
]
