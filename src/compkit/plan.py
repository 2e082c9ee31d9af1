# ./src/compkit/plan.py
"""Deterministic installation-plan generation.

`generate_plan` is a pure function of (registry entry, layout, snapshot of
existing files): it never touches the filesystem, reads no clock, and emits
mutations in a fixed order that callers may index into. Conflicts are
recorded for the caller to judge; they never stop generation.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path, PurePosixPath

from ._types import (
    Conflict,
    FileAction,
    FileMutation,
    MutationStrategy,
    Operation,
    PlanContract,
    ProvenanceAction,
)
from .errors import PlanParseError
from .layout import TemplateAdapter
from .registry import RegistryEntry

PROVENANCE_LICENSE = "Apache-2.0 OR MIT"

_FNV_OFFSET_BASIS = 0xCBF29CE484222325
_FNV_PRIME = 0x100000001B3
_MASK_64 = 0xFFFFFFFFFFFFFFFF


def fnv1a_64(text: str) -> str:
    """FNV-1a 64-bit hash of the UTF-8 bytes of `text`, as 16 hex digits.

    Used for drift detection and integrity display, not for security.
    """

    value = _FNV_OFFSET_BASIS
    for byte in text.encode("utf-8"):
        value ^= byte
        value = (value * _FNV_PRIME) & _MASK_64
    return f"{value:016x}"


def _source_basename(entry: RegistryEntry, source_file: str) -> str:
    name = PurePosixPath(source_file.replace("\\", "/")).name
    return name or f"{entry.name.lower()}.rs"


def _module_name(basename: str) -> str:
    return PurePosixPath(basename).stem


def _duplicate_target(path: Path) -> Conflict:
    return Conflict(
        file_path=path,
        reason=f"Another file in this plan also targets {path.name}; the later write would overwrite it",
    )


def target_paths(entry: RegistryEntry, layout: TemplateAdapter) -> list[Path]:
    """Paths the plan for `entry` would create, in mutation order."""

    component_dir = layout.component_dir(entry.name)
    paths = [component_dir / _source_basename(entry, source) for source in entry.required_files]
    paths.append(component_dir / layout.index_file_name())
    return paths


def generate_plan(
    entry: RegistryEntry,
    layout: TemplateAdapter,
    existing_files: Iterable[Path | str] = (),
) -> PlanContract:
    """Build the `add` plan for `entry` under `layout`.

    Mutation order is part of the contract: one stub per required file (in
    declared order), then the component index file, then the export line on
    the shared module file.
    """

    existing = {Path(path) for path in existing_files}
    component_dir = layout.component_dir(entry.name)
    lower = entry.name.lower()

    mutations: list[FileMutation] = []
    conflicts: list[Conflict] = []
    checksums: dict[Path, str] = {}

    module_names: list[str] = []
    for source_file in entry.required_files:
        basename = _source_basename(entry, source_file)
        module_names.append(_module_name(basename))
        target = component_dir / basename
        if target in checksums:
            conflicts.append(_duplicate_target(target))
        elif target in existing:
            conflicts.append(
                Conflict(
                    file_path=target,
                    reason=f"File already exists at target path; would overwrite existing {basename}",
                )
            )
        content = layout.source_stub(entry.name, entry.version, source_file)
        checksums[target] = fnv1a_64(content)
        mutations.append(
            FileMutation(
                action=FileAction.CREATE,
                file_path=target,
                strategy=MutationStrategy.WRITE_FILE,
                content=content,
                description=f"Install {entry.name} component source",
            )
        )

    index_name = layout.index_file_name()
    index_path = component_dir / index_name
    index_content = layout.index_source(entry.name, module_names or [lower])
    if index_path in checksums:
        conflicts.append(_duplicate_target(index_path))
    elif index_path in existing:
        conflicts.append(
            Conflict(file_path=index_path, reason=f"Component {index_name} already exists; would overwrite")
        )
    checksums[index_path] = fnv1a_64(index_content)
    mutations.append(
        FileMutation(
            action=FileAction.CREATE,
            file_path=index_path,
            strategy=MutationStrategy.WRITE_FILE,
            content=index_content,
            description=f"Create {entry.name} module file",
        )
    )

    # Appending is idempotent at apply time, so the module file is never a conflict.
    mutations.append(
        FileMutation(
            action=FileAction.MODIFY,
            file_path=layout.module_file(),
            strategy=MutationStrategy.APPEND_EXPORT,
            content=layout.export_line(entry.name),
            description=f"Add {entry.name} export to shared UI module",
        )
    )

    provenance_actions = [
        ProvenanceAction(
            file_path=component_dir / _source_basename(entry, source_file),
            source=source_file,
            license=PROVENANCE_LICENSE,
            modifications=f"Installed via compkit add {lower}",
        )
        for source_file in entry.required_files
    ]

    logging.debug(
        "Planned %d mutation(s) and %d conflict(s) for %s using layout '%s'",
        len(mutations),
        len(conflicts),
        entry.name,
        layout.name(),
    )

    return PlanContract(
        operation=Operation.ADD,
        component_name=entry.name,
        component_version=entry.version,
        mutations=mutations,
        conflicts=conflicts,
        provenance_actions=provenance_actions,
        file_checksums=dict(sorted(checksums.items(), key=lambda item: item[0].as_posix())),
        target_layout=layout.name(),
    )


def _unwrap_envelope(data: Mapping) -> Mapping:
    """Accept either a raw plan or a `{success, data, errors}` output envelope."""

    if "operation" not in data and isinstance(data.get("data"), Mapping):
        inner = data["data"]
        # `add` success envelopes nest the plan one level deeper.
        if "operation" not in inner and isinstance(inner.get("plan"), Mapping):
            return inner["plan"]
        return inner
    return data


def load_plan(text: str) -> PlanContract:
    """Parse plan JSON (raw or enveloped); raise `PlanParseError` on bad input."""

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise PlanParseError(f"malformed JSON ({exc})") from exc

    if not isinstance(data, Mapping):
        raise PlanParseError("expected a JSON object")

    try:
        return PlanContract.from_dict(_unwrap_envelope(data))
    except KeyError as exc:
        raise PlanParseError(f"missing field {exc}") from exc
    except (TypeError, ValueError, AttributeError) as exc:
        raise PlanParseError(str(exc)) from exc


__all__ = ["PROVENANCE_LICENSE", "fnv1a_64", "generate_plan", "load_plan", "target_paths"]
