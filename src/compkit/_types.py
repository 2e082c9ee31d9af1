# ./src/compkit/_types.py
"""Core compkit type contracts shared by CLI, API, and MCP integrations.

Plan, mutation, and apply-result models live here so the generator, executor,
and reporting layers agree on one vocabulary. Every model round-trips through
plain dictionaries with snake_case enum values and POSIX path strings.
"""

from __future__ import annotations

import copy
import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from pathlib import Path
from typing import Any, Literal, TypedDict

OutputMode = Literal["json", "human", "both"]
ErrorCode = Literal[
    "CONFLICT",
    "APPLY_FAILED",
    "COMPONENT_NOT_FOUND",
    "PLAN_PARSE_ERROR",
    "UNKNOWN_LAYOUT",
    "REGISTRY_LOAD_ERROR",
    "CONTRACT_INVALID",
    "CHECKSUM_DRIFT",
    "GENERIC_ERROR",
]


class ExitCode(IntEnum):
    """Stable process exit codes for CLI and MCP callers."""

    OK = 0
    GENERIC_ERROR = 1
    COMPONENT_NOT_FOUND = 2
    CONFLICTS_DETECTED = 3
    APPLY_FAILED = 4
    PLAN_PARSE_ERROR = 5
    UNKNOWN_LAYOUT = 6
    REGISTRY_LOAD_ERROR = 7
    CONTRACT_INVALID = 8
    CHECKSUM_DRIFT = 9


class Operation(str, Enum):
    """High-level intent of a plan. Only ADD is generated today."""

    ADD = "add"
    UPDATE = "update"
    REMOVE = "remove"


class FileAction(str, Enum):
    CREATE = "create"
    MODIFY = "modify"
    DELETE = "delete"


class MutationStrategy(str, Enum):
    """How a mutation's content is merged into its target file."""

    WRITE_FILE = "write_file"
    APPEND_EXPORT = "append_export"
    INSERT_USE = "insert_use"
    REPLACE_SECTION = "replace_section"
    DELETE_FILE = "delete_file"


# create/delete are pinned to one strategy; modify may use any of the others.
ALLOWED_STRATEGIES: dict[FileAction, frozenset[MutationStrategy]] = {
    FileAction.CREATE: frozenset({MutationStrategy.WRITE_FILE}),
    FileAction.DELETE: frozenset({MutationStrategy.DELETE_FILE}),
    FileAction.MODIFY: frozenset(
        {
            MutationStrategy.WRITE_FILE,
            MutationStrategy.APPEND_EXPORT,
            MutationStrategy.INSERT_USE,
            MutationStrategy.REPLACE_SECTION,
            MutationStrategy.DELETE_FILE,
        }
    ),
}


def _path_str(path: Path) -> str:
    return path.as_posix()


@dataclass(frozen=True)
class Options:
    """Runtime options for a single compkit invocation."""

    target_dir: Path = Path(".")
    layout: str = "default"
    registry_file: Path | None = None
    write_provenance: bool = True
    force: bool = False
    output: OutputMode = "json"
    json_report: Path | None = None
    log_file: Path | None = None
    verbosity: int = 0
    quiet: bool = False


@dataclass(frozen=True)
class FileMutation:
    """One atomic file operation within a plan."""

    action: FileAction
    file_path: Path
    strategy: MutationStrategy
    content: str
    description: str

    def to_dict(self) -> JsonMutation:
        return {
            "action": self.action.value,
            "file_path": _path_str(self.file_path),
            "strategy": self.strategy.value,
            "content": self.content,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FileMutation:
        action = FileAction(data["action"])
        strategy = MutationStrategy(data["strategy"])
        if strategy not in ALLOWED_STRATEGIES[action]:
            raise ValueError(f"strategy '{strategy.value}' cannot be used with action '{action.value}'")
        return cls(
            action=action,
            file_path=Path(str(data["file_path"])),
            strategy=strategy,
            content=str(data.get("content", "")),
            description=str(data.get("description", "")),
        )


@dataclass(frozen=True)
class Conflict:
    """A pre-existing file that a planned mutation would overwrite."""

    file_path: Path
    reason: str

    def to_dict(self) -> JsonConflict:
        return {"file_path": _path_str(self.file_path), "reason": self.reason}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Conflict:
        return cls(file_path=Path(str(data["file_path"])), reason=str(data["reason"]))


@dataclass(frozen=True)
class ProvenanceAction:
    """Attribution metadata persisted alongside an installed file."""

    file_path: Path
    source: str
    license: str
    modifications: str

    def to_dict(self) -> JsonProvenance:
        return {
            "file_path": _path_str(self.file_path),
            "source": self.source,
            "license": self.license,
            "modifications": self.modifications,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ProvenanceAction:
        return cls(
            file_path=Path(str(data["file_path"])),
            source=str(data["source"]),
            license=str(data["license"]),
            modifications=str(data["modifications"]),
        )


@dataclass
class PlanContract:
    """The full, serializable unit of work for one component operation."""

    operation: Operation
    component_name: str
    component_version: str
    mutations: list[FileMutation] = field(default_factory=list)
    conflicts: list[Conflict] = field(default_factory=list)
    provenance_actions: list[ProvenanceAction] = field(default_factory=list)
    file_checksums: dict[Path, str] = field(default_factory=dict)
    target_layout: str = "default"

    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    def mutation_count(self) -> int:
        return len(self.mutations)

    def to_dict(self) -> JsonPlan:
        checksums = {_path_str(path): value for path, value in self.file_checksums.items()}
        return {
            "operation": self.operation.value,
            "component_name": self.component_name,
            "component_version": self.component_version,
            "mutations": [mutation.to_dict() for mutation in self.mutations],
            "conflicts": [conflict.to_dict() for conflict in self.conflicts],
            "provenance_actions": [action.to_dict() for action in self.provenance_actions],
            "file_checksums": dict(sorted(checksums.items())),
            "target_layout": self.target_layout,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PlanContract:
        checksums = data.get("file_checksums") or {}
        if not isinstance(checksums, Mapping):
            raise TypeError("file_checksums must be an object")
        return cls(
            operation=Operation(data["operation"]),
            component_name=str(data["component_name"]),
            component_version=str(data["component_version"]),
            mutations=[FileMutation.from_dict(row) for row in data.get("mutations") or []],
            conflicts=[Conflict.from_dict(row) for row in data.get("conflicts") or []],
            provenance_actions=[ProvenanceAction.from_dict(row) for row in data.get("provenance_actions") or []],
            file_checksums={Path(str(key)): str(value) for key, value in checksums.items()},
            target_layout=str(data.get("target_layout", "default")),
        )

    @classmethod
    def from_json(cls, text: str) -> PlanContract:
        data = json.loads(text)
        if not isinstance(data, Mapping):
            raise TypeError("plan JSON must be an object")
        return cls.from_dict(data)

    def snapshot(self) -> PlanContract:
        """Return an independent copy for reporting."""

        return copy.deepcopy(self)


@dataclass
class ApplyFailureReport:
    """State left behind when apply halts on a failing mutation."""

    plan: PlanContract
    failed_at_index: int
    error: str
    completed_mutations: list[FileMutation] = field(default_factory=list)
    remaining_mutations: list[FileMutation] = field(default_factory=list)

    def to_dict(self) -> JsonFailureReport:
        return {
            "plan": self.plan.to_dict(),
            "failed_at_index": self.failed_at_index,
            "error": self.error,
            "completed_mutations": [mutation.to_dict() for mutation in self.completed_mutations],
            "remaining_mutations": [mutation.to_dict() for mutation in self.remaining_mutations],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


@dataclass
class ApplyResult:
    """Structured outcome of applying one plan."""

    plan: PlanContract
    applied: list[int] = field(default_factory=list)
    unchanged: list[int] = field(default_factory=list)
    provenance_files: list[Path] = field(default_factory=list)
    failure: ApplyFailureReport | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


@dataclass
class FilePreview:
    """Before/after text of one file touched by a plan. `None` means absent."""

    file_path: Path
    original_text: str | None = None
    new_text: str | None = None

    @property
    def changed(self) -> bool:
        return self.original_text != self.new_text


@dataclass(frozen=True)
class ChecksumDrift:
    """A planned file whose on-disk content no longer matches its checksum."""

    file_path: Path
    expected: str
    actual: str | None

    @property
    def status(self) -> Literal["missing", "modified"]:
        return "missing" if self.actual is None else "modified"


class JsonMutation(TypedDict):
    action: str
    file_path: str
    strategy: str
    content: str
    description: str


class JsonConflict(TypedDict):
    file_path: str
    reason: str


class JsonProvenance(TypedDict):
    file_path: str
    source: str
    license: str
    modifications: str


class JsonPlan(TypedDict):
    operation: str
    component_name: str
    component_version: str
    mutations: list[JsonMutation]
    conflicts: list[JsonConflict]
    provenance_actions: list[JsonProvenance]
    file_checksums: dict[str, str]
    target_layout: str


class JsonFailureReport(TypedDict):
    plan: JsonPlan
    failed_at_index: int
    error: str
    completed_mutations: list[JsonMutation]
    remaining_mutations: list[JsonMutation]


class JsonError(TypedDict):
    code: str
    message: str


class JsonEnvelope(TypedDict):
    success: bool
    data: Any
    errors: list[JsonError]


__all__ = [
    "ALLOWED_STRATEGIES",
    "ApplyFailureReport",
    "ApplyResult",
    "ChecksumDrift",
    "Conflict",
    "ErrorCode",
    "ExitCode",
    "FileAction",
    "FileMutation",
    "FilePreview",
    "JsonConflict",
    "JsonEnvelope",
    "JsonError",
    "JsonFailureReport",
    "JsonMutation",
    "JsonPlan",
    "JsonProvenance",
    "MutationStrategy",
    "Operation",
    "Options",
    "OutputMode",
    "PlanContract",
    "ProvenanceAction",
]
