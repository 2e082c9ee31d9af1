# ./src/compkit/errors.py
"""Custom exceptions carrying stable compkit exit codes and envelope codes.

The planner raises these typed errors so CLI, API, and MCP layers can build
result envelopes without brittle string parsing. Apply failures are not
exceptions: they come back as `ApplyFailureReport` values.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ._types import ErrorCode, ExitCode

if TYPE_CHECKING:
    from ._types import ChecksumDrift, PlanContract
    from .contracts import ValidationError


@dataclass
class CompkitError(RuntimeError):
    """Base compkit exception with a stable exit code and envelope code."""

    message: str
    exit_code: ExitCode = ExitCode.GENERIC_ERROR
    code: ErrorCode = "GENERIC_ERROR"

    def __str__(self) -> str:
        return self.message


class ComponentNotFoundError(CompkitError):
    def __init__(self, name: str, available: Iterable[str]) -> None:
        names = ", ".join(available) or "(registry is empty)"
        super().__init__(
            f"Component '{name}' not found in registry. Available components: {names}",
            ExitCode.COMPONENT_NOT_FOUND,
            "COMPONENT_NOT_FOUND",
        )
        self.name = name


class ConflictsDetectedError(CompkitError):
    def __init__(self, plan: PlanContract) -> None:
        super().__init__(
            f"{len(plan.conflicts)} conflict(s) detected for {plan.component_name}. "
            "Re-run with --plan to inspect or --force to overwrite.",
            ExitCode.CONFLICTS_DETECTED,
            "CONFLICT",
        )
        self.plan = plan


class PlanParseError(CompkitError):
    def __init__(self, detail: str) -> None:
        super().__init__(f"Invalid plan: {detail}", ExitCode.PLAN_PARSE_ERROR, "PLAN_PARSE_ERROR")


class UnknownLayoutError(CompkitError):
    def __init__(self, name: str, available: Iterable[str]) -> None:
        super().__init__(
            f"Unknown layout '{name}'. Available layouts: {', '.join(available)}",
            ExitCode.UNKNOWN_LAYOUT,
            "UNKNOWN_LAYOUT",
        )


class RegistryLoadError(CompkitError):
    def __init__(self, path: str, detail: str) -> None:
        super().__init__(
            f"Unable to load registry from {path}: {detail}",
            ExitCode.REGISTRY_LOAD_ERROR,
            "REGISTRY_LOAD_ERROR",
        )


class ContractValidationError(CompkitError):
    def __init__(self, failures: Sequence[tuple[str, Sequence[ValidationError]]]) -> None:
        count = sum(len(errors) for _name, errors in failures)
        names = ", ".join(name for name, _errors in failures)
        super().__init__(
            f"{count} contract violation(s) in: {names}",
            ExitCode.CONTRACT_INVALID,
            "CONTRACT_INVALID",
        )
        self.failures = list(failures)


class ChecksumDriftError(CompkitError):
    def __init__(self, drifts: Sequence[ChecksumDrift]) -> None:
        super().__init__(
            f"{len(drifts)} installed file(s) drifted from their planned checksums.",
            ExitCode.CHECKSUM_DRIFT,
            "CHECKSUM_DRIFT",
        )
        self.drifts = list(drifts)


__all__ = [
    "ChecksumDriftError",
    "CompkitError",
    "ComponentNotFoundError",
    "ConflictsDetectedError",
    "ContractValidationError",
    "PlanParseError",
    "RegistryLoadError",
    "UnknownLayoutError",
]
