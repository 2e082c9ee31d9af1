# ./src/compkit/report.py
"""Reporting utilities for human and machine consumers.

Builds the `{success, data, errors}` output envelope shared by every CLI
command, the Python API, and the MCP tools, plus unified diffs and one-line
plan summaries for people reading a terminal.
"""

from __future__ import annotations

import difflib
from pathlib import Path
from typing import Any

from ._types import (
    ApplyFailureReport,
    ApplyResult,
    ChecksumDrift,
    ErrorCode,
    FileAction,
    FilePreview,
    JsonEnvelope,
    JsonError,
    PlanContract,
)
from .contracts import ValidationError
from .io import write_json


def error_row(code: ErrorCode, message: str) -> JsonError:
    return {"code": code, "message": message}


def envelope(success: bool, data: Any = None, errors: list[JsonError] | None = None) -> JsonEnvelope:
    return {"success": success, "data": data, "errors": list(errors or [])}


def success_envelope(data: Any) -> JsonEnvelope:
    return envelope(True, data)


def failure_envelope(errors: list[JsonError], data: Any = None) -> JsonEnvelope:
    return envelope(False, data, errors)


def conflict_errors(plan: PlanContract) -> list[JsonError]:
    """One CONFLICT row per detected conflict, in plan order."""

    return [
        error_row("CONFLICT", f"{conflict.file_path.as_posix()}: {conflict.reason}") for conflict in plan.conflicts
    ]


def apply_result_to_json(result: ApplyResult) -> dict[str, Any]:
    """Serialize a successful apply: the plan plus which mutations changed files."""

    return {
        "plan": result.plan.to_dict(),
        "applied": [result.plan.mutations[i].file_path.as_posix() for i in result.applied],
        "unchanged": [result.plan.mutations[i].file_path.as_posix() for i in result.unchanged],
        "provenance_files": [path.as_posix() for path in result.provenance_files],
    }


def apply_envelope(result: ApplyResult) -> JsonEnvelope:
    if result.failure is not None:
        return failure_report_envelope(result.failure)
    return success_envelope(apply_result_to_json(result))


def failure_report_envelope(report: ApplyFailureReport) -> JsonEnvelope:
    failed = report.plan.mutations[report.failed_at_index]
    message = f"mutation {report.failed_at_index} ({failed.file_path.as_posix()}) failed: {report.error}"
    return failure_envelope([error_row("APPLY_FAILED", message)], report.to_dict())


def validation_errors_to_json(failures: list[tuple[str, list[ValidationError]]]) -> list[JsonError]:
    return [
        error_row("CONTRACT_INVALID", f"{name}: {error.field}: {error.message}")
        for name, errors in failures
        for error in errors
    ]


def drift_to_json(drifts: list[ChecksumDrift]) -> list[dict[str, Any]]:
    return [
        {
            "file_path": drift.file_path.as_posix(),
            "status": drift.status,
            "expected": drift.expected,
            "actual": drift.actual,
        }
        for drift in drifts
    ]


def summarize_plan(plan: PlanContract) -> str:
    """Produce a readable one-line-per-mutation summary."""

    markers = {FileAction.CREATE: "+", FileAction.MODIFY: "~", FileAction.DELETE: "-"}
    rows = [f"{plan.component_name} v{plan.component_version} [{plan.target_layout} layout]"]
    for index, mutation in enumerate(plan.mutations):
        rows.append(
            f"  {index:>2} {markers[mutation.action]} {mutation.file_path.as_posix()} ({mutation.strategy.value})"
        )
    for conflict in plan.conflicts:
        rows.append(f"  ! conflict: {conflict.file_path.as_posix()}: {conflict.reason}")
    return "\n".join(rows)


def make_diff(previews: list[FilePreview]) -> str:
    """Build a unified diff for previewed files that would change."""

    chunks: list[str] = []
    for preview in previews:
        if not preview.changed:
            continue
        name = preview.file_path.as_posix()
        diff = difflib.unified_diff(
            (preview.original_text or "").splitlines(keepends=True),
            (preview.new_text or "").splitlines(keepends=True),
            fromfile=f"{name} (current)" if preview.original_text is not None else "/dev/null",
            tofile=f"{name} (planned)" if preview.new_text is not None else "/dev/null",
        )
        chunks.append("".join(diff))
    return "\n".join(chunk for chunk in chunks if chunk)


def write_json_report(report: JsonEnvelope, path: str) -> Path:
    """Write an envelope to a file path and return the resolved output path."""

    target = Path(path)
    if target.exists() and target.is_dir():
        target = target / "compkit-report.json"
    elif str(target).strip() in {"", "."}:
        target = Path("compkit-report.json")

    write_json(target, report)
    return target


__all__ = [
    "apply_envelope",
    "apply_result_to_json",
    "conflict_errors",
    "drift_to_json",
    "envelope",
    "error_row",
    "failure_envelope",
    "failure_report_envelope",
    "make_diff",
    "success_envelope",
    "summarize_plan",
    "validation_errors_to_json",
    "write_json_report",
]
