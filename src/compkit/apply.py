# ./src/compkit/apply.py
"""Plan executor: applies mutations to the real filesystem.

Mutations run strictly in plan order and the executor halts at the first
failing one, returning an `ApplyFailureReport` inside the result instead of
raising: everything before the failing index is committed, nothing at or
after it was attempted. Merge strategies are idempotent, so re-applying a
plan over a partially installed project converges without duplication.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from ._types import (
    ApplyFailureReport,
    ApplyResult,
    FileAction,
    FileMutation,
    FilePreview,
    MutationStrategy,
    PlanContract,
)
from .io import read_text_preserve, write_atomic_bytes, write_json, write_text_preserve

PROVENANCE_SUFFIX = ".provenance.json"

_OVERWRITE_STRATEGIES = frozenset({MutationStrategy.WRITE_FILE, MutationStrategy.REPLACE_SECTION})


def _already_present(existing: str, content: str) -> bool:
    """Whether `content` is already declared in `existing`.

    Single-line content must appear as a whole token in the code part of some
    line: `pub mod dialog; // installed` counts, while `pub mod tab;` inside
    `pub mod tabs;` or behind `//` does not. Multi-line content falls back to
    containment.
    """

    needle = content.strip()
    if not needle:
        return True
    if "\n" in needle or "\r" in needle:
        return content in existing
    pattern = re.compile(rf"(?<![\w:]){re.escape(needle)}(?!\w)")
    return any(pattern.search(line.split("//", 1)[0]) for line in existing.splitlines())


def render_mutation(mutation: FileMutation, current: str | None, newline: str = "\n") -> str | None:
    """Return the file text after `mutation`, or `None` if the file is removed.

    `current` is the file's text before the mutation (`None` when absent).
    Pure: shared by `apply_plan` and the diff preview.
    """

    if mutation.action is FileAction.DELETE or mutation.strategy is MutationStrategy.DELETE_FILE:
        return None
    if mutation.action is FileAction.CREATE or mutation.strategy in _OVERWRITE_STRATEGIES:
        return mutation.content

    if mutation.strategy is MutationStrategy.APPEND_EXPORT:
        existing = current or ""
        if _already_present(existing, mutation.content):
            return existing
        if not existing:
            return mutation.content + newline
        if existing.endswith(("\n", "\r")):
            return existing + mutation.content + newline
        return existing + newline + mutation.content

    if mutation.strategy is MutationStrategy.INSERT_USE:
        if current is None:
            raise FileNotFoundError(f"Cannot insert import into missing file: {mutation.file_path}")
        if _already_present(current, mutation.content):
            return current
        return mutation.content + newline + current

    raise ValueError(f"Unsupported mutation: {mutation.action.value}/{mutation.strategy.value}")


def _resolve(path: Path, root: Path | None) -> Path:
    if root is None or path.is_absolute():
        return path
    return root / path


def _apply_one(mutation: FileMutation, path: Path) -> bool:
    """Perform one mutation on `path`; return whether the file changed."""

    if mutation.action is FileAction.DELETE or mutation.strategy is MutationStrategy.DELETE_FILE:
        if not path.exists():
            return False
        path.unlink()
        return True

    if mutation.action is FileAction.CREATE or mutation.strategy in _OVERWRITE_STRATEGIES:
        payload = mutation.content.encode("utf-8")
        unchanged = path.is_file() and path.read_bytes() == payload
        path.parent.mkdir(parents=True, exist_ok=True)
        write_atomic_bytes(path, payload)
        return not unchanged

    if path.exists():
        current, newline, bom = read_text_preserve(path)
    else:
        current, newline, bom = None, "\n", False

    new_text = render_mutation(mutation, current, newline)
    if new_text is None or new_text == current:
        return False

    path.parent.mkdir(parents=True, exist_ok=True)
    write_text_preserve(path, new_text, bom=bom)
    return True


def _write_provenance(plan: PlanContract, root: Path | None) -> list[Path]:
    """Best-effort sidecar pass; failures are logged and skipped."""

    from . import __version__

    written: list[Path] = []
    for action in plan.provenance_actions:
        target = _resolve(action.file_path, root)
        sidecar = target.with_name(target.name + PROVENANCE_SUFFIX)
        payload = {
            "file": target.name,
            "source": action.source,
            "license": action.license,
            "modifications": action.modifications,
            "installer": f"compkit {__version__}",
        }
        try:
            write_json(sidecar, payload)
        except OSError as exc:
            logging.warning("Skipped provenance sidecar %s: %s", sidecar, exc)
            continue
        logging.debug("Wrote provenance: %s", sidecar)
        written.append(sidecar)
    return written


def apply_plan(plan: PlanContract, root: Path | None = None, *, write_provenance: bool = True) -> ApplyResult:
    """Apply `plan` in order, halting at the first failing mutation.

    Relative mutation paths resolve against `root` when given (otherwise the
    working directory). Check `result.ok` / `result.failure` for the outcome.
    """

    result = ApplyResult(plan=plan.snapshot())

    for index, mutation in enumerate(plan.mutations):
        path = _resolve(mutation.file_path, root)
        try:
            changed = _apply_one(mutation, path)
        except (OSError, UnicodeError) as exc:
            logging.warning("Apply halted at mutation %d (%s): %s", index, path, exc)
            snapshot = plan.snapshot()
            result.failure = ApplyFailureReport(
                plan=snapshot,
                failed_at_index=index,
                error=str(exc),
                completed_mutations=list(snapshot.mutations[:index]),
                remaining_mutations=list(snapshot.mutations[index:]),
            )
            return result

        if changed:
            logging.info("%s %s (%s)", mutation.action.value, path, mutation.strategy.value)
            result.applied.append(index)
        else:
            logging.info("unchanged %s (%s)", path, mutation.strategy.value)
            result.unchanged.append(index)

    if write_provenance:
        result.provenance_files = _write_provenance(plan, root)

    return result


def preview_plan(plan: PlanContract, root: Path | None = None) -> list[FilePreview]:
    """Simulate `plan` in memory and return before/after text per touched file."""

    previews: dict[Path, FilePreview] = {}
    newlines: dict[Path, str] = {}

    for mutation in plan.mutations:
        path = _resolve(mutation.file_path, root)
        preview = previews.get(path)
        if preview is None:
            original: str | None = None
            newline = "\n"
            if path.is_file():
                original, newline, _bom = read_text_preserve(path)
            preview = previews[path] = FilePreview(file_path=path, original_text=original, new_text=original)
            newlines[path] = newline
        try:
            preview.new_text = render_mutation(mutation, preview.new_text, newlines[path])
        except FileNotFoundError as exc:
            logging.warning("Preview: %s", exc)

    return list(previews.values())


__all__ = ["PROVENANCE_SUFFIX", "apply_plan", "preview_plan", "render_mutation"]
