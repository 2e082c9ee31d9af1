# tests/test_plan.py

import json
from pathlib import Path

import pytest

from compkit._types import FileAction, MutationStrategy, Operation, PlanContract
from compkit.catalog import build_registry
from compkit.contracts import Disposition
from compkit.errors import PlanParseError
from compkit.layout import DefaultLayout, LibLayout
from compkit.plan import PROVENANCE_LICENSE, fnv1a_64, generate_plan, load_plan, target_paths
from compkit.registry import RegistryEntry
from compkit.report import success_envelope


@pytest.fixture
def dialog():
    entry = build_registry().get("dialog")
    assert entry is not None, "Built-in catalog should contain Dialog"
    return entry


def test_fnv1a_known_vectors():
    assert fnv1a_64("") == "cbf29ce484222325", "Empty input hashes to the offset basis"
    assert fnv1a_64("a") == "af63dc4c8601ec8c", "FNV-1a 64 of 'a' must match the reference vector"
    assert len(fnv1a_64("pub mod dialog;")) == 16


def test_dialog_plan_paths_and_order(dialog):
    plan = generate_plan(dialog, DefaultLayout("/proj"))

    assert plan.operation is Operation.ADD
    assert plan.component_name == "Dialog"
    assert plan.target_layout == "default"
    paths = [m.file_path for m in plan.mutations]
    assert paths == [
        Path("/proj/src/shared/ui/dialog/dialog.rs"),
        Path("/proj/src/shared/ui/dialog/mod.rs"),
        Path("/proj/src/shared/ui/mod.rs"),
    ], f"Unexpected mutation order: {paths}"

    stub, index, export = plan.mutations
    assert (stub.action, stub.strategy) == (FileAction.CREATE, MutationStrategy.WRITE_FILE)
    assert (index.action, index.strategy) == (FileAction.CREATE, MutationStrategy.WRITE_FILE)
    assert (export.action, export.strategy) == (FileAction.MODIFY, MutationStrategy.APPEND_EXPORT)
    assert export.content == "pub mod dialog;"
    assert not plan.conflicts


def test_stub_and_index_content(dialog):
    plan = generate_plan(dialog, DefaultLayout("/proj"))
    stub, index, _export = plan.mutations

    assert stub.content.startswith("// Component: Dialog v0.1.0\n")
    assert "// Source: crates/components/src/dialog.rs" in stub.content
    assert stub.content.endswith("pub use components::dialog::*;\n")
    assert index.content == "//! Dialog component module.\n\nmod dialog;\npub use dialog::*;\n"


def test_checksums_cover_created_files_only(dialog):
    plan = generate_plan(dialog, DefaultLayout("/proj"))
    created = {m.file_path: m.content for m in plan.mutations if m.action is FileAction.CREATE}

    assert set(plan.file_checksums) == set(created), "Exactly the created files carry checksums"
    for path, content in created.items():
        assert plan.file_checksums[path] == fnv1a_64(content)
    assert Path("/proj/src/shared/ui/mod.rs") not in plan.file_checksums


def test_provenance_actions(dialog):
    plan = generate_plan(dialog, DefaultLayout("/proj"))

    assert len(plan.provenance_actions) == 1
    action = plan.provenance_actions[0]
    assert action.file_path == Path("/proj/src/shared/ui/dialog/dialog.rs")
    assert action.source == "crates/components/src/dialog.rs"
    assert action.license == PROVENANCE_LICENSE
    assert action.modifications == "Installed via compkit add dialog"


def test_generation_is_deterministic(dialog):
    layout = DefaultLayout("/proj")
    existing = [Path("/proj/src/shared/ui/dialog/mod.rs")]
    first = generate_plan(dialog, layout, existing).to_json()
    second = generate_plan(dialog, layout, existing).to_json()
    assert first == second, "Same inputs must serialize byte-identically"


def test_existing_index_file_is_a_conflict(dialog):
    plan = generate_plan(dialog, DefaultLayout("/proj"), [Path("/proj/src/shared/ui/dialog/mod.rs")])

    assert plan.has_conflicts()
    assert [c.file_path for c in plan.conflicts] == [Path("/proj/src/shared/ui/dialog/mod.rs")]
    assert plan.conflicts[0].reason == "Component mod.rs already exists; would overwrite"
    assert plan.mutation_count() == 3, "Conflicts never remove mutations"


def test_existing_source_file_is_a_conflict(dialog):
    plan = generate_plan(dialog, DefaultLayout("/proj"), ["/proj/src/shared/ui/dialog/dialog.rs"])
    assert plan.conflicts[0].reason == "File already exists at target path; would overwrite existing dialog.rs"


def test_existing_module_file_is_not_a_conflict(dialog):
    plan = generate_plan(dialog, DefaultLayout("/proj"), [Path("/proj/src/shared/ui/mod.rs")])
    assert not plan.has_conflicts(), "Appending an export is idempotent, never a conflict"


def test_lib_layout_paths(dialog):
    plan = generate_plan(dialog, LibLayout("/proj"))
    assert plan.target_layout == "lib"
    assert [m.file_path for m in plan.mutations] == [
        Path("/proj/src/dialog/dialog.rs"),
        Path("/proj/src/dialog/mod.rs"),
        Path("/proj/src/lib.rs"),
    ]


def test_target_paths_match_created_mutations(dialog):
    layout = DefaultLayout("/proj")
    plan = generate_plan(dialog, layout)
    created = [m.file_path for m in plan.mutations if m.action is FileAction.CREATE]
    assert target_paths(dialog, layout) == created


def test_plan_json_round_trip(dialog):
    plan = generate_plan(dialog, DefaultLayout("/proj"), [Path("/proj/src/shared/ui/dialog/mod.rs")])
    restored = PlanContract.from_json(plan.to_json())
    assert restored == plan
    assert restored.to_json() == plan.to_json()


def test_load_plan_accepts_envelopes(dialog):
    plan = generate_plan(dialog, DefaultLayout("/proj"))

    raw = load_plan(plan.to_json())
    wrapped = load_plan(json.dumps(success_envelope(plan.to_dict())))
    nested = load_plan(json.dumps(success_envelope({"plan": plan.to_dict(), "applied": []})))

    assert raw == wrapped == nested == plan


@pytest.mark.parametrize(
    "text",
    [
        "{not json",
        "[]",
        "{}",
        json.dumps({"operation": "add", "component_name": "X"}),
        json.dumps(
            {
                "operation": "add",
                "component_name": "X",
                "component_version": "1",
                "mutations": [{"action": "create", "file_path": "a", "strategy": "append_export"}],
            }
        ),
    ],
)
def test_load_plan_rejects_malformed_input(text):
    with pytest.raises(PlanParseError):
        load_plan(text)


def _entry(*required_files: str) -> RegistryEntry:
    return RegistryEntry(name="Grid", version="0.2.0", disposition=Disposition.REWRITE, required_files=required_files)


def test_repeated_basename_is_a_conflict():
    plan = generate_plan(_entry("a/cell.rs", "b/cell.rs"), DefaultLayout("/proj"))

    target = Path("/proj/src/shared/ui/grid/cell.rs")
    assert [c.file_path for c in plan.conflicts] == [target]
    assert "also targets cell.rs" in plan.conflicts[0].reason
    assert plan.file_checksums[target] == fnv1a_64(plan.mutations[1].content), "Checksum tracks the final write"


def test_source_named_like_index_file_is_a_conflict():
    plan = generate_plan(_entry("crates/grid/mod.rs"), DefaultLayout("/proj"))

    index = Path("/proj/src/shared/ui/grid/mod.rs")
    assert [c.file_path for c in plan.conflicts] == [index]
    assert plan.conflicts[0].reason.startswith("Another file in this plan also targets mod.rs")


def test_on_disk_and_in_plan_duplicates_both_reported():
    index = Path("/proj/src/shared/ui/grid/mod.rs")
    plan = generate_plan(_entry("crates/grid/mod.rs"), DefaultLayout("/proj"), [index])

    reasons = [c.reason for c in plan.conflicts]
    assert reasons[0] == "File already exists at target path; would overwrite existing mod.rs"
    assert reasons[1].startswith("Another file in this plan also targets mod.rs")
    assert len(reasons) == 2
