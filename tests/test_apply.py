# tests/test_apply.py

import json
from pathlib import Path

import pytest

from compkit import apply as apply_mod
from compkit._types import FileAction, FileMutation, MutationStrategy, Operation, PlanContract
from compkit.apply import PROVENANCE_SUFFIX, apply_plan, preview_plan, render_mutation
from compkit.catalog import build_registry
from compkit.layout import DefaultLayout
from compkit.plan import generate_plan


def _modify(path: str, strategy: MutationStrategy, content: str) -> FileMutation:
    return FileMutation(FileAction.MODIFY, Path(path), strategy, content, "test")


def _plan(*mutations: FileMutation) -> PlanContract:
    return PlanContract(
        operation=Operation.ADD,
        component_name="Test",
        component_version="0.0.1",
        mutations=list(mutations),
    )


def _dialog_plan(project: Path) -> PlanContract:
    return generate_plan(build_registry().get("dialog"), DefaultLayout(project))


def test_dialog_apply_creates_files_and_export(project: Path):
    result = apply_plan(_dialog_plan(project))

    assert result.ok, f"Apply should succeed: {result.failure}"
    assert result.applied == [0, 1, 2]
    ui = project / "src" / "shared" / "ui"
    assert (ui / "dialog" / "dialog.rs").read_text(encoding="utf-8").startswith("// Component: Dialog")
    assert (ui / "dialog" / "mod.rs").exists()
    assert (ui / "mod.rs").read_text(encoding="utf-8") == "pub mod dialog;\n"


def test_apply_twice_keeps_single_export(project: Path):
    plan = _dialog_plan(project)
    apply_plan(plan)
    second = apply_plan(plan)

    assert second.ok
    assert second.unchanged == [0, 1, 2], "Re-applying identical content changes nothing"
    text = (project / "src" / "shared" / "ui" / "mod.rs").read_text(encoding="utf-8")
    assert text.count("pub mod dialog;") == 1, f"Export duplicated:\n{text}"


def test_append_export_newline_discipline():
    mutation = _modify("mod.rs", MutationStrategy.APPEND_EXPORT, "pub mod dialog;")

    assert render_mutation(mutation, None) == "pub mod dialog;\n"
    assert render_mutation(mutation, "") == "pub mod dialog;\n"
    assert render_mutation(mutation, "pub mod tabs;\n") == "pub mod tabs;\npub mod dialog;\n"
    assert render_mutation(mutation, "pub mod tabs;") == "pub mod tabs;\npub mod dialog;"
    assert render_mutation(mutation, "pub mod tabs;\r\n", "\r\n") == "pub mod tabs;\r\npub mod dialog;\r\n"


def test_append_export_ignores_lookalike_and_commented_lines():
    mutation = _modify("mod.rs", MutationStrategy.APPEND_EXPORT, "pub mod tab;")
    current = "pub mod tabs;\n// pub mod tab; (disabled)\n"

    assert render_mutation(mutation, current) == current + "pub mod tab;\n"
    assert render_mutation(mutation, "  pub mod tab;  \n") == "  pub mod tab;  \n"


@pytest.mark.parametrize(
    "current",
    [
        "pub mod dialog; // installed\n",
        "pub mod tabs; pub mod dialog;\n",
        "pub mod select;\n    pub mod dialog;\n",
    ],
)
def test_append_export_finds_declaration_within_line(current):
    mutation = _modify("mod.rs", MutationStrategy.APPEND_EXPORT, "pub mod dialog;")
    assert render_mutation(mutation, current) == current, "Existing declaration must not be appended again"


def test_append_export_requires_token_boundary():
    mutation = _modify("mod.rs", MutationStrategy.APPEND_EXPORT, "pub mod dialog;")
    assert render_mutation(mutation, "xpub mod dialog;\n") == "xpub mod dialog;\npub mod dialog;\n"


def test_insert_use_prepends_once():
    mutation = _modify("lib.rs", MutationStrategy.INSERT_USE, "use crate::shared::ui::dialog;")

    once = render_mutation(mutation, "fn main() {}\n")
    assert once == "use crate::shared::ui::dialog;\nfn main() {}\n"
    assert render_mutation(mutation, once) == once


def test_insert_use_missing_file_halts_with_report(tmp_path: Path):
    plan = _plan(
        _modify("a.rs", MutationStrategy.APPEND_EXPORT, "pub mod a;"),
        _modify("missing.rs", MutationStrategy.INSERT_USE, "use a;"),
        _modify("b.rs", MutationStrategy.APPEND_EXPORT, "pub mod b;"),
    )
    result = apply_plan(plan, root=tmp_path)

    assert not result.ok
    report = result.failure
    assert report.failed_at_index == 1
    assert [m.file_path for m in report.completed_mutations] == [Path("a.rs")]
    assert [m.file_path for m in report.remaining_mutations] == [Path("missing.rs"), Path("b.rs")]
    assert report.plan == plan
    assert (tmp_path / "a.rs").exists(), "Mutations before the failure stay committed"
    assert not (tmp_path / "missing.rs").exists()
    assert not (tmp_path / "b.rs").exists(), "Nothing after the failing index is attempted"


def test_failure_when_parent_is_a_file(tmp_path: Path):
    (tmp_path / "blocker").write_text("x", encoding="utf-8")
    plan = _plan(
        FileMutation(FileAction.CREATE, Path("ok.rs"), MutationStrategy.WRITE_FILE, "ok\n", "first"),
        FileMutation(FileAction.CREATE, Path("blocker/inner.rs"), MutationStrategy.WRITE_FILE, "x\n", "second"),
    )
    result = apply_plan(plan, root=tmp_path, write_provenance=True)

    assert result.failure is not None and result.failure.failed_at_index == 1
    assert result.failure.error, "Failure report carries the underlying error message"
    assert (tmp_path / "ok.rs").read_text(encoding="utf-8") == "ok\n"
    assert result.provenance_files == [], "No provenance pass after a failed apply"
    json.loads(result.failure.to_json())


def test_crlf_and_bom_are_preserved(tmp_path: Path):
    target = tmp_path / "mod.rs"
    target.write_bytes(b"\xef\xbb\xbfpub mod tabs;\r\n")
    plan = _plan(_modify("mod.rs", MutationStrategy.APPEND_EXPORT, "pub mod dialog;"))

    assert apply_plan(plan, root=tmp_path).ok
    assert target.read_bytes() == b"\xef\xbb\xbfpub mod tabs;\r\npub mod dialog;\r\n"


def test_delete_and_replace_strategies(tmp_path: Path):
    (tmp_path / "old.rs").write_text("old\n", encoding="utf-8")
    (tmp_path / "theme.rs").write_text("stale\n", encoding="utf-8")
    plan = _plan(
        FileMutation(FileAction.DELETE, Path("old.rs"), MutationStrategy.DELETE_FILE, "", "remove"),
        _modify("theme.rs", MutationStrategy.REPLACE_SECTION, "fresh\n"),
        FileMutation(FileAction.DELETE, Path("never.rs"), MutationStrategy.DELETE_FILE, "", "absent"),
    )
    result = apply_plan(plan, root=tmp_path)

    assert result.ok
    assert not (tmp_path / "old.rs").exists()
    assert (tmp_path / "theme.rs").read_text(encoding="utf-8") == "fresh\n"
    assert result.applied == [0, 1]
    assert result.unchanged == [2]


def test_provenance_sidecars(project: Path):
    result = apply_plan(_dialog_plan(project))

    sidecar = project / "src" / "shared" / "ui" / "dialog" / ("dialog.rs" + PROVENANCE_SUFFIX)
    assert result.provenance_files == [sidecar]
    payload = json.loads(sidecar.read_text(encoding="utf-8"))
    assert payload["file"] == "dialog.rs"
    assert payload["source"] == "crates/components/src/dialog.rs"
    assert payload["license"] == "Apache-2.0 OR MIT"
    assert payload["modifications"] == "Installed via compkit add dialog"
    assert payload["installer"].startswith("compkit ")


def test_provenance_can_be_disabled(project: Path):
    result = apply_plan(_dialog_plan(project), write_provenance=False)
    assert result.ok and result.provenance_files == []
    assert not list(project.rglob("*" + PROVENANCE_SUFFIX))


def test_provenance_failure_does_not_fail_apply(project: Path, monkeypatch, caplog):
    def boom(path, payload):
        raise PermissionError("read-only")

    monkeypatch.setattr(apply_mod, "write_json", boom)
    with caplog.at_level("WARNING"):
        result = apply_plan(_dialog_plan(project))

    assert result.ok, "Provenance is best-effort"
    assert result.provenance_files == []
    assert "Skipped provenance sidecar" in caplog.text


def test_preview_matches_apply(project: Path):
    (project / "src" / "shared" / "ui").mkdir(parents=True)
    (project / "src" / "shared" / "ui" / "mod.rs").write_text("pub mod tabs;\n", encoding="utf-8")
    plan = _dialog_plan(project)

    previews = {p.file_path: p for p in preview_plan(plan)}
    assert not list(project.rglob("dialog.rs")), "Preview must not write"
    apply_plan(plan, write_provenance=False)

    for path, preview in previews.items():
        assert preview.changed
        assert path.read_text(encoding="utf-8") == preview.new_text
    assert previews[project / "src" / "shared" / "ui" / "mod.rs"].original_text == "pub mod tabs;\n"


def test_render_create_overwrites_and_insert_needs_file():
    mutation = FileMutation(FileAction.CREATE, Path("x"), MutationStrategy.WRITE_FILE, "x", "")
    assert render_mutation(mutation, "anything") == "x"
    with pytest.raises(FileNotFoundError):
        render_mutation(_modify("x", MutationStrategy.INSERT_USE, "use x;"), None)
