# tests/test_registry.py

import json

import pytest

from compkit.catalog import DIALOG, SELECT, TABS, build_registry
from compkit.contracts import ComponentContract, ComponentState, PropDef
from compkit.errors import ContractValidationError
from compkit.registry import RegistryEntry, RegistryIndex


def test_builtin_registry_lists_sorted_by_name():
    registry = build_registry()
    assert registry.names() == ["Dialog", "Select", "Tabs"]
    assert len(registry) == 3


@pytest.mark.parametrize("name", ["dialog", "DIALOG", "Dialog", "dIaLoG"])
def test_lookup_is_case_insensitive(name):
    registry = build_registry()
    entry = registry.get(name)
    assert entry is not None and entry.name == "Dialog"
    assert name in registry


def test_missing_lookup_returns_none():
    registry = build_registry()
    assert registry.get("tooltip") is None
    assert "tooltip" not in registry
    assert 42 not in registry


def test_register_replaces_by_lowercase_name():
    registry = RegistryIndex()
    registry.register_contract(DIALOG)
    original = RegistryEntry.from_contract(DIALOG)
    registry.register(RegistryEntry(name="DIALOG", version="9.9.9", disposition=original.disposition))

    assert len(registry) == 1, "Same name in any case replaces the earlier entry"
    assert registry.get("dialog").version == "9.9.9"
    assert registry.remove("Dialog") is not None
    assert len(registry) == 0


def test_entry_mirrors_contract():
    entry = RegistryEntry.from_contract(SELECT)
    assert entry.name == SELECT.name
    assert entry.props == SELECT.props
    assert entry.states == SELECT.states
    assert entry.token_dependencies == SELECT.token_dependencies
    assert entry.required_files == ("crates/components/src/select.rs",)


def test_summary_line():
    entry = RegistryEntry.from_contract(DIALOG)
    assert entry.summary() == "Dialog v0.1.0 (fork) -- 7 props, 4 states [open, focused, hover, active], 1 files"


def test_registry_json_round_trip():
    registry = build_registry()
    restored = RegistryIndex.from_json(registry.to_json())

    assert restored.names() == registry.names()
    assert list(restored) == list(registry)
    assert restored.to_json() == registry.to_json()


def test_registry_json_accepts_envelope():
    registry = build_registry([TABS])
    wrapped = json.dumps({"success": True, "data": registry.to_dict(), "errors": []})
    assert RegistryIndex.from_json(wrapped).names() == ["Tabs"]


@pytest.mark.parametrize("text", ["[]", "{}", '{"entries": []}'])
def test_registry_json_rejects_bad_shapes(text):
    with pytest.raises(TypeError):
        RegistryIndex.from_json(text)


def test_build_registry_validates_when_asked():
    broken = ComponentContract(
        name="Broken",
        version="",
        props=(PropDef(name="id", type_name="u32", required=True, default_value="0"),),
        states=(ComponentState.DISABLED,),
    )
    with pytest.raises(ContractValidationError) as info:
        build_registry([DIALOG, broken], validate=True)

    assert [name for name, _errors in info.value.failures] == ["Broken"]
    assert info.value.code == "CONTRACT_INVALID"
    assert len(build_registry([DIALOG, broken])) == 2, "Validation is opt-in"
