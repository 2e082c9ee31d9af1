# ./src/compkit/catalog.py
"""Built-in component metadata and registry construction.

These contracts describe the design-system widgets that compkit can install.
They are read-only data; `build_registry` indexes them (optionally behind the
validation gate) into a fresh `RegistryIndex` for each invocation.
"""

from __future__ import annotations

from collections.abc import Iterable

from .contracts import (
    ComponentContract,
    ComponentState,
    Disposition,
    InteractionChecklist,
    PropDef,
    TokenRef,
    ValidationError,
    validate_contract,
)
from .errors import ContractValidationError
from .registry import RegistryIndex

DIALOG = ComponentContract(
    name="Dialog",
    version="0.1.0",
    disposition=Disposition.FORK,
    props=(
        PropDef.required_prop("id", "ElementId", "Unique identifier for the dialog instance"),
        PropDef.optional_prop("title", "Option<SharedString>", "None", "Dialog title text"),
        PropDef.optional_prop("description", "Option<SharedString>", "None", "Dialog description text"),
        PropDef.optional_prop("width", "Pixels", "480.0", "Dialog width in pixels"),
        PropDef.optional_prop("overlay_closable", "bool", "true", "Whether clicking backdrop closes the dialog"),
        PropDef.optional_prop("show_close_button", "bool", "true", "Whether to show the X close button"),
        PropDef.optional_prop("tooltip", "Option<SharedString>", "None", "Tooltip text"),
    ),
    states=(ComponentState.OPEN, ComponentState.FOCUSED, ComponentState.HOVER, ComponentState.ACTIVE),
    token_dependencies=(
        TokenRef("surface.elevated_surface", "Dialog panel background"),
        TokenRef("border.default", "Dialog panel border"),
        TokenRef("text.default", "Dialog title and body text"),
        TokenRef("text.muted", "Dialog description text"),
        TokenRef("surface.background", "Overlay backdrop (with alpha)"),
        TokenRef("ghost_element.hover", "Close button hover state"),
    ),
    interaction=InteractionChecklist(
        focus_behavior=(
            "Focus trap: Tab/Shift-Tab cycle within dialog. Focus captured on open, returned to trigger on close."
        ),
        keyboard_model=(
            "Escape dismisses the dialog. Enter is not bound by default "
            "(action buttons handle their own activation)."
        ),
        pointer_behavior=(
            "Click on backdrop dismisses (if overlay_closable). Click on close button dismisses. "
            "Mouse events on dialog panel stop propagation to backdrop."
        ),
        state_model="Controlled open/close via OpenState. Dialog is created in Open state; closing returns focus.",
    ),
    required_files=("crates/components/src/dialog.rs",),
)

SELECT = ComponentContract(
    name="Select",
    version="0.1.0",
    disposition=Disposition.FORK,
    props=(
        PropDef.required_prop("id", "ElementId", "Unique identifier for the select instance"),
        PropDef.required_prop("items", "Vec<SelectItem>", "List of selectable items"),
        PropDef.optional_prop("selected_index", "Option<usize>", "None", "Currently selected item index"),
        PropDef.optional_prop("placeholder", "SharedString", "Select...", "Text shown when no item is selected"),
        PropDef.optional_prop("disabled", "bool", "false", "Whether the select is disabled"),
        PropDef.optional_prop("width", "Pixels", "200.0", "Select trigger width"),
        PropDef.optional_prop("tooltip", "Option<SharedString>", "None", "Tooltip text"),
    ),
    states=(
        ComponentState.OPEN,
        ComponentState.FOCUSED,
        ComponentState.HOVER,
        ComponentState.ACTIVE,
        ComponentState.SELECTED,
        ComponentState.DISABLED,
    ),
    token_dependencies=(
        TokenRef("element.background", "Trigger button background"),
        TokenRef("element.hover", "Trigger button hover background"),
        TokenRef("border.default", "Trigger and popover border"),
        TokenRef("text.default", "Selected item text"),
        TokenRef("text.placeholder", "Placeholder text"),
        TokenRef("text.disabled", "Disabled item text"),
        TokenRef("surface.elevated_surface", "Popover dropdown background"),
        TokenRef("ghost_element.hover", "Dropdown item hover background"),
        TokenRef("ghost_element.selected", "Selected dropdown item background"),
    ),
    interaction=InteractionChecklist(
        focus_behavior="Trigger receives focus via Tab. Arrow keys navigate items. Focus returns to trigger on close.",
        keyboard_model=(
            "Enter/Space opens dropdown and selects highlighted item. Up/Down arrows navigate through items "
            "(wrapping). Escape closes dropdown. Home/End jump to first/last."
        ),
        pointer_behavior=(
            "Click on trigger toggles dropdown. Click on item selects it. Click outside dismisses dropdown."
        ),
        state_model=(
            "Supports controlled (selected_index) and uncontrolled mode. OpenState tracks popover visibility. "
            "on_change fires when selection changes."
        ),
        disabled_behavior=(
            "Disabled state blocks all interaction, shows reduced-opacity text, prevents dropdown from opening."
        ),
    ),
    required_files=("crates/components/src/select.rs",),
)

TABS = ComponentContract(
    name="Tabs",
    version="0.1.0",
    disposition=Disposition.FORK,
    props=(
        PropDef.required_prop("id", "ElementId", "Unique identifier for the tabs instance"),
        PropDef.required_prop("tabs", "Vec<TabItem>", "List of tab definitions"),
        PropDef.optional_prop("active_index", "usize", "0", "Index of the currently active tab"),
        PropDef.optional_prop("tooltip", "Option<SharedString>", "None", "Tooltip text"),
    ),
    states=(
        ComponentState.FOCUSED,
        ComponentState.HOVER,
        ComponentState.ACTIVE,
        ComponentState.SELECTED,
        ComponentState.DISABLED,
    ),
    token_dependencies=(
        TokenRef("tab.bar_background", "Tab bar background color"),
        TokenRef("tab.active_background", "Active tab background color"),
        TokenRef("tab.inactive_background", "Inactive tab background color"),
        TokenRef("border.default", "Tab bar bottom border"),
        TokenRef("border.selected", "Active tab indicator"),
        TokenRef("text.default", "Active tab text color"),
        TokenRef("text.muted", "Inactive tab text color"),
        TokenRef("text.disabled", "Disabled tab text color"),
        TokenRef("ghost_element.hover", "Tab hover background"),
    ),
    interaction=InteractionChecklist(
        focus_behavior=(
            "Tab bar receives focus via Tab key. Left/Right arrows navigate between tabs. "
            "Tab/Shift-Tab moves focus out of the tab bar."
        ),
        keyboard_model=(
            "Left/Right arrows move between tabs (wrapping). Home/End jump to first/last tab. "
            "Enter/Space activates the focused tab. Disabled tabs are skipped during navigation."
        ),
        pointer_behavior="Click on a tab activates it. Hover shows highlight. Disabled tabs do not respond to click.",
        state_model=(
            "Supports controlled (active_index) and uncontrolled mode. on_change fires when active tab changes. "
            "Each tab has its own disabled state."
        ),
        disabled_behavior=(
            "Disabled tabs are visually dimmed, skip during keyboard navigation, and do not respond to click events."
        ),
    ),
    required_files=("crates/components/src/tabs.rs",),
)


def builtin_contracts() -> list[ComponentContract]:
    return [DIALOG, SELECT, TABS]


def validate_contracts(contracts: Iterable[ComponentContract]) -> list[tuple[str, list[ValidationError]]]:
    """Validate every contract and return `(name, violations)` for failures only."""

    failures: list[tuple[str, list[ValidationError]]] = []
    for contract in contracts:
        errors = validate_contract(contract)
        if errors:
            failures.append((contract.name, errors))
    return failures


def build_registry(
    contracts: Iterable[ComponentContract] | None = None,
    *,
    validate: bool = False,
) -> RegistryIndex:
    """Index `contracts` (default: the built-in catalog) into a new registry.

    With `validate=True` nothing is registered unless every contract passes;
    all violations are raised together as `ContractValidationError`.
    """

    items = list(builtin_contracts() if contracts is None else contracts)
    if validate:
        failures = validate_contracts(items)
        if failures:
            raise ContractValidationError(failures)

    index = RegistryIndex()
    for contract in items:
        index.register_contract(contract)
    return index


__all__ = ["DIALOG", "SELECT", "TABS", "build_registry", "builtin_contracts", "validate_contracts"]
