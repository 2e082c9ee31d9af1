# ./src/compkit/contracts.py
"""Component contract records and the pre-registration validation gate.

A `ComponentContract` is a plain configuration record: every optional field is
named and defaulted, and `validate_contract` reports all violations at once so
callers can batch them into one report before trusting a registry.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ComponentState(str, Enum):
    """Interactive and visual states a component can enter."""

    HOVER = "hover"
    ACTIVE = "active"
    FOCUSED = "focused"
    DISABLED = "disabled"
    ERROR = "error"
    OPEN = "open"
    SELECTED = "selected"
    READONLY = "readonly"


class Disposition(str, Enum):
    """How a component was sourced. Provenance only, never behavior."""

    REUSE = "reuse"
    FORK = "fork"
    REWRITE = "rewrite"


@dataclass(frozen=True)
class PropDef:
    name: str
    type_name: str
    required: bool = False
    default_value: str | None = None
    description: str = ""

    @classmethod
    def required_prop(cls, name: str, type_name: str, description: str) -> PropDef:
        return cls(name=name, type_name=type_name, required=True, description=description)

    @classmethod
    def optional_prop(cls, name: str, type_name: str, default_value: str, description: str) -> PropDef:
        return cls(name=name, type_name=type_name, default_value=default_value, description=description)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type_name": self.type_name,
            "required": self.required,
            "default_value": self.default_value,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PropDef:
        default = data.get("default_value")
        return cls(
            name=str(data["name"]),
            type_name=str(data["type_name"]),
            required=bool(data.get("required", False)),
            default_value=None if default is None else str(default),
            description=str(data.get("description", "")),
        )


@dataclass(frozen=True)
class TokenRef:
    """A design-token dependency such as `border.default`."""

    path: str
    usage: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "usage": self.usage}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TokenRef:
        return cls(path=str(data["path"]), usage=str(data.get("usage", "")))


@dataclass(frozen=True)
class InteractionChecklist:
    """Narrative descriptions of how the component handles interaction."""

    focus_behavior: str | None = None
    keyboard_model: str | None = None
    pointer_behavior: str | None = None
    state_model: str | None = None
    disabled_behavior: str | None = None
    readonly_behavior: str | None = None


@dataclass(frozen=True)
class ComponentContract:
    """Full specification of one installable component."""

    name: str
    version: str
    disposition: Disposition = Disposition.REWRITE
    props: tuple[PropDef, ...] = ()
    variants: tuple[str, ...] = ()
    states: tuple[ComponentState, ...] = ()
    token_dependencies: tuple[TokenRef, ...] = ()
    interaction: InteractionChecklist = field(default_factory=InteractionChecklist)
    required_files: tuple[str, ...] = ()
    metadata: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ValidationError:
    """One contract violation, located by a dot-path field name."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


# state -> (checklist attribute, human label)
_STATE_CHECKLIST_FIELDS: tuple[tuple[ComponentState, str, str], ...] = (
    (ComponentState.DISABLED, "disabled_behavior", "Disabled"),
    (ComponentState.READONLY, "readonly_behavior", "Readonly"),
    (ComponentState.FOCUSED, "focus_behavior", "Focused"),
    (ComponentState.HOVER, "pointer_behavior", "Hover"),
)


def validate_contract(contract: ComponentContract) -> list[ValidationError]:
    """Return every violation in `contract`; an empty list means well-formed."""

    errors: list[ValidationError] = []

    if not contract.name:
        errors.append(ValidationError("name", "Component name must not be empty"))
    if not contract.version:
        errors.append(ValidationError("version", "Version must not be empty"))
    if not contract.props:
        errors.append(ValidationError("props", "At least one prop must be defined"))
    if not contract.states:
        errors.append(ValidationError("states", "At least one state must be listed"))

    for index, prop in enumerate(contract.props):
        if prop.required and prop.default_value is not None:
            errors.append(
                ValidationError(
                    f"props[{index}].default_value",
                    f"Required prop '{prop.name}' should not have a default value",
                )
            )

    for state, attribute, label in _STATE_CHECKLIST_FIELDS:
        if state in contract.states and getattr(contract.interaction, attribute) is None:
            errors.append(
                ValidationError(
                    f"interaction_checklist.{attribute}",
                    f"{label} state is listed but {attribute} is not described",
                )
            )

    return errors


__all__ = [
    "ComponentContract",
    "ComponentState",
    "Disposition",
    "InteractionChecklist",
    "PropDef",
    "TokenRef",
    "ValidationError",
    "validate_contract",
]
