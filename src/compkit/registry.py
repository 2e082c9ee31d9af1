# ./src/compkit/registry.py
"""Name-keyed component registry with case-insensitive lookup.

The index is built once per invocation from contract metadata (or restored
from a JSON snapshot) and treated as read-only afterwards. Listing output is
always sorted by the canonical component name so CLI and agent consumers see
stable ordering.
"""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from .contracts import ComponentContract, ComponentState, Disposition, PropDef, TokenRef


@dataclass(frozen=True)
class RegistryEntry:
    """Flattened, serializable summary of one installable component."""

    name: str
    version: str
    disposition: Disposition
    variants: tuple[str, ...] = ()
    states: tuple[ComponentState, ...] = ()
    props: tuple[PropDef, ...] = ()
    token_dependencies: tuple[TokenRef, ...] = ()
    required_files: tuple[str, ...] = ()

    @classmethod
    def from_contract(cls, contract: ComponentContract) -> RegistryEntry:
        return cls(
            name=contract.name,
            version=contract.version,
            disposition=contract.disposition,
            variants=tuple(contract.variants),
            states=tuple(contract.states),
            props=tuple(contract.props),
            token_dependencies=tuple(contract.token_dependencies),
            required_files=tuple(contract.required_files),
        )

    def summary(self) -> str:
        """One-line description used by `compkit list`."""

        state_names = ", ".join(state.value for state in self.states)
        return (
            f"{self.name} v{self.version} ({self.disposition.value}) -- "
            f"{len(self.props)} props, {len(self.states)} states [{state_names}], "
            f"{len(self.required_files)} files"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "disposition": self.disposition.value,
            "variants": list(self.variants),
            "states": [state.value for state in self.states],
            "props": [prop.to_dict() for prop in self.props],
            "token_dependencies": [token.to_dict() for token in self.token_dependencies],
            "required_files": list(self.required_files),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RegistryEntry:
        return cls(
            name=str(data["name"]),
            version=str(data["version"]),
            disposition=Disposition(data["disposition"]),
            variants=tuple(str(v) for v in data.get("variants") or ()),
            states=tuple(ComponentState(s) for s in data.get("states") or ()),
            props=tuple(PropDef.from_dict(p) for p in data.get("props") or ()),
            token_dependencies=tuple(TokenRef.from_dict(t) for t in data.get("token_dependencies") or ()),
            required_files=tuple(str(f) for f in data.get("required_files") or ()),
        )


class RegistryIndex:
    """Component catalog keyed by lowercase name; latest registration wins."""

    def __init__(self) -> None:
        self._entries: dict[str, RegistryEntry] = {}

    def register(self, entry: RegistryEntry) -> None:
        self._entries[entry.name.lower()] = entry

    def register_contract(self, contract: ComponentContract) -> RegistryEntry:
        entry = RegistryEntry.from_contract(contract)
        self.register(entry)
        return entry

    def get(self, name: str) -> RegistryEntry | None:
        return self._entries.get(name.lower())

    def remove(self, name: str) -> RegistryEntry | None:
        return self._entries.pop(name.lower(), None)

    def list(self) -> list[RegistryEntry]:
        return sorted(self._entries.values(), key=lambda entry: entry.name)

    def names(self) -> list[str]:
        return [entry.name for entry in self.list()]

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._entries

    def __iter__(self) -> Iterator[RegistryEntry]:
        return iter(self.list())

    def to_dict(self) -> dict[str, Any]:
        return {"entries": {key: self._entries[key].to_dict() for key in sorted(self._entries)}}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RegistryIndex:
        entries = data.get("entries")
        if not isinstance(entries, Mapping):
            raise TypeError("registry JSON must contain an 'entries' object")
        index = cls()
        for row in entries.values():
            index.register(RegistryEntry.from_dict(row))
        return index

    @classmethod
    def from_json(cls, text: str) -> RegistryIndex:
        data = json.loads(text)
        if not isinstance(data, Mapping):
            raise TypeError("registry JSON must be an object")
        # `compkit registry` output wraps the snapshot in an envelope.
        if "entries" not in data and isinstance(data.get("data"), Mapping):
            data = data["data"]
        return cls.from_dict(data)


__all__ = ["RegistryEntry", "RegistryIndex"]
