# ./src/compkit/layout.py
"""Target-project layout adapters.

A layout decides where a component's files land and how the shared module
file exports it. Plan generation only talks to the `TemplateAdapter`
interface, so supporting a new project convention means adding an adapter
here and registering it in `LAYOUTS`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from .errors import UnknownLayoutError


class TemplateAdapter(ABC):
    """Where component files live in a target project and how they are exported."""

    def __init__(self, project_root: Path | str = ".") -> None:
        self.project_root = Path(project_root)

    @abstractmethod
    def name(self) -> str:
        """Short layout identifier recorded in plans (e.g. "default")."""

    @abstractmethod
    def component_dir(self, component_name: str) -> Path:
        """Directory receiving the component's source files."""

    @abstractmethod
    def module_file(self) -> Path:
        """Shared module file that exports every installed component."""

    @abstractmethod
    def export_line(self, component_name: str) -> str:
        """Line appended to `module_file()` to export the component."""

    @abstractmethod
    def theme_tokens_file(self) -> Path:
        """File holding the project's design tokens."""

    # Template hooks. Rust conventions by default; override for other targets.

    def index_file_name(self) -> str:
        return "mod.rs"

    def source_stub(self, component_name: str, version: str, source_file: str) -> str:
        lower = component_name.lower()
        return (
            f"// Component: {component_name} v{version}\n"
            f"// Source: {source_file}\n"
            f"// This file was installed by `compkit add {lower}`\n"
            "\n"
            f"pub use components::{lower}::*;\n"
        )

    def index_source(self, component_name: str, module_names: list[str]) -> str:
        lines = [f"//! {component_name} component module.", ""]
        lines.extend(f"mod {module};" for module in module_names)
        lines.extend(f"pub use {module}::*;" for module in module_names)
        return "\n".join(lines) + "\n"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.project_root)!r})"


class DefaultLayout(TemplateAdapter):
    """Feature-first vertical slice: components under `src/shared/ui/<name>/`."""

    def name(self) -> str:
        return "default"

    def component_dir(self, component_name: str) -> Path:
        return self.project_root / "src" / "shared" / "ui" / component_name.lower()

    def module_file(self) -> Path:
        return self.project_root / "src" / "shared" / "ui" / "mod.rs"

    def export_line(self, component_name: str) -> str:
        return f"pub mod {component_name.lower()};"

    def theme_tokens_file(self) -> Path:
        return self.project_root / "src" / "shared" / "theme" / "tokens.rs"


class LibLayout(TemplateAdapter):
    """Library crate root: components under `src/<name>/`, exported from `src/lib.rs`."""

    def name(self) -> str:
        return "lib"

    def component_dir(self, component_name: str) -> Path:
        return self.project_root / "src" / component_name.lower()

    def module_file(self) -> Path:
        return self.project_root / "src" / "lib.rs"

    def export_line(self, component_name: str) -> str:
        return f"pub mod {component_name.lower()};"

    def theme_tokens_file(self) -> Path:
        return self.project_root / "src" / "theme.rs"


LAYOUTS: dict[str, type[TemplateAdapter]] = {
    "default": DefaultLayout,
    "lib": LibLayout,
}


def get_layout(name: str, project_root: Path | str = ".") -> TemplateAdapter:
    """Instantiate the layout registered under `name` for `project_root`."""

    try:
        layout_cls = LAYOUTS[name.lower()]
    except KeyError:
        raise UnknownLayoutError(name, sorted(LAYOUTS)) from None
    return layout_cls(project_root)


__all__ = ["LAYOUTS", "DefaultLayout", "LibLayout", "TemplateAdapter", "get_layout"]
