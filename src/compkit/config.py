# src/compkit/config.py
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from ._types import Options

try:
    import tomllib as toml
except ModuleNotFoundError:
    import tomli as toml  # type: ignore[no-redef]

_OUTPUT_MODES = ("json", "human", "both")


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            data = toml.load(f)
    except (OSError, toml.TOMLDecodeError) as e:
        logging.warning("Failed to parse %s: %s", path.name, e)
        return {}
    return data if isinstance(data, dict) else {}


def load_project_config(start_dir: Path) -> dict[str, Any]:
    cfg: dict[str, Any] = {}

    # compkit.toml
    ck = start_dir / "compkit.toml"
    if ck.exists():
        cfg.update(_load_toml(ck))

    # pyproject [tool.compkit]
    pyproj = start_dir / "pyproject.toml"
    if pyproj.exists():
        data = _load_toml(pyproj)
        tool = data.get("tool") or {}
        section = tool.get("compkit") or {}
        if isinstance(section, dict):
            cfg.update(section)

    # JSON fallback
    cj = start_dir / "compkit.json"
    if cj.exists():
        try:
            loaded = json.loads(cj.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logging.warning("Failed to parse compkit.json: %s", e)
        else:
            if isinstance(loaded, dict):
                cfg.update(loaded)

    return cfg


def _to_path(v: Any) -> Path | None:
    if v in (None, ""):
        return None
    return Path(str(v))


def _to_bool(v: Any, default: bool) -> bool:
    if v is None:
        return default
    if isinstance(v, str):
        return v.strip().lower() in {"1", "true", "yes", "on"}
    return bool(v)


def _to_output(v: Any, default: str) -> Any:
    value = str(v).strip().lower() if v is not None else default
    return value if value in _OUTPUT_MODES else default


def merge_options(base: Options, overrides: dict[str, Any]) -> Options:
    return Options(
        target_dir=_to_path(overrides.get("target_dir")) or base.target_dir,
        layout=str(overrides.get("layout") or base.layout),
        registry_file=_to_path(overrides.get("registry_file")) or base.registry_file,
        write_provenance=_to_bool(overrides.get("write_provenance"), base.write_provenance),
        force=_to_bool(overrides.get("force"), base.force),
        output=_to_output(overrides.get("output"), base.output),
        json_report=_to_path(overrides.get("json_report")) or base.json_report,
        log_file=_to_path(overrides.get("log_file")) or base.log_file,
        verbosity=int(overrides.get("verbosity", base.verbosity)),
        quiet=_to_bool(overrides.get("quiet"), base.quiet),
    )


__all__ = ["load_project_config", "merge_options"]
