# ./src/compkit/mcp_server.py
"""Built-in MCP server exposing the compkit planner to agents.

Run as `compkit mcp` or `compkit-mcp` to serve plan/add/apply/list tools over
stdio (or alternate FastMCP transports). Every tool returns the same
`{success, data, errors}` envelope as the CLI, so an agent can review a plan
before asking for it to be applied.
"""

from __future__ import annotations

import importlib
from typing import Any

from ._types import JsonEnvelope
from .api import add_payload, apply_payload, list_payload, plan_payload
from .errors import CompkitError
from .report import error_row, failure_envelope

FastMCP: Any
_MCP_IMPORT_ERROR: Exception | None
try:
    _fastmcp_module = importlib.import_module("mcp.server.fastmcp")
except ImportError as exc:  # pragma: no cover - import guarded at runtime
    FastMCP = None
    _MCP_IMPORT_ERROR = exc
else:
    FastMCP = _fastmcp_module.FastMCP
    _MCP_IMPORT_ERROR = None


def _guarded(call: Any, *args: Any, **kwargs: Any) -> JsonEnvelope:
    try:
        return call(*args, **kwargs)
    except CompkitError as error:
        return failure_envelope([error_row(error.code, str(error))])
    except Exception as error:
        return failure_envelope([error_row("GENERIC_ERROR", str(error))])


def build_server() -> Any:
    if FastMCP is None:
        raise RuntimeError(
            "MCP support requires the `mcp` package. Install optional extras: `pip install compkit[mcp]`."
        ) from _MCP_IMPORT_ERROR

    mcp = FastMCP("compkit")

    @mcp.tool(name="compkit_list", description="List installable design-system components.")
    def compkit_list(registry_file: str = "") -> JsonEnvelope:
        return _guarded(list_payload, {"registry_file": registry_file})

    @mcp.tool(name="compkit_plan", description="Generate a deterministic install plan without writing files.")
    def compkit_plan(component: str, target_dir: str = ".", layout: str = "default") -> JsonEnvelope:
        return _guarded(plan_payload, component, {"target_dir": target_dir, "layout": layout})

    @mcp.tool(name="compkit_add", description="Install a component; refuses on conflicts unless force is set.")
    def compkit_add(
        component: str,
        target_dir: str = ".",
        layout: str = "default",
        force: bool = False,
        write_provenance: bool = True,
    ) -> JsonEnvelope:
        payload = {"target_dir": target_dir, "layout": layout, "force": force, "write_provenance": write_provenance}
        return _guarded(add_payload, component, payload)

    @mcp.tool(name="compkit_apply", description="Apply a previously generated plan (raw JSON or envelope).")
    def compkit_apply(plan_json: str, target_dir: str = ".", write_provenance: bool = True) -> JsonEnvelope:
        return _guarded(apply_payload, plan_json, {"target_dir": target_dir, "write_provenance": write_provenance})

    return mcp


def serve_mcp(transport: str = "stdio") -> None:
    """Start the compkit MCP server using the requested FastMCP transport."""

    server = build_server()
    server.run(transport=transport)


def main() -> None:
    serve_mcp("stdio")


__all__ = ["build_server", "main", "serve_mcp"]
