# ./src/compkit/cli.py
"""Command-line entrypoints for compkit and built-in MCP serving.

Primary usage is `compkit add <component>` to install a component,
`compkit plan <component>` to review the exact file mutations first, and
`compkit apply <plan-file>` to execute a reviewed plan. Every command prints a
`{success, data, errors}` JSON envelope by default; `--output human` switches
to terminal summaries.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Any, NoReturn, Optional

import typer
from click.core import ParameterSource

from . import __version__
from ._logging import setup_logging
from ._types import ApplyResult, ExitCode, JsonEnvelope, Options, PlanContract
from .apply import preview_plan
from .catalog import build_registry
from .config import load_project_config, merge_options
from .core import add_component, apply_plan_file, check_plan_file, load_registry, lookup, plan_component
from .errors import ChecksumDriftError, CompkitError, ConflictsDetectedError, ContractValidationError
from .report import (
    apply_envelope,
    conflict_errors,
    drift_to_json,
    error_row,
    failure_envelope,
    make_diff,
    success_envelope,
    summarize_plan,
    validation_errors_to_json,
    write_json_report,
)


class OutputModeEnum(str, Enum):
    JSON = "json"
    HUMAN = "human"
    BOTH = "both"


class TransportEnum(str, Enum):
    STDIO = "stdio"
    SSE = "sse"
    STREAMABLE_HTTP = "streamable-http"


class HelpTopicEnum(str, Enum):
    ALL = "all"
    ADD = "add"
    PLAN = "plan"
    APPLY = "apply"
    DOCTOR = "doctor"
    MCP = "mcp"


_ROOT_HELP_EPILOG = """Help tips:
  compkit add --help
  compkit plan --help
  compkit help all
"""

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Plan and apply design-system component installs with deterministic, reviewable file mutations.",
    epilog=_ROOT_HELP_EPILOG,
)

_SUBCOMMAND_HELP_FOOTER = """Other compkit commands:
  compkit add <component> [--plan] [--force] [--target-dir DIR]
  compkit plan <component> [--target-dir DIR] [--show-diff]
  compkit apply <plan-file> [--target-dir DIR]
  compkit list | show <component> | registry | validate
  compkit doctor <plan-file>
  compkit help [all|add|plan|apply|doctor|mcp]
"""

_HELP_TEXTS: dict[HelpTopicEnum, str] = {
    HelpTopicEnum.ALL: """compkit help overview

Top-level commands:
  compkit add <component> [--plan] [--force] [--target-dir DIR] [--layout NAME]
  compkit plan <component> [--target-dir DIR] [--layout NAME] [--show-diff]
  compkit apply <plan-file> [--target-dir DIR]
  compkit doctor <plan-file> [--target-dir DIR]
  compkit list | show <component> | registry | validate
  compkit help [all|add|plan|apply|doctor|mcp]
  compkit version
  compkit mcp [--transport stdio|sse|streamable-http]

Common quick starts:
  compkit list --output human
  compkit plan dialog --output human --show-diff
  compkit plan dialog --json-report dialog-plan.json
  compkit apply dialog-plan.json
""",
    HelpTopicEnum.ADD: """compkit add help

Use:
  compkit add --help

Common add patterns:
  compkit add dialog
  compkit add dialog --plan
  compkit add tabs --target-dir ../app --layout lib
  compkit add select --force
""",
    HelpTopicEnum.PLAN: """compkit plan help

Use:
  compkit plan --help

Plans never write files. Save one for review and apply it later:
  compkit plan dialog --json-report plan.json
  compkit plan dialog --output human --show-diff
""",
    HelpTopicEnum.APPLY: """compkit apply help

Use:
  compkit apply --help

Accepts a raw plan or any compkit output envelope containing one:
  compkit apply plan.json
  compkit apply plan.json --target-dir ../app
""",
    HelpTopicEnum.DOCTOR: """compkit doctor help

Use:
  compkit doctor plan.json

Reports installed files whose checksums no longer match the plan.
""",
    HelpTopicEnum.MCP: """compkit mcp help

Use:
  compkit mcp --help
  compkit mcp --transport stdio
""",
}

# Command arguments/flags that are not part of Options.
_NON_OPTION_KEYS = {"ctx", "component", "plan_file", "plan", "show_diff", "use_config", "version", "topic"}


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"compkit {__version__}")
        raise typer.Exit()


@app.callback()
def app_callback(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        is_eager=True,
        callback=_version_callback,
        help="Show compkit version and exit.",
    ),
    registry_file: Optional[Path] = typer.Option(
        None,
        "--registry",
        help="Load components from a registry JSON snapshot instead of the built-in catalog.",
        dir_okay=False,
        rich_help_panel="Registry",
    ),
    verbosity: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
        rich_help_panel="Logging",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only log errors.",
        rich_help_panel="Logging",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        help="Optional log file path.",
        rich_help_panel="Logging",
    ),
    use_config: bool = typer.Option(
        True,
        help="Load compkit.toml / [tool.compkit] / compkit.json.",
        rich_help_panel="Config",
    ),
) -> None:
    """Global CLI options for compkit."""


def _build_options(ctx: typer.Context) -> Options:
    root = ctx.find_root()
    options = Options()
    if root.params.get("use_config", True):
        options = merge_options(options, load_project_config(Path(".").resolve()))

    overrides: dict[str, Any] = {}
    contexts = [root] if root is ctx else [root, ctx]
    for context in contexts:
        for key, value in context.params.items():
            if key in _NON_OPTION_KEYS:
                continue
            if context.get_parameter_source(key) is not ParameterSource.DEFAULT:
                overrides[key] = value.value if isinstance(value, Enum) else value

    options = merge_options(options, overrides)
    setup_logging(verbosity=options.verbosity, quiet=options.quiet, log_file=options.log_file)
    return options


def _emit(payload: JsonEnvelope, options: Options, human: Optional[Callable[[], None]] = None) -> None:
    report_path: Optional[Path] = None
    if options.json_report:
        report_path = write_json_report(payload, str(options.json_report))

    if options.output in {"human", "both"}:
        if human is not None:
            human()
        for error in payload["errors"]:
            typer.secho(f"[{error['code']}] {error['message']}", fg=typer.colors.RED, err=True)
        if report_path:
            typer.echo(f"json report written: {report_path}")

    if options.output in {"json", "both"}:
        typer.echo(json.dumps(payload, indent=2))


def _exit(code: ExitCode) -> NoReturn:
    raise typer.Exit(int(code))


def _fail(error: Exception, options: Options) -> NoReturn:
    if isinstance(error, ConflictsDetectedError):
        plan = error.plan
        _emit(failure_envelope(conflict_errors(plan), plan.to_dict()), options, human=lambda: _print_plan(plan))
        _exit(error.exit_code)
    if isinstance(error, CompkitError):
        _emit(failure_envelope([error_row(error.code, str(error))]), options)
        _exit(error.exit_code)
    _emit(failure_envelope([error_row("GENERIC_ERROR", str(error))]), options)
    _exit(ExitCode.GENERIC_ERROR)


def _print_plan(plan: PlanContract) -> None:
    typer.echo(summarize_plan(plan))
    if plan.has_conflicts():
        typer.secho(f"{len(plan.conflicts)} conflict(s) detected", fg=typer.colors.YELLOW)


def _print_apply(result: ApplyResult) -> None:
    plan = result.plan
    if result.failure is not None:
        typer.secho(
            f"compkit [apply] -> {plan.component_name} halted at mutation {result.failure.failed_at_index}",
            fg=typer.colors.RED,
        )
        return
    typer.secho(f"compkit [apply] -> {plan.component_name} v{plan.component_version} installed", fg=typer.colors.GREEN)
    typer.echo(
        f"files changed: {len(result.applied)} | unchanged: {len(result.unchanged)} "
        f"| provenance files: {len(result.provenance_files)}"
    )
    for index in result.applied:
        typer.echo(f"  - {plan.mutations[index].file_path.as_posix()}")


def _finish_apply(result: ApplyResult, options: Options) -> NoReturn:
    _emit(apply_envelope(result), options, human=lambda: _print_apply(result))
    _exit(ExitCode.OK if result.ok else ExitCode.APPLY_FAILED)


def _output_option() -> Any:
    return typer.Option(OutputModeEnum.JSON, "--output", "-o", help="Stdout output mode.", rich_help_panel="Output")


def _json_report_option() -> Any:
    return typer.Option(None, help="Also write the output envelope to this file.", rich_help_panel="Output")


def _target_dir_option() -> Any:
    return typer.Option(
        Path("."), "--target-dir", help="Root of the target project.", file_okay=False, rich_help_panel="Target"
    )


def _layout_option() -> Any:
    return typer.Option("default", "--layout", help="Target project layout (default, lib).", rich_help_panel="Target")


def _provenance_option() -> Any:
    return typer.Option(
        True,
        "--write-provenance/--no-provenance",
        help="Write <file>.provenance.json sidecars after a successful apply.",
        rich_help_panel="Apply",
    )


@app.command("add", epilog=_SUBCOMMAND_HELP_FOOTER)
def add_command(
    ctx: typer.Context,
    component: str = typer.Argument(..., help="Component name (case-insensitive)."),
    plan: bool = typer.Option(False, "--plan", help="Print the mutation plan instead of applying it."),
    force: bool = typer.Option(False, "--force", help="Apply even when target files already exist."),
    target_dir: Path = _target_dir_option(),
    layout: str = _layout_option(),
    write_provenance: bool = _provenance_option(),
    output: OutputModeEnum = _output_option(),
    json_report: Optional[Path] = _json_report_option(),
) -> None:
    """Install a component into the target project."""

    options = _build_options(ctx)

    if plan:
        try:
            planned = plan_component(component, options)
        except Exception as error:
            _fail(error, options)
        _emit(success_envelope(planned.to_dict()), options, human=lambda: _print_plan(planned))
        _exit(ExitCode.OK)

    try:
        result = add_component(component, options)
    except Exception as error:
        _fail(error, options)
    _finish_apply(result, options)


@app.command("plan", epilog=_SUBCOMMAND_HELP_FOOTER)
def plan_command(
    ctx: typer.Context,
    component: str = typer.Argument(..., help="Component name (case-insensitive)."),
    target_dir: Path = _target_dir_option(),
    layout: str = _layout_option(),
    show_diff: bool = typer.Option(
        False,
        help="Show a unified diff of what apply would change (stderr in json mode).",
        rich_help_panel="Output",
    ),
    output: OutputModeEnum = _output_option(),
    json_report: Optional[Path] = _json_report_option(),
) -> None:
    """Generate and print an install plan. Never writes project files."""

    options = _build_options(ctx)
    try:
        planned = plan_component(component, options)
        diff = make_diff(preview_plan(planned, options.target_dir)) if show_diff else ""
    except Exception as error:
        _fail(error, options)

    def _human() -> None:
        _print_plan(planned)
        if diff:
            typer.echo(diff)

    _emit(success_envelope(planned.to_dict()), options, human=_human)
    if diff and options.output == "json":
        typer.echo(diff, err=True)
    _exit(ExitCode.OK)


@app.command("apply", epilog=_SUBCOMMAND_HELP_FOOTER)
def apply_command(
    ctx: typer.Context,
    plan_file: Path = typer.Argument(..., help="Plan JSON file (raw plan or compkit output envelope)."),
    target_dir: Path = _target_dir_option(),
    write_provenance: bool = _provenance_option(),
    output: OutputModeEnum = _output_option(),
    json_report: Optional[Path] = _json_report_option(),
) -> None:
    """Apply a previously generated plan."""

    options = _build_options(ctx)
    try:
        result = apply_plan_file(plan_file, options)
    except Exception as error:
        _fail(error, options)
    _finish_apply(result, options)


@app.command("doctor", epilog=_SUBCOMMAND_HELP_FOOTER)
def doctor_command(
    ctx: typer.Context,
    plan_file: Path = typer.Argument(..., help="Plan JSON whose checksums should be verified."),
    target_dir: Path = _target_dir_option(),
    output: OutputModeEnum = _output_option(),
    json_report: Optional[Path] = _json_report_option(),
) -> None:
    """Report installed files that drifted from the plan's checksums."""

    options = _build_options(ctx)
    try:
        planned, drifts = check_plan_file(plan_file, options)
    except Exception as error:
        _fail(error, options)

    data = {
        "component_name": planned.component_name,
        "checked": len(planned.file_checksums),
        "drift": drift_to_json(drifts),
    }

    def _human() -> None:
        if not drifts:
            typer.secho(f"compkit [doctor] -> {planned.component_name}: all files match", fg=typer.colors.GREEN)

    if not drifts:
        _emit(success_envelope(data), options, human=_human)
        _exit(ExitCode.OK)

    error = ChecksumDriftError(drifts)
    rows = [
        error_row(error.code, f"{drift.file_path.as_posix()}: {drift.status} (expected {drift.expected})")
        for drift in error.drifts
    ]
    _emit(failure_envelope(rows, data), options)
    _exit(error.exit_code)


@app.command("list", epilog=_SUBCOMMAND_HELP_FOOTER)
def list_command(
    ctx: typer.Context,
    output: OutputModeEnum = _output_option(),
) -> None:
    """List installable components."""

    options = _build_options(ctx)
    try:
        registry = load_registry(options)
    except Exception as error:
        _fail(error, options)

    def _human() -> None:
        for entry in registry.list():
            typer.echo(entry.summary())

    _emit(success_envelope([entry.to_dict() for entry in registry.list()]), options, human=_human)
    _exit(ExitCode.OK)


@app.command("show", epilog=_SUBCOMMAND_HELP_FOOTER)
def show_command(
    ctx: typer.Context,
    component: str = typer.Argument(..., help="Component name (case-insensitive)."),
    output: OutputModeEnum = _output_option(),
) -> None:
    """Show one registry entry."""

    options = _build_options(ctx)
    try:
        entry = lookup(load_registry(options), component)
    except Exception as error:
        _fail(error, options)

    def _human() -> None:
        typer.echo(entry.summary())
        for prop in entry.props:
            marker = "required" if prop.required else f"default {prop.default_value}"
            typer.echo(f"  {prop.name}: {prop.type_name} ({marker})")
        for source in entry.required_files:
            typer.echo(f"  file: {source}")

    _emit(success_envelope(entry.to_dict()), options, human=_human)
    _exit(ExitCode.OK)


@app.command("registry", epilog=_SUBCOMMAND_HELP_FOOTER)
def registry_command(
    ctx: typer.Context,
    output: OutputModeEnum = _output_option(),
    json_report: Optional[Path] = _json_report_option(),
) -> None:
    """Print the registry snapshot (reloadable with --registry)."""

    options = _build_options(ctx)
    try:
        registry = load_registry(options)
    except Exception as error:
        _fail(error, options)

    _emit(success_envelope(registry.to_dict()), options, human=lambda: typer.echo(registry.to_json()))
    _exit(ExitCode.OK)


@app.command("validate", epilog=_SUBCOMMAND_HELP_FOOTER)
def validate_command(
    ctx: typer.Context,
    output: OutputModeEnum = _output_option(),
) -> None:
    """Validate the built-in component contracts."""

    options = _build_options(ctx)
    try:
        registry = build_registry(validate=True)
    except ContractValidationError as error:
        _emit(failure_envelope(validation_errors_to_json(error.failures)), options)
        _exit(error.exit_code)

    names = registry.names()
    _emit(
        success_envelope({"validated": names}),
        options,
        human=lambda: typer.secho(f"{len(names)} contract(s) valid: {', '.join(names)}", fg=typer.colors.GREEN),
    )
    _exit(ExitCode.OK)


@app.command("help", epilog=_SUBCOMMAND_HELP_FOOTER)
def help_command(
    topic: HelpTopicEnum = typer.Argument(
        HelpTopicEnum.ALL,
        help="Help topic: all, add, plan, apply, doctor, or mcp.",
    ),
) -> None:
    """Show concise command guidance and discoverability tips."""

    typer.echo(_HELP_TEXTS[topic].strip())


@app.command("version", epilog=_SUBCOMMAND_HELP_FOOTER)
def version_command() -> None:
    """Print installed compkit version."""

    typer.echo(f"compkit {__version__}")


@app.command("mcp", epilog=_SUBCOMMAND_HELP_FOOTER)
def mcp_server(
    transport: TransportEnum = typer.Option(TransportEnum.STDIO, help="MCP transport to serve"),
) -> None:
    """Start the compkit MCP server for local agent clients."""

    from .mcp_server import serve_mcp

    serve_mcp(transport=transport.value)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
