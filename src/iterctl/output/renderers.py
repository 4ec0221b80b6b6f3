"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). Renderers
are dispatched by ``result.op`` in :func:`render_result`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from iterctl.output.console import create_console, get_output, style_for_mode

if TYPE_CHECKING:
    from rich.console import Console

    from iterctl.services.result import ServiceError, ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Failed sync runs still render the projects that completed before the
    error, followed by the error line.
    """
    console = create_console()
    if result.ok or result.data.get("projects"):
        _OP_RENDERERS[result.op](result, console, verbose=verbose)
    if result.error is not None:
        _render_error(result.op, result.error, console, verbose=verbose)
    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output: the names of created (or planned) iterations."""
    if not result.ok:
        msg = result.error.message if result.error else "unknown error"
        return f"ERROR: {result.op}: {msg}"

    names: list[str] = []
    for project in result.data.get("projects", []):
        for key in ("backfilled", "created", "backfill", "plan"):
            names.extend(f"{project['project']}: {item['name']}" for item in project.get(key, []))
    return "\n".join(names) if names else f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="iter.ok") if result.ok else Text("PARTIAL", style="iter.warning")
    console.print(label, Text(f"  {result.op}", style="iter.op"))


def _field(console: Console, key: str, value: Any) -> None:
    console.print(Text.assemble((f"  {key}: ", "iter.key"), str(value)))


def _project_header(console: Console, project: dict[str, Any]) -> None:
    mode = str(project.get("mode", ""))
    header = Text(f"\n{project['project']}", style="iter.project")
    header.append(f"  [{mode}]", style=style_for_mode(mode))
    if project.get("anchor"):
        header.append(f"  after {project['anchor']}", style="iter.key")
    console.print(header)


def _iteration_table(rows: list[tuple[str, dict[str, Any]]], *, teams: bool = False) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Kind", style="iter.key")
    table.add_column("Name", style="iter.name", no_wrap=True)
    table.add_column("Start", style="iter.date")
    table.add_column("Finish", style="iter.date")
    if teams:
        table.add_column("Teams")
    for kind, row in rows:
        cells = [kind, str(row["name"]), str(row["start_date"]), str(row["finish_date"])]
        if teams:
            assigned = len(row.get("assigned_teams", []))
            failed = row.get("failed_teams", [])
            cells.append(f"{assigned} ok" + (f", {len(failed)} failed" if failed else ""))
        table.add_row(*cells)
    return table


def _render_meta(console: Console, result: ServiceResult) -> None:
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        console.print(f"    {k}: {v}")


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(
    op: str, error: ServiceError, console: Console, *, verbose: bool = False
) -> None:
    line = Text("ERROR", style="iter.error")
    line.append(f"  {op}", style="iter.op")
    line.append(f"  [{error.code}] ", style="iter.key")
    line.append(error.message)
    console.print(line)
    if verbose:
        for key, value in error.detail.items():
            _field(console, key, value)


def _render_failures(console: Console, result: ServiceResult) -> None:
    for failure in result.data.get("failures", []):
        console.print(
            Text.assemble(
                (f"\n{failure['project']}", "iter.project"),
                (f"  {failure['code']}", "iter.error"),
                f"  {failure['message']}",
            )
        )


# ── Operation renderers ───────────────────────────────────────────────


def _render_sync(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "created_count", result.data.get("created_count", 0))
    for project in result.data.get("projects", []):
        _project_header(console, project)
        rows = [("backfill", r) for r in project.get("backfilled", [])]
        rows += [("new", r) for r in project.get("created", [])]
        if rows:
            console.print(_iteration_table(rows, teams=True))
        else:
            console.print("  nothing to create")
        if verbose and project.get("skipped"):
            _field(console, "already present", ", ".join(project["skipped"]))
    _render_failures(console, result)
    if verbose:
        _render_meta(console, result)


def _render_plan(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for project in result.data.get("projects", []):
        _project_header(console, project)
        rows = [("backfill", r) for r in project.get("backfill", [])]
        rows += [("new", r) for r in project.get("plan", [])]
        if rows:
            console.print(_iteration_table(rows))
        else:
            console.print("  calendar is up to date")
        if verbose and project.get("skipped"):
            _field(console, "already present", ", ".join(project["skipped"]))
    _render_failures(console, result)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "sync": _render_sync,
    "plan": _render_plan,
}
