"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from sambactl.output.console import create_console, get_output

if TYPE_CHECKING:
    from collections.abc import Callable

    from rich.console import Console

    from sambactl.services.result import ServiceResult

    Renderer = Callable[..., None]


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    items = result.data.get("items")
    if isinstance(items, list):
        return "\n".join(str(item) for item in items)
    if "version" in result.data:
        return str(result.data["version"])

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK/ERROR status line."""
    label = Text("OK", style="samba.ok")
    op = Text(f"  {result.op}", style="samba.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="samba.key")
    if isinstance(value, (dict, list)):
        v = Text(_json.dumps(value, separators=(",", ":")))
    elif key in ("name", "host"):
        v = Text(str(value), style="samba.name")
    elif key in ("dn", "distinguishedName") or str(value).upper().startswith("CN="):
        v = Text(str(value), style="samba.dn")
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))

    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(
    console: Console,
    span_data: dict[str, Any],
    indent: int = 4,
) -> None:
    """Render a hierarchical span tree with color-coded timing."""
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)

    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = Text(prefix)
    line.append(f"{duration:>8.2f}ms", style=style)
    line.append(f"  {name}")
    annotations = span_data.get("annotations") or {}
    if annotations:
        extras = ", ".join(f"{ak}={av}" for ak, av in annotations.items())
        line.append(f"  ({extras})")

    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="samba.error")
    op = Text(f"  {result.op}", style="samba.op")
    sep = Text(" — ")
    code = Text(f" [{err.code}]", style="samba.code") if err else Text("")
    console.print(label, op, sep, Text(msg), code)

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))


# ── Directory renderers ───────────────────────────────────────────────


def _render_name_list(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render list_objects / group_members as a one-column table."""
    d = result.data
    items = d.get("items", [])
    heading = str(d.get("kind") or d.get("group") or "name")

    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column(heading.title(), style="samba.name")
    for item in items:
        table.add_row(str(item))
    console.print(table)
    console.print(f"\n{d.get('count', len(items))} items")
    if verbose:
        _render_meta(console, result)


def _render_attributes(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render show_object as a two-column attribute table."""
    d = result.data
    _status_line(console, result)
    _field(console, "name", d.get("name", "?"))

    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Attribute", style="samba.key", no_wrap=True)
    table.add_column("Value")
    for key, value in d.get("attributes", {}).items():
        if isinstance(value, list):
            table.add_row(key, "\n".join(str(v) for v in value))
        else:
            table.add_row(key, str(value))
    console.print(table)
    if verbose:
        _render_meta(console, result)


def _render_fsmo(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render fsmo_roles as role → owner."""
    _status_line(console, result)
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Role", style="samba.op", no_wrap=True)
    table.add_column("Owner", style="samba.dn")
    for role, owner in result.data.get("roles", {}).items():
        table.add_row(role, str(owner))
    console.print(table)
    if verbose:
        _render_meta(console, result)


def _render_version(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "version", result.data.get("version", "unknown"))
    features = result.data.get("features", [])
    if features and verbose:
        console.print(Text("  features:", style="samba.key"))
        for feature in features:
            console.print(f"    {feature}")
    if verbose:
        _render_meta(console, result)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Renderer] = {
    "list_objects": _render_name_list,
    "group_members": _render_name_list,
    "show_object": _render_attributes,
    "fsmo_roles": _render_fsmo,
    "version": _render_version,
    "ping": _render_generic,
}
