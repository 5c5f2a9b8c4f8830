"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched on ``result.op``; unknown ops fall back to a
key-value listing. Text exports are the exception: the artifact is
returned verbatim so it can be piped or pasted without Rich wrapping it.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from ctdata.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from ctdata.services.result import ServiceResult

Renderer = Callable[["ServiceResult", "Console"], None]


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    if result.ok and result.op == "export_text":
        return str(result.data.get("content", ""))

    console = create_console()
    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console)
        if verbose:
            _render_meta(console, result)
    else:
        _render_error(result, console, verbose=verbose)
    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Minimal output for ``--quiet``: the artifact, the file path, or a status word."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} - {msg}"
    if result.op == "export_text":
        return str(result.data.get("content", ""))
    if result.op == "export_file":
        return str(result.data.get("output_file", ""))
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK", style="ct.ok"), Text(f"  {result.op}", style="ct.op"), sep="")


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    style = {"source": "ct.source", "output_file": "ct.path", "stage": "ct.stage"}.get(key, "")
    console.print(Text(f"  {key}: ", style="ct.key"), Text(str(value), style=style), sep="")


def _render_meta(console: Console, result: ServiceResult) -> None:
    if not result.meta:
        return
    console.print(Text("  meta:", style="dim"))
    for key, value in result.meta.items():
        if key == "stages":
            value = " → ".join(value)
        console.print(f"    {key}: {value}", markup=False)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(
        Text("ERROR", style="ct.error"),
        Text(f"  {result.op}", style="ct.op"),
        Text(f" - {msg}"),
        sep="",
    )
    if err is None:
        return

    detail = dict(err.detail)
    for issue in detail.pop("issues", []):
        console.print(f"    {issue['path']}: {issue['message']}", markup=False)
    if detail.get("retryable"):
        console.print(Text("  The store was not changed; retrying may succeed.", style="ct.warning"))
    if verbose and detail:
        console.print(Text("  detail:", style="dim"))
        for key, value in detail.items():
            console.print(f"    {key}: {value}", markup=False)
        _render_meta(console, result)


# ── Operation renderers ───────────────────────────────────────────────


def _render_export_file(result: ServiceResult, console: Console) -> None:
    _status_line(console, result)
    for key in ("source", "output_file", "size"):
        if key in result.data:
            _field(console, key, result.data[key])


def _render_import(result: ServiceResult, console: Console) -> None:
    """Stage, then a per-collection table of merge counts (or record counts on a dry run)."""
    _status_line(console, result)
    d = result.data
    _field(console, "source", d.get("source", ""))
    _field(console, "stage", d.get("stage", ""))

    table = Table(show_header=True, pad_edge=False, expand=False)
    table.add_column("Collection")
    merge = d.get("merge")
    if merge:
        table.add_column("Inserted", style="ct.count", justify="right")
        table.add_column("Updated", style="ct.count", justify="right")
        for name, inserted in merge["inserted"].items():
            table.add_row(name, str(inserted), str(merge["updated"].get(name, 0)))
    else:
        _field(console, "dry_run", True)
        table.add_column("Records", style="ct.count", justify="right")
        state = d.get("state") or {}
        for name, value in state.items():
            if isinstance(value, list):
                table.add_row(name, str(len(value)))
    console.print(table)


def _render_generic(result: ServiceResult, console: Console) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)


_OP_RENDERERS: dict[str, Renderer] = {
    "export_file": _render_export_file,
    "import_text": _render_import,
    "import_bytes": _render_import,
    "import_file": _render_import,
    "commit": _render_import,
}
