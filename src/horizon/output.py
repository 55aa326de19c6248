"""Rich renderers for ServiceResult in human output mode.

Each renderer writes to a Console backed by a StringIO buffer; the caller
gets the text back through :func:`render_result`. In non-TTY environments
(tests, pipes) Rich drops the color codes on its own.

Renderers are dispatched by ``result.op``. Unknown ops fall through to a
generic key-value renderer.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import datetime
from io import StringIO
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

if TYPE_CHECKING:
    from horizon.result import ServiceResult

HORIZON_THEME = Theme(
    {
        "horizon.ok": "bold green",
        "horizon.error": "bold red",
        "horizon.op": "bold cyan",
        "horizon.key": "dim",
        "horizon.name": "bold blue",
        "horizon.status.running": "green",
        "horizon.status.paused": "yellow",
        "horizon.status.terminating": "red",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    return Console(
        file=StringIO(),
        theme=HORIZON_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render *result* to plain or styled text."""
    console = create_console()
    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)
    return get_output(console).rstrip("\n")


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(
        Text("OK", style="horizon.ok"), Text(f": {result.op}", style="horizon.op"), sep=""
    )


def _field(console: Console, key: str, value: Any) -> None:
    if isinstance(value, (dict, list)):
        value = json.dumps(value, separators=(",", ":"), default=str)
    console.print(Text(f"  {key}: ", style="horizon.key"), Text(str(value)), sep="")


_STATUS_STYLES = {"running", "paused", "terminating"}


def _status(value: Any) -> Text:
    status = str(value or "")
    return Text(status, style=f"horizon.status.{status}" if status in _STATUS_STYLES else "")


def _queues(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ",".join(str(q) for q in value)
    return str(value or "")


def _timestamp(value: Any) -> str:
    if not isinstance(value, (int, float)):
        return ""
    return datetime.fromtimestamp(value).strftime("%Y-%m-%d %H:%M:%S")


def _table(*columns: str) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    for column in columns:
        table.add_column(column)
    return table


# ── Renderers ─────────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(
        Text("ERROR", style="horizon.error"),
        Text(f": {result.op}", style="horizon.op"),
        Text(f": {msg}"),
        sep="",
    )
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for key, value in err.detail.items():
            console.print(Text(f"    {key}: {value}"))


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


def _render_masters(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    masters = result.data.get("masters", [])
    if masters:
        table = _table("Name", "PID", "Status", "Updated")
        for row in masters:
            table.add_row(
                Text(str(row.get("name", "")), style="horizon.name"),
                str(row.get("pid") or ""),
                _status(row.get("status")),
                _timestamp(row.get("updated_at")),
            )
        console.print(table)
    console.print(f"{result.data.get('count', len(masters))} masters")


def _render_supervisors(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    supervisors = result.data.get("supervisors", [])
    if supervisors:
        columns = ["Name", "Master", "Status", "Queues"]
        if verbose:
            columns.append("Options")
        table = _table(*columns)
        for row in supervisors:
            options = row.get("options") or {}
            cells: list[Any] = [
                Text(str(row.get("name", "")), style="horizon.name"),
                str(row.get("master", "")),
                _status(row.get("status")),
                _queues(options.get("queue")),
            ]
            if verbose:
                cells.append(json.dumps(options, separators=(",", ":"), default=str))
            table.add_row(*cells)
        console.print(table)
    console.print(f"{result.data.get('count', len(supervisors))} supervisors")


def _render_snapshot(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    queues = result.data.get("queues", [])
    if queues:
        table = _table("Queue", "Throughput", "Runtime (ms)")
        for row in queues:
            table.add_row(
                str(row.get("queue", "")),
                str(row.get("throughput", 0)),
                f"{float(row.get('runtime', 0.0)):.2f}",
            )
        console.print(table)
    console.print(f"{len(queues)} queues measured")


_OP_RENDERERS: dict[str, Callable[..., None]] = {
    "list": _render_masters,
    "supervisors": _render_supervisors,
    "snapshot": _render_snapshot,
}
