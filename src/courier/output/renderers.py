"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from courier.output.console import create_console, get_output, style_for_kind

if TYPE_CHECKING:
    from rich.console import Console

    from courier.services.result import ServiceResult


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="courier.ok")
    op = Text(f"  {result.op}", style="courier.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    console.print(Text(f"  {key}: ", style="courier.key"), Text(str(value)), end="")
    console.print()


# ── Renderers ─────────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="courier.error")
    op = Text(f"  {result.op}", style="courier.op")
    console.print(label, op, Text(" — "), msg)

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


def _render_bindings(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    data = result.data
    _field(console, "requests", data.get("requests", 0))
    _field(console, "notifications", data.get("notifications", 0))
    _field(console, "behaviors", data.get("behaviors", 0))

    bindings: list[dict[str, Any]] = data.get("bindings", [])
    if not bindings:
        return

    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Kind", no_wrap=True)
    table.add_column("Key")
    table.add_column("Implementation", style="courier.impl")
    if verbose:
        table.add_column("Lifetime", style="dim")

    for binding in bindings:
        kind = str(binding.get("kind", ""))
        row: list[Text | str] = [
            Text(kind, style=style_for_kind(kind)),
            str(binding.get("key", "")),
            str(binding.get("implementation", "")),
        ]
        if verbose:
            row.append(str(binding.get("lifetime", "")))
        table.add_row(*row)

    console.print(table)


_OP_RENDERERS: dict[str, Callable[..., None]] = {
    "list_handlers": _render_bindings,
}
