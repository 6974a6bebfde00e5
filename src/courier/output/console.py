"""Rich Console factory and theme for courier output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract. In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

COURIER_THEME = Theme(
    {
        "courier.ok": "bold green",
        "courier.error": "bold red",
        "courier.warning": "bold yellow",
        "courier.op": "bold cyan",
        "courier.key": "dim",
        "courier.impl": "bold",
        "courier.kind.request": "green",
        "courier.kind.notification": "blue",
        "courier.kind.behavior": "magenta",
    }
)

_KIND_STYLES: dict[str, str] = {
    "request": "courier.kind.request",
    "notification": "courier.kind.notification",
    "behavior": "courier.kind.behavior",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=COURIER_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_kind(kind: str) -> str:
    """Return the Rich style name for a binding kind."""
    return _KIND_STYLES.get(kind, "")
