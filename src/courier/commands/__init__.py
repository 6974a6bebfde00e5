"""Subcommand modules for courier.

Provides register_commands() which uses deferred imports to keep
``courier --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from courier.commands.handlers import handlers

    cli.add_command(handlers)
