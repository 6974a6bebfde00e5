"""Command: list handler and behavior bindings."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from courier.commands._base import CourierCommand

if TYPE_CHECKING:
    from courier.commands._context import AppContext


@click.command(
    cls=CourierCommand,
    examples="""\
  courier handlers
  courier handlers --module app.handlers
  courier handlers -m app.handlers -m app.events --no-plugins
  courier --json handlers""",
)
@click.option(
    "-m",
    "--module",
    "modules",
    multiple=True,
    help="Extra module to scan (repeatable).",
)
@click.option("--no-plugins", is_flag=True, help="Skip plugin discovery.")
@click.pass_obj
def handlers(app: AppContext, modules: tuple[str, ...], no_plugins: bool) -> None:
    """List the bindings the current configuration produces."""
    from courier.services.registry_report import RegistryService

    settings = app.settings
    if no_plugins:
        plugins = settings.plugins.model_copy(update={"enabled": False})
        settings = settings.model_copy(update={"plugins": plugins})

    app.emit(RegistryService(settings).list_handlers(modules))
