"""Pluggy hook specifications for courier registration plugins.

Plugins contribute handlers and behaviors to a RegistryBuilder before it
is frozen. One setup-time hook; nothing is dispatched through pluggy at
request time.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from courier.registry import RegistryBuilder

PROJECT_NAME = "courier"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class CourierHookSpec:
    """Hook specifications for the courier plugin system."""

    @hookspec
    def courier_register(self, builder: RegistryBuilder) -> None:
        """Register handlers and behaviors on *builder*.

        Called once per plugin while the registry is being assembled.
        """
