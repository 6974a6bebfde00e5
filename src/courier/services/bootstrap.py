"""Assemble a Mediator from settings.

Registration order, which is also behavior order from the outside in:
built-in behaviors enabled in ``[pipeline]``, then anything added by the
``configure`` callback, then scanned modules and packages, then plugins.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from courier.behaviors import LoggingBehavior, ResponseValidationBehavior, TracingBehavior
from courier.config.settings import CourierSettings
from courier.dispatch.mediator import Mediator
from courier.registry import HandlerRegistry, RegistryBuilder

if TYPE_CHECKING:
    from courier.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


def build_registry(
    settings: CourierSettings,
    *,
    configure: Callable[[RegistryBuilder], object] | None = None,
    modules: Iterable[str] = (),
    plugin_manager: PluginManager | None = None,
) -> HandlerRegistry:
    """Build a frozen registry from *settings*.

    Args:
        settings: Loaded courier settings.
        configure: Callback for explicit registrations.
        modules: Extra modules to scan on top of ``[registry] modules``.
        plugin_manager: Pre-populated manager; a fresh one is created
            when plugins are enabled and none is given.

    Raises:
        RegistrationError: On conflicting or invalid registrations.
    """
    builder = RegistryBuilder()

    pipeline = settings.pipeline
    if pipeline.tracing:
        builder.add_behavior(TracingBehavior())
    if pipeline.logging:
        builder.add_behavior(LoggingBehavior())
    if pipeline.validate_responses:
        builder.add_behavior(ResponseValidationBehavior(strict=pipeline.strict_validation))

    if configure is not None:
        configure(builder)

    builder.scan_modules([*settings.registry.modules, *modules])
    for package in settings.registry.packages:
        builder.scan_package(package)

    if settings.plugins.enabled:
        pm = plugin_manager
        if pm is None:
            from courier.plugins.manager import PluginManager

            pm = PluginManager()
        if not pm.is_loaded:
            names = pm.discover_and_load(local_dir=settings.plugin_dir())
            logger.debug("Loaded %d plugin(s): %s", len(names), ", ".join(names))
        pm.contribute(builder)

    return builder.build()


def build_mediator(
    settings: CourierSettings | None = None,
    *,
    configure: Callable[[RegistryBuilder], object] | None = None,
    modules: Iterable[str] = (),
    plugin_manager: PluginManager | None = None,
) -> Mediator:
    """Build a Mediator over a registry assembled from *settings*.

    Settings are loaded from the environment and ``courier.toml`` when
    not given.
    """
    if settings is None:
        settings = CourierSettings.load()
    registry = build_registry(
        settings,
        configure=configure,
        modules=modules,
        plugin_manager=plugin_manager,
    )
    return Mediator(registry)
