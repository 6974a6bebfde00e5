"""Module and package scanning for handler/behavior classes.

Only classes *defined* in a scanned module are considered, so a module
that imports a handler from elsewhere does not register it twice.
"""

from __future__ import annotations

import importlib
import inspect
import logging
import pkgutil
from collections.abc import Iterator
from types import ModuleType

from courier.domain.errors import RegistrationError
from courier.domain.handlers import NotificationHandler, PipelineBehavior, RequestHandler

logger = logging.getLogger(__name__)

CAPABILITIES: tuple[type, ...] = (RequestHandler, NotificationHandler, PipelineBehavior)


def load_module(name: str) -> ModuleType:
    """Import *name*, reporting failures as :class:`RegistrationError`."""
    try:
        return importlib.import_module(name)
    except ImportError as exc:
        msg = f"Cannot import handler module {name!r}: {exc}"
        raise RegistrationError(msg) from exc


def discover_classes(module: ModuleType) -> Iterator[type]:
    """Yield concrete capability classes defined in *module*, in definition order."""
    for attr_name, obj in vars(module).items():
        if not inspect.isclass(obj) or attr_name.startswith("_"):
            continue
        if obj.__module__ != module.__name__:
            continue  # skip imported classes
        if obj in CAPABILITIES or not issubclass(obj, CAPABILITIES):
            continue
        if inspect.isabstract(obj):
            logger.debug("Skipping abstract %s.%s", module.__name__, obj.__qualname__)
            continue
        yield obj


def walk_package(package: ModuleType | str) -> Iterator[ModuleType]:
    """Yield *package* and every submodule below it, importing as it goes."""
    pkg = load_module(package) if isinstance(package, str) else package
    yield pkg
    search_path = getattr(pkg, "__path__", None)
    if search_path is None:
        return  # plain module, nothing below it
    for info in pkgutil.walk_packages(search_path, prefix=f"{pkg.__name__}."):
        yield load_module(info.name)
