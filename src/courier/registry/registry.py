"""Handler registry — registration-time lookup tables for the mediator.

:class:`RegistryBuilder` collects bindings (explicitly, by scanning
modules, or from plugins) and :meth:`RegistryBuilder.build` freezes them
into a :class:`HandlerRegistry`. The frozen registry is read-only and
safe to share between concurrent calls.

Registering a class gives a *transient* binding: a fresh instance is
created on every resolution. Registering an instance gives a *singleton*
binding: that instance is returned every time.

INVARIANT: At most one request handler per (request type, response type).
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType, ModuleType
from typing import Any, Literal

from pydantic import BaseModel

from courier.domain.errors import RegistrationError
from courier.domain.handlers import NotificationHandler, PipelineBehavior, RequestHandler
from courier.domain.messages import (
    Notification,
    RequestKey,
    generic_arguments,
    is_concrete,
    is_unbound,
    type_name,
)

logger = logging.getLogger(__name__)


class Lifetime(StrEnum):
    TRANSIENT = "transient"
    SINGLETON = "singleton"


@dataclass(frozen=True, slots=True)
class Registration:
    """One bound handler or behavior implementation."""

    implementation: type
    instance: Any = None
    scope: RequestKey | None = None

    @property
    def lifetime(self) -> Lifetime:
        return Lifetime.TRANSIENT if self.instance is None else Lifetime.SINGLETON

    @property
    def name(self) -> str:
        return self.implementation.__qualname__

    def resolve(self) -> Any:
        """Return the bound instance, constructing one for transient bindings."""
        if self.instance is not None:
            return self.instance
        return self.implementation()

    def applies_to(self, key: RequestKey) -> bool:
        """For behaviors: whether this binding wraps requests with *key*."""
        return self.scope is None or self.scope == key


class Binding(BaseModel):
    """Read-only description of one registry entry (used by the CLI)."""

    model_config = {"frozen": True}

    kind: Literal["request", "notification", "behavior"]
    key: str
    implementation: str
    lifetime: Lifetime


class HandlerRegistry:
    """Immutable lookup tables consumed by :class:`~courier.Mediator`.

    Built by :meth:`RegistryBuilder.build`; never mutated afterwards.
    """

    def __init__(
        self,
        request_handlers: Mapping[RequestKey, Registration],
        notification_handlers: Mapping[type, Iterable[Registration]],
        behaviors: Iterable[Registration],
    ) -> None:
        self._request_handlers = MappingProxyType(dict(request_handlers))
        self._notification_handlers = MappingProxyType(
            {t: tuple(regs) for t, regs in notification_handlers.items()}
        )
        self._behaviors = tuple(behaviors)
        # Precomputed per handled key; other keys are filtered on demand.
        self._behaviors_by_key = MappingProxyType(
            {key: self._select_behaviors(key) for key in self._request_handlers}
        )

    # ------------------------------------------------------------------
    # Lookup contract
    # ------------------------------------------------------------------

    def resolve_handler(
        self, request_type: type, response_type: Any
    ) -> RequestHandler[Any, Any] | None:
        """Return the handler bound to the pair, or None if there is none."""
        registration = self._request_handlers.get(RequestKey(request_type, response_type))
        if registration is None:
            return None
        return registration.resolve()

    def resolve_behaviors(
        self, request_type: type, response_type: Any
    ) -> tuple[PipelineBehavior[Any, Any], ...]:
        """Return the behaviors wrapping the pair, in registration order."""
        key = RequestKey(request_type, response_type)
        registrations = self._behaviors_by_key.get(key)
        if registrations is None:
            registrations = self._select_behaviors(key)
        return tuple(r.resolve() for r in registrations)

    def resolve_notification_handlers(
        self, notification_type: type
    ) -> tuple[NotificationHandler[Any], ...]:
        """Return every handler bound to *notification_type* (possibly none)."""
        registrations = self._notification_handlers.get(notification_type, ())
        return tuple(r.resolve() for r in registrations)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def has_handler(self, request_type: type) -> bool:
        """Whether a handler is bound for *request_type*'s declared response type."""
        return RequestKey.for_request_type(request_type) in self._request_handlers

    def describe(self) -> list[Binding]:
        """List every binding: request handlers, notification handlers, behaviors."""
        bindings = [
            Binding(kind="request", key=str(key), implementation=reg.name, lifetime=reg.lifetime)
            for key, reg in self._request_handlers.items()
        ]
        for notification_type, registrations in self._notification_handlers.items():
            bindings.extend(
                Binding(
                    kind="notification",
                    key=type_name(notification_type),
                    implementation=reg.name,
                    lifetime=reg.lifetime,
                )
                for reg in registrations
            )
        bindings.extend(
            Binding(
                kind="behavior",
                key=str(reg.scope) if reg.scope is not None else "*",
                implementation=reg.name,
                lifetime=reg.lifetime,
            )
            for reg in self._behaviors
        )
        return bindings

    def _select_behaviors(self, key: RequestKey) -> tuple[Registration, ...]:
        return tuple(b for b in self._behaviors if b.applies_to(key))


class RegistryBuilder:
    """Collects handler and behavior bindings before dispatch starts.

    Usage::

        registry = (
            RegistryBuilder()
            .add_behavior(LoggingBehavior())
            .add_request_handler(PingHandler)
            .scan_module("app.handlers")
            .build()
        )
    """

    def __init__(self) -> None:
        self._request_handlers: dict[RequestKey, Registration] = {}
        self._notification_handlers: dict[type, list[Registration]] = {}
        self._behaviors: list[Registration] = []

    # ------------------------------------------------------------------
    # Explicit registration
    # ------------------------------------------------------------------

    def add_request_handler(
        self, handler: Any, request_type: type | None = None
    ) -> RegistryBuilder:
        """Bind a request handler class or instance.

        The request type is read from the handler's
        ``RequestHandler[TRequest, TResponse]`` base unless given.

        Raises:
            RegistrationError: If the types cannot be determined, disagree
                with the request's declared response type, or the key is
                already handled.
        """
        implementation, instance = _split(handler, RequestHandler)
        args = generic_arguments(implementation, RequestHandler)
        declared = RequestKey(args[0], args[1]) if args and is_concrete(args) else None

        if request_type is None:
            if declared is None:
                msg = (
                    f"Cannot infer the request type handled by {implementation.__qualname__}; "
                    f"derive from RequestHandler[RequestType, ResponseType] or pass request_type"
                )
                raise RegistrationError(msg)
            request_type = declared.request_type

        key = _request_key(request_type)
        if declared is not None and declared != key:
            msg = (
                f"{implementation.__qualname__} handles {declared}, "
                f"but {type_name(key.request_type)} declares {key}"
            )
            raise RegistrationError(msg)

        existing = self._request_handlers.get(key)
        if existing is not None:
            msg = f"{key} is already handled by {existing.name}"
            raise RegistrationError(msg)

        self._request_handlers[key] = Registration(implementation, instance)
        logger.debug("Registered request handler %s for %s", implementation.__qualname__, key)
        return self

    def add_notification_handler(
        self, handler: Any, notification_type: type | None = None
    ) -> RegistryBuilder:
        """Bind a notification handler class or instance. Any number per type."""
        implementation, instance = _split(handler, NotificationHandler)

        if notification_type is None:
            args = generic_arguments(implementation, NotificationHandler)
            if not is_concrete(args):
                msg = (
                    f"Cannot infer the notification type handled by "
                    f"{implementation.__qualname__}; derive from "
                    f"NotificationHandler[NotificationType] or pass notification_type"
                )
                raise RegistrationError(msg)
            assert args is not None
            notification_type = args[0]

        is_notification = isinstance(notification_type, type) and issubclass(
            notification_type, Notification
        )
        if not is_notification:
            msg = f"{type_name(notification_type)} is not a Notification subclass"
            raise RegistrationError(msg)

        self._notification_handlers.setdefault(notification_type, []).append(
            Registration(implementation, instance)
        )
        logger.debug(
            "Registered notification handler %s for %s",
            implementation.__qualname__,
            type_name(notification_type),
        )
        return self

    def add_behavior(self, behavior: Any, request_type: type | None = None) -> RegistryBuilder:
        """Bind a pipeline behavior class or instance.

        Behaviors parameterized with a concrete request type (or given one
        explicitly) wrap only that request. Unparameterized or type-variable
        behaviors are *open* and wrap every request. Either way, behaviors
        run in the order they were added.
        """
        implementation, instance = _split(behavior, PipelineBehavior)

        scope: RequestKey | None = None
        if request_type is not None:
            scope = _request_key(request_type)
        else:
            args = generic_arguments(implementation, PipelineBehavior) or ()
            if args and not is_unbound(args[0]):
                scope = _request_key(args[0])
                response = args[1] if len(args) > 1 else scope.response_type
                if not is_unbound(response) and response != scope.response_type:
                    msg = (
                        f"{implementation.__qualname__} wraps {type_name(args[0])} -> "
                        f"{type_name(args[1])}, but the request declares {scope}"
                    )
                    raise RegistrationError(msg)

        self._behaviors.append(Registration(implementation, instance, scope))
        logger.debug(
            "Registered behavior %s for %s",
            implementation.__qualname__,
            scope if scope is not None else "all requests",
        )
        return self

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def scan_module(self, module: ModuleType | str) -> RegistryBuilder:
        """Register every concrete handler and behavior class defined in *module*.

        Classes are registered transient, in definition order. Imported
        names, abstract classes and ``_``-prefixed classes are skipped.
        """
        from courier.registry.scanning import discover_classes, load_module

        mod = load_module(module) if isinstance(module, str) else module
        count = 0
        for cls in discover_classes(mod):
            if issubclass(cls, RequestHandler) and _is_closed(cls, RequestHandler):
                self.add_request_handler(cls)
                count += 1
            if issubclass(cls, NotificationHandler) and _is_closed(cls, NotificationHandler):
                self.add_notification_handler(cls)
                count += 1
            if issubclass(cls, PipelineBehavior):
                self.add_behavior(cls)
                count += 1
        logger.debug("Scanned %s: %d binding(s)", mod.__name__, count)
        return self

    def scan_modules(self, modules: Iterable[ModuleType | str]) -> RegistryBuilder:
        for module in modules:
            self.scan_module(module)
        return self

    def scan_package(self, package: ModuleType | str) -> RegistryBuilder:
        """Scan *package* and every submodule below it."""
        from courier.registry.scanning import walk_package

        for module in walk_package(package):
            self.scan_module(module)
        return self

    # ------------------------------------------------------------------
    # Freeze
    # ------------------------------------------------------------------

    def build(self) -> HandlerRegistry:
        """Freeze the collected bindings into a read-only registry."""
        registry = HandlerRegistry(
            self._request_handlers,
            self._notification_handlers,
            self._behaviors,
        )
        logger.debug(
            "Built registry: %d request handler(s), %d notification type(s), %d behavior(s)",
            len(self._request_handlers),
            len(self._notification_handlers),
            len(self._behaviors),
        )
        return registry


def _split(obj: Any, capability: type) -> tuple[type, Any]:
    """Return ``(implementation class, instance or None)`` for a registration."""
    if isinstance(obj, type):
        if not issubclass(obj, capability):
            msg = f"{obj.__qualname__} is not a {capability.__name__}"
            raise RegistrationError(msg)
        if inspect.isabstract(obj):
            msg = f"{obj.__qualname__} is abstract and cannot be instantiated"
            raise RegistrationError(msg)
        if not _constructible(obj):
            msg = (
                f"{obj.__qualname__} cannot be constructed without arguments; "
                f"register an instance instead"
            )
            raise RegistrationError(msg)
        return obj, None
    if isinstance(obj, capability) or callable(getattr(obj, "handle", None)):
        return type(obj), obj
    msg = f"{obj!r} is not a {capability.__name__} (no handle() method)"
    raise RegistrationError(msg)


def _constructible(cls: type) -> bool:
    """Whether transient resolution can call ``cls()``."""
    try:
        signature = inspect.signature(cls)
    except (TypeError, ValueError):
        return True  # no introspectable signature; resolution will tell
    try:
        signature.bind()
    except TypeError:
        return False
    return True


def _is_closed(cls: type, capability: type) -> bool:
    """Whether *cls* binds every type parameter of *capability*."""
    if is_concrete(generic_arguments(cls, capability)):
        return True
    logger.debug("Skipping generic %s: type parameters are unbound", cls.__qualname__)
    return False


def _request_key(request_type: Any) -> RequestKey:
    try:
        return RequestKey.for_request_type(request_type)
    except TypeError as exc:
        raise RegistrationError(str(exc)) from exc
