"""Message base types and the lookup identity of a request.

A request class declares its response type through its generic base
(``class Ping(Request[str])``). That declaration is read once per class
and combined with the concrete request type into a :class:`RequestKey`,
the key every handler and behavior lookup uses.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Any, TypeVar, get_args, get_origin


class Request[TResponse]:
    """Base class for requests handled by exactly one handler.

    Subclasses are usually frozen dataclasses::

        @dataclass(frozen=True)
        class GetUser(Request[User]):
            user_id: int
    """

    __slots__ = ()


class Notification:
    """Base class for notifications broadcast to zero or more handlers."""

    __slots__ = ()


@dataclass(frozen=True, slots=True)
class RequestKey:
    """Lookup identity of a request: concrete request type + declared response type."""

    request_type: type
    response_type: Any

    def __str__(self) -> str:
        return f"{type_name(self.request_type)} -> {type_name(self.response_type)}"

    @classmethod
    def for_request_type(cls, request_type: type) -> RequestKey:
        """Build the key for *request_type* from its declared response type."""
        return cls(request_type, response_type_of(request_type))


def type_name(tp: Any) -> str:
    """Short human-readable name for a class or typing construct."""
    if isinstance(tp, type) and get_origin(tp) is None:
        return tp.__qualname__
    return repr(tp).replace("typing.", "")


def full_type_name(tp: Any) -> str:
    """Module-qualified name, used in diagnostics."""
    if isinstance(tp, type) and get_origin(tp) is None:
        return f"{tp.__module__}.{tp.__qualname__}"
    return repr(tp)


def generic_arguments(cls: type, target: type) -> tuple[Any, ...] | None:
    """Return the arguments *cls* binds to the generic base *target*.

    Walks the class hierarchy, substituting type variables introduced by
    intermediate generic classes. Returns ``()`` when *target* is
    inherited unparameterized and ``None`` when *cls* does not derive
    from *target* at all. Unbound parameters come back as ``TypeVar``.
    """
    bases = cls.__dict__.get("__orig_bases__", cls.__bases__)
    for base in bases:
        origin = get_origin(base)
        if origin is None:
            if base is target:
                return ()
            if isinstance(base, type) and issubclass(base, target):
                found = generic_arguments(base, target)
                if found is not None:
                    return found
            continue

        args = get_args(base)
        if origin is target:
            return args
        if not (isinstance(origin, type) and issubclass(origin, target)):
            continue

        inner = generic_arguments(origin, target)
        if inner is None:
            continue
        mapping = dict(zip(getattr(origin, "__parameters__", ()), args, strict=False))
        return tuple(_substitute(a, mapping) for a in inner)
    return None


def _substitute(arg: Any, mapping: dict[Any, Any]) -> Any:
    """Replace type variables in *arg*, including inside aliases like ``list[T]``."""
    if isinstance(arg, TypeVar):
        return mapping.get(arg, arg)
    params = getattr(arg, "__parameters__", ())
    if params and get_origin(arg) is not None:
        return arg[tuple(mapping.get(p, p) for p in params)]
    return arg


def is_unbound(arg: Any) -> bool:
    """True for a generic argument left open (a type variable or ``Any``)."""
    return arg is Any or isinstance(arg, TypeVar)


def is_concrete(args: tuple[Any, ...] | None) -> bool:
    """True when every generic argument is bound to a real type."""
    if not args:
        return False
    return not any(is_unbound(a) for a in args)


@functools.cache
def response_type_of(request_type: type) -> Any:
    """Return the response type *request_type* declares via ``Request[T]``.

    Raises:
        TypeError: If *request_type* is not a request class or leaves
            the response type unbound.
    """
    if not (isinstance(request_type, type) and issubclass(request_type, Request)):
        msg = f"{type_name(request_type)} is not a Request subclass"
        raise TypeError(msg)
    args = generic_arguments(request_type, Request)
    if not args or isinstance(args[0], TypeVar):
        msg = (
            f"{type_name(request_type)} does not declare a response type; "
            f"derive from Request[ResponseType]"
        )
        raise TypeError(msg)
    return args[0]
