"""Errors raised by courier itself.

Failures raised by handlers and behaviors during ``send`` are *not*
represented here: they reach the caller exactly as raised.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any


class CourierError(Exception):
    """Base class for errors originating in courier."""


class HandlerNotFoundError(CourierError, LookupError):
    """No request handler is bound for a (request type, response type) pair."""

    def __init__(self, request_type: type, response_type: Any, handler_interface: str) -> None:
        from courier.domain.messages import full_type_name

        self.request_type = request_type
        self.response_type = response_type
        self.handler_interface = handler_interface
        super().__init__(
            f"No handler registered for request of type {full_type_name(request_type)} "
            f"(expected interface: {handler_interface})."
        )


class OperationCancelledError(CourierError):
    """Cooperative cancellation was observed through a CancellationToken."""

    def __init__(self, reason: str | None = None) -> None:
        self.reason = reason
        super().__init__(f"Operation cancelled: {reason}" if reason else "Operation cancelled")


class RegistrationError(CourierError, ValueError):
    """A handler or behavior could not be registered."""


class ResponseValidationError(CourierError):
    """A handler's response does not match the request's declared response type."""

    def __init__(self, request_type: type, response_type: Any, detail: str) -> None:
        from courier.domain.messages import type_name

        self.request_type = request_type
        self.response_type = response_type
        super().__init__(
            f"Response for {type_name(request_type)} is not a valid "
            f"{type_name(response_type)}: {detail}"
        )


@dataclass(frozen=True, slots=True)
class NotificationFailure:
    """One notification handler's failure during a publish."""

    handler: str
    error: Exception


class NotificationPublishError(ExceptionGroup):  # noqa: N818
    """One or more notification handlers failed during a single publish.

    ``exceptions`` holds every handler's original error, so ``except*``
    matches on them directly. ``failures`` pairs each error with the
    handler that raised it and ``succeeded`` names the handlers that
    completed normally.
    """

    notification_type: type
    failures: tuple[NotificationFailure, ...]
    succeeded: tuple[str, ...]

    def __new__(
        cls,
        notification_type: type,
        failures: Sequence[NotificationFailure],
        succeeded: Sequence[str] = (),
    ) -> NotificationPublishError:
        names = ", ".join(f.handler for f in failures)
        message = (
            f"{len(failures)} handler(s) failed while publishing "
            f"{notification_type.__qualname__}: {names}"
        )
        obj = super().__new__(cls, message, [f.error for f in failures])
        obj.notification_type = notification_type
        obj.failures = tuple(failures)
        obj.succeeded = tuple(succeeded)
        return obj

    def __init__(
        self,
        notification_type: type,
        failures: Sequence[NotificationFailure],
        succeeded: Sequence[str] = (),
    ) -> None:
        super().__init__(self.message, list(self.exceptions))

    def derive(self, excs: Sequence[Exception]) -> ExceptionGroup[Exception]:
        return ExceptionGroup(self.message, excs)

    def errors_for(self, handler: str) -> list[Exception]:
        """Return the errors raised by the handler named *handler*."""
        return [f.error for f in self.failures if f.handler == handler]
