"""Mediator — the public entry point for sending requests and publishing notifications.

INVARIANT: The mediator is a pure routing layer. It never logs, retries
or swallows handler failures; recovery policy belongs in behaviors
(for requests) or in the caller (for notifications).
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from courier.dispatch.pipeline import build_pipeline
from courier.domain.cancellation import CancellationToken
from courier.domain.errors import (
    HandlerNotFoundError,
    NotificationFailure,
    NotificationPublishError,
    OperationCancelledError,
)
from courier.domain.messages import Notification, Request, response_type_of, type_name

if TYPE_CHECKING:
    from courier.registry import HandlerRegistry


class Mediator:
    """Routes requests to one handler and notifications to all of theirs.

    Safe for concurrent use: the only shared state is the registry, which
    is immutable once built. Each call composes its own pipeline.

    Usage::

        registry = RegistryBuilder().scan_module(app.handlers).build()
        mediator = Mediator(registry)
        answer = await mediator.send(Ping())
        await mediator.publish(UserCreated(user_id=1))
    """

    def __init__(self, registry: HandlerRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> HandlerRegistry:
        return self._registry

    async def send[TResponse](
        self,
        request: Request[TResponse],
        cancellation: CancellationToken | None = None,
    ) -> TResponse:
        """Run *request* through its behaviors and handler; return the response.

        Raises:
            TypeError: If *request* is None or does not declare a response type.
            HandlerNotFoundError: If no handler is bound for the request's
                (request type, response type). No behavior runs.
            Exception: Anything a behavior or the handler raises, unmodified.
        """
        if request is None:
            msg = "request must not be None"
            raise TypeError(msg)

        request_type = type(request)
        response_type = response_type_of(request_type)

        handler = self._registry.resolve_handler(request_type, response_type)
        if handler is None:
            raise HandlerNotFoundError(
                request_type,
                response_type,
                handler_interface(request_type, response_type),
            )
        behaviors = self._registry.resolve_behaviors(request_type, response_type)

        token = cancellation if cancellation is not None else CancellationToken()
        chain = build_pipeline(request, token, handler, behaviors)
        return await chain()

    async def publish(
        self,
        notification: Notification,
        cancellation: CancellationToken | None = None,
    ) -> None:
        """Deliver *notification* to every bound handler concurrently.

        All handlers run to completion even when some of them fail.
        Publishing to a type with no handlers succeeds without doing anything.
        A handler that cancels itself counts as a failed handler.

        Raises:
            TypeError: If *notification* is None.
            NotificationPublishError: If at least one handler failed; carries
                every handler's error.
            BaseException: A non-``Exception`` raised by a handler (or the
                ``CancelledError`` of a publish that is itself being
                cancelled), after the join, with the other failures
                attached as notes.
        """
        if notification is None:
            msg = "notification must not be None"
            raise TypeError(msg)

        notification_type = type(notification)
        handlers = self._registry.resolve_notification_handlers(notification_type)
        if not handlers:
            return

        token = cancellation if cancellation is not None else CancellationToken()
        outcomes = await asyncio.gather(
            *(h.handle(notification, token) for h in handlers),
            return_exceptions=True,
        )

        failures: list[NotificationFailure] = []
        succeeded: list[str] = []
        escalated: BaseException | None = None
        for handler, outcome in zip(handlers, outcomes, strict=True):
            name = type(handler).__qualname__
            if isinstance(outcome, asyncio.CancelledError) and not _publisher_cancelling():
                # The handler cancelled itself; nobody asked this publish to stop.
                error = OperationCancelledError(f"{name} was cancelled")
                error.__cause__ = outcome
                failures.append(NotificationFailure(handler=name, error=error))
            elif isinstance(outcome, Exception):
                failures.append(NotificationFailure(handler=name, error=outcome))
            elif isinstance(outcome, BaseException):
                escalated = escalated or outcome
            else:
                succeeded.append(name)

        if escalated is not None:
            for failure in failures:
                escalated.add_note(
                    f"notification handler {failure.handler} also failed: {failure.error!r}"
                )
            raise escalated
        if failures:
            raise NotificationPublishError(notification_type, failures, succeeded)


def _publisher_cancelling() -> bool:
    task = asyncio.current_task()
    return task is not None and task.cancelling() > 0


def handler_interface(request_type: type, response_type: Any) -> str:
    """Describe the capability a handler for this pair must implement."""
    return f"RequestHandler[{type_name(request_type)}, {type_name(response_type)}]"
