"""Capabilities implemented by registered handlers and behaviors.

Every capability is an async ``handle`` method receiving the message and
the call's :class:`~courier.domain.cancellation.CancellationToken`.
Behaviors additionally receive ``next``, a zero-argument coroutine
function running the remainder of the pipeline.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from courier.domain.cancellation import CancellationToken

type RequestHandlerDelegate[TResponse] = Callable[[], Awaitable[TResponse]]


class RequestHandler[TRequest, TResponse](ABC):
    """Handles one request type and produces its response.

    At most one handler may be registered per (request type, response type).
    """

    @abstractmethod
    async def handle(self, request: TRequest, cancellation: CancellationToken) -> TResponse:
        """Produce the response for *request*."""


class NotificationHandler[TNotification](ABC):
    """Observes one notification type. Any number may be registered."""

    @abstractmethod
    async def handle(self, notification: TNotification, cancellation: CancellationToken) -> None:
        """React to *notification*. Must not mutate it."""


class PipelineBehavior[TRequest, TResponse](ABC):
    """Middleware wrapped around request handling.

    Code before ``await next()`` runs on the way in, code after it on the
    way out. A behavior that never awaits ``next`` short-circuits the
    pipeline: neither inner behaviors nor the handler run.

    Deriving from the bare ``PipelineBehavior`` (or parameterizing it with
    type variables) makes an *open* behavior that wraps every request.
    """

    @abstractmethod
    async def handle(
        self,
        request: TRequest,
        cancellation: CancellationToken,
        next: RequestHandlerDelegate[TResponse],  # noqa: A002
    ) -> TResponse:
        """Run around the rest of the pipeline."""
