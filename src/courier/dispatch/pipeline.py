"""Pipeline composition: fold behaviors around a terminal handler call.

Behaviors are wrapped in reverse registration order, so the first
registered behavior ends up outermost. It runs its pre-handler code
first and its post-handler code last.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from courier.domain.cancellation import CancellationToken
    from courier.domain.handlers import (
        PipelineBehavior,
        RequestHandler,
        RequestHandlerDelegate,
    )


def build_pipeline[TResponse](
    request: Any,
    cancellation: CancellationToken,
    handler: RequestHandler[Any, TResponse],
    behaviors: Sequence[PipelineBehavior[Any, TResponse]] = (),
) -> RequestHandlerDelegate[TResponse]:
    """Compose the per-call chain for *request*.

    Nothing runs until the returned coroutine function is awaited.

    Args:
        request: The request every stage receives.
        cancellation: The token every stage receives.
        handler: Terminal handler, invoked innermost.
        behaviors: Behaviors in registration order (index 0 is outermost).
    """

    async def invoke_handler() -> TResponse:
        return await handler.handle(request, cancellation)

    chain: RequestHandlerDelegate[TResponse] = invoke_handler
    for behavior in reversed(behaviors):
        chain = _wrap(behavior, request, cancellation, chain)
    return chain


def _wrap[TResponse](
    behavior: PipelineBehavior[Any, TResponse],
    request: Any,
    cancellation: CancellationToken,
    next_step: RequestHandlerDelegate[TResponse],
) -> RequestHandlerDelegate[TResponse]:
    """Bind one behavior to the continuation it wraps."""

    async def invoke_behavior() -> TResponse:
        return await behavior.handle(request, cancellation, next_step)

    return invoke_behavior
