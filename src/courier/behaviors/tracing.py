"""TracingBehavior — one telemetry span per dispatched request."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from courier.domain.handlers import PipelineBehavior
from courier.domain.messages import type_name
from courier.services.telemetry import trace_span

if TYPE_CHECKING:
    from courier.domain.cancellation import CancellationToken
    from courier.domain.handlers import RequestHandlerDelegate


class TracingBehavior(PipelineBehavior[Any, Any]):
    """Open a span around the rest of the pipeline. No-op when tracing is off."""

    async def handle(
        self,
        request: Any,
        cancellation: CancellationToken,
        next: RequestHandlerDelegate[Any],  # noqa: A002
    ) -> Any:
        with trace_span(type_name(type(request))) as span:
            if span is not None and cancellation.cancelled:
                span.annotate("cancelled_on_entry", True)
            return await next()
