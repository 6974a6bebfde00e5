"""LoggingBehavior — structured start/complete/failure events per request."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

import structlog

from courier.domain.handlers import PipelineBehavior
from courier.domain.messages import type_name

if TYPE_CHECKING:
    from courier.domain.cancellation import CancellationToken
    from courier.domain.handlers import RequestHandlerDelegate


class LoggingBehavior(PipelineBehavior[Any, Any]):
    """Log every request passing through the pipeline.

    Failures are logged and re-raised unchanged.
    """

    def __init__(self, logger_name: str = "courier.requests") -> None:
        self._log = structlog.get_logger(logger_name)

    async def handle(
        self,
        request: Any,
        cancellation: CancellationToken,
        next: RequestHandlerDelegate[Any],  # noqa: A002
    ) -> Any:
        request_name = type_name(type(request))
        self._log.debug("request.started", request=request_name)
        started = time.perf_counter()
        try:
            response = await next()
        except Exception as exc:
            self._log.warning(
                "request.failed",
                request=request_name,
                error=type(exc).__name__,
                detail=str(exc),
                duration_ms=_elapsed_ms(started),
            )
            raise
        self._log.debug(
            "request.completed",
            request=request_name,
            duration_ms=_elapsed_ms(started),
        )
        return response


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)
