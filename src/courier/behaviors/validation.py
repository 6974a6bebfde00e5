"""ResponseValidationBehavior — check responses against the declared response type.

Uses pydantic ``TypeAdapter`` so that containers, unions, dataclasses and
models are checked structurally. Types pydantic has no schema for fall
back to an ``isinstance`` check.
"""

from __future__ import annotations

import functools
from typing import TYPE_CHECKING, Any

from pydantic import ConfigDict, PydanticSchemaGenerationError, TypeAdapter, ValidationError

from courier.domain.errors import ResponseValidationError
from courier.domain.handlers import PipelineBehavior
from courier.domain.messages import response_type_of

if TYPE_CHECKING:
    from courier.domain.cancellation import CancellationToken
    from courier.domain.handlers import RequestHandlerDelegate


@functools.cache
def _adapter_for(response_type: Any) -> TypeAdapter[Any]:
    try:
        return TypeAdapter(response_type)
    except PydanticSchemaGenerationError:
        return TypeAdapter(response_type, config=ConfigDict(arbitrary_types_allowed=True))


class ResponseValidationBehavior(PipelineBehavior[Any, Any]):
    """Reject responses that do not match the request's declared response type.

    The handler's response is returned unchanged on success; validation
    never coerces it.

    Args:
        strict: Use pydantic strict mode (no ``"1"`` -> ``1`` coercion
            accepted as valid). Defaults to True.
    """

    def __init__(self, *, strict: bool = True) -> None:
        self._strict = strict

    async def handle(
        self,
        request: Any,
        cancellation: CancellationToken,
        next: RequestHandlerDelegate[Any],  # noqa: A002
    ) -> Any:
        response = await next()
        request_type = type(request)
        response_type = response_type_of(request_type)
        try:
            _adapter_for(response_type).validate_python(response, strict=self._strict)
        except ValidationError as exc:
            first = exc.errors()[0]["msg"] if exc.error_count() else str(exc)
            detail = f"{exc.error_count()} validation error(s); {first}"
            raise ResponseValidationError(request_type, response_type, detail) from exc
        return response
