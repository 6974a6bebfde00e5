"""Tests for request identity: declared response types and RequestKey."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pytest

from courier import Notification, Request, RequestHandler, RequestKey
from courier.domain.messages import (
    generic_arguments,
    is_concrete,
    response_type_of,
    type_name,
)


@dataclass(frozen=True)
class GetUser(Request[dict[str, Any]]):
    user_id: int


@dataclass(frozen=True)
class GetAdmin(GetUser):
    """Inherits GetUser's declared response type."""


class Query[T](Request[list[T]]):
    pass


class ListNames(Query[str]):
    pass


class Unbound[T](Request[T]):
    pass


class Ping(Request[str]):
    pass


class TestResponseTypeOf:
    def test_reads_declared_response(self) -> None:
        assert response_type_of(Ping) is str

    def test_parameterized_response(self) -> None:
        assert response_type_of(GetUser) == dict[str, Any]

    def test_inherited_from_concrete_parent(self) -> None:
        assert response_type_of(GetAdmin) == dict[str, Any]

    def test_substitutes_through_generic_intermediate(self) -> None:
        assert response_type_of(ListNames) == list[str]

    def test_unbound_response_rejected(self) -> None:
        with pytest.raises(TypeError, match="does not declare a response type"):
            response_type_of(Unbound)

    def test_non_request_rejected(self) -> None:
        with pytest.raises(TypeError, match="not a Request subclass"):
            response_type_of(int)

    def test_notification_is_not_a_request(self) -> None:
        class Happened(Notification):
            pass

        with pytest.raises(TypeError):
            response_type_of(Happened)


class TestGenericArguments:
    def test_direct_base(self) -> None:
        class H(RequestHandler[Ping, str]):
            async def handle(self, request: Ping, cancellation: Any) -> str:
                return ""

        assert generic_arguments(H, RequestHandler) == (Ping, str)

    def test_unrelated_target(self) -> None:
        assert generic_arguments(Ping, RequestHandler) is None

    def test_unparameterized_base(self) -> None:
        class Raw(RequestHandler):  # type: ignore[type-arg]
            async def handle(self, request: Any, cancellation: Any) -> Any:
                return None

        assert generic_arguments(Raw, RequestHandler) == ()

    def test_is_concrete(self) -> None:
        assert is_concrete((Ping, str))
        assert not is_concrete(())
        assert not is_concrete(None)
        assert not is_concrete((Ping, Any))


class TestRequestKey:
    def test_equal_keys_hash_equal(self) -> None:
        assert RequestKey(Ping, str) == RequestKey.for_request_type(Ping)
        assert hash(RequestKey(Ping, str)) == hash(RequestKey(Ping, str))

    def test_response_type_is_part_of_identity(self) -> None:
        assert RequestKey(Ping, str) != RequestKey(Ping, int)

    def test_str(self) -> None:
        assert str(RequestKey(Ping, str)) == "Ping -> str"

    def test_type_name_for_generic_alias(self) -> None:
        assert type_name(list[int]) == "list[int]"
