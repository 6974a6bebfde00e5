"""Tests for module and package scanning."""

from __future__ import annotations

import pytest

from courier import Mediator, RegistrationError, RegistryBuilder
from courier.registry.scanning import discover_classes, load_module, walk_package
from tests.sample_app import handlers as sample_handlers
from tests.sample_app.events import audit
from tests.sample_app.messages import Add, Ping, UserCreated

pytestmark = pytest.mark.anyio


class TestDiscoverClasses:
    def test_finds_concrete_classes_in_definition_order(self) -> None:
        found = [cls.__name__ for cls in discover_classes(sample_handlers)]
        # EchoBase is discovered but closed-generic filtering happens at registration
        assert found == ["PingHandler", "AddHandler", "AppendExclaim", "EchoBase"]

    def test_skips_imported_and_private_classes(self) -> None:
        names = {cls.__name__ for cls in discover_classes(sample_handlers)}
        assert "_PrivateHandler" not in names
        assert "RequestHandler" not in names
        assert "PipelineBehavior" not in names


class TestLoadModule:
    def test_imports_by_dotted_name(self) -> None:
        assert load_module("tests.sample_app.handlers") is sample_handlers

    def test_missing_module_is_registration_error(self) -> None:
        with pytest.raises(RegistrationError, match="Cannot import handler module"):
            load_module("tests.sample_app.does_not_exist")


class TestWalkPackage:
    def test_yields_package_and_submodules(self) -> None:
        names = [m.__name__ for m in walk_package("tests.sample_app")]
        assert names[0] == "tests.sample_app"
        assert set(names) == {
            "tests.sample_app",
            "tests.sample_app.events",
            "tests.sample_app.events.audit",
            "tests.sample_app.handlers",
            "tests.sample_app.messages",
        }

    def test_plain_module_yields_itself(self) -> None:
        assert list(walk_package(audit)) == [audit]


class TestScanModule:
    def test_registers_handlers_and_behaviors(self) -> None:
        registry = RegistryBuilder().scan_module("tests.sample_app.handlers").build()
        assert registry.has_handler(Ping)
        assert registry.has_handler(Add)
        assert [type(b).__name__ for b in registry.resolve_behaviors(Ping, str)] == [
            "AppendExclaim"
        ]

    def test_skips_generic_and_private_handlers(self) -> None:
        registry = RegistryBuilder().scan_module(sample_handlers).build()
        implementations = {b.implementation for b in registry.describe()}
        assert implementations == {"PingHandler", "AddHandler", "AppendExclaim"}

    def test_scanning_twice_is_a_duplicate(self) -> None:
        builder = RegistryBuilder().scan_module(sample_handlers)
        with pytest.raises(RegistrationError, match="already handled"):
            builder.scan_module(sample_handlers)

    def test_unknown_module_name(self) -> None:
        with pytest.raises(RegistrationError, match="nope_not_here"):
            RegistryBuilder().scan_module("nope_not_here")

    def test_scan_modules_accepts_many(self) -> None:
        registry = RegistryBuilder().scan_modules([sample_handlers, audit]).build()
        assert registry.has_handler(Ping)
        assert len(registry.resolve_notification_handlers(UserCreated)) == 1

    async def test_scanned_pipeline_dispatches(self) -> None:
        mediator = Mediator(RegistryBuilder().scan_module(sample_handlers).build())
        assert await mediator.send(Ping()) == "pong!"
        assert await mediator.send(Add(left=2, right=3)) == 5


class TestScanPackage:
    async def test_finds_handlers_in_subpackages(self) -> None:
        audit.AUDIT_LOG.clear()
        registry = RegistryBuilder().scan_package("tests.sample_app").build()

        assert registry.has_handler(Ping)
        await Mediator(registry).publish(UserCreated(user_id=42))
        assert audit.AUDIT_LOG == [42]
