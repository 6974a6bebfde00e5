"""Tests for build_registry / build_mediator and RegistryService."""

from __future__ import annotations

from pathlib import Path

import pytest

from courier import RegistrationError, RegistryBuilder
from courier.behaviors import LoggingBehavior, ResponseValidationBehavior, TracingBehavior
from courier.config.settings import CourierSettings
from courier.plugins import PluginManager, hookimpl
from courier.services.bootstrap import build_mediator, build_registry
from courier.services.registry_report import RegistryService
from tests.sample_app import handlers as sample_handlers
from tests.sample_app.events import audit
from tests.sample_app.messages import Add, Ping, UserCreated

pytestmark = pytest.mark.anyio


def settings(**overrides: object) -> CourierSettings:
    overrides.setdefault("plugins", {"enabled": False})
    return CourierSettings.load(**overrides)


class SamplePlugin:
    @hookimpl
    def courier_register(self, builder: RegistryBuilder) -> None:
        builder.add_notification_handler(audit.AuditUserCreated)


class TestBuildRegistry:
    def test_default_pipeline_is_logging_only(self) -> None:
        registry = build_registry(settings())
        behaviors = registry.resolve_behaviors(Ping, str)
        assert [type(b) for b in behaviors] == [LoggingBehavior]

    def test_builtin_behavior_order(self) -> None:
        registry = build_registry(
            settings(pipeline={"tracing": True, "logging": True, "validate_responses": True})
        )
        behaviors = registry.resolve_behaviors(Ping, str)
        assert [type(b) for b in behaviors] == [
            TracingBehavior,
            LoggingBehavior,
            ResponseValidationBehavior,
        ]

    def test_builtins_precede_configured_and_scanned_behaviors(self) -> None:
        registry = build_registry(
            settings(pipeline={"logging": True}),
            modules=["tests.sample_app.handlers"],
        )
        names = [type(b).__name__ for b in registry.resolve_behaviors(Ping, str)]
        assert names == ["LoggingBehavior", "AppendExclaim"]

    def test_scans_configured_modules_and_packages(self) -> None:
        registry = build_registry(
            settings(registry={"modules": ["tests.sample_app.handlers"]}),
        )
        assert registry.has_handler(Ping)
        assert registry.resolve_notification_handlers(UserCreated) == ()

        registry = build_registry(settings(registry={"packages": ["tests.sample_app"]}))
        assert registry.has_handler(Add)
        assert len(registry.resolve_notification_handlers(UserCreated)) == 1

    def test_configure_callback_runs_before_scanning(self) -> None:
        calls: list[int] = []

        def configure(builder: RegistryBuilder) -> None:
            calls.append(1)
            builder.add_request_handler(sample_handlers.PingHandler)

        with pytest.raises(RegistrationError, match="already handled by PingHandler"):
            build_registry(settings(), configure=configure, modules=["tests.sample_app.handlers"])
        assert calls == [1]

    def test_plugins_contribute_when_enabled(self, tmp_path: Path) -> None:
        pm = PluginManager()
        pm.register_plugin(SamplePlugin())
        registry = build_registry(
            settings(plugins={"enabled": True}, project_root=tmp_path),
            plugin_manager=pm,
        )
        assert pm.is_loaded
        assert len(registry.resolve_notification_handlers(UserCreated)) == 1

    def test_plugins_ignored_when_disabled(self) -> None:
        pm = PluginManager()
        pm.register_plugin(SamplePlugin())
        registry = build_registry(settings(), plugin_manager=pm)
        assert registry.resolve_notification_handlers(UserCreated) == ()


class TestBuildMediator:
    async def test_end_to_end_send_and_publish(self) -> None:
        audit.AUDIT_LOG.clear()
        mediator = build_mediator(
            settings(pipeline={"logging": False, "validate_responses": True}),
            modules=["tests.sample_app.handlers", "tests.sample_app.events.audit"],
        )

        assert await mediator.send(Ping()) == "pong!"
        assert await mediator.send(Add(left=1, right=1)) == 2
        await mediator.publish(UserCreated(user_id=9))
        assert audit.AUDIT_LOG == [9]

    async def test_loads_settings_from_courier_toml(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "courier.toml").write_text(
            '[registry]\nmodules = ["tests.sample_app.handlers"]\n\n'
            "[plugins]\nenabled = false\n",
            encoding="utf-8",
        )
        monkeypatch.chdir(tmp_path)

        mediator = build_mediator()
        assert await mediator.send(Ping()) == "pong!"


class TestRegistryService:
    def test_lists_bindings(self) -> None:
        result = RegistryService(settings()).list_handlers(["tests.sample_app.handlers"])

        assert result.ok
        assert result.op == "list_handlers"
        assert result.data["requests"] == 2
        assert result.data["notifications"] == 0
        assert result.data["behaviors"] == 2
        assert result.data["count"] == 4
        assert {b["implementation"] for b in result.data["bindings"]} == {
            "LoggingBehavior",
            "PingHandler",
            "AddHandler",
            "AppendExclaim",
        }
        assert result.warnings == []

    def test_warns_when_nothing_registered(self) -> None:
        result = RegistryService(settings()).list_handlers()
        assert result.ok
        assert result.warnings == ["No handlers registered"]

    def test_registration_error_becomes_error_result(self) -> None:
        result = RegistryService(settings()).list_handlers(["tests.sample_app.nowhere"])

        assert not result.ok
        assert result.error is not None
        assert result.error.code == "REGISTRATION_ERROR"
        assert "tests.sample_app.nowhere" in result.error.message
        assert result.error.detail == {"cause": "ModuleNotFoundError"}
