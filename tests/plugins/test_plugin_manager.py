"""Tests for plugin discovery and registry contribution."""

from __future__ import annotations

import sys
import textwrap
from collections.abc import Generator
from pathlib import Path

import pytest

from courier import Mediator, RegistrationError, RegistryBuilder
from courier.plugins import PluginManager, hookimpl
from courier.plugins.manager import ENTRY_POINT_GROUP
from tests.sample_app.handlers import PingHandler
from tests.sample_app.messages import Ping

pytestmark = pytest.mark.anyio

LOCAL_PLUGIN = textwrap.dedent(
    """
    from dataclasses import dataclass

    from courier import Request, RequestHandler
    from courier.plugins import hookimpl


    @dataclass(frozen=True)
    class Shout(Request[str]):
        text: str


    class ShoutHandler(RequestHandler[Shout, str]):
        async def handle(self, request, cancellation):
            return request.text.upper()


    class ShoutPlugin:
        @hookimpl
        def courier_register(self, builder):
            builder.add_request_handler(ShoutHandler)
    """
)


@pytest.fixture
def _clean_local_modules() -> Generator[None]:
    yield
    for name in [n for n in sys.modules if n.startswith("courier_local_plugin_")]:
        del sys.modules[name]


class PingPlugin:
    @hookimpl
    def courier_register(self, builder: RegistryBuilder) -> None:
        builder.add_request_handler(PingHandler)


class TestRegistration:
    def test_register_and_list(self) -> None:
        pm = PluginManager()
        pm.register_plugin(PingPlugin())
        assert "PingPlugin" in pm.list_plugin_names()
        assert len(pm.get_plugins()) == 1

    def test_register_with_explicit_name(self) -> None:
        pm = PluginManager()
        pm.register_plugin(PingPlugin(), name="ping")
        assert pm.list_plugin_names() == ["ping"]

    def test_unregister(self) -> None:
        pm = PluginManager()
        plugin = PingPlugin()
        pm.register_plugin(plugin)
        pm.unregister(plugin)
        assert pm.get_plugins() == []

    def test_not_loaded_until_discovery(self) -> None:
        assert not PluginManager().is_loaded


class TestContribute:
    async def test_plugin_bindings_reach_the_mediator(self) -> None:
        pm = PluginManager()
        pm.register_plugin(PingPlugin())
        registry = pm.contribute(RegistryBuilder()).build()

        assert await Mediator(registry).send(Ping()) == "pong"

    def test_conflicting_plugins_fail_the_build(self) -> None:
        pm = PluginManager()
        pm.register_plugin(PingPlugin(), name="first")
        pm.register_plugin(PingPlugin(), name="second")

        with pytest.raises(RegistrationError, match="already handled"):
            pm.contribute(RegistryBuilder())

    def test_no_plugins_is_a_noop(self) -> None:
        builder = RegistryBuilder()
        assert PluginManager().contribute(builder) is builder
        assert builder.build().describe() == []


@pytest.mark.usefixtures("_clean_local_modules")
class TestLocalDiscovery:
    async def test_loads_single_file_plugins(self, tmp_path: Path) -> None:
        (tmp_path / "shout.py").write_text(LOCAL_PLUGIN, encoding="utf-8")
        pm = PluginManager()

        names = pm.discover_and_load(local_dir=tmp_path)

        assert "courier_local_plugin_shout.ShoutPlugin" in names
        assert pm.is_loaded
        registry = pm.contribute(RegistryBuilder()).build()
        shout_type = sys.modules["courier_local_plugin_shout"].Shout
        assert await Mediator(registry).send(shout_type(text="hi")) == "HI"

    def test_skips_private_files(self, tmp_path: Path) -> None:
        (tmp_path / "_helper.py").write_text(LOCAL_PLUGIN, encoding="utf-8")
        pm = PluginManager()
        assert pm.discover_and_load(local_dir=tmp_path) == []

    def test_broken_plugin_is_logged_not_raised(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        (tmp_path / "broken.py").write_text("raise RuntimeError('nope')\n", encoding="utf-8")
        pm = PluginManager()

        with caplog.at_level("WARNING", logger="courier.plugins.manager"):
            assert pm.discover_and_load(local_dir=tmp_path) == []

        assert "Failed to load local plugin" in caplog.text
        assert "courier_local_plugin_broken" not in sys.modules

    def test_missing_directory_is_ignored(self, tmp_path: Path) -> None:
        pm = PluginManager()
        assert pm.discover_and_load(local_dir=tmp_path / "absent") == []
        assert pm.is_loaded

    def test_classes_without_hooks_are_ignored(self, tmp_path: Path) -> None:
        (tmp_path / "plain.py").write_text("class Plain:\n    pass\n", encoding="utf-8")
        pm = PluginManager()
        assert pm.discover_and_load(local_dir=tmp_path) == []


class TestEntryPoints:
    def test_discovers_entry_point_group(self, monkeypatch: pytest.MonkeyPatch) -> None:
        seen: list[str] = []
        pm = PluginManager()

        def fake_load(group: str, name: str | None = None) -> int:
            seen.append(group)
            return 0

        monkeypatch.setattr(pm._pm, "load_setuptools_entrypoints", fake_load)
        pm.discover_and_load()
        assert seen == [ENTRY_POINT_GROUP]

    def test_class_plugins_are_instantiated(self) -> None:
        pm = PluginManager()
        pm._pm.register(PingPlugin, name="ping-class")

        pm._normalize_plugin_instances()

        plugins = pm.get_plugins()
        assert len(plugins) == 1
        assert isinstance(plugins[0], PingPlugin)
        assert pm.list_plugin_names() == ["ping-class"]
