"""Shared pytest fixtures and test helpers for courier tests."""

from __future__ import annotations

import logging
import os
from collections.abc import Generator

import pytest
import structlog
from click.testing import CliRunner

from courier.services.telemetry import disable_telemetry


@pytest.fixture
def anyio_backend() -> str:
    """Run async tests on asyncio only (publish fans out with asyncio.gather)."""
    return "asyncio"


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _isolated_config(
    monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory
) -> None:
    """Keep the developer's courier.toml and COURIER_* env vars out of tests."""
    for var in [name for name in os.environ if name.startswith("COURIER_")]:
        monkeypatch.delenv(var)
    monkeypatch.chdir(tmp_path_factory.mktemp("cwd"))


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Generator[None]:
    yield
    disable_telemetry()


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Undo configure_logging() calls made by CLI and logging tests."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    courier_logger = logging.getLogger("courier")
    courier_level = courier_logger.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    courier_logger.setLevel(courier_level)
    structlog.reset_defaults()
