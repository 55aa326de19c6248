"""Shared pytest fixtures for horizon tests."""

from __future__ import annotations

from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from click.testing import CliRunner

from horizon import runtime
from horizon.host.application import Application, AppSettings, RuntimeContext
from horizon.host.config import Repository
from horizon.provider import HorizonServiceProvider


@pytest.fixture(autouse=True)
def _reset_storage_mode() -> Generator[None]:
    """The storage mode switch is process-wide; start every test from the default."""
    runtime.reset()
    yield
    runtime.reset()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


def _host_config(tmp_path: Path) -> Repository:
    return Repository(
        {
            "database": {
                "connections": {
                    "default": {"url": f"sqlite:///{tmp_path / 'default.db'}"},
                    "redis": {"url": f"sqlite:///{tmp_path / 'redis.db'}"},
                },
            },
        }
    )


@pytest.fixture
def host_config(tmp_path: Path) -> Repository:
    """Host config with two file-backed connections, ``default`` and ``redis``."""
    return _host_config(tmp_path)


AppFactory = Callable[..., Application]


@pytest.fixture
def app_factory(tmp_path: Path) -> AppFactory:
    """Build extra host applications, each with its own copy of the host config."""

    def make(
        *,
        context: RuntimeContext = RuntimeContext.CONSOLE,
        http_enabled: bool = True,
        config: Repository | None = None,
    ) -> Application:
        settings = AppSettings(base_path=tmp_path, http_enabled=http_enabled)
        if config is None:
            config = _host_config(tmp_path)
        return Application(settings, context=context, config=config)

    return make


@pytest.fixture
def app(app_factory: AppFactory, host_config: Repository) -> Application:
    """Console-context host application, not yet booted."""
    return app_factory(config=host_config)


@pytest.fixture
def provider() -> HorizonServiceProvider:
    return HorizonServiceProvider()


@pytest.fixture
def booted_app(app: Application, provider: HorizonServiceProvider) -> Generator[Application]:
    """Host application with the horizon provider registered and booted."""
    app.register_provider(provider, name="horizon")
    app.boot()
    yield app
    if app.container.resolved("db"):
        app.make("db").dispose()
