"""Tests for the host application and its provider lifecycle."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from horizon.contracts import ConfigStore, EventDispatcher
from horizon.host.application import Application, AppSettings, RuntimeContext
from horizon.host.config import Repository
from horizon.host.database import ConnectionManager
from horizon.host.events import Dispatcher
from horizon.host.providers import hookimpl
from horizon.host.queue import QueueManager, Worker


class _Recorder:
    def __init__(self, log: list[str], name: str) -> None:
        self.log = log
        self.name = name

    @hookimpl
    def provider_register(self, app: Any) -> None:
        self.log.append(f"{self.name}.register")

    @hookimpl
    def provider_boot(self, app: Any) -> None:
        self.log.append(f"{self.name}.boot")


class TestAppSettings:
    def test_defaults(self) -> None:
        settings = AppSettings()
        assert settings.environment == "production"
        assert settings.http_enabled is True
        assert settings.base_path == Path.cwd()

    def test_env_vars(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HORIZON_ENVIRONMENT", "local")
        monkeypatch.setenv("HORIZON_HTTP_ENABLED", "false")
        settings = AppSettings()
        assert settings.environment == "local"
        assert settings.http_enabled is False

    def test_init_kwargs_beat_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HORIZON_ENVIRONMENT", "local")
        assert AppSettings(environment="staging").environment == "staging"


class TestApplication:
    def test_context(self, tmp_path: Path) -> None:
        settings = AppSettings(base_path=tmp_path)
        assert Application(settings, context="console").running_in_console()
        assert not Application(settings, context=RuntimeContext.SERVER).running_in_console()

    def test_configure_logging_tags_process_context(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        calls: list[dict[str, Any]] = []
        monkeypatch.setattr(
            "horizon.host.application.configure_logging", lambda **kw: calls.append(kw)
        )
        settings = AppSettings(base_path=tmp_path, environment="staging", log_json=True)
        Application(settings, context=RuntimeContext.SERVER).configure_logging()
        assert calls == [
            {
                "verbose": False,
                "log_json": True,
                "runtime_context": "server",
                "environment": "staging",
            }
        ]

    def test_paths(self, tmp_path: Path) -> None:
        app = Application(AppSettings(base_path=tmp_path))
        assert app.config_path("horizon.toml") == tmp_path / "config" / "horizon.toml"
        assert app.public_path("vendor") == tmp_path / "public" / "vendor"

    def test_http_disabled_has_no_router(self, tmp_path: Path) -> None:
        app = Application(AppSettings(base_path=tmp_path, http_enabled=False))
        assert app.router is None
        assert not app.container.bound("router")

    def test_base_bindings(self, app: Application) -> None:
        assert app.make("app") is app
        assert app.make("config") is app.config
        assert app.make(ConfigStore) is app.config
        assert app.make("events") is app.events
        assert app.make(EventDispatcher) is app.events
        assert app.make(Dispatcher) is app.events
        assert app.make("router") is app.router

    def test_lazy_infrastructure(self, app: Application) -> None:
        assert not app.container.resolved("db")
        assert isinstance(app.make("db"), ConnectionManager)
        assert app.make(QueueManager) is app.make("queue")
        assert isinstance(app.make("queue.worker"), Worker)

    def test_seeds_default_connection(self, tmp_path: Path) -> None:
        app = Application(AppSettings(base_path=tmp_path))
        url = app.config.get("database.connections.default.url")
        assert url == f"sqlite:///{tmp_path / 'storage' / 'horizon.db'}"
        assert app.config.get("queue.default") == "database"

    def test_host_connections_kept(self, app: Application) -> None:
        assert app.config.get("database.connections.redis") is not None
        assert "default.db" in app.config.get("database.connections.default.url")

    def test_load_configuration(self, tmp_path: Path) -> None:
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "horizon.toml").write_text('uri = "jobs"\n', encoding="utf-8")
        app = Application(AppSettings(base_path=tmp_path), config=Repository())
        assert app.load_configuration() == ["horizon"]
        assert app.config.get("horizon.uri") == "jobs"


class TestBoot:
    def test_register_phase_completes_before_boot_phase(self, app: Application) -> None:
        log: list[str] = []
        app.register_provider(_Recorder(log, "a"), name="a")
        app.register_provider(_Recorder(log, "b"), name="b")
        app.boot()
        registers = [i for i, entry in enumerate(log) if entry.endswith(".register")]
        boots = [i for i, entry in enumerate(log) if entry.endswith(".boot")]
        assert len(registers) == 2
        assert len(boots) == 2
        assert max(registers) < min(boots)

    def test_boot_runs_once(self, app: Application) -> None:
        log: list[str] = []
        app.register_provider(_Recorder(log, "a"), name="a")
        app.boot()
        app.boot()
        assert log == ["a.register", "a.boot"]
        assert app.booted
